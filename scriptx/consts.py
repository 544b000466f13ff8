# Copyright (c) 2021, Neil Booth
#
# All rights reserved.
#
# Licensed under the the Open BSV License version 3; see LICENCE for details.
#


__all__ = (
    'JSONFlags', 'WITNESS_V0_KEYHASH_SIZE', 'WITNESS_V0_SCRIPTHASH_SIZE',
    'WITNESS_V1_TAPROOT_SIZE', 'MIN_WITNESS_SCRIPT_SIZE', 'MAX_WITNESS_SCRIPT_SIZE',
    'P2PKH_SCRIPT_SIZE', 'P2SH_SCRIPT_SIZE', 'HASH160_SIZE', 'PUBLIC_KEY_SIZES',
    'PUBLIC_KEY_PREFIXES',
)


from enum import IntFlag


HASH160_SIZE = 20

# Witness programs are a version opcode, a push length byte and 2 to 40 bytes of program
MIN_WITNESS_SCRIPT_SIZE = 4
MAX_WITNESS_SCRIPT_SIZE = 42
WITNESS_V0_KEYHASH_SIZE = 20
WITNESS_V0_SCRIPTHASH_SIZE = 32
WITNESS_V1_TAPROOT_SIZE = 32

P2PKH_SCRIPT_SIZE = 25
P2SH_SCRIPT_SIZE = 23

# Compressed and uncompressed SEC encodings
PUBLIC_KEY_SIZES = (33, 65)
PUBLIC_KEY_PREFIXES = (0x02, 0x03, 0x04)


class JSONFlags(IntFlag):
    '''Flags controlling conversion of scripts to JSON.'''
    # Include the classification of output scripts
    CLASSIFY_OUTPUT_SCRIPT = 1 << 0
    # Include the version and program of witness outputs
    WITNESS_PROGRAM = 1 << 1
    # Include the signature threshold of multisig outputs
    MULTISIG_THRESHOLD = 1 << 2
    # Include the public keys pushed by the script
    PUBLIC_KEYS = 1 << 3
    # Include the size of the script in bytes
    SIZE = 1 << 4
