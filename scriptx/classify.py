# Copyright (c) 2018-2021, Neil Booth
#
# All rights reserved.
#
# Licensed under the the Open BSV License version 3; see LICENCE for details.
#

'''Classification of output scripts into the standard types.'''

__all__ = (
    'ScriptType', 'WitnessProgram', 'MultisigThreshold', 'ScriptPubKey',
    'classify_output_script',
)

import logging
from enum import Enum

import attr

from .consts import (
    JSONFlags, HASH160_SIZE, MIN_WITNESS_SCRIPT_SIZE, MAX_WITNESS_SCRIPT_SIZE,
    WITNESS_V0_KEYHASH_SIZE, WITNESS_V0_SCRIPTHASH_SIZE, WITNESS_V1_TAPROOT_SIZE,
    P2PKH_SCRIPT_SIZE, P2SH_SCRIPT_SIZE, PUBLIC_KEY_SIZES, PUBLIC_KEY_PREFIXES,
)
from .ops import (
    is_small_integer, decode_small_int,
    OP_RETURN, OP_DUP, OP_HASH160, OP_EQUAL, OP_EQUALVERIFY, OP_CHECKSIG, OP_CHECKSIGVERIFY,
    OP_CHECKMULTISIG, OP_CHECKMULTISIGVERIFY,
)
from .script import Script


logger = logging.getLogger('classify')


class ScriptType(str, Enum):
    '''The standard output script types.'''
    PUBKEY = 'pubkey'
    PUBKEYHASH = 'pubkeyhash'
    SCRIPTHASH = 'scripthash'
    MULTISIG = 'multisig'
    NULL_DATA = 'nulldata'
    WITNESS_V0_KEYHASH = 'witness_v0_keyhash'
    WITNESS_V0_SCRIPTHASH = 'witness_v0_scripthash'
    WITNESS_V1_TAPROOT = 'witness_v1_taproot'
    WITNESS_UNKNOWN = 'witness_unknown'
    NONSTANDARD = 'nonstandard'

    def __str__(self):
        return self.value


@attr.s(slots=True, frozen=True)
class WitnessProgram:
    '''The version (0 to 16) and program of a segregated witness output.'''
    version: int = attr.ib()
    program: bytes = attr.ib()

    @property
    def program_length(self):
        return len(self.program)


@attr.s(slots=True, frozen=True)
class MultisigThreshold:
    '''A multisig output needs min signatures matching its max public keys.'''
    min: int = attr.ib()
    max: int = attr.ib()


class ScriptPubKey(Script):
    '''An output script, which can be classified as one of the standard types.'''

    def get_type(self):
        '''Return the ScriptType of the script.

        The tests are made in a fixed order and the first match wins; witness programs
        are recognised before anything else.
        '''
        witness = self.witness_program()
        if witness is not None:
            version, size = witness.version, witness.program_length
            if version == 0 and size == WITNESS_V0_KEYHASH_SIZE:
                return ScriptType.WITNESS_V0_KEYHASH
            if version == 0 and size == WITNESS_V0_SCRIPTHASH_SIZE:
                return ScriptType.WITNESS_V0_SCRIPTHASH
            if version == 1 and size == WITNESS_V1_TAPROOT_SIZE:
                return ScriptType.WITNESS_V1_TAPROOT
            logger.debug(f'unknown witness program version {version} of {size} bytes')
            return ScriptType.WITNESS_UNKNOWN
        if self.is_multisig():
            return ScriptType.MULTISIG
        if self.is_pay_to_pubkey():
            return ScriptType.PUBKEY
        if self.is_pay_to_pubkey_hash():
            return ScriptType.PUBKEYHASH
        if self.is_pay_to_script_hash():
            return ScriptType.SCRIPTHASH
        if self.is_null_data():
            return ScriptType.NULL_DATA
        return ScriptType.NONSTANDARD

    def witness_program(self):
        '''Return a WitnessProgram if the script is a witness program, otherwise None.

        A witness program is a version opcode (OP_0 or OP_1 ... OP_16) followed by a
        single direct push of 2 to 40 bytes.
        '''
        size = len(self)
        if not MIN_WITNESS_SCRIPT_SIZE <= size <= MAX_WITNESS_SCRIPT_SIZE:
            return None
        version = decode_small_int(self.byte_at(0))
        if version == -1:
            return None
        if self.byte_at(1) + 2 != size:
            return None
        return WitnessProgram(version, self.to_bytes()[2:])

    def is_witness_program(self):
        return self.witness_program() is not None

    def _is_witness(self, version, size):
        witness = self.witness_program()
        return (witness is not None and witness.version == version
                and witness.program_length == size)

    def is_pay_to_witness_pubkey_hash(self):
        '''Pay to witness public key hash (P2WPKH).'''
        return self._is_witness(0, WITNESS_V0_KEYHASH_SIZE)

    def is_pay_to_witness_script_hash(self):
        '''Pay to witness script hash (P2WSH).'''
        return self._is_witness(0, WITNESS_V0_SCRIPTHASH_SIZE)

    def is_pay_to_witness_taproot(self):
        '''Pay to taproot (P2TR).'''
        return self._is_witness(1, WITNESS_V1_TAPROOT_SIZE)

    def multisig_threshold(self):
        '''Return a MultisigThreshold if the script is a bare multisig, otherwise None.

        The first and second-to-last operations must be small integers, the last byte
        OP_CHECKMULTISIG or OP_CHECKMULTISIGVERIFY, and the first must not exceed the
        second.  The public keys in between are not inspected.
        '''
        if not len(self):
            return None
        if self.byte_at(-1) not in (OP_CHECKMULTISIG, OP_CHECKMULTISIGVERIFY):
            return None
        ops = self.operations()
        first = ops[0].op
        last_n = ops[-2].op if len(ops) > 1 else first
        if not (is_small_integer(first) and is_small_integer(last_n)):
            return None
        threshold = MultisigThreshold(decode_small_int(first), decode_small_int(last_n))
        if threshold.min > threshold.max:
            return None
        return threshold

    def is_multisig(self):
        return self.multisig_threshold() is not None

    def is_pay_to_pubkey(self):
        '''Pay to public key (P2PK).

        The key itself is not validated.
        '''
        if len(self) < 2 or self.byte_at(0) not in PUBLIC_KEY_SIZES:
            return False
        if self.byte_at(-1) not in (OP_CHECKSIG, OP_CHECKSIGVERIFY):
            return False
        return self.byte_at(1) in PUBLIC_KEY_PREFIXES

    def is_pay_to_pubkey_hash(self):
        '''Pay to public key hash (P2PKH).'''
        return (len(self) == P2PKH_SCRIPT_SIZE
                and self.byte_at(0) == OP_DUP
                and self.byte_at(1) == OP_HASH160
                and self.byte_at(2) == HASH160_SIZE
                and self.byte_at(23) == OP_EQUALVERIFY
                and self.byte_at(24) == OP_CHECKSIG)

    def is_pay_to_script_hash(self):
        '''Pay to script hash (P2SH).'''
        return (len(self) == P2SH_SCRIPT_SIZE
                and self.byte_at(0) == OP_HASH160
                and self.byte_at(1) == HASH160_SIZE
                and self.byte_at(22) == OP_EQUAL)

    def is_null_data(self):
        '''An OP_RETURN followed only by pushes; provably unspendable.'''
        return len(self) >= 1 and self.byte_at(0) == OP_RETURN and self.is_push_only()

    def public_key_hashes(self):
        '''Return the hex of the public key hash paid to, as a list.

        Only P2PKH and P2WPKH outputs contain one; for other scripts the list is empty.
        '''
        if self.is_pay_to_pubkey_hash():
            return [self.to_bytes()[3:23].hex()]
        if self.is_pay_to_witness_pubkey_hash():
            return [self.witness_program().program.hex()]
        return []

    def to_json(self, flags=JSONFlags.CLASSIFY_OUTPUT_SCRIPT):
        '''Return the script as an (unconverted) json object; flags controls the output and is
        a JSONFlags instance.'''
        result = super().to_json(flags)
        if flags & JSONFlags.CLASSIFY_OUTPUT_SCRIPT:
            result['type'] = self.get_type().value
        if flags & JSONFlags.WITNESS_PROGRAM:
            witness = self.witness_program()
            if witness is not None:
                result['witness'] = {
                    'version': witness.version,
                    'program': witness.program.hex(),
                }
        if flags & JSONFlags.MULTISIG_THRESHOLD:
            threshold = self.multisig_threshold()
            if threshold is not None:
                result['threshold'] = {'min': threshold.min, 'max': threshold.max}
        return result


def classify_output_script(script):
    '''Return the ScriptType of script, which can be a Script, raw bytes or a hex string.

    Raises MalformedInput if a hex string cannot be converted.
    '''
    if isinstance(script, str):
        script = ScriptPubKey.from_hex(script)
    elif not isinstance(script, ScriptPubKey):
        script = ScriptPubKey(bytes(script))
    return script.get_type()
