# Copyright (c) 2018-2021, Neil Booth
#
# All rights reserved.
#
# Licensed under the the Open BSV License version 3; see LICENCE for details.
#

'''Script opcodes and predicates over opcode values.'''


__all__ = (
    'Ops', 'is_small_integer', 'is_data', 'is_push_data', 'decode_small_int',
    'encode_small_int', 'op_name',
)

from enum import IntEnum


class Ops(IntEnum):
    # Returned for byte values and names that are not opcodes; never a byte value
    INVALID = -1

    OP_0 = 0x00
    OP_FALSE = OP_0
    OP_PUSHDATA1 = 0x4c
    OP_PUSHDATA2 = 0x4d
    OP_PUSHDATA4 = 0x4e
    OP_1NEGATE = 0x4f
    OP_RESERVED = 0x50
    OP_1 = 0x51
    OP_TRUE = OP_1
    OP_2 = 0x52
    OP_3 = 0x53
    OP_4 = 0x54
    OP_5 = 0x55
    OP_6 = 0x56
    OP_7 = 0x57
    OP_8 = 0x58
    OP_9 = 0x59
    OP_10 = 0x5a
    OP_11 = 0x5b
    OP_12 = 0x5c
    OP_13 = 0x5d
    OP_14 = 0x5e
    OP_15 = 0x5f
    OP_16 = 0x60

    # control
    OP_NOP = 0x61
    OP_VER = 0x62
    OP_IF = 0x63
    OP_NOTIF = 0x64
    OP_VERIF = 0x65
    OP_VERNOTIF = 0x66
    OP_ELSE = 0x67
    OP_ENDIF = 0x68
    OP_VERIFY = 0x69
    OP_RETURN = 0x6a

    # stack ops
    OP_TOALTSTACK = 0x6b
    OP_FROMALTSTACK = 0x6c
    OP_2DROP = 0x6d
    OP_2DUP = 0x6e
    OP_3DUP = 0x6f
    OP_2OVER = 0x70
    OP_2ROT = 0x71
    OP_2SWAP = 0x72
    OP_IFDUP = 0x73
    OP_DEPTH = 0x74
    OP_DROP = 0x75
    OP_DUP = 0x76
    OP_NIP = 0x77
    OP_OVER = 0x78
    OP_PICK = 0x79
    OP_ROLL = 0x7a
    OP_ROT = 0x7b
    OP_SWAP = 0x7c
    OP_TUCK = 0x7d

    # splice ops
    OP_CAT = 0x7e
    OP_SUBSTR = 0x7f
    OP_LEFT = 0x80
    OP_RIGHT = 0x81
    OP_SIZE = 0x82

    # bit logic
    OP_INVERT = 0x83
    OP_AND = 0x84
    OP_OR = 0x85
    OP_XOR = 0x86
    OP_EQUAL = 0x87
    OP_EQUALVERIFY = 0x88
    OP_RESERVED1 = 0x89
    OP_RESERVED2 = 0x8a

    # numeric
    OP_1ADD = 0x8b
    OP_1SUB = 0x8c
    OP_2MUL = 0x8d
    OP_2DIV = 0x8e
    OP_NEGATE = 0x8f
    OP_ABS = 0x90
    OP_NOT = 0x91
    OP_0NOTEQUAL = 0x92

    OP_ADD = 0x93
    OP_SUB = 0x94
    OP_MUL = 0x95
    OP_DIV = 0x96
    OP_MOD = 0x97
    OP_LSHIFT = 0x98
    OP_RSHIFT = 0x99

    OP_BOOLAND = 0x9a
    OP_BOOLOR = 0x9b
    OP_NUMEQUAL = 0x9c
    OP_NUMEQUALVERIFY = 0x9d
    OP_NUMNOTEQUAL = 0x9e
    OP_LESSTHAN = 0x9f
    OP_GREATERTHAN = 0xa0
    OP_LESSTHANOREQUAL = 0xa1
    OP_GREATERTHANOREQUAL = 0xa2
    OP_MIN = 0xa3
    OP_MAX = 0xa4

    OP_WITHIN = 0xa5

    # crypto
    OP_RIPEMD160 = 0xa6
    OP_SHA1 = 0xa7
    OP_SHA256 = 0xa8
    OP_HASH160 = 0xa9
    OP_HASH256 = 0xaa
    OP_CODESEPARATOR = 0xab
    OP_CHECKSIG = 0xac
    OP_CHECKSIGVERIFY = 0xad
    OP_CHECKMULTISIG = 0xae
    OP_CHECKMULTISIGVERIFY = 0xaf

    # expansion
    OP_NOP1 = 0xb0
    OP_CHECKLOCKTIMEVERIFY = 0xb1
    OP_NOP2 = OP_CHECKLOCKTIMEVERIFY
    OP_CHECKSEQUENCEVERIFY = 0xb2
    OP_NOP3 = OP_CHECKSEQUENCEVERIFY
    OP_NOP4 = 0xb3
    OP_NOP5 = 0xb4
    OP_NOP6 = 0xb5
    OP_NOP7 = 0xb6
    OP_NOP8 = 0xb7
    OP_NOP9 = 0xb8
    OP_NOP10 = 0xb9

    # tapscript
    OP_CHECKSIGADD = 0xba

    OP_INVALIDOPCODE = 0xff

    @classmethod
    def from_value(cls, value):
        '''Return the opcode with the given byte value, or Ops.INVALID.'''
        if 0 <= value <= 0xff:
            try:
                return cls(value)
            except ValueError:
                pass
        return cls.INVALID

    @classmethod
    def from_name(cls, name):
        '''Return the opcode with the given name, or Ops.INVALID.

        The lookup is case-insensitive and the OP_ prefix is optional, so "checksig",
        "OP_CHECKSIG" and "Op_CheckSig" are all the same opcode.  Aliases such as
        "FALSE" and "NOP2" resolve to their canonical opcode.
        '''
        name = name.upper()
        if not name.startswith('OP_'):
            name = 'OP_' + name
        return cls.__members__.get(name, cls.INVALID)


# pylint:disable=E0602

_op_members = {name: op for name, op in Ops.__members__.items() if name.startswith('OP_')}
globals().update(_op_members)
__all__ += tuple(_op_members.keys())


def is_small_integer(value):
    '''Return True for the opcodes pushing a small positive integer, OP_1 through OP_16.'''
    return OP_1 <= value <= OP_16


def is_data(value):
    '''Return True if value is an opcode that directly pushes that many bytes (1 to 75).'''
    return OP_0 < value < OP_PUSHDATA1


def is_push_data(value):
    '''Return True for OP_0, the direct pushes and the three OP_PUSHDATA opcodes.'''
    return OP_0 <= value <= OP_PUSHDATA4


def decode_small_int(op):
    '''Decode OP_0 and OP_1 ... OP_16 to their numeric value.  Returns -1 for other opcodes.'''
    if op == OP_0:
        return 0
    if is_small_integer(op):
        return op - OP_1 + 1
    return -1


def encode_small_int(n):
    '''Return the opcode pushing n, which must be in the range 0 to 16 inclusive.'''
    if not 0 <= n <= 16:
        raise ValueError(f'{n} cannot be encoded as a small integer opcode')
    if n == 0:
        return OP_0
    return Ops(OP_1 + n - 1)


def op_name(value):
    '''Return the canonical name of an opcode value, or "OP_UNKNOWN".'''
    op = Ops.from_value(value)
    if op is Ops.INVALID:
        return 'OP_UNKNOWN'
    return op.name
