# Copyright (c) 2018-2021, Neil Booth
#
# All rights reserved.
#
# Licensed under the the Open BSV License version 3; see LICENCE for details.
#

'''Bitcoin script'''


__all__ = (
    'Operation', 'ScriptIterator', 'Script', 'ScriptSig', 'push_item',
)

import logging
import threading

import attr

from .consts import JSONFlags, PUBLIC_KEY_SIZES, PUBLIC_KEY_PREFIXES
from .errors import MalformedInput
from .ops import (
    Ops, is_small_integer, decode_small_int, op_name,
    OP_0, OP_PUSHDATA1, OP_PUSHDATA2, OP_PUSHDATA4, OP_1NEGATE, OP_16,
)
from .packing import (
    pack_byte, pack_le_uint16, pack_le_uint32, unpack_byte, unpack_le_uint16,
    unpack_le_uint32,
)


logger = logging.getLogger('script')

# Size of the little-endian length prefix following each OP_PUSHDATA opcode
pushdata_prefixes = {
    OP_PUSHDATA1: (1, unpack_byte),
    OP_PUSHDATA2: (2, unpack_le_uint16),
    OP_PUSHDATA4: (4, unpack_le_uint32),
}

# Sign-magnitude encoding of -1, as pushed by OP_1NEGATE
b_minus_one = b'\x81'


def push_item(item):
    '''Returns script bytes to push item on the stack using the shortest push opcode.'''
    dlen = len(item)
    if dlen < OP_PUSHDATA1:
        return pack_byte(dlen) + item
    if dlen <= 0xff:
        return pack_byte(OP_PUSHDATA1) + pack_byte(dlen) + item
    if dlen <= 0xffff:
        return pack_byte(OP_PUSHDATA2) + pack_le_uint16(dlen) + item
    return pack_byte(OP_PUSHDATA4) + pack_le_uint32(dlen) + item


@attr.s(slots=True, frozen=True, repr=False)
class Operation:
    '''A single script operation: an opcode byte and the data it pushes, if any.

    op is the raw byte value as it might not be a member of Ops.  data is None for
    opcodes that do not push data.
    '''
    op: int = attr.ib()
    data: bytes = attr.ib(default=None)

    @property
    def opcode(self):
        '''The opcode as a member of Ops; Ops.INVALID if the byte is not an opcode.'''
        return Ops.from_value(self.op)

    def size(self):
        '''The number of bytes pushed.'''
        return 0 if self.data is None else len(self.data)

    def hex(self):
        return (self.data or b'').hex()

    def to_asm_word(self):
        '''Convert the operation to a human-readable word.

        OP_0 and OP_1 ... OP_16 show as decimal, other pushes (OP_1NEGATE included) as
        the hex of their data, and everything else as the opcode name.
        '''
        op = self.op
        if op == OP_0 or is_small_integer(op):
            return str(decode_small_int(op))
        if self.data is not None:
            return self.data.hex()
        return op_name(op)

    def __str__(self):
        return self.to_asm_word()

    def __repr__(self):
        return f'Operation(op={op_name(self.op)}, data={self.data!r})'


class ScriptIterator:
    '''Decodes raw script bytes into a sequence of operations.

    Decoding never fails.  A push whose data runs past the end of the script pushes
    whatever bytes remain, and a truncated OP_PUSHDATA length prefix pushes nothing.
    In both cases decoding stops at the end of the script and truncated is set.
    '''

    def __init__(self, script):
        self._raw = bytes(script)
        self._n = 0
        self.truncated = False

    def position(self):
        return self._n

    def _truncation(self, op, start, wanted, got):
        self.truncated = True
        logger.debug(f'{op_name(op)} at offset {start:,d} wants {wanted:,d} bytes '
                     f'but only {got:,d} remain')

    def operations(self):
        '''A generator.  Iterates over the script yielding Operation objects, stopping when
        the end of the script is reached.
        '''
        raw = self._raw
        limit = len(raw)
        n = self._n

        while n < limit:
            start = n
            op = raw[n]
            n += 1
            data = None

            if op <= OP_PUSHDATA4:
                if op < OP_PUSHDATA1:
                    dlen = op
                else:
                    size, unpack = pushdata_prefixes[op]
                    prefix = raw[n: n + size]
                    n += size
                    if len(prefix) < size:
                        self._truncation(op, start, size, len(prefix))
                        dlen = 0
                    else:
                        dlen, = unpack(prefix)
                data = raw[n: n + dlen]
                n += dlen
                if len(data) < dlen:
                    self._truncation(op, start, dlen, len(data))
                n = min(n, limit)
            elif op == OP_1NEGATE:
                data = b_minus_one

            self._n = n
            yield Operation(op, data)


class Script:
    '''Wraps the raw bytes of a bitcoin script.

    The script's operations are decoded once, on first use, and cached.
    '''

    def __init__(self, script=b''):
        self._script = bytes(script)
        self._ops = None
        self._truncated = False
        self._lock = threading.Lock()

    def __len__(self):
        '''The length of the script, in bytes.'''
        return len(self._script)

    def __bytes__(self):
        '''The script as bytes.'''
        return self._script

    def __str__(self):
        '''A user-readable script.'''
        return self.to_asm()

    def __repr__(self):
        return f'{self.__class__.__name__}<"{self.to_hex()}">'

    def __eq__(self, other):
        '''A script equals anything buffer-like with the same bytes representation.'''
        return (isinstance(other, (bytes, bytearray, memoryview))
                or hasattr(other, '__bytes__')) and self._script == bytes(other)

    def byte_at(self, offset):
        '''Return the byte at offset as an integer.  Negative offsets count back from the
        end of the script.

        Raises IndexError if offset is out of range.
        '''
        return self._script[offset]

    def set_byte(self, offset, value):
        '''Replace the byte at offset.  Negative offsets count back from the end of the
        script.  Cached operations are discarded.
        '''
        with self._lock:
            raw = bytearray(self._script)
            raw[offset] = value
            self._script = bytes(raw)
            self._ops = None
            self._truncated = False

    def operations(self):
        '''Return the script's operations as a tuple.

        The script is decoded on the first call; later calls return the same tuple.
        '''
        ops = self._ops
        if ops is None:
            with self._lock:
                if self._ops is None:
                    iterator = ScriptIterator(self._script)
                    self._ops = tuple(iterator.operations())
                    self._truncated = iterator.truncated
                ops = self._ops
        return ops

    def is_truncated(self):
        '''Return True if the last push of the script is missing some of its data.'''
        self.operations()
        return self._truncated

    def is_push_only(self):
        '''Return True if every operation after the first pushes data onto the stack.

        OP_RESERVED counts as a push.  The first operation is not considered so that
        the data following an OP_RETURN can be tested.  A truncated script returns False.
        '''
        ops = self.operations()
        if self._truncated:
            return False
        return all(op.op <= OP_16 for op in ops[1:])

    def public_keys(self):
        '''Return the hex of pushed items that look like public keys.

        Keys are not validated; they are only checked to be 33 or 65 bytes starting
        with 02, 03 or 04.
        '''
        return [op.hex() for op in self.operations()
                if op.size() in PUBLIC_KEY_SIZES and op.data[0] in PUBLIC_KEY_PREFIXES]

    def to_asm(self):
        '''Return the script converted to a human-readable ASM string.'''
        return ' '.join(op.to_asm_word() for op in self.operations())

    def to_bytes(self):
        '''Return the script as a bytes() object.'''
        return self._script

    def to_hex(self):
        '''Return the script as a hexadecimal string.'''
        return self._script.hex()

    @classmethod
    def from_hex(cls, hex_str):
        '''Convert a hexadecimal string (without whitespace) into raw script.  Upper and
        lower case digits are accepted.

        Raises MalformedInput if the string cannot be converted.
        '''
        try:
            raw = bytes.fromhex(hex_str)
        except (ValueError, TypeError) as e:
            raise MalformedInput(hex_str, str(e)) from None
        # bytes.fromhex() skips whitespace between bytes
        if raw.hex() != hex_str.lower():
            raise MalformedInput(hex_str, 'not pure hexadecimal')
        return cls(raw)

    def to_json(self, flags=0):
        '''Return the script as an (unconverted) json object; flags controls the output and is
        a JSONFlags instance.'''
        result = {
            'asm': self.to_asm(),
            'hex': self.to_hex(),
        }
        if flags & JSONFlags.SIZE:
            result['size'] = len(self)
        if flags & JSONFlags.PUBLIC_KEYS:
            result['publicKeys'] = self.public_keys()
        return result


class ScriptSig(Script):
    '''An input script.'''

    def pushed_items(self):
        '''Return the items pushed on the stack by the script, as a list of bytes.

        OP_1 ... OP_16 push their value as a single byte.
        '''
        items = []
        for op in self.operations():
            if op.data is not None:
                items.append(op.data)
            elif is_small_integer(op.op):
                items.append(pack_byte(decode_small_int(op.op)))
        return items
