# Copyright (c) 2018-2021, Neil Booth
#
# All rights reserved.
#
# Licensed under the the Open BSV License version 3; see LICENCE for details.
#

__all__ = (
    'pack_byte', 'pack_le_uint16', 'pack_le_uint32',
    'unpack_byte', 'unpack_le_uint16', 'unpack_le_uint32',
)


from struct import Struct


struct_le_H = Struct('<H')
struct_le_I = Struct('<I')
structB = Struct('B')

pack_le_uint16 = struct_le_H.pack
pack_le_uint32 = struct_le_I.pack
pack_byte = structB.pack

unpack_le_uint16 = struct_le_H.unpack
unpack_le_uint32 = struct_le_I.unpack
unpack_byte = structB.unpack
