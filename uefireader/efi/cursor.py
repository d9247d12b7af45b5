#!/usr/bin/python
""" bounds checked little endian reads over a byte buffer """
import struct

from uefireader.efi import guids
from uefireader.efi import ucs16
from uefireader.errors import MalformedContainer

class ByteCursor:
    """ read-only view on data, all reads are absolute offsets """

    def __init__(self, data):
        self.data = memoryview(data)

    def __len__(self):
        return len(self.data)

    def check(self, offset, size):
        if offset < 0 or size < 0 or offset + size > len(self.data):
            raise MalformedContainer(f'read 0x{size:x} bytes at 0x{offset:x} '
                                     f'beyond buffer end 0x{len(self.data):x}')

    def unpack(self, fmt, offset):
        self.check(offset, struct.calcsize(fmt))
        return struct.unpack_from(fmt, self.data, offset)

    def u8(self, offset):
        return self.unpack('<B', offset)[0]

    def u16(self, offset):
        return self.unpack('<H', offset)[0]

    def u24(self, offset):
        (s1, s2, s3) = self.unpack('<BBB', offset)
        return s1 | (s2 << 8) | (s3 << 16)

    def u32(self, offset):
        return self.unpack('<L', offset)[0]

    def u64(self, offset):
        return self.unpack('<Q', offset)[0]

    def bytes(self, offset, size):
        self.check(offset, size)
        return bytes(self.data[offset : offset + size])

    def ascii(self, offset, size):
        return self.bytes(offset, size).decode('ascii', errors = 'replace')

    def ucs16(self, offset, size):
        self.check(offset, size)
        return ucs16.from_ucs16(self.data, offset, size)

    def guid(self, offset):
        self.check(offset, 16)
        return guids.parse_bin(self.data, offset)

    def find_ascii(self, text, start = 0):
        pos = bytes(self.data).find(text.encode('ascii'), start)
        if pos < 0:
            return None
        return pos

def align(base, offset, alignment):
    """ round offset up to alignment, counted from base """
    return base + ((offset - base + alignment - 1) & ~(alignment - 1))
