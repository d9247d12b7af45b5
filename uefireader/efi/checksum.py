#!/usr/bin/python
""" additive firmware volume / ffs checksums """
import struct

def sum8(blob):
    return sum(blob) & 0xff

def checksum8(blob):
    """ value which makes the 8-bit byte sum of blob + value zero """
    return (0x100 - sum8(blob)) & 0xff

def sum16(blob):
    count = len(blob) // 2
    words = struct.unpack_from(f'<{count}H', blob)
    return sum(words) & 0xffff

def checksum16(blob):
    """ value which makes the 16-bit word sum of blob + value zero """
    return (0x10000 - sum16(blob)) & 0xffff

def zero_field(blob, offset, size):
    return bytes(blob[ : offset ]) + b'\0' * size + bytes(blob[ offset + size : ])
