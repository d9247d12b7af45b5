#!/usr/bin/python
""" firmware volume headers """
import logging

from uefireader.efi import guids
from uefireader.efi import checksum
from uefireader.efi.cursor import ByteCursor
from uefireader.errors import ChecksumMismatch
from uefireader.errors import MalformedContainer
from uefireader.errors import SignatureNotFound

FV_SIGNATURE = '_FVH'
FV_SIGNATURE_OFFSET = 0x28
FV_MIN_HLEN = 0x38

EFI_FVB_ERASE_POLARITY = 0x00000800

def find_volume(data):
    """ offset of the first volume header in a raw image """
    cursor = ByteCursor(data)
    pos = cursor.find_ascii(FV_SIGNATURE, FV_SIGNATURE_OFFSET)
    if pos is None:
        raise SignatureNotFound(f'no {FV_SIGNATURE} signature found')
    logging.debug('%s signature at 0x%x', FV_SIGNATURE, pos)
    return pos - FV_SIGNATURE_OFFSET


# pylint: disable=too-many-instance-attributes
class VolumeHeader:
    """ EFI_FIRMWARE_VOLUME_HEADER, trusted only after verify() """

    def __init__(self, cursor = None, offset = 0):
        self.offset = offset
        self.guid = None
        self.tlen = 0
        self.hlen = 0
        self.attr = 0
        self.csum = 0
        self.padding = 0x00
        if cursor is not None:
            self.parse(cursor, offset)

    def parse(self, cursor, offset):
        sig = cursor.ascii(offset + FV_SIGNATURE_OFFSET, 4)
        if sig != FV_SIGNATURE:
            raise MalformedContainer(f'no volume signature at 0x{offset:x}')
        self.guid = cursor.guid(offset + 0x10)
        # FvLength is 64 bit, only the low half is used
        self.tlen = cursor.u32(offset + 0x20)
        self.attr = cursor.u32(offset + 0x2c)
        self.hlen = cursor.u16(offset + 0x30)
        self.csum = cursor.u16(offset + 0x32)
        self.padding = 0xff if self.attr & EFI_FVB_ERASE_POLARITY else 0x00
        if self.hlen < FV_MIN_HLEN:
            raise MalformedContainer(f'volume at 0x{offset:x}: header size 0x{self.hlen:x} too small')
        if self.tlen < self.hlen:
            raise MalformedContainer(f'volume at 0x{offset:x}: size 0x{self.tlen:x} smaller than header')

    def verify(self, cursor):
        header = cursor.bytes(self.offset, self.hlen)
        calc = checksum.checksum16(checksum.zero_field(header, 0x32, 2))
        if calc != self.csum:
            raise ChecksumMismatch(f'volume at 0x{self.offset:x}: header checksum '
                                   f'0x{self.csum:04x}, expected 0x{calc:04x}')

    def body(self, data):
        """ volume bytes, header included, cut to what the buffer holds """
        end = self.offset + self.tlen
        if end > len(data):
            logging.warning('volume at 0x%x: truncated, 0x%x of 0x%x bytes present',
                            self.offset, len(data) - self.offset, self.tlen)
            end = len(data)
        return memoryview(data)[self.offset : end]

    def __str__(self):
        return (f'volume={guids.name(self.guid)} offset=0x{self.offset:x} '
                f'size=0x{self.tlen:x} hlen=0x{self.hlen:x} '
                f'attr=0x{self.attr:x} padding=0x{self.padding:02x}')
