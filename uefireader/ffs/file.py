#!/usr/bin/python
""" ffs files """
import enum
import collections

from uefireader.efi import guids
from uefireader.efi import checksum
from uefireader.errors import ChecksumMismatch

class FileType(enum.IntEnum):
    """ EFI_FV_FILETYPE_* values known to the decoder """
    RAW                   = 0x01
    FREEFORM              = 0x02
    SECURITY_CORE         = 0x03
    DXE_CORE              = 0x05
    DRIVER                = 0x07
    APPLICATION           = 0x09
    FIRMWARE_VOLUME_IMAGE = 0x0b
    FFS_PAD               = 0xf0

# file types which terminate a file list
END_OF_LIST = (0x00, 0xff)

# attributes value of EFI_FFS_FILE_HEADER2 files (large file + checksum)
FFS_ATTRIB_LARGE      = 0x41
FFS_ATTRIB_CHECKSUM   = 0x40
FFS_FIXED_CHECKSUMS   = (0xaa, 0x55)

def is_large(attr):
    return attr == FFS_ATTRIB_LARGE


# pylint: disable=too-many-instance-attributes
class FfsFileHeader:
    """ EFI_FFS_FILE_HEADER / EFI_FFS_FILE_HEADER2 """

    min_hlen = 0x18
    large_hlen = 0x20

    def __init__(self, cursor = None, offset = 0):
        self.guid = None
        self.typeid = 0
        self.attr = 0
        self.hsum = 0
        self.fsum = 0
        self.tlen = 0
        self.hlen = self.min_hlen
        self.offset = offset
        if cursor is not None:
            self.parse(cursor, offset)

    def parse(self, cursor, offset):
        self.guid = cursor.guid(offset)
        self.hsum = cursor.u8(offset + 0x10)
        self.fsum = cursor.u8(offset + 0x11)
        self.typeid = cursor.u8(offset + 0x12)
        self.attr = cursor.u8(offset + 0x13)
        self.tlen = cursor.u24(offset + 0x14)
        self.hlen = self.min_hlen
        if self.is_large():
            self.tlen = cursor.u64(offset + 0x18)
            self.hlen = self.large_hlen

    def is_large(self):
        return is_large(self.attr)

    def verify(self, cursor):
        """ check header checksum, then body checksum or fixed value """
        header = cursor.bytes(self.offset, self.hlen)
        # integrity check and state are not covered by the header checksum
        header = checksum.zero_field(header, 0x10, 2)
        header = checksum.zero_field(header, 0x17, 1)
        calc = checksum.checksum8(header)
        if calc != self.hsum:
            raise ChecksumMismatch(f'file {self.guid} at 0x{self.offset:x}: header checksum '
                                   f'0x{self.hsum:02x}, expected 0x{calc:02x}')

        if self.attr & FFS_ATTRIB_CHECKSUM:
            body = cursor.bytes(self.offset + self.hlen, self.tlen - self.hlen)
            calc = checksum.checksum8(body)
            if calc != self.fsum:
                raise ChecksumMismatch(f'file {self.guid} at 0x{self.offset:x}: file checksum '
                                       f'0x{self.fsum:02x}, expected 0x{calc:02x}')
        elif self.fsum not in FFS_FIXED_CHECKSUMS:
            raise ChecksumMismatch(f'file {self.guid} at 0x{self.offset:x}: '
                                   f'bad fixed file checksum 0x{self.fsum:02x}')

    def fmt_type(self):
        try:
            return FileType(self.typeid).name
        except ValueError:
            return f'0x{self.typeid:x}'

    def __str__(self):
        return (f'ffsfile={guids.name(self.guid)} offset=0x{self.offset:x} '
                f'size=0x{self.tlen:x} type={self.fmt_type()} attr=0x{self.attr:x}')


class DecodedFile(collections.UserList):
    """ decoded ffs file, a list of DecodedSection """

    def __init__(self, guid, typeid, sections = None):
        super().__init__(sections or [])
        self.guid = guid
        self.typeid = FileType(typeid)

    @property
    def type(self):
        return self.typeid.name

    def ui_sections(self):
        return [ s for s in self.data if s.is_ui() ]

    def path_sections(self):
        return [ s for s in self.data if s.has_path() ]

    def __str__(self):
        return f'ffsfile={guids.name(self.guid)} type={self.type} sections={len(self.data)}'
