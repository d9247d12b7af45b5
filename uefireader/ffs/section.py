#!/usr/bin/python
""" ffs file sections """
import enum

from uefireader.errors import MalformedContainer

class SectionType(enum.IntEnum):
    """ EFI_SECTION_* values known to the decoder """
    GUID_DEFINED          = 0x02
    PE32                  = 0x10
    PIC                   = 0x11
    TE                    = 0x12
    DXE_DEPEX             = 0x13
    VERSION               = 0x14
    USER_INTERFACE        = 0x15
    FIRMWARE_VOLUME_IMAGE = 0x17
    FREEFORM_SUBTYPE_GUID = 0x18
    RAW                   = 0x19
    PEI_DEPEX             = 0x1b

# section types which terminate a section list
END_OF_LIST = (0x00, 0xff)

# types emitted as plain payload sections, mapped to the output tag
payload_tags = {
    SectionType.PE32                  : 'PE32',
    SectionType.PIC                   : 'PIC',
    SectionType.TE                    : 'TE',
    SectionType.DXE_DEPEX             : 'DXE_DEPEX',
    SectionType.FREEFORM_SUBTYPE_GUID : 'RAW',
    SectionType.RAW                   : 'RAW',
    SectionType.PEI_DEPEX             : 'PEI_DEPEX',
}

# payload offset inside the section, when not the common header size
payload_offsets = {
    SectionType.FREEFORM_SUBTYPE_GUID : 0x14,
}


class SectionHeader:
    """ EFI_COMMON_SECTION_HEADER, 24-bit size only """

    hlen = 4

    def __init__(self, cursor = None, offset = 0):
        self.tlen = 0
        self.typeid = 0
        self.offset = offset
        if cursor is not None:
            self.parse(cursor, offset)

    def parse(self, cursor, offset):
        self.tlen = cursor.u24(offset)
        self.typeid = cursor.u8(offset + 3)

    def is_end(self):
        return self.typeid in END_OF_LIST

    def validate(self, available):
        if self.tlen == 0:
            raise MalformedContainer(f'section at 0x{self.offset:x}: size is zero')
        if self.tlen < self.hlen:
            raise MalformedContainer(f'section at 0x{self.offset:x}: '
                                     f'size 0x{self.tlen:x} is smaller than its header')
        if self.tlen > available:
            raise MalformedContainer(f'section at 0x{self.offset:x}: size is too big '
                                     f'(0x{self.tlen:x} > 0x{available:x})')

    def fmt_type(self):
        try:
            return SectionType(self.typeid).name
        except ValueError:
            return f'0x{self.typeid:x}'

    def __str__(self):
        return f'section size=0x{self.tlen:x} type={self.fmt_type()}'


class DecodedSection:
    """ one decoded section: type tag, payload and (ui only) name """

    def __init__(self, tag, blob, name = None):
        self.type = tag
        self.blob = bytes(blob)
        self.name = name

    def is_ui(self):
        return self.type == 'UI'

    def has_path(self):
        """ sections which may carry a build path (code sections) """
        return self.type not in ('UI', 'DXE_DEPEX', 'RAW', 'PEI_DEPEX')

    def extension(self):
        """ file name extension used when the payload is written out """
        if self.type == 'PE32':
            return 'efi'
        if self.type == 'DXE_DEPEX':
            return 'depex'
        return self.type.lower()

    def __repr__(self):
        return f'{self.__class__.__name__}({self.type!r}, {len(self.blob)} bytes, name={self.name!r})'

    def __str__(self):
        ret = f'section type={self.type} size=0x{len(self.blob):x}'
        if self.name is not None:
            ret += f' [ name={self.name} ]'
        return ret
