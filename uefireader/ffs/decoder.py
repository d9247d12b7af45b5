#!/usr/bin/python
""" decode firmware volumes into a flat list of ffs files """
import logging
import collections

from uefireader.efi import guids
from uefireader.efi import ucs16
from uefireader.efi.cursor import ByteCursor, align
from uefireader.errors import MalformedContainer
from uefireader.errors import UnsupportedFileType
from uefireader.errors import UnsupportedSectionType
from uefireader.ffs import compress
from uefireader.ffs.apriori import LoadPriorityRegistry
from uefireader.ffs.file import FfsFileHeader, DecodedFile, FileType
from uefireader.ffs.file import is_large
from uefireader.ffs.file import END_OF_LIST as FILE_END_OF_LIST
from uefireader.ffs.section import SectionHeader, DecodedSection, SectionType
from uefireader.ffs.section import payload_tags, payload_offsets
from uefireader.ffs.volume import VolumeHeader, find_volume

FILE_ALIGN = 8
SECTION_ALIGN = 4

# work item kinds
VOLUME   = 'volume'
SECTIONS = 'sections'

# section list modes
MODULE  = 'module'   # collect sections of a module file
APRIORI = 'apriori'  # collect sections of the apriori file
VOLUMES = 'volumes'  # collect files of nested volumes


class Splice(collections.UserList):
    """ placeholder, replaced by its items when the tree is flattened """


# data/offset/base: region to parse, sink: list receiving the results
Pending = collections.namedtuple('Pending', [ 'kind', 'data', 'offset', 'base', 'sink', 'mode' ])


def flatten(items):
    """ expand Splice placeholders in place order, without recursion """
    result = []
    stack = [ iter(items) ]
    while stack:
        for item in stack[-1]:
            if isinstance(item, Splice):
                stack.append(iter(item))
                break
            result.append(item)
        else:
            stack.pop()
    return result


# decoded files plus the apriori list
DecodeResult = collections.namedtuple('DecodeResult', [ 'files', 'load_priority' ])


class FirmwareDecoder:
    """
    Walks volume -> file -> section -> (decompressed sections | nested volume).

    Pending regions are kept on a work list instead of the python stack, the
    results land in Splice placeholders which keep the order of the records
    they replace.  The decoder holds no state between decode() calls.
    """

    def decode(self, data, offset = None):
        """ decode the volume at offset, or the first one found in data """
        if offset is None:
            offset = find_volume(data)
        files = []
        apriori = []
        work = collections.deque()
        work.append(Pending(VOLUME, data, offset, 0, files, None))

        while work:
            item = work.popleft()
            if item.kind == VOLUME:
                self.volume(item, work, apriori)
            else:
                self.sections(item, work)

        files = flatten(files)
        for dfile in files:
            dfile.data = flatten(dfile.data)

        registry = LoadPriorityRegistry()
        for sink in apriori:
            for section in flatten(sink):
                if section.type == 'RAW':
                    registry.add_list(section.blob)
                    break
        return DecodeResult(files, registry)

    ####################################################################
    # volume and file loop

    def volume(self, item, work, apriori):
        cursor = ByteCursor(item.data)
        header = VolumeHeader(cursor, item.offset)
        header.verify(cursor)
        logging.debug('%s', header)
        view = header.body(item.data)
        self.files(view, header.hlen, item.sink, work, apriori)

    # pylint: disable=too-many-arguments
    def files(self, data, base, sink, work, apriori):
        cursor = ByteCursor(data)
        offset = base
        while offset + FfsFileHeader.min_hlen <= len(data):
            if cursor.u8(offset + 0x12) in FILE_END_OF_LIST:
                logging.debug('end of file list at 0x%x', offset)
                break
            large = is_large(cursor.u8(offset + 0x13))
            if large and offset + FfsFileHeader.large_hlen > len(data):
                break
            header = FfsFileHeader(cursor, offset)
            if header.tlen < header.hlen or offset + header.tlen > len(data):
                # short tail at the end of the volume
                logging.debug('file at 0x%x: size 0x%x does not fit, stopping',
                              offset, header.tlen)
                break
            header.verify(cursor)
            logging.debug('%s', header)

            body = data[offset : offset + header.tlen]
            self.file(header, body, sink, work, apriori)

            offset = align(base, offset + header.tlen, FILE_ALIGN)

    def file(self, header, body, sink, work, apriori):
        try:
            typeid = FileType(header.typeid)
        except ValueError:
            raise UnsupportedFileType(f'unsupported file type 0x{header.typeid:02x} '
                                      f'(file {header.guid}, size 0x{header.tlen:x}, '
                                      f'offset 0x{header.offset:x})') from None

        if typeid == FileType.FFS_PAD:
            return

        if typeid == FileType.RAW:
            name = guids.fmt_upper(header.guid)
            section = DecodedSection('RAW', body[header.hlen : ], name = name)
            sink.append(DecodedFile(header.guid, typeid, [ section ]))
            return

        if typeid == FileType.FIRMWARE_VOLUME_IMAGE:
            nested = Splice()
            sink.append(nested)
            work.append(Pending(SECTIONS, body, header.hlen, header.hlen, nested, VOLUMES))
            return

        if typeid == FileType.FREEFORM and str(header.guid) == guids.DxeApriori:
            sections = Splice()
            apriori.append(sections)
            work.append(Pending(SECTIONS, body, header.hlen, header.hlen, sections, APRIORI))
            return

        dfile = DecodedFile(header.guid, typeid)
        sink.append(dfile)
        work.append(Pending(SECTIONS, body, header.hlen, header.hlen, dfile, MODULE))

    ####################################################################
    # section loop

    def sections(self, item, work):
        data = item.data
        cursor = ByteCursor(data)
        offset = item.offset
        while offset < len(data):
            if offset + SectionHeader.hlen > len(data):
                break
            header = SectionHeader(cursor, offset)
            if header.is_end():
                break
            header.validate(len(data) - offset)
            logging.debug('%s at 0x%x', header, offset)

            section = data[offset : offset + header.tlen]
            self.section(header, section, item, work)

            offset = align(item.base, offset + header.tlen, SECTION_ALIGN)

    def section(self, header, section, item, work):
        try:
            typeid = SectionType(header.typeid)
        except ValueError:
            raise UnsupportedSectionType(f'unsupported section type 0x{header.typeid:02x} '
                                         f'(size 0x{header.tlen:x}, '
                                         f'offset 0x{header.offset:x})') from None

        if typeid == SectionType.GUID_DEFINED:
            cursor = ByteCursor(section)
            guid = cursor.guid(header.hlen)
            doff = cursor.u16(header.hlen + 0x10)
            if doff < header.hlen + 0x14 or doff > header.tlen:
                raise MalformedContainer(f'guid-defined section at 0x{header.offset:x}: '
                                         f'bad data offset 0x{doff:x}')
            blob = compress.decompress(guid, section, doff, header.tlen - doff)
            nested = Splice()
            item.sink.append(nested)
            work.append(Pending(SECTIONS, blob, 0, 0, nested, item.mode))
            return

        if typeid == SectionType.FIRMWARE_VOLUME_IMAGE:
            payload = section[header.hlen : ]
            if item.mode != VOLUMES:
                logging.warning('volume image section at 0x%x outside a volume image file, skipped',
                                header.offset)
                return
            nested = Splice()
            item.sink.append(nested)
            work.append(Pending(VOLUME, payload, 0, 0, nested, None))
            return

        if item.mode == VOLUMES:
            # only nested volumes count in volume image files
            return

        if typeid == SectionType.VERSION:
            return

        if typeid == SectionType.USER_INTERFACE:
            blob = section[header.hlen : ]
            item.sink.append(DecodedSection('UI', blob, name = ucs16.ui_name(blob)))
            return

        start = payload_offsets.get(typeid, header.hlen)
        if start > header.tlen:
            raise MalformedContainer(f'section at 0x{header.offset:x}: too small for its header')
        item.sink.append(DecodedSection(payload_tags[typeid], section[start : ]))
