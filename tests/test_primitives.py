import unittest

import fvbuild

from uefireader.efi import checksum
from uefireader.efi import guids
from uefireader.efi import ucs16
from uefireader.efi.cursor import ByteCursor, align
from uefireader.errors import ChecksumMismatch, MalformedContainer
from uefireader.ffs.file import FfsFileHeader
from uefireader.ffs.volume import VolumeHeader

class TestsCursor(unittest.TestCase):

    def test_reads(self):
        cursor = ByteCursor(bytes(range(16)) + b'_FVH')
        self.assertEqual(cursor.u8(1), 0x01)
        self.assertEqual(cursor.u16(0), 0x0100)
        self.assertEqual(cursor.u24(1), 0x030201)
        self.assertEqual(cursor.u32(4), 0x07060504)
        self.assertEqual(cursor.u64(8), 0x0f0e0d0c0b0a0908)
        self.assertEqual(cursor.ascii(16, 4), '_FVH')
        self.assertEqual(cursor.find_ascii('_FVH'), 16)
        self.assertIsNone(cursor.find_ascii('_FVX'))

    def test_guid(self):
        cursor = ByteCursor(b'\0' + fvbuild.APRIORI.bytes_le)
        self.assertEqual(str(cursor.guid(1)), guids.DxeApriori)

    def test_ucs16(self):
        cursor = ByteCursor('Shell'.encode('utf-16le') + b'\0\0')
        self.assertEqual(cursor.ucs16(0, 10), 'Shell')
        self.assertEqual(ucs16.ui_name('Shell \0'.encode('utf-16le')), 'Shell')

    def test_out_of_bounds(self):
        cursor = ByteCursor(b'\x01\x02\x03')
        with self.assertRaises(MalformedContainer):
            cursor.u32(0)
        with self.assertRaises(MalformedContainer):
            cursor.u8(3)
        with self.assertRaises(MalformedContainer):
            cursor.bytes(2, 2)
        with self.assertRaises(MalformedContainer):
            cursor.guid(0)

    def test_align(self):
        self.assertEqual(align(0x48, 0x48, 8), 0x48)
        self.assertEqual(align(0x48, 0x49, 8), 0x50)
        self.assertEqual(align(0x18, 0x1d, 4), 0x20)
        self.assertEqual(align(0x1a, 0x1b, 4), 0x1e)


class TestsChecksum(unittest.TestCase):

    def test_checksum8(self):
        blob = b'\x10\x20\x30\xff'
        self.assertEqual(checksum.sum8(blob + bytes([ checksum.checksum8(blob) ])), 0)

    def test_checksum16(self):
        blob = b'\x10\x20\x30\xff\x00\x80'
        value = checksum.checksum16(blob)
        self.assertEqual(checksum.sum16(blob + value.to_bytes(2, 'little')), 0)

    def test_volume_checksum_roundtrip(self):
        for hlen in (0x48, 0x78):
            for attr in (0, 0x800, 0x0004feff):
                blob = fvbuild.volume(hlen = hlen, attr = attr)
                cursor = ByteCursor(blob)
                header = VolumeHeader(cursor, 0)
                header.verify(cursor)
                zeroed = checksum.zero_field(blob[:hlen], 0x32, 2)
                self.assertEqual(checksum.checksum16(zeroed), header.csum)

    def test_volume_checksum_bad(self):
        blob = bytearray(fvbuild.volume())
        blob[0x10] ^= 0x01
        cursor = ByteCursor(blob)
        header = VolumeHeader(cursor, 0)
        with self.assertRaises(ChecksumMismatch):
            header.verify(cursor)

    def test_volume_padding_byte(self):
        header = VolumeHeader(ByteCursor(fvbuild.volume(attr = 0x800)), 0)
        self.assertEqual(header.padding, 0xff)
        header = VolumeHeader(ByteCursor(fvbuild.volume(attr = 0)), 0)
        self.assertEqual(header.padding, 0x00)

    def test_volume_bad_signature(self):
        blob = bytearray(fvbuild.volume())
        blob[0x28:0x2c] = b'_FVX'
        with self.assertRaises(MalformedContainer):
            VolumeHeader(ByteCursor(blob), 0)

    def check_file(self, blob):
        cursor = ByteCursor(blob)
        header = FfsFileHeader(cursor, 0)
        header.verify(cursor)
        return header

    def test_file_fixed_checksum(self):
        guid = fvbuild.new_guid(1)
        body = fvbuild.raw(b'abcd')
        for fsum in (0xaa, 0x55):
            self.check_file(fvbuild.ffs_file(guid, 0x02, body, fsum = fsum))
        for fsum in (0x00, 0xab, 0x54, 0xff):
            with self.assertRaises(ChecksumMismatch):
                self.check_file(fvbuild.ffs_file(guid, 0x02, body, fsum = fsum))

    def test_file_body_checksum(self):
        guid = fvbuild.new_guid(1)
        blob = bytearray(fvbuild.ffs_file(guid, 0x02, fvbuild.raw(b'abcd'), attr = 0x40))
        self.check_file(blob)
        blob[-1] ^= 0x01
        with self.assertRaises(ChecksumMismatch):
            self.check_file(blob)

    def test_file_header_checksum(self):
        blob = bytearray(fvbuild.ffs_file(fvbuild.new_guid(1), 0x02, fvbuild.raw(b'abcd')))
        blob[0x12] ^= 0x08
        with self.assertRaises(ChecksumMismatch):
            self.check_file(blob)

    def test_file_state_not_covered(self):
        blob = bytearray(fvbuild.ffs_file(fvbuild.new_guid(1), 0x02, fvbuild.raw(b'abcd')))
        blob[0x17] = 0x07
        self.check_file(blob)

    def test_large_file(self):
        body = fvbuild.raw(b'x' * 32)
        header = self.check_file(fvbuild.ffs_file(fvbuild.new_guid(1), 0x02, body,
                                                  attr = 0x40, large = True))
        self.assertEqual(header.attr, 0x41)
        self.assertEqual(header.hlen, 0x20)
        self.assertEqual(header.tlen, 0x20 + len(body))

    def test_small_file_attributes(self):
        body = fvbuild.raw(b'x' * 32)
        for attr in (0x01, 0x03, 0x05):
            header = self.check_file(fvbuild.ffs_file(fvbuild.new_guid(1), 0x02, body,
                                                      attr = attr))
            self.assertFalse(header.is_large())
            self.assertEqual(header.hlen, 0x18)
            self.assertEqual(header.tlen, 0x18 + len(body))

if __name__ == '__main__':
    unittest.main()
