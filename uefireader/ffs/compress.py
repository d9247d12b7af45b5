#!/usr/bin/python
""" guid-defined section decompression """
import gzip
import lzma
import zlib
import logging

from uefireader.efi import guids
from uefireader.errors import DecompressionFailed
from uefireader.errors import UnsupportedCompression

def lzma_decompress(blob):
    return lzma.decompress(blob)

def gzip_decompress(blob):
    return gzip.decompress(blob)

decompressors = {
    guids.LzmaCompress    : lzma_decompress,
    guids.LzmaCompressAlt : lzma_decompress,
    guids.GzipCompress    : gzip_decompress,
}

def decompress(guid, data, offset = 0, length = None):
    """ decompress data[offset:offset+length] with the algorithm named by guid """
    func = decompressors.get(str(guid))
    if func is None:
        raise UnsupportedCompression(f'unsupported guid-defined section {guids.name(guid)}')
    if length is None:
        length = len(data) - offset
    blob = bytes(data[offset : offset + length])
    try:
        result = func(blob)
    except (lzma.LZMAError, zlib.error, EOFError, OSError) as err:
        raise DecompressionFailed(f'{guids.name(guid)}: {err}') from err
    logging.debug('%s: 0x%x -> 0x%x bytes', guids.name(guid), len(blob), len(result))
    return result
