#!/usr/bin/python
""" qualcomm uefi image """
import logging

from uefireader.ffs.decoder import FirmwareDecoder
from uefireader.modules import metadata
from uefireader.modules import descriptor
from uefireader.modules import writer

class UefiImage:
    """ decoded uefi image: files, apriori list and build id """

    def __init__(self, data, offset = None, name = None):
        self.name = name
        result = FirmwareDecoder().decode(data, offset)
        self.files = result.files
        self.load_priority = result.load_priority
        self.build_id = metadata.find_build_id(data)
        logging.info('%d files, %d apriori entries, build id %s',
                     len(self.files), len(self.load_priority), self.build_id)

    @classmethod
    def from_file(cls, filename):
        logging.info('reading uefi image from %s', filename)
        with open(filename, 'rb') as f:
            data = f.read()
        return cls(data, name = filename)

    def base_path(self):
        return descriptor.build_base(self.files)

    def descriptors(self):
        return descriptor.assemble(self.files, self.load_priority, self.base_path())

    def extract(self, outdir):
        writer.write_tree(self.descriptors(), outdir)

    def __str__(self):
        return f'image={self.name} files={len(self.files)}'
