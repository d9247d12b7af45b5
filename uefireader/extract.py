#!/usr/bin/python
""" extract modules from qualcomm uefi images """
import os
import sys
import logging
import argparse

from uefireader.errors import UefiReaderError
from uefireader.image import UefiImage

def main():
    parser = argparse.ArgumentParser()
    parser.add_argument('-l', '--loglevel', dest = 'loglevel', type = str, default = 'info',
                        help = 'set loglevel to LEVEL', metavar = 'LEVEL')
    parser.add_argument('input', type = str,
                        help = 'read uefi image from FILE', metavar = 'FILE')
    parser.add_argument('output', type = str,
                        help = 'write modules to DIR', metavar = 'DIR')
    options = parser.parse_args()

    logging.basicConfig(format = '%(levelname)s: %(message)s',
                        level = getattr(logging, options.loglevel.upper()))

    try:
        image = UefiImage.from_file(options.input)
        output = options.output
        if image.build_id:
            output = os.path.join(output, image.build_id)
        image.extract(output)
    except UefiReaderError as err:
        logging.error('%s: %s', options.input, err)
        return 1
    return 0

if __name__ == '__main__':
    sys.exit(main())
