#!/usr/bin/python
""" dump content of qualcomm uefi images """
import sys
import logging
import argparse

from uefireader.efi import guids
from uefireader.errors import UefiReaderError
from uefireader.image import UefiImage
from uefireader.peinfo import pe_summary


########################################################################
# print stuff

def print_line(item, indent):
    print(f'{"":{indent}s}{item}')

def print_modules(image):
    for dfile in image.files:
        uis = dfile.ui_sections()
        name = uis[0].name if uis else ''
        print_line(f'ffsfile={guids.fmt_upper(dfile.guid)} type={dfile.type} name={name}', 2)

def print_all(image, pe = False):
    for dfile in image.files:
        print_line(dfile, 2)
        for section in dfile:
            print_line(section, 4)
            if pe and section.type in ('PE32', 'TE'):
                for line in pe_summary(section.blob):
                    print_line(line, 6)

def print_apriori(image):
    print_line('apriori', 2)
    for guid in image.load_priority:
        print_line(guids.fmt_upper(guid), 4)


########################################################################
# main

def main():
    parser = argparse.ArgumentParser()
    parser.add_argument('-l', '--loglevel', dest = 'loglevel', type = str, default = 'warning',
                        help = 'set loglevel to LEVEL', metavar = 'LEVEL')
    parser.add_argument('-i', '--input', dest = 'input', type = str,
                        help = 'dump uefi image FILE', metavar = 'FILE')
    parser.add_argument('--all', dest = 'fmt',
                        action = 'store_const', const = 'all',
                        help = 'print everything (default)')
    parser.add_argument('--modules', dest = 'fmt',
                        action = 'store_const', const = 'modules',
                        help = 'print included modules')
    parser.add_argument('--pe', dest = 'pe',
                        action = 'store_true', default = False,
                        help = 'print pe sections and signers of code sections')
    options = parser.parse_args()

    logging.basicConfig(format = '%(levelname)s: %(message)s',
                        level = getattr(logging, options.loglevel.upper()))

    if not options.input:
        print('ERROR: no input file specified (try -h for help)')
        return 1

    try:
        image = UefiImage.from_file(options.input)
    except UefiReaderError as err:
        logging.error('%s: %s', options.input, err)
        return 1

    print(f'{image}')
    if image.build_id:
        print_line(f'build={image.build_id}', 2)
    if options.fmt == 'modules':
        print_modules(image)
    else:
        print_all(image, options.pe)
    if len(image.load_priority):
        print_apriori(image)
    return 0

if __name__ == '__main__':
    sys.exit(main())
