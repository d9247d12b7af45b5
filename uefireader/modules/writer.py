#!/usr/bin/python
""" write reconstructed modules and edk2 include files """
import os
import logging

from uefireader.efi import guids
from uefireader.errors import MalformedContainer

CRLF = '\r\n'

def inf_text(module):
    lines = [
        '[Defines]',
        '  INF_VERSION    = 0x00010005',
        f'  BASE_NAME      = {module.name}',
        f'  FILE_GUID      = {guids.fmt_upper(module.guid)}',
        f'  MODULE_TYPE    = {module.module_type}',
        '  VERSION_STRING = 1.0',
        '  ENTRY_POINT    = EfiEntry',
        '',
        '[Binaries.AARCH64]',
    ]
    for binary in module.binaries:
        lines.append(f'   {binary.type}|{binary.filename}|RELEASE')
    return CRLF.join(lines)

def freeform_lines(item):
    lines = [ f'FILE FREEFORM = {guids.fmt_upper(item.guid)} {{' ]
    for section in item.sections:
        name = section.name or item.name
        if section.type == 'RAW':
            lines.append(f'    SECTION {section.type} = RawFiles/{name}')
        elif section.is_ui():
            lines.append(f'    SECTION {section.type} = "{name}"')
    lines.append('}')
    return lines

def apriori_lines(descset):
    lines = [ 'APRIORI DXE {' ]
    for path in descset.apriori_paths():
        lines.append(f'    INF {path}')
    lines.append('}')
    return lines

def output_path(outdir, *parts):
    """ join parts below outdir, refusing names which leave it """
    root = os.path.realpath(outdir)
    path = os.path.realpath(os.path.join(root, *parts))
    if os.path.commonpath([ root, path ]) != root:
        name = '/'.join(parts)
        logging.warning('output name %r leaves %s, refused', name, outdir)
        raise MalformedContainer(f'output name {name!r} points outside the output directory')
    return path

def write_bytes(filename, blob):
    with open(filename, 'wb') as f:
        f.write(blob)

def write_lines(filename, lines):
    with open(filename, 'w', encoding = 'utf-8') as f:
        for line in lines:
            f.write(line + '\n')

def write_module(module, outdir):
    moddir = output_path(outdir, *module.directory.split('/'))
    os.makedirs(moddir, exist_ok = True)
    for binary in module.binaries:
        write_bytes(output_path(moddir, binary.filename), binary.blob)
    with open(output_path(moddir, module.inf_name), 'w', encoding = 'utf-8', newline = '') as f:
        f.write(inf_text(module))
    logging.debug('wrote %s', module.inf_path())

def write_freeform(item, outdir):
    rawdir = os.path.join(outdir, 'RawFiles')
    for section in item.sections:
        if section.type == 'RAW':
            filename = output_path(rawdir, section.name or item.name)
            os.makedirs(os.path.dirname(filename), exist_ok = True)
            write_bytes(filename, section.blob)

def write_tree(descset, outdir):
    """ write all modules plus DXE.inc, DXE.dsc.inc and APRIORI.inc """
    logging.info('writing %d modules to %s', len(descset.modules), outdir)
    os.makedirs(outdir, exist_ok = True)

    load_list = []
    for module in descset.modules:
        write_module(module, outdir)
        load_list.append(f'INF {module.inf_path()}')
    for item in descset.freeform:
        write_freeform(item, outdir)
        load_list += freeform_lines(item)
    for item in descset.declared:
        unnamed = os.path.join(outdir, 'Unnamed')
        os.makedirs(unnamed, exist_ok = True)
        write_bytes(os.path.join(unnamed, f'{guids.fmt_upper(item.guid)}.bin'), item.blob)
        logging.info('file %s (%s) has no name, stored in Unnamed/',
                     guids.fmt_upper(item.guid), item.type)

    write_lines(os.path.join(outdir, 'DXE.inc'), load_list)
    write_lines(os.path.join(outdir, 'DXE.dsc.inc'), descset.inf_paths())
    write_lines(os.path.join(outdir, 'APRIORI.inc'), apriori_lines(descset))
