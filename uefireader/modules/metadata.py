#!/usr/bin/python
""" module names and build paths recovered from decoded payloads """
import re
import logging
import collections

import pefile

from uefireader.errors import AmbiguousMetadata

path_regex = re.compile(r'[a-zA-Z/\\0-9_\-\.]*\.dll\b')
build_id_regex = re.compile(rb'QC_IMAGE_VERSION_STRING=([A-Za-z0-9._\-]+)')

# directory components naming the build architecture, everything up to
# and including them is build environment
arch_dirs = ('ARM', 'AARCH64', 'X64', 'IA32')

RELEASE_MARKER = '/RELEASE_'
DEBUG_MARKER = '/DEBUG/'

def normalize_path(path):
    return path.replace('\\', '/').replace('WIN', 'LINUX')

def find_paths(blob):
    """ candidate build paths (ending in .dll) found in blob """
    text = bytes(blob).decode('ascii', errors = 'replace')
    return [ normalize_path(p) for p in path_regex.findall(text) ]

def pe_debug_paths(blob):
    """ codeview pdb path of a pe image, as .dll path """
    try:
        pe = pefile.PE(data = bytes(blob), fast_load = True)
        pe.parse_data_directories(directories = [
            pefile.DIRECTORY_ENTRY['IMAGE_DIRECTORY_ENTRY_DEBUG'] ])
    except pefile.PEFormatError:
        return []
    paths = []
    for entry in getattr(pe, 'DIRECTORY_ENTRY_DEBUG', []):
        pdb = getattr(entry.entry, 'PdbFileName', None)
        if not pdb:
            continue
        path = pdb.rstrip(b'\0').decode('ascii', errors = 'replace')
        paths.append(normalize_path(re.sub(r'\.pdb$', '.dll', path, flags = re.I)))
    return paths

def section_paths(sections):
    """ build paths of a module, from all sections which may carry one """
    blob = b''.join(s.blob for s in sections)
    paths = find_paths(blob)
    if not paths:
        for section in sections:
            if section.type in ('PE32', 'TE'):
                paths += pe_debug_paths(section.blob)
    if not paths:
        logging.warning('no build path found in %d section(s)', len(sections))
    elif len(set(paths)) > 1:
        logging.warning('more than one build path found: %s', ', '.join(paths))
    return paths

def common_prefix(paths, marker = RELEASE_MARKER):
    """ longest common prefix of the path parts following marker """
    if not paths:
        return ''
    parts = [ p.split(marker, 1)[1] if marker and marker in p else p
              for p in paths ]
    prefix = parts[0]
    for part in parts[1:]:
        count = 0
        for (a, b) in zip(prefix, part):
            if a != b:
                break
            count += 1
        prefix = prefix[:count]
    return prefix

def module_path(path, base = ''):
    """ split a build path into (module directory, module name) """
    items = path.split('/')
    for (index, item) in enumerate(items):
        if item in arch_dirs:
            rel = '/'.join(items[index + 1 : ])
            break
    else:
        if base and base in path:
            rel = path.split(base, 1)[1]
        else:
            rel = path.lstrip('/')

    if DEBUG_MARKER in '/' + rel:
        rel = ('/' + rel).split(DEBUG_MARKER, 1)[0].lstrip('/')
    else:
        rel = re.sub(r'\.dll$', '', rel)
    items = [ i for i in rel.split('/') if i ]
    if not items:
        return ('', '')
    return ('/'.join(items[:-1]), items[-1])

def find_build_id(data):
    """ qualcomm image version string, None if the image has none """
    match = build_id_regex.search(bytes(data))
    if match is None:
        return None
    return match.group(1).decode('ascii')


# where and under which name a module is reconstructed
ModuleMetadata = collections.namedtuple('ModuleMetadata', [ 'directory', 'inf_name', 'base_name' ])


def ui_name(dfile):
    """ the single ui name of a file, None if it has none """
    uis = dfile.ui_sections()
    if len(uis) > 1:
        names = ', '.join(s.name for s in uis)
        raise AmbiguousMetadata(f'file {dfile.guid} has more than one ui name: {names}')
    if uis:
        return uis[0].name
    return None

def module_metadata(dfile, base = ''):
    """ metadata for a file with code sections, None if it can not be named """
    sections = dfile.path_sections()
    if not sections:
        return None
    name = ui_name(dfile)
    paths = section_paths(sections)
    if paths:
        (directory, path_name) = module_path(paths[0], base)
        if path_name:
            return ModuleMetadata(directory, f'{path_name}.inf', name or path_name)
    if name:
        return ModuleMetadata(name, f'{name}.inf', name)
    return None
