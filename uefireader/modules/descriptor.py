#!/usr/bin/python
""" edk2 module descriptors built from the decoded file list """
import logging
import collections

from uefireader.efi import guids
from uefireader.modules import metadata

module_types = {
    'APPLICATION'   : 'UEFI_APPLICATION',
    'DRIVER'        : 'DXE_DRIVER',
    'SECURITY_CORE' : 'SEC',
}

# one binary of a module: section type tag, output file name, payload
Binary = collections.namedtuple('Binary', [ 'type', 'filename', 'blob' ])

# file without code, named by its ui section
FreeformFile = collections.namedtuple('FreeformFile', [ 'guid', 'name', 'sections' ])

# file which could not be named, kept as guid + raw bytes
DeclaredFile = collections.namedtuple('DeclaredFile', [ 'guid', 'type', 'blob' ])


def module_type(file_type):
    return module_types.get(file_type, file_type.upper())


# pylint: disable=too-many-instance-attributes
class ModuleDescriptor:
    """ one reconstructed module (.inf) """

    def __init__(self, dfile, meta, apriori = False):
        self.guid = dfile.guid
        self.name = meta.base_name
        self.module_type = module_type(dfile.type)
        self.directory = meta.directory
        self.inf_name = meta.inf_name
        self.apriori = apriori
        self.has_depex = any(s.type in ('DXE_DEPEX', 'PEI_DEPEX') for s in dfile)
        self.binaries = []
        self.add_binaries(dfile)

    def add_binaries(self, dfile):
        seen = collections.Counter()
        for section in dfile:
            if section.is_ui():
                continue
            ext = section.extension()
            seen[ext] += 1
            if seen[ext] == 1:
                filename = f'{self.name}.{ext}'
            else:
                filename = f'{self.name}_{seen[ext]}.{ext}'
            self.binaries.append(Binary(section.type, filename, section.blob))

    def inf_path(self):
        if self.directory:
            return f'{self.directory}/{self.inf_name}'
        return self.inf_name

    def __str__(self):
        return (f'module={self.name} guid={guids.fmt_upper(self.guid)} '
                f'type={self.module_type} inf={self.inf_path()}')


class DescriptorSet:
    """ all descriptors of one image, in file order """

    def __init__(self):
        self.modules = []
        self.freeform = []
        self.declared = []
        self.apriori = []

    def inf_paths(self):
        return [ m.inf_path() for m in self.modules ]

    def apriori_paths(self):
        return [ m.inf_path() for m in self.apriori ]


def assemble(files, load_priority, base = None):
    """ turn decoded files into descriptors; raises AmbiguousMetadata """
    if base is None:
        base = build_base(files)
    result = DescriptorSet()
    by_guid = {}
    for dfile in files:
        meta = metadata.module_metadata(dfile, base)
        if meta is not None:
            module = ModuleDescriptor(dfile, meta, dfile.guid in load_priority)
            result.modules.append(module)
            by_guid.setdefault(dfile.guid, module)
            continue

        name = metadata.ui_name(dfile)
        if name is not None and not dfile.path_sections():
            result.freeform.append(FreeformFile(dfile.guid, name, list(dfile)))
            continue

        logging.warning('file %s (%s) has neither build path nor ui name',
                        guids.fmt_upper(dfile.guid), dfile.type)
        blob = b''.join(s.blob for s in dfile if not s.is_ui())
        result.declared.append(DeclaredFile(dfile.guid, dfile.type, blob))

    for guid in load_priority:
        if guid in by_guid:
            result.apriori.append(by_guid[guid])
    return result

def build_base(files):
    """ common build directory prefix of all modules """
    paths = []
    for dfile in files:
        sections = dfile.path_sections()
        if sections:
            paths += metadata.section_paths(sections)
    return metadata.common_prefix(paths)
