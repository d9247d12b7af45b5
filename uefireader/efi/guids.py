#!/usr/bin/python
""" efi guid database and helper functions """

import uuid

Ffs                          = "8c8ce578-8a3d-4f1c-9935-896185c32dd3"
Ffs3                         = "5473c07a-3dcb-4dca-bd6f-1e9689e7349a"
LzmaCompress                 = "ee4e5898-3914-4259-9d6e-dc7bd79403cf"
LzmaCompressAlt              = "bd9921ea-ed91-404a-8b2f-b4d724747c8c"
GzipCompress                 = "1d301fe9-be79-4353-91c2-d23bc959ae0c"
DxeApriori                   = "fc510ee7-ffdc-11d4-bd41-0080c73c8881"

NotValid                     = "ffffffff-ffff-ffff-ffff-ffffffffffff"

name_table = {
    # firmware volumes
    Ffs                                    : "Ffs",
    Ffs3                                   : "Ffs3",

    # guid-defined sections
    LzmaCompress                           : "LzmaCompress",
    LzmaCompressAlt                        : "LzmaCompressAlt",
    GzipCompress                           : "GzipCompress",

    # special files
    DxeApriori                             : "DxeApriori",

    # misc
    "00000000-0000-0000-0000-000000000000" : "Zero",
    NotValid                               : "NotValid",
}

def name(guid):
    nstr = name_table.get(str(guid), None)
    if nstr is None:
        return str(guid)
    return f'guid:{nstr}'

def parse_bin(data, offset):
    return uuid.UUID(bytes_le = bytes(data[offset:offset+16]))

def fmt_upper(guid):
    """ edk2 descriptor style: upper case, dashed """
    return str(guid).upper()
