#!/usr/bin/python3
""" pe (efi) payload summaries """
import struct

import pefile

from cryptography import x509
from cryptography.hazmat.primitives.serialization import pkcs7

WIN_CERT_TYPE_PKCS_SIGNED_DATA = 2

def common_name(item):
    try:
        scn = item.get_attributes_for_oid(x509.oid.NameOID.COMMON_NAME)[0]
        return scn.value
    except IndexError:
        return 'no CN'

def load_pe(blob):
    try:
        return pefile.PE(data = bytes(blob))
    except pefile.PEFormatError:
        return None

def pe_sections(pe):
    lines = []
    for sec in pe.sections:
        name = sec.Name.rstrip(b'\0').decode(errors = 'replace')
        lines.append(f'pe section: 0x{sec.PointerToRawData:06x} '
                     f'+0x{sec.SizeOfRawData:06x} ({name})')
    return lines

def pe_signers(pe):
    """ subject common names of all authenticode certificates """
    sighdr = pe.OPTIONAL_HEADER.DATA_DIRECTORY[4]
    if not sighdr.VirtualAddress or not sighdr.Size:
        return []
    sigs = pe.__data__[ sighdr.VirtualAddress :
                        sighdr.VirtualAddress + sighdr.Size ]
    names = []
    pos = 0
    while pos + 8 < len(sigs):
        (slen, srev, stype) = struct.unpack_from('<LHH', sigs, pos)
        if slen < 8:
            break
        if stype == WIN_CERT_TYPE_PKCS_SIGNED_DATA:
            try:
                certs = pkcs7.load_der_pkcs7_certificates(sigs [ pos + 8 : pos + slen ])
            except ValueError:
                certs = []
            for cert in certs:
                names.append(common_name(cert.subject))
        pos += slen
        pos = (pos + 7) & ~7 # align
    return names

def pe_summary(blob):
    """ printable lines for one pe payload, [] if blob is no pe image """
    pe = load_pe(blob)
    if pe is None:
        return []
    lines = [ f'pe machine=0x{pe.FILE_HEADER.Machine:x} '
              f'subsystem={pe.OPTIONAL_HEADER.Subsystem}' ]
    lines += pe_sections(pe)
    for scn in pe_signers(pe):
        lines.append(f'signer: {scn}')
    return lines
