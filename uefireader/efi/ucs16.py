#!/usr/bin/python
""" efi ucs-16 decoding """

def from_ucs16(data, offset = 0, size = None):
    """ decode ucs-16 bytes, odd trailing byte is ignored """
    end = len(data) if size is None else min(len(data), offset + size)
    end -= (end - offset) & 1
    return bytes(data[offset : end]).decode('utf-16le', errors = 'replace')

def ui_name(blob):
    """ user interface section name, trailing nul and blanks trimmed """
    return from_ucs16(blob).rstrip('\0 ')
