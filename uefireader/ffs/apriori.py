#!/usr/bin/python
""" dxe apriori file: guids of modules loaded first """
import logging

from uefireader.efi import guids

class LoadPriorityRegistry:
    """ set of module guids, kept in discovery order """

    def __init__(self):
        self.guids = []
        self.members = set()

    def add(self, guid):
        if guid in self.members:
            return
        self.members.add(guid)
        self.guids.append(guid)

    def add_list(self, blob):
        """ add a packed array of 16-byte guids, a short tail is ignored """
        for pos in range(0, len(blob) - 15, 16):
            guid = guids.parse_bin(blob, pos)
            logging.debug('apriori: %s', guids.fmt_upper(guid))
            self.add(guid)

    def __contains__(self, guid):
        return guid in self.members

    def __iter__(self):
        return iter(self.guids)

    def __len__(self):
        return len(self.guids)
