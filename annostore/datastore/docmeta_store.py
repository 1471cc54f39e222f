#!/usr/bin/env python

"""
@file annostore/datastore/docmeta_store.py
@brief Document metadata records keyed by fingerprint
"""

from annostore.util.preconditions import assert_type_of


class DocumentRecord(object):
    """
    One document's metadata payload. The fingerprint is its identity.
    """
    __slots__ = ['fingerprint', 'content', 'doc_info']

    def __init__(self, fingerprint, content, doc_info=None):
        self.fingerprint = fingerprint
        self.content = content
        self.doc_info = doc_info

    def __repr__(self):
        return "DocumentRecord(%r, %d chars)" % (self.fingerprint, len(self.content))


class DocMetaStore(object):
    """
    Memory implementation, a dict from fingerprint to DocumentRecord. Dicts
    keep insertion order, which is the order fingerprints are listed in.
    A record is replaced as a whole, so readers never see a partial write.
    """

    def __init__(self):
        self.records = {}

    def put(self, fingerprint, content, doc_info=None):
        """
        @retval the replaced DocumentRecord, or None for a new fingerprint
        """
        assert_type_of(fingerprint, str, "fingerprint")
        assert_type_of(content, str, "data")
        previous = self.records.get(fingerprint)
        self.records[fingerprint] = DocumentRecord(fingerprint, content, doc_info)
        return previous

    def get(self, fingerprint):
        """
        @retval DocumentRecord or None if not existing
        """
        return self.records.get(fingerprint)

    def get_content(self, fingerprint):
        record = self.records.get(fingerprint)
        if record is None:
            return None
        return record.content

    def has_key(self, fingerprint):
        return fingerprint in self.records

    def remove(self, fingerprint):
        """
        @retval the removed DocumentRecord, or None if there was none
        """
        return self.records.pop(fingerprint, None)

    def fingerprints(self):
        return list(self.records.keys())

    def values(self):
        """
        @brief Consistent copy of all records at the time of the call
        """
        return list(self.records.values())

    def __len__(self):
        return len(self.records)
