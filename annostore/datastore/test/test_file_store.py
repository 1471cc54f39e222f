#!/usr/bin/env python

"""
@file annostore/datastore/test/test_file_store.py
@test file keys and content normalization
"""

import io
import pathlib

from twisted.trial import unittest

from annostore.core.exception import InvalidKeyError, TypeMismatchError
from annostore.datastore.file_store import Backend, FileRef, FileStore, to_file_ref_key, to_bytes


class FileRefKeyTest(unittest.TestCase):

    def test_key(self):
        self.assertEqual(to_file_ref_key(Backend.STASH, FileRef('doc.pdf')), 'stash:doc.pdf')
        self.assertEqual(to_file_ref_key(Backend.LOGS, FileRef('doc.pdf')), 'logs:doc.pdf')

    def test_name_may_hold_separator(self):
        # backends never contain ':' so the first one splits unambiguously
        self.assertEqual(to_file_ref_key('stash', FileRef('a:b')), 'stash:a:b')

    def test_malformed(self):
        for backend, ref in [(None, FileRef('x')),
                             ('', FileRef('x')),
                             ('a:b', FileRef('c')),
                             (Backend.STASH, None),
                             (Backend.STASH, FileRef('')),
                             (Backend.STASH, FileRef(None)),
                             (Backend.STASH, 'x')]:
            self.assertRaises(InvalidKeyError, to_file_ref_key, backend, ref)


class ToBytesTest(unittest.TestCase):

    def test_to_bytes(self):
        self.assertEqual(to_bytes(b'abc'), b'abc')
        self.assertEqual(to_bytes(bytearray(b'abc')), b'abc')
        self.assertEqual(to_bytes('café'), b'caf\xc3\xa9')
        self.assertEqual(to_bytes(io.BytesIO(b'abc')), b'abc')
        self.assertEqual(to_bytes(io.StringIO('abc')), b'abc')

    def test_path_like(self):
        path = self.mktemp()
        with open(path, 'wb') as fh:
            fh.write(b'on disk')
        self.assertEqual(to_bytes(pathlib.Path(path)), b'on disk')

    def test_unsupported(self):
        self.assertRaises(TypeMismatchError, to_bytes, None)
        self.assertRaises(TypeMismatchError, to_bytes, 3.5)


class FileStoreTest(unittest.TestCase):

    def setUp(self):
        self.store = FileStore()

    def test_put_get_remove(self):
        ref = FileRef('x')
        meta = {'k': 'v'}
        self.store.put(Backend.STASH, ref, b'1', meta)
        meta['k'] = 'changed'
        self.assertEqual(self.store.get(Backend.STASH, ref).meta, {'k': 'v'})
        returned = self.store.put(Backend.STASH, FileRef('y'), b'2', {'k': 'v'})
        returned['k'] = 'changed'
        self.assertEqual(self.store.get(Backend.STASH, FileRef('y')).meta, {'k': 'v'})
        self.assertEqual(self.store.read(Backend.STASH, ref), b'1')
        self.assertTrue(self.store.remove(Backend.STASH, ref))
        self.assertFalse(self.store.remove(Backend.STASH, ref))
        self.assertEqual(self.store.read(Backend.STASH, ref), None)

    def test_backends_isolated(self):
        self.store.put(Backend.STASH, FileRef('x'), b'stash')
        self.store.put(Backend.LOGS, FileRef('x'), b'logs')
        self.assertEqual(len(self.store), 2)
        self.assertEqual(self.store.read(Backend.STASH, FileRef('x')), b'stash')
        self.assertEqual(self.store.read(Backend.LOGS, FileRef('x')), b'logs')
