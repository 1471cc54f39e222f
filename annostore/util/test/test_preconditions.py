#!/usr/bin/env python

"""
@file annostore/util/test/test_preconditions.py
@test argument checks
"""

from twisted.trial import unittest

from annostore.core.exception import TypeMismatchError
from annostore.util.preconditions import assert_type_of, assert_present, is_present


class PreconditionsTest(unittest.TestCase):

    def test_assert_type_of(self):
        self.assertEqual(assert_type_of('x', str, 'data'), 'x')
        self.assertEqual(assert_type_of(b'x', (bytes, str), 'data'), b'x')
        ex = self.assertRaises(TypeMismatchError, assert_type_of, 1, (bytes, str), 'data')
        self.assertEqual(ex.name, 'data')
        self.assertEqual(ex.expected, 'bytes|str')
        self.assertEqual(ex.actual, 'int')
        self.assertIn('Precondition failure', str(ex))

    def test_present(self):
        self.assertEqual(assert_present(0, 'n'), 0)
        self.assertRaises(TypeMismatchError, assert_present, None, 'n')
        self.assertTrue(is_present(''))
        self.assertFalse(is_present(None))
