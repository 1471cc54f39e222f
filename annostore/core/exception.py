#!/usr/bin/env python

"""
@file annostore/core/exception.py
@brief module for exceptions
"""

class AnnostoreError(Exception):
    pass

class ConfigurationError(AnnostoreError):
    pass

class IllegalStateError(AnnostoreError):
    pass

class InitError(AnnostoreError):
    """
    @brief A backend could not prepare its storage during init. Carries the
        path or resource that was unreachable, when known.
    """

    def __init__(self, reason, target=None):
        AnnostoreError.__init__(self, reason)
        self.target = target

class TypeMismatchError(AnnostoreError):
    """
    @brief A payload failed a required type check. Raised before the store is
        touched, the caller should fix the call.
    """

    def __init__(self, name, expected, actual):
        msg = "Precondition failure: %s must be of type %s but was %s" % (name, expected, actual)
        AnnostoreError.__init__(self, msg)
        self.name = name
        self.expected = expected
        self.actual = actual

class InvalidKeyError(AnnostoreError):
    pass
