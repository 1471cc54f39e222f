#!/usr/bin/env python

"""
@file annostore/util/preconditions.py
@brief Fail-fast argument checks. Each check raises before any state is
    touched and returns the checked value so calls can be inlined.
"""

from annostore.core.exception import TypeMismatchError

def _type_name(value):
    return type(value).__name__

def assert_type_of(value, types, name):
    """
    @param value the argument to check
    @param types a type or tuple of types the value must be an instance of
    @param name the argument name, for the error message
    @retval value
    """
    if not isinstance(value, types):
        if isinstance(types, tuple):
            expected = "|".join(t.__name__ for t in types)
        else:
            expected = types.__name__
        raise TypeMismatchError(name, expected, _type_name(value))
    return value

def assert_present(value, name):
    """
    @brief value must not be None
    """
    if value is None:
        raise TypeMismatchError(name, "present value", "None")
    return value

def is_present(value):
    return value is not None
