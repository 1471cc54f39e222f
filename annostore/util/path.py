#!/usr/bin/env python

"""
@file annostore/util/path.py
@brief resolves resource paths relative to the project root
"""

import os

# The directory holding the annostore package and the res/ tree
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

def adjust_dir(path):
    """
    @brief Makes a relative resource path absolute, relative to the project
        root. Absolute paths and paths starting with ~ are expanded only.
    """
    path = os.path.expanduser(path)
    if os.path.isabs(path):
        return path
    return os.path.join(ROOT_DIR, path)
