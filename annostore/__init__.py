#!/usr/bin/env python

"""
@file annostore/__init__.py
@brief Document metadata and attachment persistence for the annotation
    application. Backends share one contract, see annostore.datastore.
"""

__version__ = '0.3.0'
