#!/usr/bin/env python

"""
@file annostore/util/config.py
@brief  supports work with config files
"""

import ast
import os.path
import weakref

from annostore.core.exception import ConfigurationError
from annostore.util.path import adjust_dir

def _load(filename):
    """
    @brief Reads a config file holding one Python dict literal
    """
    with open(filename) as fh:
        filecontent = fh.read()
    try:
        obj = ast.literal_eval(filecontent)
    except (ValueError, SyntaxError) as ex:
        raise ConfigurationError("Config file %s is not a dict literal: %s" % (filename, ex))
    if not isinstance(obj, dict):
        raise ConfigurationError("Config file %s does not hold a dict" % filename)
    return obj

class Config(object):
    """
    Helper class managing config files
    """

    def __init__(self, cfgFile, config=None):
        """
        @brief Creates a new Config for retrieving configuration
        @param cfgFile filename or key within Config
        @param config if present, a Config instance for which the value given
            by cfgFile will be extracted
        """
        assert cfgFile
        self.config = None

        if config is not None:
            # Save config to look up later
            self.filename = cfgFile
            self.config = weakref.ref(config)
            self.obj = None
        else:
            self.filename = adjust_dir(cfgFile)
            if os.path.isfile(self.filename):
                self.obj = _load(self.filename)
            else:
                self.obj = {}

    def __getitem__(self, key):
        return self._getValue(self.obj, key)

    def __str__(self):
        result = ''
        result += 'Config File Name: %s \n' % self.filename
        result += 'Config Content: \n %s' % str(self.obj)
        return result

    def getObject(self):
        return self.obj

    def _getValue(self, dic, key, default=None):
        if dic is None:
            # lookup in live configuration
            if self.config() is not None:
                obj = self.config().getValue(self.filename, {})
                return obj.get(key, default)
            return default
        return dic.get(key, default)

    def getValue(self, key, default=None):
        return self._getValue(self.obj, key, default)

    def getValue2(self, key1, key2, default=None):
        value = self.getValue(key1, {})
        return self._getValue(value, key2, default)

    def update_from_file(self, filename):
        filename = adjust_dir(filename)
        if os.path.isfile(filename):
            self.update(_load(filename))

    def update(self, updates):
        """
        @brief Merges a dict of updates, one level deep per top-level key
        """
        assert self.obj is not None, "Cannot update a derived Config"
        for key, value in updates.items():
            current = self.obj.get(key)
            if isinstance(current, dict) and isinstance(value, dict):
                current.update(value)
            else:
                self.obj[key] = value
