#!/usr/bin/env python

"""
@file annostore/datastore/directories.py
@brief The working directories of a datastore. The paths are exposed even by
    backends that never write there, collaborators read them unconditionally.
"""

import os

from annostore.core import annoconst as ac
from annostore.core.exception import InitError
from annostore.datastore.datastore import InitResult

from annostore.util import annolog
log = annolog.getLogger(__name__)

from annostore.core import annoinit
CONF = annoinit.config(__name__)

DEFAULT_DATA_DIR = '~/.annostore'


class Directories(object):
    """
    @param data_dir root of all datastore directories. If None, the
        ANNOSTORE_DATA_DIR environment variable, then the 'data_dir' config
        entry, then ~/.annostore is used.
    @param conf Config to read 'data_dir' from, defaults to the module config
    """

    def __init__(self, data_dir=None, conf=None):
        conf = conf if conf is not None else CONF
        if data_dir is None:
            data_dir = os.environ.get(ac.ANNOSTORE_DATA_DIR)
        if data_dir is None:
            data_dir = conf.getValue('data_dir', None)
        if data_dir is None:
            data_dir = DEFAULT_DATA_DIR

        self.data_dir = os.path.abspath(os.path.expanduser(data_dir))
        self.stash_dir = os.path.join(self.data_dir, 'stash')
        self.files_dir = os.path.join(self.data_dir, 'files')
        self.logs_dir = os.path.join(self.data_dir, 'logs')

    def all(self):
        return [self.data_dir, self.stash_dir, self.files_dir, self.logs_dir]

    def init(self):
        """
        @brief Creates any missing directory
        @retval InitResult listing the directories that were created
        @raise InitError if a directory cannot be created
        """
        created = []
        for path in self.all():
            if os.path.isdir(path):
                continue
            try:
                os.makedirs(path)
            except OSError as ex:
                raise InitError("Cannot create directory %s: %s" % (path, ex), target=path)
            log.info("Created directory %s" % path)
            created.append(path)
        return InitResult(self.data_dir, created)

    def __repr__(self):
        return "Directories(%r)" % self.data_dir
