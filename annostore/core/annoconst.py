#!/usr/bin/env python

"""
@file annostore/core/annoconst.py
@brief definitions of annostore package wide constants
"""

# Name of central logging configuration file
LOGCONF_FILENAME = 'res/logging/annologging.conf'

# Name of environment variable to override logging configuration
ANNOSTORE_ALTERNATE_LOGGING_CONF = 'ANNOSTORE_ALTERNATE_LOGGING_CONF'

# Name of central configuration file (not to be changed)
ANNOSTORE_CONF_FILENAME = 'res/config/annostore.config'

# Name of local config override file (can be changed locally)
ANNOSTORE_LOCAL_CONF_FILENAME = 'res/config/annostorelocal.config'

# Name of environment variable pointing at an alternative config file
ANNOSTORE_CONFIG = 'ANNOSTORE_CONFIG'

# Name of environment variable overriding the datastore data directory
ANNOSTORE_DATA_DIR = 'ANNOSTORE_DATA_DIR'

from annostore import __version__ as VERSION
