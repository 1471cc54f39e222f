#!/usr/bin/env python

"""
@file annostore/core/annoinit.py
@brief definitions and code that needs to run for any use of annostore
"""

import logging
import logging.config
import os
import sys

from annostore.core import annoconst as ac
from annostore.util.config import Config
from annostore.util.path import adjust_dir

# Configure logging system (console, logfile, other loggers)
logconf = adjust_dir(ac.LOGCONF_FILENAME)
if ac.ANNOSTORE_ALTERNATE_LOGGING_CONF in os.environ:
    # make sure that path exists
    altpath = adjust_dir(os.environ.get(ac.ANNOSTORE_ALTERNATE_LOGGING_CONF))
    if os.path.exists(altpath):
        logconf = altpath
    else:
        sys.stderr.write("Warning: %s specified (%s), but not found\n" %
                         (ac.ANNOSTORE_ALTERNATE_LOGGING_CONF, altpath))

if os.path.exists(logconf):
    logging.config.fileConfig(logconf, disable_existing_loggers=False)
else:
    logging.basicConfig(level=logging.WARNING,
        format='%(asctime)s.%(msecs)03d [%(levelname)s] {%(module)s:%(lineno)3d} %(message)s')

# Load configuration properties for any module to access
anno_config = Config(os.environ.get(ac.ANNOSTORE_CONFIG, ac.ANNOSTORE_CONF_FILENAME))

# Update configuration with local override config
anno_config.update_from_file(ac.ANNOSTORE_LOCAL_CONF_FILENAME)

def config(name):
    """
    Get a subtree of the global configuration, typically for a module
    """
    return Config(name, anno_config)
