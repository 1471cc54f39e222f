#!/usr/bin/env python

"""
@file setup.py
@brief setup file for the annostore document and file persistence layer
@see http://peak.telecommunity.com/DevCenter/setuptools
"""

import os

from setuptools import setup, find_packages

from annostore import __version__ as version

# Workaround a bug in "package_data" that ignores directories. Build flattened list of all files.
excludeFiles = set(['annostorelocal.config'])
resFiles = [os.path.relpath(os.path.join(root, name), 'res')
            for root, dirs, files in os.walk('res')
            for name in files
            if name not in excludeFiles]

setup( name = 'annostore',
       version = version,
       description = 'Pluggable persistence for document metadata and attached files',
       license = 'Apache 2.0',
       keywords = ['annostore', 'datastore'],

       packages = find_packages() + ['res'],
       package_data = {
           'res': resFiles,
                      },
       test_suite = 'annostore',
       install_requires = [
           'Twisted>=22.10.0',
           'zope.interface>=5.0',
           'simplejson>=3.17',
                          ],
       extras_require = {
           'test': ['pytest'],
                        },
       include_package_data = True,
       classifiers = [
           'Development Status :: 3 - Alpha',
           'Intended Audience :: Developers',
           'License :: OSI Approved :: Apache Software License',
           'Operating System :: OS Independent',
           'Programming Language :: Python :: 3',
           'Topic :: Database'
                     ]
     )
