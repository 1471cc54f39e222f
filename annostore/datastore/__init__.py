#!/usr/bin/env python

"""
@file annostore/datastore/__init__.py
@brief Datastore contract, in-memory backend and the types they exchange
"""

from annostore.datastore.datastore import IDatastore, AbstractDatastore
from annostore.datastore.datastore import DocMetaRef, DocMetaFileRef, DeleteResult, FileDeleted, InitResult
from annostore.datastore.directories import Directories
from annostore.datastore.file_store import Backend, FileRef, FileHandle, DatastoreFile
from annostore.datastore.mutation import DatastoreMutation, DatastoreMutations, Latch
from annostore.datastore.snapshot import DocMetaSnapshotEvent, DocMetaMutation, MutationType, SnapshotResult
from annostore.datastore.memory import MemoryDatastore
from annostore.datastore.datastores import create_datastore, create_committed_snapshot
