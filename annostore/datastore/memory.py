#!/usr/bin/env python

"""
@file annostore/datastore/memory.py
@brief In-memory implementation of IDatastore. Nothing survives the process;
    'committed' means visible to subsequent reads.
"""

from zope.interface import implementer

from twisted.internet import defer

from annostore.datastore.datastore import IDatastore, AbstractDatastore
from annostore.datastore.datastore import DeleteResult, DocMetaRef, InitResult
from annostore.datastore.directories import Directories
from annostore.datastore.docmeta_store import DocMetaStore
from annostore.datastore.file_store import FileStore, DatastoreFile, Backend, to_file_ref_key
from annostore.datastore.mutation import DatastoreMutation
from annostore.datastore.snapshot import SnapshotEngine, DocMetaMutation, MutationType, mutation_for_record
from annostore.core.exception import TypeMismatchError

from annostore.util import annolog
log = annolog.getLogger(__name__)

from annostore.core import annoinit
CONF = annoinit.config(__name__)


@implementer(IDatastore)
class MemoryDatastore(AbstractDatastore):
    """
    Memory implementation of the datastore, using dicts for document metadata
    and files. Every operation completes within the call, which makes the
    commit cut line of a snapshot simply the moment snapshot() is called.
    """

    id = 'memory'

    def __init__(self, directories=None, create_directories=None):
        """
        @param directories Directories to expose, default from config
        @param create_directories if True, init() creates the directories
        """
        if directories is None:
            directories = Directories()
        AbstractDatastore.__init__(self, directories)
        if create_directories is None:
            create_directories = CONF.getValue('create_directories', False)
        self.create_directories = create_directories

        self.docmeta_store = DocMetaStore()
        self.file_store = FileStore()
        self.snapshots = SnapshotEngine(self.id, self.docmeta_store.values, self.report_error)

    def on_initialize(self, *args, **kwargs):
        if self.create_directories:
            return self.directories.init()
        return InitResult(self.directories.data_dir)

    def contains(self, fingerprint):
        """
        @see IDatastore.contains
        """
        return defer.succeed(self.docmeta_store.has_key(fingerprint))

    def write(self, fingerprint, data, doc_info=None, mutation=None):
        """
        @see IDatastore.write
        The value is stored, then the mutation resolves written and committed
        and only after that are live listeners notified.
        """
        if mutation is None:
            mutation = DatastoreMutation()
        try:
            previous = self.docmeta_store.put(fingerprint, data, doc_info)
        except Exception as ex:
            mutation.reject(ex)
            raise

        mutation.resolve_written(True)
        mutation.resolve_committed(True)

        record = self.docmeta_store.get(fingerprint)
        mutation_type = MutationType.CREATED if previous is None else MutationType.UPDATED
        self.snapshots.dispatch([mutation_for_record(record, mutation_type)])
        return defer.succeed(None)

    def get_doc_meta(self, fingerprint):
        """
        @see IDatastore.get_doc_meta
        """
        log.info("Fetching document from datastore with fingerprint %s of %d docs." %
                 (fingerprint, len(self.docmeta_store)))
        return defer.succeed(self.docmeta_store.get_content(fingerprint))

    def get_doc_meta_files(self):
        """
        @see IDatastore.get_doc_meta_files
        Fingerprints are listed in the order they were first written.
        """
        return defer.succeed([DocMetaRef(fingerprint) for fingerprint in self.docmeta_store.fingerprints()])

    def delete(self, doc_meta_file_ref):
        """
        @see IDatastore.delete
        Removes the record and, when the reference names one, its data file
        in the stash. A missing record leaves the stash alone, so the result
        always describes what was removed.
        """
        removed = self.docmeta_store.remove(doc_meta_file_ref.fingerprint)
        existed = removed is not None
        if existed:
            if doc_meta_file_ref.doc_file is not None:
                self.file_store.remove(Backend.STASH, doc_meta_file_ref.doc_file)
            deleted = DocMetaMutation(removed.fingerprint, lambda: None,
                                      removed.doc_info, MutationType.DELETED)
            self.snapshots.dispatch([deleted])
        return defer.succeed(DeleteResult.for_ref(doc_meta_file_ref, existed))

    def _to_datastore_file(self, backend, ref, meta):
        url = 'memory://%s/%s' % (backend, ref.name)
        # callers get their own copy of the stored metadata
        return DatastoreFile(backend, ref, url, dict(meta))

    def write_file(self, backend, ref, data, meta=None):
        """
        @see IDatastore.write_file
        """
        stored_meta = self.file_store.put(backend, ref, data, meta)
        return defer.succeed(self._to_datastore_file(backend, ref, stored_meta))

    def get_file(self, backend, ref):
        """
        @see IDatastore.get_file
        """
        file_data = self.file_store.get(backend, ref)
        if file_data is None:
            return defer.succeed(None)
        return defer.succeed(self._to_datastore_file(backend, ref, file_data.meta))

    def read_file(self, backend, ref):
        """
        @retval Deferred, for the stored bytes or None
        """
        return defer.succeed(self.file_store.read(backend, ref))

    def contains_file(self, backend, ref):
        """
        @see IDatastore.contains_file
        """
        return defer.succeed(self.file_store.has_key(backend, ref))

    def delete_file(self, backend, ref):
        """
        @see IDatastore.delete_file
        """
        if self.file_store.remove(backend, ref):
            log.debug("Deleted file %s" % to_file_ref_key(backend, ref))
        return defer.succeed(None)

    def snapshot(self, listener, error_listener=None):
        """
        @see IDatastore.snapshot
        """
        d = self.snapshots.snapshot(listener)
        if error_listener is not None:
            def _failed(reason):
                error_listener(reason)
                return reason
            d.addErrback(_failed)
        return d

    def add_doc_meta_snapshot_event_listener(self, listener):
        """
        @see IDatastore.add_doc_meta_snapshot_event_listener
        """
        if not callable(listener):
            raise TypeMismatchError("listener", "callable", type(listener).__name__)
        self.snapshots.add_listener(listener)

    def remove_doc_meta_snapshot_event_listener(self, listener):
        """
        @see IDatastore.remove_doc_meta_snapshot_event_listener
        """
        self.snapshots.remove_listener(listener)

    def on_terminate(self, *args, **kwargs):
        log.info("Memory datastore stopped, %d docs and %d files held" %
                 (len(self.docmeta_store), len(self.file_store)))
