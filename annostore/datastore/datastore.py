#!/usr/bin/env python

"""
@file annostore/datastore/datastore.py
@package annostore.datastore.IDatastore contract for all datastore backends
@package annostore.datastore.AbstractDatastore lifecycle shared by backends
@brief The uniform contract for storing document metadata (JSON payloads keyed
    by fingerprint) and binary attachments (keyed by backend and name).
"""

from zope.interface import Interface, Attribute

from twisted.internet import defer

from annostore.core.exception import IllegalStateError
from annostore.util.state_object import BasicLifecycleObject, BasicStates

from annostore.util import annolog
log = annolog.getLogger(__name__)


class IDatastore(Interface):
    """
    Interface all datastore backend implementations.
    All operations are returning deferreds and operate asynchronously.
    Precondition violations are raised directly from the call.
    """

    id = Attribute("short name of the backend, e.g. 'memory'")
    directories = Attribute("Directories instance with the datastore paths")

    def init(error_listener=None):
        """
        @param error_listener callable(Failure) receiving errors that happen
            after init, outside of any single call
        @retval Deferred, for an InitResult. Fails with InitError if the
            backing storage is unreachable.
        """

    def stop():
        """
        @brief release anything acquired in init. Idempotent.
        @retval Deferred
        """

    def contains(fingerprint):
        """
        @retval Deferred, for a bool
        """

    def write(fingerprint, data, doc_info=None, mutation=None):
        """
        @param data the document metadata, must be a str
        @param doc_info optional document info travelling with the record
        @param mutation DatastoreMutation to resolve written then committed
        @retval Deferred, for success of this operation
        """

    def get_doc_meta(fingerprint):
        """
        @retval Deferred, for the stored str or None if not existing
        """

    def get_doc_meta_files():
        """
        @retval Deferred, for a list of DocMetaRef
        """

    def delete(doc_meta_file_ref):
        """
        @param doc_meta_file_ref a DocMetaFileRef
        @retval Deferred, for a DeleteResult. Absent targets are reported
            with deleted=False, never as an error.
        """

    def write_file(backend, ref, data, meta=None):
        """
        @param backend storage area, see Backend
        @param ref FileRef naming the file
        @param data bytes, str, a FileHandle or a file-like object
        @param meta dict of caller supplied metadata
        @retval Deferred, for a DatastoreFile
        """

    def get_file(backend, ref):
        """
        @retval Deferred, for a DatastoreFile or None
        """

    def contains_file(backend, ref):
        """
        @retval Deferred, for a bool
        """

    def delete_file(backend, ref):
        """
        @retval Deferred, for success. Deleting a missing file is fine.
        """

    def snapshot(listener, error_listener=None):
        """
        @brief Deliver all committed records to listener as one batch
        @retval Deferred, for a SnapshotResult
        """

    def add_doc_meta_snapshot_event_listener(listener):
        """
        @brief Register for change batches following later mutations
        """

    def remove_doc_meta_snapshot_event_listener(listener):
        """
        @brief Stop delivering change batches to listener
        """


class DocMetaRef(object):
    """
    Lightweight reference to a document metadata record.
    """

    def __init__(self, fingerprint):
        self.fingerprint = fingerprint

    def __eq__(self, other):
        return isinstance(other, DocMetaRef) and self.fingerprint == other.fingerprint

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash(self.fingerprint)

    def __repr__(self):
        return "DocMetaRef(%r)" % self.fingerprint


class DocMetaFileRef(DocMetaRef):
    """
    A DocMetaRef that also names the data file (e.g. the PDF in the stash)
    the metadata belongs to.
    """

    def __init__(self, fingerprint, doc_file=None, doc_info=None):
        DocMetaRef.__init__(self, fingerprint)
        self.doc_file = doc_file
        self.doc_info = doc_info

    def __repr__(self):
        return "DocMetaFileRef(%r, doc_file=%r)" % (self.fingerprint, self.doc_file)


class FileDeleted(object):

    def __init__(self, path, deleted=False):
        self.path = path
        self.deleted = deleted

    def __eq__(self, other):
        return isinstance(other, FileDeleted) and \
            (self.path, self.deleted) == (other.path, other.deleted)

    def __ne__(self, other):
        return not self == other

    def __repr__(self):
        return "FileDeleted(path=%r, deleted=%r)" % (self.path, self.deleted)


class DeleteResult(object):
    """
    Outcome of IDatastore.delete(). The paths are for display and debugging,
    not necessarily locations on disk.
    """

    def __init__(self, doc_meta_file, data_file):
        self.doc_meta_file = doc_meta_file
        self.data_file = data_file

    @classmethod
    def for_ref(cls, doc_meta_file_ref, deleted):
        doc_file = doc_meta_file_ref.doc_file
        data_path = '/%s' % doc_file.name if doc_file is not None else None
        return cls(FileDeleted('/%s.json' % doc_meta_file_ref.fingerprint, deleted),
                   FileDeleted(data_path, deleted))

    def to_dict(self):
        return {
            'docMetaFile': {'path': self.doc_meta_file.path, 'deleted': self.doc_meta_file.deleted},
            'dataFile': {'path': self.data_file.path, 'deleted': self.data_file.deleted},
        }

    def __repr__(self):
        return "DeleteResult(%r, %r)" % (self.doc_meta_file, self.data_file)


class InitResult(object):

    def __init__(self, data_dir, created=None):
        self.data_dir = data_dir
        self.created = list(created or [])

    def __repr__(self):
        return "InitResult(data_dir=%r, created=%r)" % (self.data_dir, self.created)


def NULL_LISTENER(*args, **kwargs):
    pass


class AbstractDatastore(BasicLifecycleObject):
    """
    Lifecycle shared by all backends: init() runs initialize then activate,
    stop() terminates. Subclasses implement on_initialize / on_activate /
    on_terminate and the IDatastore operations.
    """

    id = None

    def __init__(self, directories):
        BasicLifecycleObject.__init__(self)
        self.directories = directories
        self.error_listener = NULL_LISTENER

    @property
    def data_dir(self):
        return self.directories.data_dir

    @property
    def stash_dir(self):
        return self.directories.stash_dir

    @property
    def files_dir(self):
        return self.directories.files_dir

    @property
    def logs_dir(self):
        return self.directories.logs_dir

    @defer.inlineCallbacks
    def init(self, error_listener=None):
        """
        @see IDatastore.init
        """
        if error_listener is not None:
            self.error_listener = error_listener
        init_result = yield self.initialize()
        yield self.activate()
        log.info("Datastore %s initialized: %s" % (self.id, init_result))
        return init_result

    def stop(self):
        """
        @see IDatastore.stop
        """
        state = self._get_state()
        if state in (BasicStates.S_READY, BasicStates.S_ACTIVE):
            return defer.maybeDeferred(self.terminate)
        return defer.succeed(None)

    def report_error(self, reason):
        """
        @brief Hands an asynchronous error to the registered error listener
        """
        log.error("Datastore %s error: %s" % (self.id, reason))
        try:
            self.error_listener(reason)
        except Exception:
            log.exception("Error listener failed")

    def on_activate(self, *args, **kwargs):
        pass

    def on_terminate(self, *args, **kwargs):
        log.info("Datastore %s stopped" % self.id)

    def on_error(self, cause=None, *args, **kwargs):
        if cause is None:
            raise IllegalStateError("Illegal state change in datastore %s (state %s)" %
                                    (self.id, self._get_state()))
        log.error("Datastore %s error: %s" % (self.id, cause))
