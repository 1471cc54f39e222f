#!/usr/bin/env python

"""
@file annostore/datastore/file_store.py
@brief Binary attachments keyed by backend and name, with metadata.
"""

import os

from annostore.core.exception import InvalidKeyError, TypeMismatchError
from annostore.util.preconditions import assert_type_of

from annostore.util import annolog
log = annolog.getLogger(__name__)


# Separator between backend and file name in a file key
KEY_SEPARATOR = ':'


class Backend(object):
    """
    @brief Storage areas within which file references are keyed.
    """
    STASH = 'stash'
    LOGS = 'logs'
    ATTACHMENT = 'attachment'
    IMAGE = 'image'

    @classmethod
    def values(cls):
        return (cls.STASH, cls.LOGS, cls.ATTACHMENT, cls.IMAGE)


class FileRef(object):
    """
    Reference to a stored attachment, by name.
    """

    def __init__(self, name, hashcode=None):
        self.name = name
        self.hashcode = hashcode

    def __eq__(self, other):
        return isinstance(other, FileRef) and self.name == other.name

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash(self.name)

    def __repr__(self):
        return "FileRef(%r)" % self.name


class FileHandle(object):
    """
    Names content that lives on the local filesystem.
    """

    def __init__(self, path):
        self.path = path

    def __repr__(self):
        return "FileHandle(%r)" % self.path


class DatastoreFile(object):
    """
    Descriptor returned for a stored file.
    @var url locator the caller can use to retrieve the content later
    """

    def __init__(self, backend, ref, url, meta=None):
        self.backend = backend
        self.ref = ref
        self.url = url
        self.meta = meta if meta is not None else {}

    def __eq__(self, other):
        return isinstance(other, DatastoreFile) and \
            (self.backend, self.ref, self.url, self.meta) == \
            (other.backend, other.ref, other.url, other.meta)

    def __ne__(self, other):
        return not self == other

    def __repr__(self):
        return "DatastoreFile(%s, %r, url=%r)" % (self.backend, self.ref, self.url)


def to_file_ref_key(backend, ref):
    """
    @brief Derives the storage key of a file: backend + ':' + ref.name
    @raise InvalidKeyError for anything that could produce an ambiguous key
    """
    if not isinstance(backend, str) or not backend:
        raise InvalidKeyError("Invalid backend: %r" % (backend,))
    if KEY_SEPARATOR in backend:
        raise InvalidKeyError("Backend may not contain '%s': %r" % (KEY_SEPARATOR, backend))
    if ref is None:
        raise InvalidKeyError("No file reference given for backend %s" % backend)
    name = getattr(ref, 'name', None)
    if not isinstance(name, str) or not name:
        raise InvalidKeyError("Invalid file reference name: %r" % (name,))
    return backend + KEY_SEPARATOR + name


def to_bytes(data):
    """
    @brief Normalizes file content to bytes
    @param data bytes, bytearray, str (UTF-8), an os.PathLike or an object
        with a path attribute (read from disk), or a file-like object with read()
    """
    if isinstance(data, bytes):
        return data
    if isinstance(data, bytearray):
        return bytes(data)
    if isinstance(data, str):
        return data.encode('utf-8')
    if isinstance(data, os.PathLike):
        with open(os.fspath(data), 'rb') as fh:
            return fh.read()
    if isinstance(getattr(data, 'path', None), str):
        with open(data.path, 'rb') as fh:
            return fh.read()
    if hasattr(data, 'read'):
        content = data.read()
        if isinstance(content, str):
            content = content.encode('utf-8')
        return assert_type_of(content, bytes, "data.read()")
    raise TypeMismatchError("data", "bytes|str|PathLike|FileHandle|file", type(data).__name__)


class FileData(object):
    __slots__ = ['content', 'meta']

    def __init__(self, content, meta):
        self.content = content
        self.meta = meta


class FileStore(object):
    """
    Memory implementation of the file storage, using a dict keyed by
    to_file_ref_key(). Repeated writes to the same key overwrite.
    """

    def __init__(self):
        self.files = {}

    def put(self, backend, ref, data, meta=None):
        key = to_file_ref_key(backend, ref)
        content = to_bytes(data)
        meta = dict(meta) if meta else {}
        self.files[key] = FileData(content, meta)
        log.debug("Stored file %s (%d bytes)" % (key, len(content)))
        return dict(meta)

    def get(self, backend, ref):
        """
        @retval FileData or None if not existing
        """
        return self.files.get(to_file_ref_key(backend, ref))

    def read(self, backend, ref):
        """
        @retval stored bytes or None if not existing
        """
        file_data = self.get(backend, ref)
        if file_data is None:
            return None
        return file_data.content

    def has_key(self, backend, ref):
        return to_file_ref_key(backend, ref) in self.files

    def remove(self, backend, ref):
        """
        @retval True if something was removed
        """
        return self.files.pop(to_file_ref_key(backend, ref), None) is not None

    def __len__(self):
        return len(self.files)
