#!/usr/bin/env python

"""
@file annostore/datastore/datastores.py
@brief Backend selection and helpers working on any IDatastore
"""

from twisted.internet import defer

from annostore.core.exception import ConfigurationError
from annostore.datastore.datastore import IDatastore
from annostore.datastore.snapshot import Consistency, DocMetaMutation, DocMetaSnapshotEvent
from annostore.datastore.snapshot import MutationType, SnapshotBatch, SnapshotResult

from annostore.util import annolog
log = annolog.getLogger(__name__)

from annostore.core import annoinit
CONF = annoinit.config(__name__)

# backend name -> (module, class name); imported on first use
BACKENDS = {
    'memory': ('annostore.datastore.memory', 'MemoryDatastore'),
}


def register_backend(name, module, class_name):
    BACKENDS[name] = (module, class_name)


def create_datastore(name=None, **kwargs):
    """
    @brief Creates a datastore backend by name. The instance still needs init().
    @param name key in BACKENDS; the 'default_backend' config entry if None
    @param kwargs passed to the backend constructor
    """
    if name is None:
        name = CONF.getValue('default_backend', 'memory')
    if name not in BACKENDS:
        raise ConfigurationError("Unknown datastore backend '%s', known: %s" %
                                 (name, ", ".join(sorted(BACKENDS))))
    module_name, class_name = BACKENDS[name]
    module = __import__(module_name, fromlist=[class_name])
    cls = getattr(module, class_name)
    datastore = cls(**kwargs)
    if not IDatastore.providedBy(datastore):
        raise ConfigurationError("Backend %s.%s does not provide IDatastore" % (module_name, class_name))
    log.debug("Created datastore backend %s" % name)
    return datastore


@defer.inlineCallbacks
def create_committed_snapshot(datastore, listener, batch_id=0):
    """
    @brief Builds a snapshot through the plain contract operations, for
        backends without a native snapshot. Every record is read before the
        listener is called, so the listener gets the whole batch or nothing.
    @retval Deferred, for a SnapshotResult
    """
    refs = yield datastore.get_doc_meta_files()
    mutations = []
    for ref in refs:
        data = yield datastore.get_doc_meta(ref.fingerprint)
        if data is None:
            # deleted while we were reading
            continue
        mutations.append(DocMetaMutation(ref.fingerprint, lambda data=data: data,
                                         None, MutationType.CREATED))

    event = DocMetaSnapshotEvent(datastore.id, Consistency.COMMITTED, 100,
                                 SnapshotBatch(batch_id, True), mutations)
    yield defer.maybeDeferred(listener, event)
    return SnapshotResult(len(mutations), batch_id)
