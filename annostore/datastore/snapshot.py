#!/usr/bin/env python

"""
@file annostore/datastore/snapshot.py
@brief Point in time views of the document metadata store and change
    notification for registered listeners.

A snapshot reads the committed records synchronously and hands them to the
listener as one terminated batch. Live batches go to every registered
listener; listeners added or removed while a batch is being delivered are
queued and applied before the next batch starts, so nobody sees half a batch.
"""

import itertools

import simplejson as json

from twisted.internet import defer

from annostore.util import annolog
log = annolog.getLogger(__name__)


class MutationType(object):
    CREATED = 'created'
    UPDATED = 'updated'
    DELETED = 'deleted'


class Consistency(object):
    # Only committed records are ever delivered
    COMMITTED = 'committed'


class DocMetaMutation(object):
    """
    One record inside a batch. The payload is produced on demand by
    doc_meta_provider, a callable returning the stored str (or None for
    deleted records).
    """

    def __init__(self, fingerprint, doc_meta_provider, doc_info=None, mutation_type=MutationType.CREATED):
        self.fingerprint = fingerprint
        self.doc_meta_provider = doc_meta_provider
        self.doc_info = doc_info
        self.mutation_type = mutation_type

    def doc_meta(self):
        return self.doc_meta_provider()

    def parse(self):
        """
        @retval the payload decoded from JSON, None for deleted records
        """
        content = self.doc_meta()
        if content is None:
            return None
        return json.loads(content)

    def __repr__(self):
        return "DocMetaMutation(%r, %s)" % (self.fingerprint, self.mutation_type)


class SnapshotBatch(object):

    def __init__(self, id, terminated=True):
        self.id = id
        self.terminated = terminated

    def __repr__(self):
        return "SnapshotBatch(%s, terminated=%s)" % (self.id, self.terminated)


class DocMetaSnapshotEvent(object):

    def __init__(self, datastore, consistency, progress, batch, doc_meta_mutations):
        self.datastore = datastore
        self.consistency = consistency
        self.progress = progress
        self.batch = batch
        self.doc_meta_mutations = doc_meta_mutations

    def fingerprints(self):
        return [m.fingerprint for m in self.doc_meta_mutations]

    def __len__(self):
        return len(self.doc_meta_mutations)

    def __repr__(self):
        return "DocMetaSnapshotEvent(%s, %r, %d mutations)" % \
            (self.datastore, self.batch, len(self.doc_meta_mutations))


class SnapshotResult(object):

    def __init__(self, count, batch_id):
        self.count = count
        self.batch_id = batch_id

    def __repr__(self):
        return "SnapshotResult(count=%d, batch_id=%s)" % (self.count, self.batch_id)


def _constant(value):
    return lambda: value


def mutation_for_record(record, mutation_type):
    return DocMetaMutation(record.fingerprint, _constant(record.content),
                           record.doc_info, mutation_type)


class SnapshotEngine(object):
    """
    @param datastore_id name of the datastore put into each event
    @param records callable returning the committed DocumentRecords
    @param error_reporter callable(Failure) for failures of live listeners
    """

    def __init__(self, datastore_id, records, error_reporter):
        self.datastore_id = datastore_id
        self.records = records
        self.error_reporter = error_reporter

        self.listeners = []
        # (register, listener) tuples waiting for the next batch boundary
        self.pending_registrations = []
        self.in_flight = 0
        self._batch_ids = itertools.count(1)

    def add_listener(self, listener):
        self._register(True, listener)

    def remove_listener(self, listener):
        self._register(False, listener)

    def _register(self, register, listener):
        if self.in_flight:
            log.debug("Batch in flight, queueing listener registration")
            self.pending_registrations.append((register, listener))
        else:
            self._apply_registration(register, listener)

    def _apply_registration(self, register, listener):
        if register:
            if listener not in self.listeners:
                self.listeners.append(listener)
        elif listener in self.listeners:
            self.listeners.remove(listener)

    def _drain_registrations(self):
        while self.pending_registrations:
            register, listener = self.pending_registrations.pop(0)
            self._apply_registration(register, listener)

    def _create_event(self, mutations, terminated=True):
        batch = SnapshotBatch(next(self._batch_ids), terminated)
        progress = 100 if terminated else 0
        return DocMetaSnapshotEvent(self.datastore_id, Consistency.COMMITTED,
                                    progress, batch, mutations)

    def _begin(self):
        self.in_flight += 1

    def _end(self, result):
        self.in_flight -= 1
        if not self.in_flight:
            self._drain_registrations()
        return result

    def snapshot(self, listener):
        """
        @brief Read the committed records and deliver them to listener as one
            batch. The records are copied before delivery starts.
        @retval Deferred, for a SnapshotResult; fails if the listener fails
        """
        mutations = [mutation_for_record(record, MutationType.CREATED)
                     for record in self.records()]
        event = self._create_event(mutations)
        log.debug("Delivering snapshot %r" % event)

        self._begin()
        d = defer.maybeDeferred(listener, event)
        d.addBoth(self._end)
        d.addCallback(lambda _: SnapshotResult(len(mutations), event.batch.id))
        return d

    def dispatch(self, mutations):
        """
        @brief Deliver a batch of changes to every registered listener. A
            failing listener is reported and does not stop delivery to the
            others.
        @retval Deferred fired once every listener has processed the batch
        """
        # registrations made during earlier batches apply from this batch on,
        # even while those batches are still being processed
        self._drain_registrations()
        event = self._create_event(list(mutations))
        listeners = list(self.listeners)
        if not listeners:
            return defer.succeed(event)

        self._begin()
        deliveries = []
        for listener in listeners:
            d = defer.maybeDeferred(listener, event)
            d.addErrback(self._listener_failed, listener)
            deliveries.append(d)
        dl = defer.DeferredList(deliveries)
        dl.addBoth(self._end)
        dl.addCallback(lambda _: event)
        return dl

    def _listener_failed(self, reason, listener):
        log.error("Snapshot listener %r failed: %s" % (listener, reason.getErrorMessage()))
        self.error_reporter(reason)
