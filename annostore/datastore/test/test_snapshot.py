#!/usr/bin/env python

"""
@file annostore/datastore/test/test_snapshot.py
@test snapshots and live change batches of the memory datastore
"""

from twisted.internet import defer

from annostore.core.exception import TypeMismatchError
from annostore.datastore.datastore import DocMetaFileRef
from annostore.datastore.datastores import create_committed_snapshot
from annostore.datastore.mutation import DatastoreMutation
from annostore.datastore.snapshot import Consistency, MutationType
from annostore.test.annotest import AnnoTestCase, SnapshotRecorder


class SnapshotTest(AnnoTestCase):

    @defer.inlineCallbacks
    def setUp(self):
        self.errors = []
        self.ds = yield self._start_datastore(error_listener=self.errors.append)

    @defer.inlineCallbacks
    def test_snapshot_has_committed_records(self):
        mutation = DatastoreMutation()
        yield self.ds.write('doc1', '{"title":"A"}', mutation=mutation)
        yield mutation.committed.get()
        yield self.ds.write('doc2', '{"title":"B"}')

        recorder = SnapshotRecorder()
        result = yield self.ds.snapshot(recorder)

        self.assertEqual(result.count, 2)
        self.assertEqual(len(recorder.events), 1)
        event = recorder.events[0]
        self.assertEqual(event.batch.id, result.batch_id)
        self.assertTrue(event.batch.terminated)
        self.assertEqual(event.progress, 100)
        self.assertEqual(event.consistency, Consistency.COMMITTED)
        self.assertEqual(event.datastore, 'memory')
        self.assertEqual(event.fingerprints(), ['doc1', 'doc2'])

        first = event.doc_meta_mutations[0]
        self.assertEqual(first.doc_meta(), '{"title":"A"}')
        self.assertEqual(first.parse(), {'title': 'A'})
        self.assertEqual(first.mutation_type, MutationType.CREATED)

    @defer.inlineCallbacks
    def test_empty_snapshot(self):
        recorder = SnapshotRecorder()
        result = yield self.ds.snapshot(recorder)
        self.assertEqual(result.count, 0)
        self.assertEqual(len(recorder.events), 1)
        self.assertTrue(recorder.events[0].batch.terminated)

    @defer.inlineCallbacks
    def test_snapshot_excludes_deleted(self):
        yield self.ds.write('doc1', '{}')
        yield self.ds.write('doc2', '{}')
        yield self.ds.delete(DocMetaFileRef('doc1'))

        recorder = SnapshotRecorder()
        yield self.ds.snapshot(recorder)
        self.assertEqual(recorder.fingerprints, ['doc2'])

    def test_snapshot_listener_failure(self):
        failures = []
        def listener(event):
            raise RuntimeError('listener blew up')
        d = self.ds.snapshot(listener, error_listener=failures.append)
        d = self.assertFailure(d, RuntimeError)
        d.addCallback(lambda _: self.assertEqual(len(failures), 1))
        return d

    @defer.inlineCallbacks
    def test_doc_info_travels(self):
        doc_info = {'title': 'A', 'nrPages': 3}
        yield self.ds.write('doc1', '{}', doc_info)
        recorder = SnapshotRecorder()
        yield self.ds.snapshot(recorder)
        self.assertEqual(recorder.mutations[0].doc_info, doc_info)

    @defer.inlineCallbacks
    def test_live_events(self):
        recorder = SnapshotRecorder()
        self.ds.add_doc_meta_snapshot_event_listener(recorder)

        yield self.ds.write('doc1', '{"v":1}')
        yield self.ds.write('doc1', '{"v":2}')
        yield self.ds.delete(DocMetaFileRef('doc1'))
        # nothing existed, nothing to announce
        yield self.ds.delete(DocMetaFileRef('doc1'))

        types = [m.mutation_type for m in recorder.mutations]
        self.assertEqual(types, [MutationType.CREATED, MutationType.UPDATED, MutationType.DELETED])
        self.assertEqual(recorder.mutations[1].parse(), {'v': 2})
        self.assertEqual(recorder.mutations[2].doc_meta(), None)
        self.assertEqual(len(recorder.events), 3)

    @defer.inlineCallbacks
    def test_live_event_after_commit(self):
        seen = []
        mutation = DatastoreMutation()
        def listener(event):
            seen.append(mutation.committed.called)
        self.ds.add_doc_meta_snapshot_event_listener(listener)
        yield self.ds.write('doc1', '{}', mutation=mutation)
        self.assertEqual(seen, [True])

    @defer.inlineCallbacks
    def test_remove_listener(self):
        recorder = SnapshotRecorder()
        self.ds.add_doc_meta_snapshot_event_listener(recorder)
        yield self.ds.write('doc1', '{}')
        self.ds.remove_doc_meta_snapshot_event_listener(recorder)
        yield self.ds.write('doc2', '{}')
        self.assertEqual(recorder.fingerprints, ['doc1'])

    @defer.inlineCallbacks
    def test_register_during_delivery(self):
        late = SnapshotRecorder()
        def early(event):
            # registration while this batch is in flight waits for the next one
            self.ds.add_doc_meta_snapshot_event_listener(late)
        self.ds.add_doc_meta_snapshot_event_listener(early)

        yield self.ds.write('doc1', '{}')
        self.assertEqual(late.events, [])
        yield self.ds.write('doc2', '{}')
        self.assertEqual(late.fingerprints, ['doc2'])

    @defer.inlineCallbacks
    def test_unregister_during_delivery(self):
        second = SnapshotRecorder()
        def first(event):
            self.ds.remove_doc_meta_snapshot_event_listener(second)
        self.ds.add_doc_meta_snapshot_event_listener(first)
        self.ds.add_doc_meta_snapshot_event_listener(second)

        yield self.ds.write('doc1', '{}')
        # the batch in flight still reaches every listener it started with
        self.assertEqual(second.fingerprints, ['doc1'])
        yield self.ds.write('doc2', '{}')
        self.assertEqual(second.fingerprints, ['doc1'])

    @defer.inlineCallbacks
    def test_register_during_snapshot(self):
        live = SnapshotRecorder()
        def catch_up(event):
            self.ds.add_doc_meta_snapshot_event_listener(live)
        yield self.ds.write('doc1', '{}')
        yield self.ds.snapshot(catch_up)
        self.assertEqual(self.ds.snapshots.listeners, [live])
        yield self.ds.write('doc2', '{}')
        self.assertEqual(live.fingerprints, ['doc2'])

    @defer.inlineCallbacks
    def test_register_while_earlier_batch_pending(self):
        pending = defer.Deferred()
        def slow(event):
            if event.fingerprints() == ['doc1']:
                return pending
        late = SnapshotRecorder()
        self.ds.add_doc_meta_snapshot_event_listener(slow)

        yield self.ds.write('doc1', '{}')
        # doc1's batch is still being processed by slow
        self.ds.add_doc_meta_snapshot_event_listener(late)
        yield self.ds.write('doc2', '{}')
        self.assertEqual(late.fingerprints, ['doc2'])

        pending.callback(None)
        yield self.ds.write('doc3', '{}')
        self.assertEqual(late.fingerprints, ['doc2', 'doc3'])

    @defer.inlineCallbacks
    def test_register_while_snapshot_pending(self):
        pending = defer.Deferred()
        live = SnapshotRecorder()
        d = self.ds.snapshot(lambda event: pending)
        self.ds.add_doc_meta_snapshot_event_listener(live)
        yield self.ds.write('doc1', '{}')
        self.assertEqual(live.fingerprints, ['doc1'])
        pending.callback(None)
        result = yield d
        self.assertEqual(result.count, 0)

    @defer.inlineCallbacks
    def test_failing_live_listener_reported(self):
        def broken(event):
            raise ValueError('broken listener')
        recorder = SnapshotRecorder()
        self.ds.add_doc_meta_snapshot_event_listener(broken)
        self.ds.add_doc_meta_snapshot_event_listener(recorder)

        yield self.ds.write('doc1', '{}')

        self.assertEqual(recorder.fingerprints, ['doc1'])
        self.assertEqual(len(self.errors), 1)
        self.assertTrue(self.errors[0].check(ValueError))
        data = yield self.ds.get_doc_meta('doc1')
        self.assertEqual(data, '{}')

    def test_listener_must_be_callable(self):
        self.assertRaises(TypeMismatchError, self.ds.add_doc_meta_snapshot_event_listener, 'nope')

    @defer.inlineCallbacks
    def test_create_committed_snapshot(self):
        yield self.ds.write('doc1', '{"title":"A"}')
        yield self.ds.write('doc2', '{"title":"B"}')
        recorder = SnapshotRecorder()
        result = yield create_committed_snapshot(self.ds, recorder)
        self.assertEqual(result.count, 2)
        self.assertEqual(recorder.fingerprints, ['doc1', 'doc2'])
        self.assertEqual([m.parse()['title'] for m in recorder.mutations], ['A', 'B'])
