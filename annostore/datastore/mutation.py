#!/usr/bin/env python

"""
@file annostore/datastore/mutation.py
@brief Two phase completion tracking for a single datastore write.

A DatastoreMutation is created by the caller and handed to
IDatastore.write(). The backend resolves 'written' once the value is visible
locally and 'committed' once the backend considers it durable. Backends that
cannot tell the two apart resolve both in one go, written first.
"""

from twisted.internet import defer
from twisted.python import failure

from annostore.core.exception import IllegalStateError

from annostore.util import annolog
log = annolog.getLogger(__name__)


class Latch(object):
    """
    Single assignment completion cell. It is resolved (or rejected) exactly
    once; every observer calling get() receives its own Deferred for the
    outcome, so any number of observers can wait on the same latch.
    """

    def __init__(self, name='latch'):
        self.name = name
        self.called = False
        self.result = None
        self._waiting = []

    def resolve(self, value):
        self._fire(value)

    def reject(self, reason):
        """
        @param reason an Exception or a twisted Failure
        """
        if not isinstance(reason, failure.Failure):
            reason = failure.Failure(reason)
        self._fire(reason)

    def _fire(self, result):
        if self.called:
            raise defer.AlreadyCalledError("%s already resolved with %r" % (self.name, self.result))
        self.called = True
        self.result = result
        waiting, self._waiting = self._waiting, []
        for d in waiting:
            if isinstance(result, failure.Failure):
                d.errback(result)
            else:
                d.callback(result)

    @property
    def failed(self):
        return self.called and isinstance(self.result, failure.Failure)

    def get(self):
        """
        @retval Deferred firing with the resolved value, or failing with the
            rejection
        """
        if self.called:
            if isinstance(self.result, failure.Failure):
                return defer.fail(self.result)
            return defer.succeed(self.result)
        d = defer.Deferred()
        self._waiting.append(d)
        return d

    def __repr__(self):
        return "Latch(%s, called=%s, result=%r)" % (self.name, self.called, self.result)


class DatastoreMutation(object):
    """
    Owned by the caller, resolved by the datastore. 'written' can never be
    resolved after 'committed'.
    """

    def __init__(self):
        self.written = Latch('written')
        self.committed = Latch('committed')

    def resolve_written(self, value=True):
        self.written.resolve(value)

    def resolve_committed(self, value=True):
        if not self.written.called:
            raise IllegalStateError("committed resolved before written")
        self.committed.resolve(value)

    def resolve(self, value=True):
        """
        @brief For backends without a separate durability phase
        """
        self.resolve_written(value)
        self.resolve_committed(value)

    def reject(self, reason):
        """
        @brief Fails every phase that is still pending
        """
        if not isinstance(reason, failure.Failure):
            reason = failure.Failure(reason)
        if not self.written.called:
            self.written.reject(reason)
        if not self.committed.called:
            self.committed.reject(reason)

    @property
    def pending(self):
        return not self.committed.called

    def __repr__(self):
        return "DatastoreMutation(written=%r, committed=%r)" % (self.written, self.committed)


class DatastoreMutations(object):
    """
    Helpers to combine and chain mutations.
    """

    @staticmethod
    def create():
        return DatastoreMutation()

    @staticmethod
    def pipe(source, target):
        """
        @brief Forwards the phases of source into target as they resolve
        @retval target
        """
        def _written(value):
            target.resolve_written(value)
            return source.committed.get()

        d = source.written.get()
        d.addCallback(_written)
        d.addCallbacks(target.resolve_committed, target.reject)
        return target

    @staticmethod
    def batched(mutations, target=None):
        """
        @brief target.written fires once every mutation is written and
            target.committed once every mutation is committed. The first
            failure rejects whatever is still pending on the target.
        @retval target
        """
        if target is None:
            target = DatastoreMutation()
        mutations = list(mutations)

        def _phase(latch_name):
            dl = defer.DeferredList([getattr(m, latch_name).get() for m in mutations],
                                    fireOnOneErrback=True, consumeErrors=True)
            dl.addCallback(lambda results: all(value for ok, value in results))
            return dl

        def _written(value):
            target.resolve_written(value)
            return _phase('committed')

        def _failed(reason):
            if reason.check(defer.FirstError):
                reason = reason.value.subFailure
            target.reject(reason)

        d = _phase('written')
        d.addCallback(_written)
        d.addCallbacks(target.resolve_committed, _failed)
        return target

    @staticmethod
    def then(mutation, on_committed):
        """
        @brief Calls on_committed(value) once the mutation is committed.
        @retval Deferred with the result of on_committed
        """
        d = mutation.committed.get()
        d.addCallback(on_committed)
        return d
