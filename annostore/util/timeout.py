#!/usr/bin/env python
"""
@file annostore/util/timeout.py
@brief A timeout decorator for Deferred returning calls
"""

import pprint

from twisted.internet import defer, reactor

from annostore.core.exception import AnnostoreError

from annostore.util import annolog
log = annolog.getLogger(__name__)

from annostore.core import annoinit
CONF = annoinit.config(__name__)

default_timeout = CONF.getValue('default_timeout', 10.0)

class TimeoutError(AnnostoreError):
    """Raised when time expires in timeout decorator"""

def timeout(secs=None):
    """
    Decorator to add timeout to Deferred calls. The wrapped call is not
    cancelled: whatever it already started (e.g. a datastore write) may still
    complete after the TimeoutError was raised.
    """
    if secs is None:
        secs = default_timeout

    def wrap(func):
        @defer.inlineCallbacks
        def _timeout(*args, **kwargs):
            log.debug('Setting Timeout for function "%s" to %f seconds: Args: %s KWArgs: %s' %
                      (func.__name__, secs, pprint.pformat(args), pprint.pformat(kwargs)))

            rawD = func(*args, **kwargs)
            if not isinstance(rawD, defer.Deferred):
                return rawD

            timeoutD = defer.Deferred()
            timesUp = reactor.callLater(secs, timeoutD.callback, None)

            try:
                rawResult, index = yield defer.DeferredList([rawD, timeoutD],
                        fireOnOneCallback=True, fireOnOneErrback=True, consumeErrors=True)
            except defer.FirstError as e:
                # Only rawD should raise an exception
                assert e.index == 0
                timesUp.cancel()
                e.subFailure.raiseException()

            if index == 1:
                log.error('Timeout error in function "%s"' % func.__name__)
                raise TimeoutError("%s secs have expired in func name %s" % (secs, func.__name__))

            log.debug('Cancelling timeout callback')
            timesUp.cancel()
            return rawResult
        return _timeout
    return wrap
