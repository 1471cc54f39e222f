#!/usr/bin/env python

"""
@file annostore/util/state_object.py
@brief base classes for objects that are controlled by an underlying state machine
"""

from twisted.internet import defer
from twisted.python import failure

from annostore.util import annolog
log = annolog.getLogger(__name__)

from annostore.util.fsm import FSM

class BasicStates(object):
    """
    @brief Defines constants for basic state and lifecycle FSMs.
    """
    # States
    # Note: The INIT state is active before the initialize input is received
    S_INIT = "INIT"
    S_READY = "READY"
    S_ACTIVE = "ACTIVE"
    S_TERMINATED = "TERMINATED"
    S_ERROR = "ERROR"

    # Input events
    E_INITIALIZE = "initialize"
    E_ACTIVATE = "activate"
    E_TERMINATE = "terminate"
    E_ERROR = "error"

    # Actions - in general called the same as the triggering event
    A_ACTIVE_TERMINATE = "terminate_active"

class StateObject(object):
    """
    @brief Base class for an object instance that has an underlying FSM that
        determines which inputs are allowed at any given time; inputs trigger
        actions named "on_<action>" on the instance.
    """

    def __init__(self):
        self.__fsm = None
        self.__input_args = ()
        self.__input_kwargs = {}
        self.__error_cause = None

    def _so_set_fsm(self, fsm_inst):
        assert not self.__fsm, "FSM already set"
        assert isinstance(fsm_inst, FSM), "Given object not a FSM"
        self.__fsm = fsm_inst

    def _so_action(self, action):
        """
        @retval a function for the FSM calling the named action of this object
        """
        def action_target(fsm):
            func = getattr(self, "on_%s" % action)
            if action == BasicStates.E_ERROR:
                return func(self.__error_cause, *self.__input_args, **self.__input_kwargs)
            return func(*self.__input_args, **self.__input_kwargs)
        return action_target

    def _so_process(self, event, *args, **kwargs):
        """
        @brief Trigger the FSM with an event. Leads to action functions being
            called. A failing action (immediate or deferred) moves the object
            into the ERROR state and the original error is passed on.
        @retval Maybe a Deferred, or result of the action
        """
        assert self.__fsm, "FSM not set"
        self.__input_args = args
        self.__input_kwargs = kwargs
        self.__error_cause = None
        try:
            res = self.__fsm.process(event)
        except Exception as ex:
            log.exception("ERROR in StateObject process(event=%s)" % event)
            try:
                self._so_error(ex)
            except Exception:
                log.exception("Subsequent ERROR in StateObject error()")
            raise

        if isinstance(res, defer.Deferred):
            def _err(reason):
                log.error("ERROR in StateObject process(event=%s), D:\n%s" % (event, reason))
                d_err = defer.maybeDeferred(self._so_error, reason)
                d_err.addErrback(lambda f: log.error("Subsequent ERROR in StateObject error():\n%s" % f))
                d_err.addBoth(lambda _: reason)
                return d_err
            res.addErrback(_err)
        return res

    def _so_error(self, cause):
        """
        @brief Brings the StateObject explicitly into the error state, because
            of some action error.
        """
        if isinstance(cause, Exception):
            cause = failure.Failure(cause)
        self.__error_cause = cause
        self.__input_args = ()
        self.__input_kwargs = {}
        return self.__fsm.process(BasicStates.E_ERROR)

    def _get_state(self):
        assert self.__fsm, "FSM not set"
        return self.__fsm.current_state

class BasicLifecycleObject(StateObject):
    """
    A StateObject with a basic life cycle:
    INIT -initialize-> READY -activate-> ACTIVE -terminate-> TERMINATED.
    READY can be terminated directly. Any other input leads to ERROR.
    """

    def __init__(self):
        StateObject.__init__(self)
        fsm = FSM(BasicStates.S_INIT)
        fsm.add_transition(BasicStates.E_INITIALIZE, BasicStates.S_INIT,
                           self._so_action(BasicStates.E_INITIALIZE), BasicStates.S_READY)
        fsm.add_transition(BasicStates.E_ACTIVATE, BasicStates.S_READY,
                           self._so_action(BasicStates.E_ACTIVATE), BasicStates.S_ACTIVE)
        fsm.add_transition(BasicStates.E_TERMINATE, BasicStates.S_READY,
                           self._so_action(BasicStates.E_TERMINATE), BasicStates.S_TERMINATED)
        fsm.add_transition(BasicStates.E_TERMINATE, BasicStates.S_ACTIVE,
                           self._so_action(BasicStates.A_ACTIVE_TERMINATE), BasicStates.S_TERMINATED)
        fsm.set_default_transition(self._so_action(BasicStates.E_ERROR), BasicStates.S_ERROR)
        self._so_set_fsm(fsm)

    def initialize(self, *args, **kwargs):
        return self._so_process(BasicStates.E_INITIALIZE, *args, **kwargs)

    def activate(self, *args, **kwargs):
        return self._so_process(BasicStates.E_ACTIVATE, *args, **kwargs)

    def terminate(self, *args, **kwargs):
        return self._so_process(BasicStates.E_TERMINATE, *args, **kwargs)

    def on_initialize(self, *args, **kwargs):
        raise NotImplementedError("Not implemented")

    def on_activate(self, *args, **kwargs):
        raise NotImplementedError("Not implemented")

    def on_terminate_active(self, *args, **kwargs):
        """
        @brief this is a shorthand delegating to on_terminate from the ACTIVE
            state. Subclasses can override this action handler with more specific
            functionality
        """
        return self.on_terminate(*args, **kwargs)

    def on_terminate(self, *args, **kwargs):
        raise NotImplementedError("Not implemented")

    def on_error(self, *args, **kwargs):
        raise NotImplementedError("Not implemented")
