#!/usr/bin/env python

"""
@file annostore/util/fsm.py
@brief A small Finite State Machine (FSM) whose actions may return Deferreds.
    The state changes once the action's Deferred fires successfully; a failed
    action leaves the current state in place.
"""

from twisted.internet import defer

from annostore.core.exception import IllegalStateError

class FSM(object):

    def __init__(self, initial_state):
        # Map (input_symbol, current_state) --> (action, next_state).
        self.state_transitions = {}
        self.default_transition = None

        self.input_symbol = None
        self.initial_state = initial_state
        self.current_state = initial_state
        self.next_state = None

    def reset(self):
        self.current_state = self.initial_state
        self.input_symbol = None

    def add_transition(self, input_symbol, state, action=None, next_state=None):
        if next_state is None:
            next_state = state
        self.state_transitions[(input_symbol, state)] = (action, next_state)

    def set_default_transition(self, action, next_state):
        """
        This sets the transition taken for any undefined (input, state) pair.
        """
        self.default_transition = (action, next_state)

    def get_transition(self, input_symbol, state):
        """
        This returns (action, next state) given an input_symbol and state.
        """
        if (input_symbol, state) in self.state_transitions:
            return self.state_transitions[(input_symbol, state)]
        elif self.default_transition is not None:
            return self.default_transition
        raise IllegalStateError('Transition is undefined: (%s, %s).' % (input_symbol, state))

    def process(self, input_symbol):
        """
        This is the main method that you call to process input.
        @retval result of the action, maybe a Deferred
        """
        self.input_symbol = input_symbol
        action, self.next_state = self.get_transition(input_symbol, self.current_state)

        res = None
        if action is not None:
            res = action(self)

        if isinstance(res, defer.Deferred):
            def _cb(result):
                self.current_state = self.next_state
                self.next_state = None
                return result
            res.addCallback(_cb)
        else:
            self.current_state = self.next_state
            self.next_state = None

        return res
