"""Tests for the error-recovery hook pair."""
import logging

from dataclasses import dataclass, field
from tick_machine import ErrorKind, MachineError, State, StateMachine, Transition


@dataclass
class Robot:
    """Shared data for recovery scenarios."""
    log: list = field(default_factory=list)
    exec_failures: int = 1


def _init(s, d):
    d.log.append(f"init {s.name}")


def _exec(s, d):
    d.log.append(f"exec {s.name}")


def _flaky_exec(s, d):
    d.log.append(f"exec {s.name}")
    if d.exec_failures > 0:
        d.exec_failures -= 1
        raise MachineError(ErrorKind.STATE_IS_EMPTY)


def _build():
    """work -> done_state transition plus an unconnected 'safe' state."""
    sm = StateMachine(Robot(), 3)
    work = sm.add_state(State("work", _init, _flaky_exec))
    finished = sm.add_state(State("finished", _init, _exec))
    sm.add_state(State("safe", _init, _exec))
    sm.add_transition(
        Transition("work__finished", work, finished, lambda t, d: True, lambda t, d: None),
        work,
        finished,
    )
    sm.set_active_state(work)
    return sm


class TestRecoveryInvocation:
    """Test cases for how the recovery pair is called."""

    def test_both_hooks_called_in_order(self):
        # Arrange
        sm = _build()
        calls = []
        sm.set_error_callbacks(
            lambda e, d: calls.append(("first", e.kind)),
            lambda e, d: calls.append(("second", e.kind)),
        )

        # Act
        sm.run()

        # Assert
        assert calls == [
            ("first", ErrorKind.STATE_IS_EMPTY),
            ("second", ErrorKind.STATE_IS_EMPTY),
        ]

    def test_first_hook_return_ignored(self):
        """Only the second hook's return value can redirect."""
        sm = _build()
        sm.set_error_callbacks(lambda e, d: "safe", lambda e, d: None)

        sm.run()

        assert sm.active_state == 0
        assert sm.active_initialized is True

    def test_hooks_receive_data(self):
        sm = _build()
        received = []
        sm.set_error_callbacks(lambda e, d: received.append(d), lambda e, d: received.append(d))
        sm.run()
        assert received == [sm.data, sm.data]

    def test_hooks_called_for_init_and_done_failures(self):
        def failing_init(s, d):
            raise MachineError(ErrorKind.STATE_INDEX_OUT_OF_BOUNDS)

        def failing_done(t, d):
            raise MachineError(ErrorKind.TRANSITION_IS_EMPTY)

        kinds = []
        sm = StateMachine(Robot(), 3)
        sm.add_state(State("a", _init, _exec))
        sm.add_state(State("b", failing_init, _exec))
        sm.add_transition(Transition("a__b", 0, 1, lambda t, d: True, failing_done), 0, 1)
        sm.set_error_callbacks(lambda e, d: kinds.append(e.kind), lambda e, d: None)
        sm.set_active_state(0)

        sm.run()
        sm.set_active_state(1)
        sm.run()

        assert kinds == [ErrorKind.TRANSITION_IS_EMPTY, ErrorKind.STATE_INDEX_OUT_OF_BOUNDS]


class TestRecoveryRedirect:
    """Test cases for redirecting the active state from the recovery hook."""

    def test_redirect_by_name(self):
        """Next tick initializes and executes the named state, skipping the table."""
        # Arrange
        sm = _build()
        sm.set_error_callbacks(lambda e, d: None, lambda e, d: "safe")

        # Act
        sm.run()

        # Assert
        assert sm.active_state == 2
        assert sm.active_initialized is False

        sm.run()
        assert sm.data.log == ["init work", "exec work", "init safe", "exec safe"]
        assert sm.active_state == 2

    def test_redirect_by_index(self):
        sm = _build()
        sm.set_error_callbacks(lambda e, d: None, lambda e, d: 1)

        sm.run()
        sm.run()

        assert sm.data.log == ["init work", "exec work", "init finished", "exec finished"]
        assert sm.active_state == 1

    def test_redirect_to_same_state_reinitializes(self):
        sm = _build()
        sm.set_error_callbacks(lambda e, d: None, lambda e, d: "work")

        sm.run()
        assert sm.active_initialized is False
        sm.run()

        assert sm.data.log == ["init work", "exec work", "init work", "exec work"]
        # Second exec succeeded, so the guard moved on to 'finished'.
        assert sm.active_state == 1

    def test_unknown_name_is_ignored(self):
        """An unresolved name leaves active slot and flag unchanged."""
        # Arrange
        sm = _build()
        sm.data.exec_failures = 10
        sm.set_error_callbacks(lambda e, d: None, lambda e, d: "does-not-exist")

        # Act
        sm.run()

        # Assert
        assert sm.active_state == 0
        assert sm.active_initialized is True
        sm.run()
        assert sm.data.log == ["init work", "exec work", "exec work"]

    def test_out_of_range_index_is_ignored(self):
        sm = _build()
        sm.set_error_callbacks(lambda e, d: None, lambda e, d: 3)
        sm.run()
        assert sm.active_state == 0
        assert sm.active_initialized is True

    def test_negative_index_is_ignored(self):
        sm = _build()
        sm.set_error_callbacks(lambda e, d: None, lambda e, d: -1)
        sm.run()
        assert sm.active_state == 0

    def test_index_within_capacity_but_unregistered_is_ignored(self):
        sm = StateMachine(Robot(), 5)
        sm.add_state(State("work", _init, _flaky_exec))
        sm.set_error_callbacks(lambda e, d: None, lambda e, d: 3)
        sm.set_active_state(0)

        sm.run()

        assert sm.active_state == 0

    def test_redirect_from_init_failure(self):
        def failing_init(s, d):
            raise MachineError(ErrorKind.STATE_IS_EMPTY)

        sm = StateMachine(Robot(), 2)
        sm.add_state(State("bad", failing_init, _exec))
        sm.add_state(State("fallback", _init, _exec))
        sm.set_error_callbacks(lambda e, d: None, lambda e, d: "fallback")
        sm.set_active_state(0)

        sm.run()
        sm.run()

        assert sm.active_state == 1
        assert sm.data.log == ["init fallback", "exec fallback"]

    def test_redirect_does_not_notify_listeners(self):
        sm = _build()
        seen = []
        sm.on_transition(lambda m, t: seen.append(t.name))
        sm.set_error_callbacks(lambda e, d: None, lambda e, d: "safe")
        sm.run()
        assert seen == []

    def test_unresolved_target_logged_at_debug(self, caplog):
        sm = _build()
        sm.set_error_callbacks(lambda e, d: None, lambda e, d: "ghost")
        with caplog.at_level(logging.DEBUG, logger="tick_machine.machine"):
            sm.run()
        assert any("ghost" in r.getMessage() for r in caplog.records)
