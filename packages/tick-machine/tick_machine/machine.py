"""StateMachine - slot storage, transition matrix and the tick algorithm."""
from __future__ import annotations

import dataclasses
import logging
from typing import Any, Callable, Generic, TypeVar

from tick_machine.components import State, Transition
from tick_machine.config import MachineConfig
from tick_machine.types import Destination, ErrorHook, ErrorKind, MachineError

logger = logging.getLogger(__name__)

D = TypeVar("D")

TransitionListener = Callable[["StateMachine[Any]", "Transition[Any]"], None]


class StateMachine(Generic[D]):
    """Fixed-capacity state machine driven one tick at a time by the host.

    States live in append-only slots and are referred to by the integer
    handle :meth:`add_state` returns. Transitions are stored in a
    ``capacity x capacity`` matrix indexed by ``(src, dst)`` and are
    evaluated in ascending ``dst`` order, first passing guard wins.

    Hooks signal failure by raising :class:`MachineError`. Such failures
    never escape :meth:`run`; they are logged and handed to the recovery
    pair installed with :meth:`set_error_callbacks`. Without a recovery
    pair, or when the recovery target does not resolve, the machine stays
    where it is and retries the failed step on the next tick, indefinitely.
    """

    def __init__(
        self,
        data: D,
        capacity: int,
        *,
        name: str = "machine",
        error_log_level: int = logging.WARNING,
    ) -> None:
        config = MachineConfig(capacity, name, error_log_level)
        self._data = data
        self._name = config.name
        self._error_log_level = config.error_log_level
        self._capacity = capacity
        self._states: list[State[D] | None] = [None] * capacity
        self._num_states = 0
        self._transitions: list[list[Transition[D] | None]] = [
            [None] * capacity for _ in range(capacity)
        ]
        self._active: int | None = None
        self._active_initialized = False
        self._error_hooks: tuple[ErrorHook, ErrorHook] | None = None
        self._transition_listeners: list[TransitionListener] = []

    @classmethod
    def from_config(cls, data: D, config: MachineConfig) -> StateMachine[D]:
        return cls(
            data,
            config.capacity,
            name=config.name,
            error_log_level=config.error_log_level,
        )

    @property
    def data(self) -> D:
        return self._data

    @property
    def name(self) -> str:
        return self._name

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def num_states(self) -> int:
        return self._num_states

    @property
    def active_state(self) -> int | None:
        return self._active

    @property
    def active_initialized(self) -> bool:
        return self._active_initialized

    def states(self) -> list[State[D]]:
        """Return the registered states in slot order."""
        return [s for s in self._states[: self._num_states] if s is not None]

    # -- Registration --

    def add_state(self, state: State[D]) -> int:
        """Append a state and return its slot index."""
        if self._num_states >= self._capacity:
            raise MachineError(ErrorKind.MAX_NUMBER_OF_STATES_EXCEEDED)
        index = self._num_states
        self._states[index] = state
        self._num_states += 1
        return index

    def add_transition(self, transition: Transition[D], src: int, dst: int) -> Transition[D]:
        """Store a copy of ``transition`` at ``(src, dst)`` and return it.

        The copy carries ``src`` and ``dst``; the argument is left untouched,
        so one transition can serve as a template for several edges. Any
        existing transition in the cell is replaced.
        """
        if not self._in_range(src) or not self._in_range(dst):
            raise MachineError(ErrorKind.TRANSITION_INDEX_OUT_OF_BOUNDS)
        if src == dst:
            raise MachineError(ErrorKind.ADD_TRANSITION_SRC_DST_STATES_EQUAL)
        stored = dataclasses.replace(transition, src=src, dst=dst)
        self._transitions[src][dst] = stored
        return stored

    # -- Lookup --

    def state(self, index: int) -> State[D]:
        if not self._in_range(index):
            raise MachineError(ErrorKind.STATE_INDEX_OUT_OF_BOUNDS)
        state = self._states[index]
        if state is None:
            raise MachineError(ErrorKind.STATE_IS_EMPTY)
        return state

    def transition(self, src: int, dst: int) -> Transition[D]:
        if not self._in_range(src) or not self._in_range(dst):
            raise MachineError(ErrorKind.TRANSITION_INDEX_OUT_OF_BOUNDS)
        transition = self._transitions[src][dst]
        if transition is None:
            raise MachineError(ErrorKind.TRANSITION_IS_EMPTY)
        return transition

    def active_transitions(self, src: int) -> list[Transition[D] | None]:
        """Return the outgoing row of ``src``, indexed by destination slot."""
        if not self._in_range(src):
            raise MachineError(ErrorKind.TRANSITION_INDEX_OUT_OF_BOUNDS)
        return list(self._transitions[src])

    def state_by_name(self, name: str) -> int | None:
        for index, state in enumerate(self._states[: self._num_states]):
            if state is not None and state.name == name:
                return index
        return None

    # -- Activation & hooks --

    def set_active_state(self, index: int) -> None:
        """Make ``index`` the active slot.

        Re-selecting the current slot keeps its initialized flag; any other
        slot will be initialized on the next tick.
        """
        self.state(index)
        if index != self._active:
            self._active = index
            self._active_initialized = False

    def set_error_callbacks(self, on_error_init: ErrorHook, on_error_exec: ErrorHook) -> None:
        """Install the recovery pair called on every runtime hook failure.

        ``on_error_init(error, data)`` is called first and its result is
        ignored. ``on_error_exec(error, data)`` may return a slot index or a
        state name to activate from the next tick on.
        """
        self._error_hooks = (on_error_init, on_error_exec)

    def on_transition(self, callback: TransitionListener) -> None:
        """Register a listener called as ``callback(machine, transition)``.

        Fires after a guard-driven transition has moved the active slot.
        Recovery redirects do not notify listeners.
        """
        self._transition_listeners.append(callback)

    # -- Tick --

    def run(self) -> None:
        """Perform one tick. A no-op until an active state is set."""
        index = self._active
        if index is None:
            return
        state = self.state(index)

        if not self._active_initialized:
            try:
                state.do_init(self._data)
            except MachineError as exc:
                self._dispatch_error(exc, "init", state.name)
                return

        self._active_initialized = True

        try:
            state.do_exec(self._data)
        except MachineError as exc:
            self._dispatch_error(exc, "exec", state.name)
            return

        for dst, transition in enumerate(list(self._transitions[index])):
            if transition is None or not transition.do_check(self._data):
                continue
            try:
                transition.do_done(self._data)
            except MachineError as exc:
                self._dispatch_error(exc, "done", transition.name)
                return
            self._active = dst
            self._active_initialized = False
            logger.debug(
                "%s: transition %r moved %r -> %r",
                self._name, transition.name, state.name, self.state(dst).name,
            )
            for cb in list(self._transition_listeners):
                cb(self, transition)
            return

    # -- Internals --

    def _in_range(self, index: int) -> bool:
        return 0 <= index < self._num_states

    def _resolve(self, target: Destination) -> int | None:
        if isinstance(target, str):
            return self.state_by_name(target)
        if isinstance(target, int) and not isinstance(target, bool) and self._in_range(target):
            return target
        return None

    def _dispatch_error(self, error: MachineError, phase: str, owner: str) -> None:
        logger.log(
            self._error_log_level,
            "%s: %s hook of %r failed: %s",
            self._name, phase, owner, error.kind,
        )
        if self._error_hooks is None:
            return
        on_error_init, on_error_exec = self._error_hooks
        on_error_init(error, self._data)
        target = on_error_exec(error, self._data)
        if target is None:
            return
        index = self._resolve(target)
        if index is None:
            logger.debug("%s: ignoring unresolved recovery target %r", self._name, target)
            return
        self._active = index
        self._active_initialized = False
        logger.debug("%s: recovery redirected to %r", self._name, self.state(index).name)
