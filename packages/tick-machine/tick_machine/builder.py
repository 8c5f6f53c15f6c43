"""MachineBuilder - registration shorthand over StateMachine."""
from __future__ import annotations

from typing import Generic, TypeVar

from tick_machine.components import State, Transition
from tick_machine.config import MachineConfig
from tick_machine.machine import StateMachine
from tick_machine.types import (
    CheckHook,
    Destination,
    DoneHook,
    ErrorHook,
    ErrorKind,
    MachineError,
    StateHook,
)

D = TypeVar("D")


class MachineBuilder(Generic[D]):
    """Wires states and transitions by handle.

    ``state()`` returns the slot handle used to wire ``transition()`` calls.
    Transitions are named ``"<src>__<dst>"`` unless a name is given.
    Registration errors propagate as :class:`MachineError`.
    """

    def __init__(self, data: D, config: MachineConfig | int) -> None:
        if isinstance(config, bool):
            raise TypeError("capacity must be an int or MachineConfig, not bool")
        if isinstance(config, int):
            config = MachineConfig(capacity=config)
        self._machine: StateMachine[D] = StateMachine.from_config(data, config)

    def state(self, name: str, init: StateHook, exec: StateHook) -> int:
        return self._machine.add_state(State(name, init, exec))

    def transition(
        self,
        src: int,
        dst: int,
        check: CheckHook,
        done: DoneHook,
        name: str | None = None,
    ) -> Transition[D]:
        stored = self._machine.add_transition(
            Transition(name or "", src, dst, check, done), src, dst
        )
        if name is None:
            # Both slots exist once add_transition has accepted them.
            stored.name = f"{self._machine.state(src).name}__{self._machine.state(dst).name}"
        return stored

    def on_error(self, on_error_init: ErrorHook, on_error_exec: ErrorHook) -> MachineBuilder[D]:
        self._machine.set_error_callbacks(on_error_init, on_error_exec)
        return self

    def start(self, target: Destination) -> MachineBuilder[D]:
        """Set the initial active state by handle or by name."""
        if isinstance(target, str):
            index = self._machine.state_by_name(target)
            if index is None:
                raise MachineError(
                    ErrorKind.STATE_INDEX_OUT_OF_BOUNDS, f"No state named {target!r}"
                )
            target = index
        self._machine.set_active_state(target)
        return self

    def build(self) -> StateMachine[D]:
        return self._machine
