"""State and Transition value objects."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from tick_machine.types import CheckHook, DoneHook, StateHook

D = TypeVar("D")


@dataclass
class State(Generic[D]):
    """A named unit of work with a one-time ``init`` and a per-tick ``exec``.

    Both hooks are called as ``hook(state, data)``. A hook fails by raising
    :class:`~tick_machine.types.MachineError`.
    """

    name: str
    init: StateHook
    exec: StateHook

    def do_init(self, data: D) -> None:
        self.init(self, data)

    def do_exec(self, data: D) -> None:
        self.exec(self, data)


@dataclass
class Transition(Generic[D]):
    """Directed, guarded edge between two state slots.

    ``check(transition, data)`` is the guard and should not mutate ``data``.
    ``done(transition, data)`` runs once when the guard passes.
    Registration stores a copy whose ``src`` and ``dst`` are the slot
    indices it was registered under.
    """

    name: str
    src: int
    dst: int
    check: CheckHook
    done: DoneHook

    def do_check(self, data: D) -> bool:
        return bool(self.check(self, data))

    def do_done(self, data: D) -> None:
        self.done(self, data)
