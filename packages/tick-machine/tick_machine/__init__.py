"""tick-machine - Fixed-capacity, tick-driven finite state machine."""
from __future__ import annotations

from tick_machine.builder import MachineBuilder
from tick_machine.components import State, Transition
from tick_machine.config import MachineConfig
from tick_machine.machine import StateMachine, TransitionListener
from tick_machine.types import (
    CheckHook,
    Destination,
    DoneHook,
    ErrorHook,
    ErrorKind,
    MachineError,
    StateHook,
)

__all__ = [
    "StateMachine",
    "State",
    "Transition",
    "MachineBuilder",
    "MachineConfig",
    "MachineError",
    "ErrorKind",
    "Destination",
    "StateHook",
    "CheckHook",
    "DoneHook",
    "ErrorHook",
    "TransitionListener",
]
