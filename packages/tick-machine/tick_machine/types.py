"""Error kinds, the MachineError exception and hook signatures."""
from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Union

if TYPE_CHECKING:
    from tick_machine.components import State, Transition


class ErrorKind(Enum):
    """Failure categories shared by validation and runtime hooks."""

    STATE_INDEX_OUT_OF_BOUNDS = "StateIndexOutOfBounds"
    TRANSITION_INDEX_OUT_OF_BOUNDS = "TransitionIndexOutOfBounds"
    MAX_NUMBER_OF_STATES_EXCEEDED = "MaxNumberOfStatesExceeded"
    ADD_TRANSITION_SRC_DST_STATES_EQUAL = "AddTransitionSrcDstStatesEqual"
    STATE_IS_EMPTY = "StateIsEmpty"
    TRANSITION_IS_EMPTY = "TransitionIsEmpty"

    def __str__(self) -> str:
        return self.value


class MachineError(Exception):
    """Raised by registration/lookup, and by hooks to signal failure."""

    def __init__(self, kind: ErrorKind, message: str | None = None) -> None:
        self.kind = kind
        super().__init__(message if message is not None else str(kind))


# Recovery target: a slot index or a state name.
Destination = Union[int, str]

StateHook = Callable[["State[Any]", Any], None]
CheckHook = Callable[["Transition[Any]", Any], bool]
DoneHook = Callable[["Transition[Any]", Any], None]
ErrorHook = Callable[[MachineError, Any], "Destination | None"]
