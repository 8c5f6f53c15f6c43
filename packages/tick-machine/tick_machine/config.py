"""Machine configuration dataclass."""
from __future__ import annotations

import logging
from dataclasses import dataclass


@dataclass(frozen=True)
class MachineConfig:
    """Immutable construction parameters for a StateMachine.

    Attributes:
        capacity: Maximum number of states; also the transition matrix size.
        name: Label used in log records.
        error_log_level: Logging level for runtime hook failures.
    """

    capacity: int
    name: str = "machine"
    error_log_level: int = logging.WARNING

    def __post_init__(self) -> None:
        if self.capacity < 0:
            raise ValueError("capacity must be non-negative")
