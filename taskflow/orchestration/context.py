"""Per-run orchestration context.

A fresh context is created for every orchestration call and passed
explicitly through each stage. It owns the run's state machine, its
cancellation signal and any memoized graph data, so a single engine instance
can serve concurrent callers without them seeing each other's caches.
"""

import threading
import time
from dataclasses import dataclass, field
from enum import Enum


class EngineState(str, Enum):
    """Stages of an orchestration run."""

    IDLE = "idle"
    VALIDATING = "validating"
    ANALYZING = "analyzing"
    GROUPING = "grouping"
    OPTIMIZING = "optimizing"
    BALANCING = "balancing"
    DONE = "done"
    FAILED = "failed"


# Allowed transitions; the pipeline never branches or skips a stage.
_TRANSITIONS: dict[EngineState, set[EngineState]] = {
    EngineState.IDLE: {EngineState.VALIDATING, EngineState.FAILED},
    EngineState.VALIDATING: {EngineState.ANALYZING},
    EngineState.ANALYZING: {EngineState.GROUPING},
    EngineState.GROUPING: {EngineState.OPTIMIZING},
    EngineState.OPTIMIZING: {EngineState.BALANCING},
    EngineState.BALANCING: {EngineState.DONE},
    EngineState.DONE: set(),
    EngineState.FAILED: set(),
}


@dataclass
class OrchestrationContext:
    """State scoped to a single orchestration call."""

    cancel_event: threading.Event | None = None
    deadline: float | None = None
    state: EngineState = EngineState.IDLE
    transitions: list[EngineState] = field(default_factory=lambda: [EngineState.IDLE])
    cancelled: bool = False
    # Task ID -> bitmask of transitive dependencies over graph.task_ids positions
    ancestors: dict[str, int] = field(default_factory=dict)

    def set_timeout(self, timeout: float | None) -> None:
        """Start the deadline clock; None clears it."""
        self.deadline = time.monotonic() + timeout if timeout is not None else None

    def should_stop(self) -> bool:
        """True once the caller cancelled or the deadline passed."""
        if self.cancel_event is not None and self.cancel_event.is_set():
            return True
        return self.deadline is not None and time.monotonic() >= self.deadline

    def advance(self, state: EngineState) -> None:
        """Move the state machine forward.

        Raises:
            RuntimeError: If the transition is not allowed.
        """
        if state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal engine transition {self.state.value} -> {state.value}")
        self.state = state
        self.transitions.append(state)
