from __future__ import annotations

from collections.abc import Sequence
from enum import Enum

from .steps import Step


class QueueState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    EXHAUSTED = "exhausted"


class StepQueueError(Exception):
    pass


class QueueExhausted(StepQueueError):
    """Raised by :meth:`StepQueue.peek` once every step has been consumed."""


class OutOfRange(StepQueueError):
    """Raised by :meth:`StepQueue.advance` past the end of the queue."""


class StepQueue:
    """An ordered workflow script plus a cursor on the next unconsumed step.

    Invariant: `0 <= cursor <= length`. The cursor only moves forward, except
    for :meth:`install`, which replaces the steps and rewinds it to 0 in one go.

    The queue itself is not synchronised; the workflow engine owns it and
    serialises every call.
    """

    def __init__(self, steps: Sequence[Step] = ()) -> None:
        self._steps: tuple[Step, ...] = tuple(steps)
        self._cursor = 0

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def length(self) -> int:
        return len(self._steps)

    @property
    def exhausted(self) -> bool:
        return self._cursor >= len(self._steps)

    @property
    def state(self) -> QueueState:
        if self.exhausted:
            return QueueState.EXHAUSTED
        if self._cursor == 0:
            return QueueState.IDLE
        return QueueState.RUNNING

    def install(self, steps: Sequence[Step]) -> None:
        self._steps, self._cursor = tuple(steps), 0

    def peek(self) -> Step:
        if self.exhausted:
            raise QueueExhausted(f"Workflow exhausted at step {self._cursor}/{self.length}")
        return self._steps[self._cursor]

    def advance(self) -> None:
        if self.exhausted:
            raise OutOfRange(f"Cannot advance past step {self._cursor}/{self.length}")
        self._cursor += 1

    def progress(self) -> str:
        """Human-readable position of the next step, e.g. `3/7`."""

        return f"{self._cursor + 1}/{self.length}"
