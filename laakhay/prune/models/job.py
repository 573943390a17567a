"""Delete job state."""

from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import JobState
from ..core.path import TreePath


@dataclass
class DeleteJob:
    """A single path scheduled for removal.

    Attributes:
        path: Path to delete
        attempt: Number of direct delete attempts made so far
        state: Current lifecycle state
        reason: Failure or abort reason once terminal
        child_count: Children enqueued when the job fanned out
    """

    path: TreePath
    attempt: int = 0
    state: JobState = JobState.PENDING
    reason: str | None = None
    child_count: int = 0

    def begin_attempt(self) -> None:
        if self.state is not JobState.PENDING:
            raise ValueError(f"Cannot attempt job for {self.path} in state {self.state.value}")
        self.state = JobState.ATTEMPTING
        self.attempt += 1

    def requeue(self) -> None:
        """Return an attempting job to the queue for another try."""
        self._require_attempting()
        self.state = JobState.PENDING

    def succeed(self) -> None:
        self._finish(JobState.SUCCEEDED)

    def fan_out(self, child_count: int) -> None:
        self.child_count = child_count
        self._finish(JobState.FANNED_OUT)

    def fail(self, reason: str) -> None:
        self.reason = reason
        self._finish(JobState.FAILED)

    def abort(self, reason: str = "cancelled") -> None:
        if self.state.is_terminal:
            raise ValueError(f"Job for {self.path} already finished as {self.state.value}")
        self.reason = reason
        self.state = JobState.ABORTED

    def _finish(self, state: JobState) -> None:
        self._require_attempting()
        self.state = state

    def _require_attempting(self) -> None:
        if self.state is not JobState.ATTEMPTING:
            raise ValueError(
                f"Job for {self.path} must be attempting, found {self.state.value}"
            )
