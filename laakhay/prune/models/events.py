"""Progress events emitted during a prune run."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from ..core.enums import ProgressEventType


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ProgressEvent:
    """Structured event describing one step of a prune run.

    Per path, ``path_started`` always precedes any terminal event for that
    path. Ordering across paths is unspecified.
    """

    event_type: ProgressEventType
    path: str | None = None
    timestamp: datetime = field(default_factory=_now)
    attempt: int = 0
    child_count: int | None = None
    delay: float | None = None
    reason: str | None = None
    succeeded: bool | None = None
    failed_paths: frozenset[str] = frozenset()
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def path_started(cls, path: str, attempt: int) -> ProgressEvent:
        return cls(event_type=ProgressEventType.PATH_STARTED, path=path, attempt=attempt)

    @classmethod
    def path_deleted(cls, path: str, attempt: int) -> ProgressEvent:
        return cls(event_type=ProgressEventType.PATH_DELETED, path=path, attempt=attempt)

    @classmethod
    def path_fanned_out(cls, path: str, child_count: int) -> ProgressEvent:
        return cls(
            event_type=ProgressEventType.PATH_FANNED_OUT,
            path=path,
            child_count=child_count,
        )

    @classmethod
    def path_retrying(cls, path: str, attempt: int, delay: float, reason: str) -> ProgressEvent:
        return cls(
            event_type=ProgressEventType.PATH_RETRYING,
            path=path,
            attempt=attempt,
            delay=delay,
            reason=reason,
        )

    @classmethod
    def path_failed(cls, path: str, reason: str, attempt: int = 0) -> ProgressEvent:
        return cls(
            event_type=ProgressEventType.PATH_FAILED,
            path=path,
            attempt=attempt,
            reason=reason,
        )

    @classmethod
    def path_aborted(cls, path: str) -> ProgressEvent:
        return cls(event_type=ProgressEventType.PATH_ABORTED, path=path, reason="cancelled")

    @classmethod
    def run_finished(
        cls,
        succeeded: bool,
        failed_paths: set[str] | frozenset[str],
        metadata: dict[str, Any] | None = None,
    ) -> ProgressEvent:
        return cls(
            event_type=ProgressEventType.RUN_FINISHED,
            succeeded=succeeded,
            failed_paths=frozenset(failed_paths),
            metadata=metadata or {},
        )

    @property
    def is_terminal_for_path(self) -> bool:
        return self.event_type in (
            ProgressEventType.PATH_DELETED,
            ProgressEventType.PATH_FANNED_OUT,
            ProgressEventType.PATH_FAILED,
            ProgressEventType.PATH_ABORTED,
        )
