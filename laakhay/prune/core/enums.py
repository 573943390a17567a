"""Core enumerations shared by the orchestrator, models and stores.

Key Types:
    - JobState: Lifecycle of a single DeleteJob
    - FailureKind: Retry classification of a failed store call
    - RunStatus: Overall outcome of a prune run
    - ProgressEventType: Events emitted to progress sinks
"""

from enum import Enum


class JobState(str, Enum):
    """Lifecycle of a DeleteJob.

    PENDING -> ATTEMPTING -> one of SUCCEEDED, FANNED_OUT, FAILED.
    ABORTED is assigned only when a cancelled run leaves the job unresolved.
    """

    PENDING = "pending"
    ATTEMPTING = "attempting"
    SUCCEEDED = "succeeded"
    FANNED_OUT = "fanned_out"
    FAILED = "failed"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        """Whether the job has reached its final outcome."""
        return self in (
            JobState.SUCCEEDED,
            JobState.FANNED_OUT,
            JobState.FAILED,
            JobState.ABORTED,
        )


class FailureKind(str, Enum):
    """How a failed listing or delete call is handled."""

    RETRYABLE = "retryable"
    STRUCTURAL = "structural"
    FATAL = "fatal"


class RunStatus(str, Enum):
    """Overall outcome of a prune run."""

    SUCCEEDED = "succeeded"
    PARTIAL_FAILURE = "partial_failure"
    ABORTED = "aborted"


class ProgressEventType(str, Enum):
    """Types of progress events."""

    PATH_STARTED = "path_started"
    PATH_DELETED = "path_deleted"
    PATH_FANNED_OUT = "path_fanned_out"
    PATH_RETRYING = "path_retrying"
    PATH_FAILED = "path_failed"
    PATH_ABORTED = "path_aborted"
    RUN_FINISHED = "run_finished"
