"""Prune run result."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..core.enums import RunStatus
from ..core.exceptions import PartialFailureError, PruneAbortedError


@dataclass
class RunStats:
    """Counters collected during a run.

    Attributes:
        delete_calls: Direct delete requests issued
        list_calls: Listing pages requested
        retries: Operations re-attempted after a retryable failure
        peak_in_flight: Highest number of concurrent store calls observed
        elapsed_seconds: Wall time of the run
    """

    delete_calls: int = 0
    list_calls: int = 0
    retries: int = 0
    peak_in_flight: int = 0
    elapsed_seconds: float = 0.0


@dataclass
class PruneResult:
    """Outcome of a prune run.

    Attributes:
        root: Path the run was started on
        status: Overall outcome
        deleted: Paths removed by a direct delete
        fanned_out: Paths split into child jobs
        failed: Paths that could not be removed, mapped to the reason
        aborted: Paths left unresolved by cancellation
        stats: Run counters
    """

    root: str
    status: RunStatus
    deleted: set[str] = field(default_factory=set)
    fanned_out: set[str] = field(default_factory=set)
    failed: dict[str, str] = field(default_factory=dict)
    aborted: set[str] = field(default_factory=set)
    stats: RunStats = field(default_factory=RunStats)

    @property
    def succeeded(self) -> bool:
        return self.status is RunStatus.SUCCEEDED

    @property
    def failed_paths(self) -> set[str]:
        return set(self.failed)

    def raise_for_status(self) -> None:
        """Raise if the run did not fully succeed.

        Raises:
            PruneAbortedError: If the run was cancelled
            PartialFailureError: If any path could not be removed
        """
        if self.status is RunStatus.ABORTED:
            raise PruneAbortedError(
                f"Prune of {self.root} was cancelled with {len(self.aborted)} unresolved paths",
                result=self,
            )
        if self.status is RunStatus.PARTIAL_FAILURE:
            raise PartialFailureError(
                f"Prune of {self.root} failed for {len(self.failed)} paths: "
                + ", ".join(sorted(self.failed)),
                result=self,
            )
