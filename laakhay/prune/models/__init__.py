"""Data models."""

from .events import ProgressEvent
from .job import DeleteJob
from .result import PruneResult, RunStats

__all__ = [
    "DeleteJob",
    "ProgressEvent",
    "PruneResult",
    "RunStats",
]
