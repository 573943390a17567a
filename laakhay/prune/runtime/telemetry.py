"""Structured logging for prune runs.

This module provides telemetry hooks for the orchestrator and pager,
emitting structured log records whose message is the event name and whose
fields travel in ``extra``.
"""

from __future__ import annotations

import logging

from ..models.result import PruneResult

logger = logging.getLogger(__name__)


def log_job_started(*, path: str, attempt: int) -> None:
    """Log the start of a direct delete attempt."""
    logger.debug("prune_job_started", extra={"path": path, "attempt": attempt})


def log_job_deleted(*, path: str, attempt: int, latency_ms: float | None = None) -> None:
    """Log a successful direct delete.

    Args:
        path: Deleted path
        attempt: Attempt number that succeeded
        latency_ms: Latency of the delete call in milliseconds
    """
    logger.info(
        "prune_job_deleted",
        extra={"path": path, "attempt": attempt, "latency_ms": latency_ms},
    )


def log_job_fanned_out(*, path: str, child_count: int, pages: int) -> None:
    """Log a path split into child jobs.

    Args:
        path: Path that was too large to delete directly
        child_count: Number of child jobs enqueued
        pages: Listing pages needed to enumerate the children
    """
    logger.info(
        "prune_job_fanned_out",
        extra={"path": path, "child_count": child_count, "pages": pages},
    )


def log_job_retry(
    *,
    path: str,
    operation: str,
    attempt: int,
    max_attempts: int,
    delay: float,
    error_type: str,
    error_message: str,
) -> None:
    """Log a retryable failure that will be attempted again."""
    logger.warning(
        "prune_job_retry",
        extra={
            "path": path,
            "operation": operation,
            "attempt": attempt,
            "max_attempts": max_attempts,
            "delay": delay,
            "error_type": error_type,
            "error_message": error_message,
        },
    )


def log_job_failed(*, path: str, kind: str, reason: str, attempt: int) -> None:
    """Log a path recorded in the failure set.

    Args:
        path: Path that could not be removed
        kind: Failure classification ("fatal", "retryable" after exhaustion, ...)
        reason: Human readable reason
        attempt: Attempts made before giving up
    """
    logger.error(
        "prune_job_failed",
        extra={"path": path, "kind": kind, "reason": reason, "attempt": attempt},
    )


def log_page_fetched(*, path: str, page_index: int, keys: int, start_after: str | None) -> None:
    """Log one listing page."""
    logger.debug(
        "prune_page_fetched",
        extra={
            "path": path,
            "page_index": page_index,
            "keys": keys,
            "start_after": start_after,
        },
    )


def log_run_complete(*, result: PruneResult) -> None:
    """Log completion of a prune run."""
    level = logging.INFO if result.succeeded else logging.WARNING
    logger.log(
        level,
        "prune_run_complete",
        extra={
            "root": result.root,
            "status": result.status.value,
            "deleted": len(result.deleted),
            "fanned_out": len(result.fanned_out),
            "failed": len(result.failed),
            "aborted": len(result.aborted),
            "delete_calls": result.stats.delete_calls,
            "list_calls": result.stats.list_calls,
            "retries": result.stats.retries,
            "peak_in_flight": result.stats.peak_in_flight,
            "elapsed_seconds": result.stats.elapsed_seconds,
        },
    )
