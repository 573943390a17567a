"""Progress reporting for prune runs.

The ProgressReporter forwards ProgressEvents from the orchestrator to
pluggable sinks (in-memory queues, log output, terminal renderers owned by
the host application).

Design Decisions:
    - Protocol-based sinks: any object with publish() and close() works
    - Fan-out: every sink receives every event
    - Isolation: a failing sink is logged and counted, never fails the run
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Iterable
from typing import Protocol

from ..core.enums import ProgressEventType
from ..models.events import ProgressEvent

logger = logging.getLogger(__name__)


class ProgressSink(Protocol):
    """Protocol for sinks that receive progress events."""

    async def publish(self, event: ProgressEvent) -> None:
        """Receive one progress event.

        Raises:
            Exception: If publishing fails (the reporter logs and continues)
        """
        ...

    async def close(self) -> None:
        """Release sink resources at the end of a run."""
        ...


class InMemoryProgressSink:
    """Sink that records events in a list and an asyncio queue."""

    def __init__(self, maxsize: int = 0) -> None:
        self.events: list[ProgressEvent] = []
        self._queue: asyncio.Queue[ProgressEvent] = asyncio.Queue(maxsize=maxsize)
        self.closed = False

    async def publish(self, event: ProgressEvent) -> None:
        self.events.append(event)
        await self._queue.put(event)

    async def get(self) -> ProgressEvent:
        return await self._queue.get()

    def get_nowait(self) -> ProgressEvent:
        return self._queue.get_nowait()

    def qsize(self) -> int:
        return self._queue.qsize()

    def empty(self) -> bool:
        return self._queue.empty()

    async def stream(self) -> AsyncIterator[ProgressEvent]:
        """Yield events as they arrive, stopping after ``run_finished``."""
        while True:
            event = await self._queue.get()
            yield event
            if event.event_type is ProgressEventType.RUN_FINISHED:
                return

    def of_type(self, event_type: ProgressEventType) -> list[ProgressEvent]:
        return [e for e in self.events if e.event_type is event_type]

    def for_path(self, path: str) -> list[ProgressEvent]:
        return [e for e in self.events if e.path == path]

    async def close(self) -> None:
        self.closed = True


class LoggingProgressSink:
    """Sink that writes each event to a logger."""

    def __init__(self, log: logging.Logger | None = None, level: int = logging.INFO) -> None:
        self._logger = log or logger
        self._level = level

    async def publish(self, event: ProgressEvent) -> None:
        if event.event_type is ProgressEventType.RUN_FINISHED:
            status = "succeeded" if event.succeeded else "failed"
            self._logger.log(
                self._level,
                f"Prune {status}; {len(event.failed_paths)} paths could not be removed",
            )
            return

        message = f"{event.event_type.value}: {event.path}"
        if event.child_count is not None:
            message += f" ({event.child_count} children)"
        if event.reason:
            message += f" ({event.reason})"
        level = self._level
        if event.event_type is ProgressEventType.PATH_FAILED:
            level = max(level, logging.ERROR)
        elif event.event_type is ProgressEventType.PATH_STARTED:
            level = logging.DEBUG
        self._logger.log(level, message)

    async def close(self) -> None:
        return None


class ProgressReporter:
    """Fans progress events out to registered sinks."""

    def __init__(self, sinks: Iterable[ProgressSink] | None = None) -> None:
        self._sinks: list[ProgressSink] = list(sinks or [])
        self.events_published = 0
        self.events_failed = 0

    @property
    def sinks(self) -> list[ProgressSink]:
        return list(self._sinks)

    def add_sink(self, sink: ProgressSink) -> None:
        self._sinks.append(sink)
        logger.debug(f"Added progress sink: {sink.__class__.__name__}")

    def remove_sink(self, sink: ProgressSink) -> None:
        if sink in self._sinks:
            self._sinks.remove(sink)

    async def emit(self, event: ProgressEvent) -> None:
        """Publish ``event`` to every sink."""
        for sink in self._sinks:
            try:
                await sink.publish(event)
                self.events_published += 1
            except Exception as e:
                logger.error(
                    f"Failed to publish to progress sink {sink.__class__.__name__}: {e}",
                    exc_info=True,
                )
                self.events_failed += 1

    async def close(self) -> None:
        for sink in self._sinks:
            try:
                await sink.close()
            except Exception as e:
                logger.error(f"Error closing progress sink {sink.__class__.__name__}: {e}")
