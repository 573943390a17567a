"""Chunked delete orchestrator.

Architecture:
    The orchestrator removes a subtree from a remote tree store that exposes
    no size query. It is optimistic: every path is first deleted with a single
    request, and only when the store answers PayloadTooLargeError is the path
    enumerated and replaced by one job per child.

    Work is an explicit queue of DeleteJobs consumed by ``max_concurrency``
    worker tasks, so tree depth is bounded by memory rather than the call
    stack. Every listing page and delete request holds one token from a
    shared ConcurrencyTokenPool, which caps in-flight store calls at K.

Job lifecycle:
    PENDING -> ATTEMPTING -> SUCCEEDED    direct delete succeeded
                          -> FANNED_OUT   too large; children enqueued
                          -> FAILED       fatal error or retries exhausted
    Retryable delete failures return the job to PENDING after a backoff
    delay. Jobs left unresolved by cancellation end as ABORTED.

Completion:
    A run ends when no job is pending or attempting. It never raises for
    per-path failures; the PruneResult distinguishes full success, partial
    failure (with the exact failed paths) and abort. Failed and aborted paths
    are left untouched in the store, so the whole run can be repeated.

See Also:
    - CursorPager: Ordered enumeration of one path's children
    - RetryPolicy: Failure classification and backoff
    - ProgressReporter: Event fan-out to progress sinks
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from time import perf_counter

from ..core.base import DeleteTransport, ListingClient
from ..core.config import PruneConfig
from ..core.enums import FailureKind, RunStatus
from ..core.exceptions import RetryCancelledError, RetryExhaustedError
from ..core.path import TreePath
from ..models.events import ProgressEvent
from ..models.job import DeleteJob
from ..models.result import PruneResult, RunStats
from .paging import CursorPager
from .progress import ProgressReporter, ProgressSink
from .retry import RetryPolicy
from .telemetry import (
    log_job_deleted,
    log_job_failed,
    log_job_fanned_out,
    log_job_retry,
    log_job_started,
    log_run_complete,
)
from .tokens import ConcurrencyTokenPool

logger = logging.getLogger(__name__)


class ChunkedDeleteOrchestrator:
    """Deletes arbitrarily large subtrees through bounded, retried fan-out."""

    def __init__(
        self,
        listing: ListingClient,
        transport: DeleteTransport,
        config: PruneConfig | None = None,
        *,
        retry_policy: RetryPolicy | None = None,
        reporter: ProgressReporter | None = None,
        sinks: Iterable[ProgressSink] | None = None,
        cancel_event: asyncio.Event | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize orchestrator.

        Args:
            listing: Client used to enumerate children after a structural failure
            transport: Transport used for direct subtree deletes
            config: Run configuration (defaults to PruneConfig())
            retry_policy: Retry policy (defaults to one built from config)
            reporter: Progress reporter (defaults to a new one over ``sinks``)
            sinks: Progress sinks, ignored when ``reporter`` is given
            cancel_event: External cancellation signal
            sleep: Awaitable sleep used for backoff delays
        """
        self._listing = listing
        self._transport = transport
        self._config = config or PruneConfig()
        self._sleep = sleep
        self._retry = retry_policy or RetryPolicy.from_config(self._config, sleep=sleep)
        self._reporter = reporter or ProgressReporter(sinks)
        self._owns_cancel_event = cancel_event is None
        self._cancel_event = cancel_event or asyncio.Event()
        self._running = False
        self._reset()

    @property
    def config(self) -> PruneConfig:
        return self._config

    @property
    def reporter(self) -> ProgressReporter:
        return self._reporter

    @property
    def tokens(self) -> ConcurrencyTokenPool:
        return self._tokens

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def cancel(self) -> None:
        """Stop scheduling new work; in-flight calls finish on their own.

        The internal cancel signal is cleared when the run ends, so the
        orchestrator can be reused. An externally supplied ``cancel_event``
        is left set; clear it before the next run.
        """
        self._cancel_event.set()

    async def run(self, root: str | TreePath) -> PruneResult:
        """Delete ``root`` and everything below it.

        Args:
            root: Path of the subtree to remove (``/`` removes everything)

        Returns:
            PruneResult describing every path that was not removed

        Raises:
            RuntimeError: If the orchestrator is already running
            InvalidPathError: If ``root`` cannot be parsed
        """
        if self._running:
            raise RuntimeError("Orchestrator is already running")
        root_path = TreePath.parse(root)
        self._running = True
        self._reset()
        started = perf_counter()
        try:
            self._enqueue(DeleteJob(root_path))
            workers = [
                asyncio.create_task(self._worker(), name=f"prune-worker-{i}")
                for i in range(self._config.max_concurrency)
            ]
            try:
                await self._wait_for_completion(workers)
            except BaseException:
                await self._shutdown(workers, force=True)
                raise
            await self._shutdown(workers, force=False)
            result = await self._build_result(root_path, perf_counter() - started)
        finally:
            self._running = False
            if self._owns_cancel_event:
                self._cancel_event.clear()

        log_run_complete(result=result)
        await self._reporter.emit(
            ProgressEvent.run_finished(
                succeeded=result.succeeded,
                failed_paths=result.failed_paths,
                metadata={"status": result.status.value, "aborted": len(result.aborted)},
            )
        )
        return result

    def _reset(self) -> None:
        self._tokens = ConcurrencyTokenPool(self._config.max_concurrency)
        self._queue: asyncio.Queue[DeleteJob | None] = asyncio.Queue()
        self._live: dict[TreePath, DeleteJob] = {}
        self._idle = asyncio.Event()
        self._stopping = False
        self._backoff_tasks: set[asyncio.Task[None]] = set()
        self._deleted: set[str] = set()
        self._fanned_out: set[str] = set()
        self._failed: dict[str, str] = {}
        self._stats = RunStats()

    async def _wait_for_completion(self, workers: list[asyncio.Task[None]]) -> None:
        idle_waiter = asyncio.create_task(self._idle.wait())
        cancel_waiter = asyncio.create_task(self._cancel_event.wait())
        try:
            done, _ = await asyncio.wait(
                {idle_waiter, cancel_waiter, *workers},
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            idle_waiter.cancel()
            cancel_waiter.cancel()
        for task in done:
            if task in workers:
                error = task.exception()
                if error is not None:
                    raise error
                # Workers only return on their own once cancellation is requested.
                if not self.cancelled:
                    raise RuntimeError(f"Worker {task.get_name()} exited unexpectedly")
        if cancel_waiter in done and not self._idle.is_set():
            logger.warning(f"Prune cancelled with {len(self._live)} unresolved paths")

    async def _shutdown(self, workers: list[asyncio.Task[None]], *, force: bool) -> None:
        self._stopping = True
        for task in self._backoff_tasks:
            task.cancel()
        if force:
            for task in workers:
                task.cancel()
        else:
            for _ in workers:
                self._queue.put_nowait(None)
        await asyncio.gather(*self._backoff_tasks, *workers, return_exceptions=True)
        self._backoff_tasks.clear()

    async def _build_result(self, root: TreePath, elapsed: float) -> PruneResult:
        aborted: set[str] = set()
        for job in list(self._live.values()):
            job.abort()
            aborted.add(str(job.path))
            await self._reporter.emit(ProgressEvent.path_aborted(str(job.path)))
        self._live.clear()

        if aborted:
            status = RunStatus.ABORTED
        elif self._failed:
            status = RunStatus.PARTIAL_FAILURE
        else:
            status = RunStatus.SUCCEEDED

        self._stats.peak_in_flight = self._tokens.peak_in_flight
        self._stats.elapsed_seconds = elapsed
        return PruneResult(
            root=str(root),
            status=status,
            deleted=set(self._deleted),
            fanned_out=set(self._fanned_out),
            failed=dict(self._failed),
            aborted=aborted,
            stats=self._stats,
        )

    def _enqueue(self, job: DeleteJob) -> None:
        if job.path in self._live:
            return
        self._live[job.path] = job
        self._idle.clear()
        self._queue.put_nowait(job)

    def _finish(self, job: DeleteJob) -> None:
        self._live.pop(job.path, None)
        if not self._live:
            self._idle.set()

    async def _worker(self) -> None:
        while True:
            job = await self._queue.get()
            if job is None or self._stopping or self.cancelled:
                # Unstarted jobs stay live and are reported as aborted.
                return
            await self._process(job)

    async def _process(self, job: DeleteJob) -> None:
        job.begin_attempt()
        path = str(job.path)
        log_job_started(path=path, attempt=job.attempt)
        await self._reporter.emit(ProgressEvent.path_started(path, job.attempt))

        call_started = perf_counter()
        try:
            async with self._tokens.acquire():
                self._stats.delete_calls += 1
                await self._transport.delete_subtree(path, timeout=self._config.call_timeout)
        except Exception as e:
            kind = self._retry.classify(e)
            if kind is FailureKind.STRUCTURAL:
                await self._fan_out(job)
            elif kind is FailureKind.RETRYABLE:
                await self._retry_or_fail(job, e)
            else:
                await self._fail(job, kind, f"{type(e).__name__}: {e}")
            return

        job.succeed()
        self._deleted.add(path)
        log_job_deleted(
            path=path,
            attempt=job.attempt,
            latency_ms=(perf_counter() - call_started) * 1000.0,
        )
        await self._reporter.emit(ProgressEvent.path_deleted(path, job.attempt))
        self._finish(job)

    async def _retry_or_fail(self, job: DeleteJob, error: Exception) -> None:
        path = str(job.path)
        if not self._retry.can_retry(job.attempt):
            await self._fail(
                job,
                FailureKind.RETRYABLE,
                f"retries exhausted after {job.attempt} attempts: {type(error).__name__}: {error}",
            )
            return
        if self._stopping or self.cancelled:
            job.requeue()
            return

        delay = self._retry.delay_for(job.attempt)
        self._stats.retries += 1
        log_job_retry(
            path=path,
            operation="delete",
            attempt=job.attempt,
            max_attempts=self._retry.max_attempts,
            delay=delay,
            error_type=type(error).__name__,
            error_message=str(error),
        )
        job.requeue()
        await self._reporter.emit(
            ProgressEvent.path_retrying(path, job.attempt, delay, f"{type(error).__name__}: {error}")
        )
        task = asyncio.create_task(self._requeue_after(job, delay))
        self._backoff_tasks.add(task)
        task.add_done_callback(self._backoff_tasks.discard)

    async def _requeue_after(self, job: DeleteJob, delay: float) -> None:
        await self._sleep(delay)
        if not self._stopping and not self.cancelled:
            self._queue.put_nowait(job)

    async def _fan_out(self, job: DeleteJob) -> None:
        """Enumerate the children of a too-large path and enqueue one job each."""
        path = str(job.path)
        pager = CursorPager(
            self._listing,
            path,
            page_size=self._config.page_size,
            timeout=self._config.call_timeout,
        )
        child_count = 0
        try:
            while not pager.exhausted:
                if self._stopping or self.cancelled:
                    # Partially enumerated; the job is reported as aborted.
                    return
                page = await self._retry.run(
                    lambda: self._fetch_page(pager),
                    path=path,
                    name="list",
                    on_retry=self._count_retry,
                    stop_event=self._cancel_event,
                )
                for key in page:
                    self._enqueue(DeleteJob(job.path.child(key)))
                child_count += len(page)
        except RetryCancelledError:
            return
        except RetryExhaustedError as e:
            await self._fail(job, FailureKind.RETRYABLE, f"listing failed: {e}")
            return
        except Exception as e:
            await self._fail(job, FailureKind.FATAL, f"listing failed: {type(e).__name__}: {e}")
            return

        if child_count == 0:
            await self._fail(
                job,
                FailureKind.STRUCTURAL,
                "payload too large to delete and path has no children to fan out",
            )
            return

        job.fan_out(child_count)
        self._fanned_out.add(path)
        log_job_fanned_out(path=path, child_count=child_count, pages=pager.pages_fetched)
        await self._reporter.emit(ProgressEvent.path_fanned_out(path, child_count))
        self._finish(job)

    async def _fetch_page(self, pager: CursorPager) -> list[str]:
        async with self._tokens.acquire():
            self._stats.list_calls += 1
            return await pager.fetch_next_page()

    def _count_retry(self, attempt: int, delay: float, error: BaseException) -> None:
        self._stats.retries += 1

    async def _fail(self, job: DeleteJob, kind: FailureKind, reason: str) -> None:
        path = str(job.path)
        job.fail(reason)
        self._failed[path] = reason
        log_job_failed(path=path, kind=kind.value, reason=reason, attempt=job.attempt)
        await self._reporter.emit(ProgressEvent.path_failed(path, reason, job.attempt))
        self._finish(job)


async def prune(
    store: ListingClient | DeleteTransport,
    path: str | TreePath,
    config: PruneConfig | None = None,
    *,
    sinks: Iterable[ProgressSink] | None = None,
    cancel_event: asyncio.Event | None = None,
) -> PruneResult:
    """Delete ``path`` from a store implementing both collaborator contracts.

    Progress sinks are closed when the run ends.

    Examples:
        async with RestTreeStore(RestStoreSettings(base_url=url)) as store:
            result = await prune(store, "/users/inactive")
            result.raise_for_status()
    """
    orchestrator = ChunkedDeleteOrchestrator(
        store,  # type: ignore[arg-type]
        store,  # type: ignore[arg-type]
        config,
        sinks=sinks,
        cancel_event=cancel_event,
    )
    try:
        return await orchestrator.run(path)
    finally:
        await orchestrator.reporter.close()
