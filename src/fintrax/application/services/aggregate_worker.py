"""Background recomputation of derived aggregates.

Every aggregate component follows the same message-passing loop:

    change event -> work queue -> recompute -> publish

The store callback only enqueues. A single worker task drains the queue in
batches, recomputes the affected aggregates under a bounded query timeout,
retries ``StoreUnavailableError`` with exponential backoff (tenacity) and marks
the affected observables stale if the store stays unavailable. Results are
published only once the queue is empty, so subscribers never see a mix of
aggregates from before and after a mutation.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from fintrax.application.reactive import Observable
from fintrax.domain.ledger.events import Unsubscribe
from fintrax.domain.shared.exceptions import (
    DomainException,
    ErrorCode,
    StoreUnavailableError,
)

logger = logging.getLogger(__name__)

E = TypeVar("E")
R = TypeVar("R")

# Queue marker requesting a full rebuild instead of an incremental update
FULL_REFRESH = None


@dataclass(frozen=True)
class RecomputePolicy:
    """Timeout and retry settings shared by all aggregate workers."""

    query_timeout_seconds: float = 5.0
    max_attempts: int = 3
    backoff_seconds: float = 0.05
    backoff_max_seconds: float = 2.0

    def retrying(
        self,
        before_sleep: Optional[Callable[[RetryCallState], None]] = None,
    ) -> AsyncRetrying:
        """
        Retry controller for one recomputation.

        Only ``StoreUnavailableError`` is retried. The wait doubles from
        ``backoff_seconds`` up to ``backoff_max_seconds`` and the last error
        is re-raised once ``max_attempts`` is reached.
        """
        return AsyncRetrying(
            stop=stop_after_attempt(max(self.max_attempts, 1)),
            wait=wait_exponential(
                multiplier=self.backoff_seconds,
                max=self.backoff_max_seconds,
            ),
            retry=retry_if_exception_type(StoreUnavailableError),
            before_sleep=before_sleep,
            reraise=True,
        )


class AggregateWorker(ABC, Generic[E]):
    """Base class for components that keep observables current."""

    def __init__(
        self,
        name: str,
        subscribe: Callable[[Callable[[E], None]], Unsubscribe],
        policy: Optional[RecomputePolicy] = None,
    ):
        self._name = name
        self._subscribe = subscribe
        self._policy = policy or RecomputePolicy()
        self._queue: asyncio.Queue[Optional[E]] = asyncio.Queue()
        self._task: Optional[asyncio.Task] = None
        self._unsubscribe: Optional[Unsubscribe] = None
        # Bumped synchronously on every change; guards caches against
        # results computed from a ledger state that is already gone
        self._generation = 0
        # Set after a failed batch so the next one rebuilds everything
        self._needs_full_refresh = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def generation(self) -> int:
        return self._generation

    async def start(self) -> None:
        """Subscribe to the change source and launch the worker task."""
        if self.running:
            return
        # Changes made while stopped were never seen; nothing cached survives
        self._generation += 1
        self._reset()
        self._unsubscribe = self._subscribe(self._on_change)
        self._task = asyncio.create_task(self._run(), name=f"{self._name}-worker")
        self._queue.put_nowait(FULL_REFRESH)
        logger.info("Started aggregate worker %s", self._name)

    async def stop(self) -> None:
        """Unsubscribe and cancel; in-flight recomputation is discarded."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        task, self._task = self._task, None
        if task is not None:
            # Cancel again if a store driver swallowed the first request
            while not task.done():
                task.cancel()
                await asyncio.wait({task}, timeout=self._policy.query_timeout_seconds)
            if not task.cancelled() and task.exception() is not None:
                logger.warning(
                    "Aggregate worker %s ended with %r",
                    self._name,
                    task.exception(),
                )
        # Drop whatever was still queued so a later start begins clean
        while not self._queue.empty():
            self._queue.get_nowait()
            self._queue.task_done()
        logger.info("Stopped aggregate worker %s", self._name)

    async def wait_idle(self) -> None:
        """Wait until every queued change has been processed."""
        if self.running:
            await self._queue.join()

    def refresh(self) -> None:
        """Request a full rebuild of every aggregate this worker owns."""
        self._queue.put_nowait(FULL_REFRESH)

    async def bounded(self, awaitable: Awaitable[R], operation: str) -> R:
        """Run a store call under the query timeout."""
        try:
            async with asyncio.timeout(self._policy.query_timeout_seconds):
                return await awaitable
        except TimeoutError as e:
            msg = (
                f"Store call '{operation}' timed out after "
                f"{self._policy.query_timeout_seconds}s"
            )
            raise StoreUnavailableError(msg, operation=operation) from e

    def _on_change(self, change: E) -> None:
        self._generation += 1
        self._invalidate(change)
        self._queue.put_nowait(change)

    async def _run(self) -> None:
        task = asyncio.current_task()
        while True:
            first = await self._queue.get()
            batch = [first]
            while not self._queue.empty():
                batch.append(self._queue.get_nowait())
            try:
                await self._process(batch)
            finally:
                for _ in batch:
                    self._queue.task_done()
            if task is not None and task.cancelling():
                raise asyncio.CancelledError

    async def _process(self, batch: list[Optional[E]]) -> None:
        full = self._needs_full_refresh or any(
            item is FULL_REFRESH for item in batch
        )
        changes = [item for item in batch if item is not FULL_REFRESH]
        logger.debug(
            "%s processing %d change(s)%s",
            self._name,
            len(changes),
            " with full refresh" if full else "",
        )

        try:
            async for attempt in self._policy.retrying(self._log_retry):
                with attempt:
                    await self._recompute(changes, full)
        except StoreUnavailableError as e:
            logger.warning(
                "%s giving up after %d attempt(s): %s",
                self._name,
                self._policy.max_attempts,
                e,
            )
            self._mark_stale(changes, full, e.code)
            return
        except DomainException as e:
            logger.warning("%s recompute failed: %s", self._name, e)
            self._mark_stale(changes, full, e.code)
            return
        except Exception as e:
            logger.warning("%s recompute crashed: %r", self._name, e)
            self._mark_stale(changes, full, ErrorCode.INTERNAL_ERROR)
            return
        self._needs_full_refresh = False

        # Publish only when no newer change is waiting; the next batch
        # will publish the combined result otherwise
        if self._queue.empty():
            self._publish()

    def _log_retry(self, retry_state: RetryCallState) -> None:
        logger.warning(
            "%s recompute attempt %d failed, retrying in %.2fs: %s",
            self._name,
            retry_state.attempt_number,
            retry_state.next_action.sleep if retry_state.next_action else 0,
            retry_state.outcome.exception() if retry_state.outcome else None,
        )

    def _mark_stale(
        self,
        changes: list[E],
        full: bool,
        error_code: ErrorCode,
    ) -> None:
        self._needs_full_refresh = True
        for observable in self._affected(changes, full):
            observable.mark_stale(error_code)

    def _reset(self) -> None:  # NOQA: B027
        """Drop every cached value (runs on start, before subscribing)."""

    def _invalidate(self, change: E) -> None:  # NOQA: B027
        """Drop cached values the change makes obsolete (runs synchronously)."""

    @abstractmethod
    async def _recompute(self, changes: list[E], full: bool) -> None:
        """Recompute the aggregates touched by ``changes`` and stage them."""

    @abstractmethod
    def _publish(self) -> None:
        """Push every staged result to its observable."""

    @abstractmethod
    def _affected(self, changes: list[E], full: bool) -> list[Observable]:
        """Observables whose value depends on ``changes``."""
