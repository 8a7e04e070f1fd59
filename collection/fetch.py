"""
FetchCoordinator — one outstanding list request per view, newest wins.

Every ``issue()`` cancels the previous in-flight task (best effort), bumps the
request epoch and starts a new task. When a response arrives it is applied
only if its epoch is still the current one; anything older is dropped. The
epoch check is what guarantees correctness: cancellation may not reach the
transport in time (a worker thread keeps running), so a superseded response
can still arrive and must be ignored.

Outcomes never escape as exceptions. A transport failure becomes
``Err(TRANSIENT_FETCH_FAILURE)``, a cancellation becomes ``Err(CANCELLED)``.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping

from collection.results import Err, ErrorKind, LoadResult, Ok, Result
from services.errors import ApiError, RequestCancelled, describe_error

logger = logging.getLogger(__name__)

ListFn = Callable[[dict[str, Any]], Awaitable[LoadResult]]


@dataclass(frozen=True)
class FetchOutcome:
    epoch: int
    result: Result[LoadResult]
    applied: bool
    params: Mapping[str, Any] | None = None

    @property
    def cancelled(self) -> bool:
        return isinstance(self.result, Err) and self.result.is_cancelled


class FetchCoordinator:
    """Issue list requests and decide which single response wins."""

    def __init__(
        self,
        list_fn: ListFn,
        *,
        on_outcome: Callable[[FetchOutcome], None] | None = None,
        name: str = "collection",
        failure_message: str = "Failed to load records",
    ) -> None:
        self._list = list_fn
        self._on_outcome = on_outcome
        self.name = name
        self.failure_message = failure_message
        self._epoch = 0
        self._task: asyncio.Task | None = None
        self._loading = False
        self._closed = False

    # ── state ─────────────────────────────────────────────────────────────

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def closed(self) -> bool:
        return self._closed

    def is_current(self, epoch: int) -> bool:
        return not self._closed and epoch == self._epoch

    # ── lifecycle ─────────────────────────────────────────────────────────

    def issue(self, params: Mapping[str, Any]) -> asyncio.Task:
        """Supersede any pending request and start a new one.

        Must be called with a running event loop.
        """
        if self._closed:
            raise RuntimeError(f"{self.name}: fetch coordinator is closed")
        loop = asyncio.get_running_loop()
        self._cancel_in_flight()
        self._epoch += 1
        epoch = self._epoch
        self._loading = True
        snapshot = dict(params)
        logger.debug(
            "%s: issue epoch=%d params=%s", self.name, epoch, snapshot,
            extra={"resource": self.name, "epoch": epoch},
        )
        task = loop.create_task(self._run(snapshot, epoch), name=f"{self.name}-fetch-{epoch}")
        task.add_done_callback(lambda t, e=epoch, p=snapshot: self._on_task_done(t, e, p))
        self._task = task
        return task

    def close(self) -> None:
        """Tear down: abandon the in-flight request. Idempotent."""
        if self._closed:
            return
        self._closed = True
        self._cancel_in_flight()
        self._loading = False

    async def wait_idle(self) -> None:
        """Wait until the newest issued request has settled."""
        while self._task is not None and not self._task.done():
            await asyncio.wait({self._task})

    # ── internals ─────────────────────────────────────────────────────────

    def _cancel_in_flight(self) -> None:
        task = self._task
        if task is not None and not task.done():
            logger.debug(
                "%s: cancelling superseded request", self.name,
                extra={"resource": self.name, "epoch": self._epoch},
            )
            task.cancel()

    async def _run(self, params: dict[str, Any], epoch: int) -> FetchOutcome:
        started = time.monotonic()
        try:
            load = await self._list(params)
        except RequestCancelled as exc:
            return self._settle(epoch, Err(ErrorKind.CANCELLED, exc.message), params)
        except Exception as exc:
            status = exc.status_code if isinstance(exc, ApiError) else None
            message = describe_error(exc, self.failure_message)
            if self.is_current(epoch):
                logger.warning(
                    "%s: list request failed epoch=%d status=%s: %s",
                    self.name, epoch, status, exc,
                    extra={"resource": self.name, "epoch": epoch, "status": status},
                )
            err = Err(ErrorKind.TRANSIENT_FETCH_FAILURE, message, status)
            return self._settle(epoch, err, params)

        logger.debug(
            "%s: response epoch=%d total=%d rows=%d duration_ms=%.1f",
            self.name, epoch, load.total, len(load.items),
            (time.monotonic() - started) * 1000,
            extra={"resource": self.name, "epoch": epoch},
        )
        return self._settle(epoch, Ok(load), params)

    def _settle(self, epoch: int, result: Result[LoadResult], params: Mapping[str, Any]) -> FetchOutcome:
        cancelled = isinstance(result, Err) and result.is_cancelled
        applied = self.is_current(epoch) and not cancelled
        if not applied and not cancelled:
            logger.debug(
                "%s: dropping stale response epoch=%d current=%d",
                self.name, epoch, self._epoch,
                extra={"resource": self.name, "epoch": epoch},
            )
        if applied or (cancelled and self.is_current(epoch)):
            self._loading = False
        outcome = FetchOutcome(epoch=epoch, result=result, applied=applied, params=params)
        if self._on_outcome is not None:
            self._on_outcome(outcome)
        return outcome

    def _on_task_done(self, task: asyncio.Task, epoch: int, params: Mapping[str, Any]) -> None:
        if task is self._task:
            self._task = None
        if task.cancelled():
            logger.debug(
                "%s: request cancelled epoch=%d", self.name, epoch,
                extra={"resource": self.name, "epoch": epoch},
            )
            if self._on_outcome is not None:
                outcome = FetchOutcome(
                    epoch=epoch,
                    result=Err(ErrorKind.CANCELLED, "request superseded"),
                    applied=False,
                    params=params,
                )
                self._on_outcome(outcome)
