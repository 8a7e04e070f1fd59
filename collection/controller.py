"""
RemoteCollectionController — one table's window onto a paginated endpoint.

Wires the pure ViewState transitions to a FetchCoordinator (one winning
request per user intent), a Debouncer (search refetches only), and an
OptimisticMerge (confirmed writes shown before the next refetch).

Usage from a screen::

    controller = RemoteCollectionController(station.complaints(session=session))
    controller.subscribe(render)          # called with a CollectionSnapshot
    controller.load()
    ...
    controller.set_search("smith")        # state now, request after 350 ms
    await controller.create(payload)      # row appears once the API accepts it
    controller.reload()                   # authoritative refetch
    ...
    controller.close()                    # screen torn down
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Protocol

from collection import view_state as vs
from collection.debounce import Debouncer
from collection.fetch import FetchCoordinator, FetchOutcome
from collection.merge import OptimisticMerge, Rows
from collection.results import (
    Err, ErrorKind, Insert, LoadResult, Ok, PendingMutation, Remove, Replace, Result,
)
from collection.view_state import SortDirection, ViewState
from services.errors import RequestCancelled, describe_error
from utils.config import ClientConfig

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_DEBOUNCE = 0.35
_CLOSED = Err(ErrorKind.CANCELLED, "controller closed")


class CollectionResource(Protocol):
    """What the controller needs from the transport."""

    async def list(self, params: dict[str, Any]) -> LoadResult: ...

    async def create(self, payload: Mapping[str, Any]) -> Mapping[str, Any]: ...

    async def update(self, record_id: Any, payload: Mapping[str, Any]) -> Mapping[str, Any]: ...

    async def delete(self, record_id: Any) -> None: ...


class FetchStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True)
class CollectionSnapshot:
    """Everything a table widget renders."""

    items: Rows
    total: int
    loading: bool
    initial_loading: bool
    error: str | None
    error_kind: ErrorKind | None
    status: FetchStatus
    page: int
    page_size: int
    page_count: int
    sort_field: str | None
    sort_direction: SortDirection
    search_text: str
    filters: Mapping[str, Any]


@dataclass(frozen=True)
class CollectionCallbacks:
    """Event handlers a table widget binds to."""

    on_page_change: Callable[[int], Any]
    on_page_size_change: Callable[[int], Any]
    on_sort: Callable[..., Any]
    on_search: Callable[[str], Any]
    on_external_filter_change: Callable[[Mapping[str, Any]], Any]
    on_header_click: Callable[[str], Any]


class RemoteCollectionController:
    """Keep page/sort/search/total consistent with a remote paginated list."""

    def __init__(
        self,
        resource: CollectionResource,
        *,
        page_size: int = 10,
        search_debounce: float = DEFAULT_SEARCH_DEBOUNCE,
        filters: Mapping[str, Any] | None = None,
        id_field: str = "id",
        insert_at: str = "start",
        name: str | None = None,
        failure_message: str | None = None,
        initial_state: ViewState | None = None,
    ) -> None:
        self._resource = resource
        self.name = name or getattr(resource, "name", None) or "collection"
        self._state = initial_state or ViewState(page_size=page_size, filters=dict(filters or {}))
        self._items: Rows = ()
        self._total = 0
        self._error: Err | None = None
        self._initial_loading = True
        self._last_transition: FetchStatus | None = None
        self._settled_epoch = 0
        self._closed = False
        self._followup: asyncio.Handle | None = None
        self._subscribers: list[Callable[[CollectionSnapshot], None]] = []

        self._merge = OptimisticMerge(id_field=id_field, insert_at=insert_at)
        self._fetch = FetchCoordinator(
            resource.list,
            on_outcome=self._on_outcome,
            name=self.name,
            failure_message=failure_message or f"Failed to load {self.name}",
        )
        self._debouncer = Debouncer(search_debounce, self._on_search_settled)

    @classmethod
    def from_config(
        cls, resource: CollectionResource, cfg: ClientConfig | None = None, **kwargs: Any,
    ) -> "RemoteCollectionController":
        cfg = cfg or ClientConfig.from_env()
        kwargs.setdefault("page_size", cfg.page_size)
        kwargs.setdefault("search_debounce", cfg.search_debounce_seconds)
        return cls(resource, **kwargs)

    # ── read side ─────────────────────────────────────────────────────────

    @property
    def view_state(self) -> ViewState:
        return self._state

    @property
    def items(self) -> Rows:
        return self._items

    @property
    def total(self) -> int:
        return self._total

    @property
    def loading(self) -> bool:
        return self._fetch.loading

    @property
    def initial_loading(self) -> bool:
        return self._initial_loading

    @property
    def error(self) -> str | None:
        return self._error.detail if self._error is not None else None

    @property
    def error_kind(self) -> ErrorKind | None:
        return self._error.kind if self._error is not None else None

    @property
    def status(self) -> FetchStatus:
        return FetchStatus.LOADING if self._fetch.loading else FetchStatus.IDLE

    @property
    def last_transition(self) -> FetchStatus | None:
        return self._last_transition

    @property
    def epoch(self) -> int:
        return self._fetch.epoch

    @property
    def pending_mutations(self) -> tuple[PendingMutation, ...]:
        return self._merge.pending

    @property
    def search_pending(self) -> bool:
        return self._debouncer.pending

    @property
    def closed(self) -> bool:
        return self._closed

    def snapshot(self) -> CollectionSnapshot:
        state = self._state
        return CollectionSnapshot(
            items=self._items,
            total=self._total,
            loading=self.loading,
            initial_loading=self._initial_loading,
            error=self.error,
            error_kind=self.error_kind,
            status=self.status,
            page=state.page,
            page_size=state.page_size,
            page_count=vs.page_count(self._total, state.page_size),
            sort_field=state.sort_field,
            sort_direction=state.sort_direction,
            search_text=state.search_text,
            filters=dict(state.filters),
        )

    def callbacks(self) -> CollectionCallbacks:
        return CollectionCallbacks(
            on_page_change=self.set_page,
            on_page_size_change=self.set_page_size,
            on_sort=self.set_sort,
            on_search=self.set_search,
            on_external_filter_change=self.apply_external_filters,
            on_header_click=self.toggle_sort,
        )

    def subscribe(self, callback: Callable[[CollectionSnapshot], None]) -> Callable[[], None]:
        """Register a change listener; returns an unsubscribe function."""
        assert callable(callback), "subscriber must be callable"
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    # ── user actions ──────────────────────────────────────────────────────

    def load(self) -> asyncio.Task | None:
        """First paint; same as ``reload``."""
        return self.reload()

    def reload(self) -> asyncio.Task | None:
        """Authoritative refetch of the current ViewState."""
        return self._refetch()

    def set_page(self, page: int) -> asyncio.Task | None:
        return self._transition(vs.set_page, page)

    def set_page_size(self, page_size: int) -> asyncio.Task | None:
        return self._transition(vs.set_page_size, page_size)

    def set_sort(
        self, sort_field: str | None, direction: SortDirection | str | None = SortDirection.ASCENDING,
    ) -> asyncio.Task | None:
        return self._transition(vs.set_sort, sort_field, direction)

    def toggle_sort(self, sort_field: str) -> asyncio.Task | None:
        """Cycle a column header through asc, desc and unsorted."""
        return self._transition(vs.toggle_sort, sort_field)

    def apply_external_filters(self, filters: Mapping[str, Any] | None) -> asyncio.Task | None:
        return self._transition(vs.apply_external_filters, filters)

    def set_search(self, text: str | None) -> None:
        """Update search text now; refetch once typing has been quiet."""
        if self._closed:
            logger.debug("%s: set_search ignored, controller closed", self.name)
            return None
        self._state = vs.set_search(self._state, text)
        self._notify()
        self._debouncer.trigger()
        return None

    def flush_search(self) -> bool:
        """Fire a pending search refetch now (e.g. Enter pressed)."""
        return self._debouncer.flush()

    # ── mutations ─────────────────────────────────────────────────────────

    async def create(self, payload: Mapping[str, Any], *, reload: bool = False) -> Result[Mapping[str, Any]]:
        if self._closed:
            return _CLOSED
        try:
            record = await self._resource.create(payload)
        except RequestCancelled as exc:
            return Err(ErrorKind.CANCELLED, exc.message)
        except Exception as exc:
            return self._mutation_failed("create", exc, f"Failed to create {self.name} record")
        self._apply_mutation(Insert(record), reload)
        return Ok(record)

    async def update(
        self, record_id: Any, payload: Mapping[str, Any], *, reload: bool = False,
    ) -> Result[Mapping[str, Any]]:
        if self._closed:
            return _CLOSED
        try:
            record = await self._resource.update(record_id, payload)
        except RequestCancelled as exc:
            return Err(ErrorKind.CANCELLED, exc.message)
        except Exception as exc:
            return self._mutation_failed("update", exc, f"Failed to update {self.name} record")
        self._apply_mutation(Replace(record_id, record), reload)
        return Ok(record)

    async def delete(self, record_id: Any, *, reload: bool = False) -> Result[None]:
        if self._closed:
            return _CLOSED
        try:
            await self._resource.delete(record_id)
        except RequestCancelled as exc:
            return Err(ErrorKind.CANCELLED, exc.message)
        except Exception as exc:
            return self._mutation_failed("delete", exc, f"Failed to delete {self.name} record")
        self._apply_mutation(Remove(record_id), reload)
        return Ok(None)

    # ── teardown ──────────────────────────────────────────────────────────

    def close(self) -> None:
        """Cancel the pending timer and request; later triggers are ignored."""
        if self._closed:
            return
        self._closed = True
        self._debouncer.cancel()
        if self._followup is not None:
            self._followup.cancel()
            self._followup = None
        self._fetch.close()
        self._subscribers.clear()
        logger.debug("%s: controller closed", self.name)

    async def wait_idle(self) -> None:
        """Wait for the in-flight request and any follow-up it scheduled.

        A pending search debounce is not waited for.
        """
        while True:
            await self._fetch.wait_idle()
            if self._followup is None:
                return
            await asyncio.sleep(0)

    # ── internals ─────────────────────────────────────────────────────────

    def _transition(self, fn: Callable[..., ViewState], *args: Any) -> asyncio.Task | None:
        if self._closed:
            logger.debug("%s: %s ignored, controller closed", self.name, fn.__name__)
            return None
        return self._refetch(fn(self._state, *args))

    def _refetch(self, state: ViewState | None = None) -> asyncio.Task | None:
        """Request ``state`` (default: the current one), then commit it.

        The ViewState only changes once a request for it has been issued.
        """
        if self._closed:
            return None
        if state is None:
            state = self._state
        task = self._fetch.issue(state.to_params())
        self._state = state
        self._notify()
        return task

    def _on_search_settled(self) -> None:
        self._refetch()

    def _schedule_followup(self) -> None:
        loop = asyncio.get_running_loop()

        def _run() -> None:
            self._followup = None
            self._refetch()

        if self._followup is not None:
            self._followup.cancel()
        self._followup = loop.call_soon(_run)

    def _on_outcome(self, outcome: FetchOutcome) -> None:
        if self._closed:
            return
        if outcome.cancelled:
            if outcome.epoch > self._settled_epoch:
                self._settled_epoch = outcome.epoch
                self._last_transition = FetchStatus.CANCELLED
            return
        if not outcome.applied:
            return

        self._settled_epoch = outcome.epoch
        result = outcome.result
        if isinstance(result, Ok):
            self._apply_page(result.value)
        else:
            self._apply_failure(result)

    def _apply_page(self, load: LoadResult) -> None:
        state = self._state
        last_page = vs.page_count(load.total, state.page_size)
        if not load.items and load.total > 0 and state.page > last_page:
            logger.info(
                "%s: page %d beyond last page %d, moving to last page",
                self.name, state.page, last_page,
            )
            self._state = vs.set_page(state, last_page)
            self._schedule_followup()
            return

        self._items = load.items
        self._total = load.total
        self._error = None
        self._initial_loading = False
        self._last_transition = FetchStatus.SUCCESS
        dropped = self._merge.reconcile()
        if dropped:
            logger.debug("%s: %d optimistic mutation(s) reconciled", self.name, dropped)
        self._notify()

    def _apply_failure(self, err: Err) -> None:
        if (
            err.status_code == 404
            and "invalid page" in err.detail.lower()
            and self._state.page != 1
        ):
            logger.info("%s: server rejected page %d, resetting to 1", self.name, self._state.page)
            self._state = vs.set_page(self._state, 1)
            self._schedule_followup()
            return

        self._error = err
        self._initial_loading = False
        self._last_transition = FetchStatus.FAILED
        self._notify()

    def _apply_mutation(self, mutation: PendingMutation, reload: bool) -> None:
        if self._closed:
            return
        self._items, self._total = self._merge.apply(self._items, self._total, mutation)
        if self._error is not None and self._error.kind is ErrorKind.MUTATION_FAILURE:
            self._error = None
        self._notify()
        if reload:
            self.reload()

    def _mutation_failed(self, action: str, exc: Exception, fallback: str) -> Err:
        status = getattr(exc, "status_code", None)
        err = Err(ErrorKind.MUTATION_FAILURE, describe_error(exc, fallback), status)
        logger.warning(
            "%s: %s failed status=%s: %s", self.name, action, status, exc,
            extra={"resource": self.name, "status": status},
        )
        if not self._closed:
            self._error = err
            self._notify()
        return err

    def _notify(self) -> None:
        if not self._subscribers:
            return
        snap = self.snapshot()
        for callback in tuple(self._subscribers):
            try:
                callback(snap)
            except Exception:
                logger.exception(
                    "%s: subscriber %r failed", self.name, callback,
                    extra={"resource": self.name},
                )
