"""
REST transport for one PMIS collection endpoint.

``RestResource`` wraps a blocking ``requests`` session (retrying, pooled;
see utils/http.py) and exposes the async list/create/update/delete calls a
RemoteCollectionController needs. Each call runs in a worker thread via
``asyncio.to_thread`` so the event loop stays responsive. Cancelling the
awaiting task abandons the call; the thread finishes on its own and its
result is discarded.

List responses may be a DRF page ``{count, next, previous, results}`` or a
bare JSON array (some endpoints skip pagination); both become a LoadResult.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Mapping

import requests
from pydantic import BaseModel, Field, ValidationError

from collection.results import LoadResult
from services.errors import ApiError, RequestCancelled
from utils.config import ClientConfig
from utils.http import SessionManager

logger = logging.getLogger(__name__)


class PageModel(BaseModel):
    """DRF PageNumberPagination envelope."""
    count: int = Field(..., ge=0, description="Total matching records across all pages")
    next: str | None = Field(None, description="URL of the next page")
    previous: str | None = Field(None, description="URL of the previous page")
    results: list[dict[str, Any]] = Field(default_factory=list, description="Records on this page")


def parse_page(body: Any) -> LoadResult:
    """Turn a list response body into a LoadResult.

    Raises:
        ApiError: The body is neither a DRF page nor a JSON array of objects.
    """
    if isinstance(body, list):
        rows = [row for row in body if isinstance(row, dict)]
        if len(rows) != len(body):
            raise ApiError("Malformed list response: expected objects", payload=body)
        return LoadResult(items=tuple(rows), total=len(rows))
    try:
        page = PageModel.model_validate(body)
    except ValidationError as exc:
        raise ApiError(f"Malformed list response: {exc.error_count()} error(s)", payload=body) from exc
    return LoadResult(items=tuple(page.results), total=page.count)


class RestResource:
    """Async CRUD client for ``{base_url}{path}`` and ``{path}{id}/``."""

    def __init__(
        self,
        path: str,
        *,
        base_url: str | None = None,
        session: Any = None,
        session_manager: SessionManager | None = None,
        timeout: float | None = None,
        name: str | None = None,
        config: ClientConfig | None = None,
    ) -> None:
        cfg = config or ClientConfig.from_env()
        self.path = "/" + path.strip("/") + "/"
        self.base_url = (base_url if base_url is not None else cfg.api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else cfg.request_timeout
        self.name = name or self.path.strip("/").rsplit("/", 1)[-1]
        if session is None:
            session_manager = session_manager or SessionManager.from_config(cfg)
            session = session_manager.session
        self._session_manager = session_manager
        self._session = session
        self._closed = False

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.path}"

    def detail_url(self, record_id: Any) -> str:
        return f"{self.url}{record_id}/"

    # ── async API ─────────────────────────────────────────────────────────

    async def list(self, params: Mapping[str, Any]) -> LoadResult:
        body = await self._call("GET", self.url, params=dict(params))
        return parse_page(body)

    async def create(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        return await self._call("POST", self.url, json=dict(payload))

    async def update(self, record_id: Any, payload: Mapping[str, Any]) -> dict[str, Any]:
        return await self._call("PUT", self.detail_url(record_id), json=dict(payload))

    async def delete(self, record_id: Any) -> None:
        await self._call("DELETE", self.detail_url(record_id))

    def close(self) -> None:
        """Refuse further calls and release the owned session, if any."""
        self._closed = True
        if self._session_manager is not None:
            self._session_manager.close()

    # ── internals ─────────────────────────────────────────────────────────

    async def _call(self, method: str, url: str, **kwargs: Any) -> Any:
        if self._closed:
            raise RequestCancelled(f"{self.name}: resource closed")
        try:
            return await asyncio.to_thread(self._request, method, url, **kwargs)
        except asyncio.CancelledError:
            logger.debug("%s %s abandoned", method, url, extra={"resource": self.name})
            raise

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        """Blocking request; returns the decoded JSON body (None for 204)."""
        started = time.monotonic()
        try:
            response = self._session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.Timeout as exc:
            raise ApiError(f"Request timed out after {self.timeout}s") from exc
        except requests.exceptions.RequestException as exc:
            raise ApiError(f"Network error: {exc}") from exc

        duration_ms = round((time.monotonic() - started) * 1000, 1)
        status = response.status_code
        logger.debug(
            "%s %s -> %d (%.1fms)", method, url, status, duration_ms,
            extra={
                "resource": self.name, "method": method, "path": url,
                "status": status, "duration_ms": duration_ms,
            },
        )

        body = _decode(response)
        if status >= 400:
            message = f"{method} {self.path} failed with HTTP {status}"
            raise ApiError(message, status_code=status, payload=body)
        return body


def _decode(response: Any) -> Any:
    if response.status_code == 204 or not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
