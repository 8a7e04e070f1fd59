"""Pooled ``requests`` sessions for the PMIS REST client.

The PMIS API sits behind a gateway that answers 429/502/503/504 while it
scales. Reads (list pages, detail lookups) are retried with exponential
backoff; writes are not, because a replayed POST would file a second
complaint or journal entry. Exhausted retries hand the last response back
so services/rest.py can turn it into an ApiError with the server's body.
"""

from typing import Dict, FrozenSet, Optional, Tuple

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry as URLRetry

from utils.config import ClientConfig

GATEWAY_RETRY_STATUSES: Tuple[int, ...] = (429, 502, 503, 504)
READ_METHODS: FrozenSet[str] = frozenset({"GET", "HEAD", "OPTIONS"})


class RetryStrategy:
    """Backoff policy for idempotent PMIS reads."""

    def __init__(self, max_retries: int = 3, backoff_factor: float = 0.5,
                 status_forcelist: Optional[Tuple[int, ...]] = None):
        """
        Args:
            max_retries: Attempts after the first one; 0 disables retries.
            backoff_factor: Sleep ``factor * 2**(n-1)`` seconds before retry n.
            status_forcelist: Statuses retried on reads
                (default: GATEWAY_RETRY_STATUSES).
        """
        if max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {max_retries}")
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self.status_forcelist = tuple(status_forcelist or GATEWAY_RETRY_STATUSES)

    def get_retry_object(self) -> URLRetry:
        return URLRetry(
            total=self.max_retries,
            connect=self.max_retries,
            read=self.max_retries,
            backoff_factor=self.backoff_factor,
            status_forcelist=self.status_forcelist,
            allowed_methods=READ_METHODS,
            raise_on_status=False,
        )


class SessionManager:
    """Owns one lazily-built session carrying the PMIS auth headers.

    Use as a context manager, or call ``close()``, to release pooled
    connections when a screen or CLI run is done.
    """

    def __init__(self, retry_strategy: Optional[RetryStrategy] = None,
                 pool_maxsize: int = 10,
                 headers: Optional[Dict[str, str]] = None):
        self.retry_strategy = retry_strategy or RetryStrategy()
        self.pool_maxsize = pool_maxsize
        self.headers = dict(headers or {})
        self._session: Optional[requests.Session] = None

    @classmethod
    def from_config(cls, cfg: Optional[ClientConfig] = None) -> "SessionManager":
        """Session manager with the configured bearer token and JSON headers."""
        cfg = cfg or ClientConfig.from_env()
        return cls(RetryStrategy(), headers=cfg.auth_headers())

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            session = requests.Session()
            session.headers.update(self.headers)
            adapter = HTTPAdapter(
                max_retries=self.retry_strategy.get_retry_object(),
                pool_maxsize=self.pool_maxsize,
            )
            session.mount("http://", adapter)
            session.mount("https://", adapter)
            self._session = session
        return self._session

    def set_token(self, token: Optional[str]) -> None:
        """Swap the bearer token after login/refresh; None signs out."""
        if token:
            self.headers["Authorization"] = f"Bearer {token}"
        else:
            self.headers.pop("Authorization", None)
        if self._session is not None:
            self._session.headers.pop("Authorization", None)
            self._session.headers.update(self.headers)

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    def __enter__(self) -> "SessionManager":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
