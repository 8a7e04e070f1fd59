"""Configuration management utilities for the PMIS admin client.

Provides reusable pieces for:
- Settings objects that round-trip through small JSON files
  (the saved location filter)
- Reading PMIS_* environment settings with defaults
- Validating numeric settings before they reach the controller
"""

import json
import os as _os
from pathlib import Path
from typing import Any, Dict, Optional


class Config:
    """Plain attribute bag that saves to and loads from JSON.

    Public attributes are persisted; names starting with ``_`` are not.
    """

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in self.__dict__.items() if not k.startswith("_")}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Build an instance from defaults overlaid with ``data``.

        Raises:
            ValueError: ``data`` is not a JSON object.
        """
        if not isinstance(data, dict):
            raise ValueError(f"{cls.__name__} expects a JSON object, got {type(data).__name__}")
        config = cls()
        for key, value in data.items():
            setattr(config, key, value)
        return config

    def save_json(self, path: Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict(), indent=2, default=str), encoding="utf-8")

    @classmethod
    def load_json(cls, path: Path) -> "Config":
        """
        Raises:
            OSError: The file cannot be read.
            ValueError: The file is not a JSON object (JSONDecodeError included).
        """
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls.from_dict(data)


class LocationSelection(Config):
    """Saved region/district/station choice of the location filter."""

    def __init__(self, region: str = "", district: str = "", station: str = ""):
        self.region = region
        self.district = district
        self.station = station


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    raw = _os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


def _env_float(name: str, default: float, minimum: float = 0.0) -> float:
    raw = _os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


class ClientConfig(Config):
    """Client-level configuration loaded from environment variables.

    All env vars have sensible defaults so the client works out of the box
    against a locally running mock API (``python main.py serve``).

    Environment variables:
        PMIS_API_BASE_URL: REST API root (default: http://127.0.0.1:8000)
        PMIS_API_TOKEN: Bearer token sent as Authorization header (default: unset)
        PMIS_API_TIMEOUT: Per-request timeout in seconds (default: 30)
        PMIS_PAGE_SIZE: Initial page size for list screens (default: 10)
        PMIS_SEARCH_DEBOUNCE_MS: Quiet interval before a search refetch (default: 350)
        PMIS_LOG_FORMAT: Logging format — "text" or "json" (default: text)
        PMIS_LOG_LEVEL: Root log level name (default: INFO)
        PMIS_FILTER_STORE: JSON file persisting location filters (default: unset)
        PMIS_API_HOST: Mock API bind address (default: 127.0.0.1)
        PMIS_API_PORT: Mock API port (default: 8000)
    """

    def __init__(self) -> None:
        super().__init__()
        self.api_base_url = _os.getenv("PMIS_API_BASE_URL", "http://127.0.0.1:8000").rstrip("/")
        token = _os.getenv("PMIS_API_TOKEN", "").strip()
        self.api_token: Optional[str] = token or None
        self.request_timeout = _env_float("PMIS_API_TIMEOUT", 30.0, minimum=0.1)
        self.page_size = _env_int("PMIS_PAGE_SIZE", 10, minimum=1)
        self.search_debounce_ms = _env_int("PMIS_SEARCH_DEBOUNCE_MS", 350)
        self.log_format = _os.getenv("PMIS_LOG_FORMAT", "text").lower()
        self.log_level = _os.getenv("PMIS_LOG_LEVEL", "INFO").upper()
        store = _os.getenv("PMIS_FILTER_STORE", "").strip()
        self.filter_store: Optional[Path] = Path(store) if store else None
        self.api_host = _os.getenv("PMIS_API_HOST", "127.0.0.1")
        self.api_port = _env_int("PMIS_API_PORT", 8000, minimum=1)

    @property
    def search_debounce_seconds(self) -> float:
        return self.search_debounce_ms / 1000.0

    def auth_headers(self) -> Dict[str, str]:
        """Return headers every API request carries."""
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Create a ClientConfig instance populated from environment variables."""
        return cls()
