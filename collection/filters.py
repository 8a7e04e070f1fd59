"""
Location filter shared by the station screens.

Region → district → station cascade: picking a region clears district and
station, picking a district clears station. The current selection is
turned into query params for every list request and, when a store path is
configured, survives restarts as a small JSON file.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from utils.config import LocationSelection

if TYPE_CHECKING:
    from collection.controller import RemoteCollectionController

logger = logging.getLogger(__name__)

FILTER_KEYS = ("region", "district", "station")


class LocationFilter:
    """Current region/district/station selection with change notification."""

    def __init__(self, store_path: str | Path | None = None, *, autoload: bool = True) -> None:
        self.store_path = Path(store_path) if store_path else None
        self._region = ""
        self._district = ""
        self._station = ""
        self._subscribers: list[Callable[[dict[str, str]], None]] = []
        if autoload and self.store_path is not None:
            self.load()

    @property
    def region(self) -> str:
        return self._region

    @property
    def district(self) -> str:
        return self._district

    @property
    def station(self) -> str:
        return self._station

    def set_region(self, value: str | int | None) -> None:
        self._update(region=_clean(value), district="", station="")

    def set_district(self, value: str | int | None) -> None:
        self._update(region=self._region, district=_clean(value), station="")

    def set_station(self, value: str | int | None) -> None:
        self._update(region=self._region, district=self._district, station=_clean(value))

    def clear(self) -> None:
        self._update(region="", district="", station="")
        if self.store_path is not None and self.store_path.exists():
            self.store_path.unlink()

    def params(self) -> dict[str, str]:
        """Query params for the non-empty parts of the selection."""
        values = {"region": self._region, "district": self._district, "station": self._station}
        return {k: v for k, v in values.items() if v}

    def subscribe(self, callback: Callable[[dict[str, str]], None]) -> Callable[[], None]:
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def bind_controller(self, controller: "RemoteCollectionController") -> Callable[[], None]:
        """Push the current selection into ``controller`` and follow changes."""
        controller.apply_external_filters(self.params())
        return self.subscribe(controller.apply_external_filters)

    # ── persistence ───────────────────────────────────────────────────────

    def load(self) -> None:
        if self.store_path is None or not self.store_path.exists():
            return
        try:
            saved = LocationSelection.load_json(self.store_path)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable filter store %s: %s", self.store_path, exc)
            return
        self._region = _clean(saved.region)
        self._district = _clean(saved.district)
        self._station = _clean(saved.station)

    def save(self) -> None:
        if self.store_path is None:
            return
        saved = LocationSelection(self._region, self._district, self._station)
        saved.save_json(self.store_path)

    # ── internals ─────────────────────────────────────────────────────────

    def _update(self, *, region: str, district: str, station: str) -> None:
        if (region, district, station) == (self._region, self._district, self._station):
            return
        self._region, self._district, self._station = region, district, station
        self.save()
        params = self.params()
        logger.debug("location filter changed: %s", params)
        for callback in tuple(self._subscribers):
            callback(params)


def _clean(value: str | int | None) -> str:
    if value is None:
        return ""
    return str(value).strip()
