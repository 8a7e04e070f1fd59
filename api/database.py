"""
In-memory record store backing the mock PMIS API.

One SQLite connection per store (``:memory:``), shared across request
threads behind a lock. Each station-management resource is a table
described by a ``TableSpec``: its columns, which of them ``search`` matches,
which query params filter on, and which fields ``ordering`` accepts.

Usage in a route::

    from api.database import get_store
    from fastapi import Depends

    @router.get("/example")
    def example(store: RecordStore = Depends(get_store)):
        ...
"""

import sqlite3
import threading
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Mapping

from fastapi import Request

from utils.query import build_order_clause, build_where_clause, parse_ordering


@dataclass(frozen=True)
class TableSpec:
    """Schema and list-contract metadata for one resource table."""
    name: str
    columns: tuple[str, ...]
    search_columns: tuple[str, ...]
    sort_columns: frozenset[str]
    filter_columns: frozenset[str] = frozenset({"region", "district", "station"})
    boolean_columns: frozenset[str] = frozenset({"is_active"})


_LOCATION_COLUMNS = ("region", "district", "station", "station_name")

COMPLAINTS = TableSpec(
    name="complaints",
    columns=_LOCATION_COLUMNS + (
        "prisoner_name", "force_number", "rank_name",
        "nature_of_complaint_name", "complaint_priority_name",
        "complaint", "complaint_date", "complaint_status",
        "complaint_remark", "response", "date_of_response",
        "is_active", "created_datetime",
    ),
    search_columns=(
        "prisoner_name", "complaint", "force_number",
        "station_name", "nature_of_complaint_name",
    ),
    sort_columns=frozenset({
        "id", "prisoner_name", "complaint_date", "complaint_status",
        "complaint_priority_name", "station_name", "created_datetime",
    }),
)

STAFF_DEPLOYMENTS = TableSpec(
    name="staff_deployments",
    columns=_LOCATION_COLUMNS + (
        "full_name", "force_number", "rank",
        "start_date", "end_date", "is_active", "created_datetime",
    ),
    search_columns=("full_name", "force_number", "station_name", "rank"),
    sort_columns=frozenset({
        "id", "full_name", "force_number", "rank", "station_name",
        "start_date", "end_date", "created_datetime",
    }),
)

JOURNALS = TableSpec(
    name="journals",
    columns=_LOCATION_COLUMNS + (
        "journal_date", "type_of_journal_name", "duty_officer_username",
        "rank_name", "force_number", "activity", "is_active", "created_datetime",
    ),
    search_columns=(
        "activity", "duty_officer_username", "force_number",
        "type_of_journal_name", "station_name",
    ),
    sort_columns=frozenset({
        "id", "journal_date", "type_of_journal_name", "duty_officer_username",
        "station_name", "created_datetime",
    }),
)

TABLES: dict[str, TableSpec] = {t.name: t for t in (COMPLAINTS, STAFF_DEPLOYMENTS, JOURNALS)}


class RecordStore:
    """Thread-safe CRUD over the in-memory resource tables."""

    def __init__(self, seed: bool = True) -> None:
        self._conn = sqlite3.connect(":memory:", check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.RLock()
        self._create_schema()
        if seed:
            seed_store(self)

    def _create_schema(self) -> None:
        with self._lock:
            for spec in TABLES.values():
                cols = ", ".join(
                    f"{c} INTEGER" if c in spec.boolean_columns else f"{c} TEXT"
                    for c in spec.columns
                )
                self._conn.execute(
                    f"CREATE TABLE {spec.name} (id INTEGER PRIMARY KEY AUTOINCREMENT, {cols})"
                )
            self._conn.commit()

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    # ── reads ─────────────────────────────────────────────────────────────

    def list(
        self,
        table: str,
        *,
        page: int,
        page_size: int,
        ordering: str | None = None,
        search: str | None = None,
        filters: Mapping[str, Any] | None = None,
    ) -> tuple[int, list[dict[str, Any]]]:
        """Return ``(total, rows)`` for one page.

        Raises:
            ValueError: ``ordering`` names a field that is not sortable.
        """
        spec = TABLES[table]
        order = build_order_clause(parse_ordering(ordering, set(spec.sort_columns)))
        where, params = build_where_clause(
            search=search,
            search_columns=spec.search_columns,
            filters=filters,
            filter_columns=set(spec.filter_columns),
        )
        offset = (page - 1) * page_size
        with self._lock:
            total = self._conn.execute(
                f"SELECT COUNT(*) FROM {spec.name} {where}", params,
            ).fetchone()[0]
            rows = self._conn.execute(
                f"SELECT * FROM {spec.name} {where} {order} LIMIT ? OFFSET ?",
                params + [page_size, offset],
            ).fetchall()
        return total, [self._to_dict(spec, row) for row in rows]

    def get(self, table: str, record_id: int) -> dict[str, Any] | None:
        spec = TABLES[table]
        with self._lock:
            row = self._conn.execute(
                f"SELECT * FROM {spec.name} WHERE id = ?", (record_id,),
            ).fetchone()
        return self._to_dict(spec, row) if row is not None else None

    # ── writes ────────────────────────────────────────────────────────────

    def create(self, table: str, data: Mapping[str, Any]) -> dict[str, Any]:
        spec = TABLES[table]
        values = {c: data.get(c) for c in spec.columns if c in data}
        values.setdefault("is_active", True)
        values.setdefault("created_datetime", datetime.now().isoformat(timespec="seconds"))
        cols = ", ".join(values)
        marks = ", ".join("?" for _ in values)
        with self._lock:
            cur = self._conn.execute(
                f"INSERT INTO {spec.name} ({cols}) VALUES ({marks})",
                [self._to_db(spec, c, v) for c, v in values.items()],
            )
            self._conn.commit()
            new_id = cur.lastrowid
        return self.get(table, new_id)

    def update(self, table: str, record_id: int, data: Mapping[str, Any]) -> dict[str, Any] | None:
        spec = TABLES[table]
        values = {c: data[c] for c in spec.columns if c in data and c != "created_datetime"}
        with self._lock:
            if self.get(table, record_id) is None:
                return None
            if values:
                sets = ", ".join(f"{c} = ?" for c in values)
                self._conn.execute(
                    f"UPDATE {spec.name} SET {sets} WHERE id = ?",
                    [self._to_db(spec, c, v) for c, v in values.items()] + [record_id],
                )
                self._conn.commit()
            return self.get(table, record_id)

    def delete(self, table: str, record_id: int) -> bool:
        spec = TABLES[table]
        with self._lock:
            cur = self._conn.execute(f"DELETE FROM {spec.name} WHERE id = ?", (record_id,))
            self._conn.commit()
        return cur.rowcount > 0

    def count(self, table: str) -> int:
        with self._lock:
            return self._conn.execute(f"SELECT COUNT(*) FROM {TABLES[table].name}").fetchone()[0]

    # ── row conversion ────────────────────────────────────────────────────

    @staticmethod
    def _to_db(spec: TableSpec, column: str, value: Any) -> Any:
        if column in spec.boolean_columns and value is not None:
            return 1 if value else 0
        return value

    @staticmethod
    def _to_dict(spec: TableSpec, row: sqlite3.Row) -> dict[str, Any]:
        data = dict(row)
        for column in spec.boolean_columns:
            if data.get(column) is not None:
                data[column] = bool(data[column])
        return data


# ── Seed data ─────────────────────────────────────────────────────────────────

_STATIONS = (
    # (region, district, station, station_name)
    ("1", "10", "100", "Luzira Upper"),
    ("1", "10", "101", "Luzira Women"),
    ("1", "11", "110", "Kitalya"),
    ("2", "20", "200", "Gulu Main"),
    ("2", "21", "210", "Lira"),
)
_PEOPLE = (
    ("John Smith", "Sgt"), ("Mary Achieng", "Cpl"), ("Peter Okello", "Insp"),
    ("Grace Smithson", "PO"), ("Samuel Mugisha", "Sgt"), ("Ruth Nakato", "Cpl"),
    ("David Opio", "ASP"),
)
_NATURES = ("Food ration", "Medical attention", "Visitation", "Mistreatment", "Property")
_PRIORITIES = ("LOW", "MEDIUM", "HIGH")
_COMPLAINT_STATUSES = ("OPEN", "IN_PROGRESS", "RESOLVED", "CLOSED")
_JOURNAL_TYPES = ("Occurrence", "Lock-up", "Muster", "Visitors")

SEED_COUNTS = {"complaints": 37, "staff_deployments": 24, "journals": 45}


def seed_store(store: RecordStore) -> None:
    """Fill ``store`` with deterministic sample records."""
    start = date(2024, 1, 1)
    for i in range(SEED_COUNTS["complaints"]):
        region, district, station, station_name = _STATIONS[i % len(_STATIONS)]
        name, rank = _PEOPLE[i % len(_PEOPLE)]
        store.create("complaints", {
            "region": region, "district": district, "station": station,
            "station_name": station_name,
            "prisoner_name": f"Prisoner {i + 1:03d}",
            "force_number": f"UPS/{1000 + i}",
            "rank_name": rank,
            "nature_of_complaint_name": _NATURES[i % len(_NATURES)],
            "complaint_priority_name": _PRIORITIES[i % len(_PRIORITIES)],
            "complaint": f"{_NATURES[i % len(_NATURES)]} raised with {name}",
            "complaint_date": (start + timedelta(days=i)).isoformat(),
            "complaint_status": _COMPLAINT_STATUSES[i % len(_COMPLAINT_STATUSES)],
            "complaint_remark": "",
            "response": "",
        })
    for i in range(SEED_COUNTS["staff_deployments"]):
        region, district, station, station_name = _STATIONS[i % len(_STATIONS)]
        name, rank = _PEOPLE[i % len(_PEOPLE)]
        store.create("staff_deployments", {
            "region": region, "district": district, "station": station,
            "station_name": station_name,
            "full_name": f"{name} {i + 1}",
            "force_number": f"UPS/{2000 + i}",
            "rank": rank,
            "start_date": (start + timedelta(days=7 * i)).isoformat(),
            "end_date": None,
            "is_active": i % 5 != 0,
        })
    for i in range(SEED_COUNTS["journals"]):
        region, district, station, station_name = _STATIONS[i % len(_STATIONS)]
        name, rank = _PEOPLE[i % len(_PEOPLE)]
        store.create("journals", {
            "region": region, "district": district, "station": station,
            "station_name": station_name,
            "journal_date": (start + timedelta(days=i // 3)).isoformat(),
            "type_of_journal_name": _JOURNAL_TYPES[i % len(_JOURNAL_TYPES)],
            "duty_officer_username": name.lower().replace(" ", "."),
            "rank_name": rank,
            "force_number": f"UPS/{3000 + i}",
            "activity": f"Entry {i + 1} recorded by {name}",
        })


def get_store(request: Request) -> RecordStore:
    """FastAPI dependency: the store attached to the running app."""
    return request.app.state.store
