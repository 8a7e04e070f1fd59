"""
Pytest fixtures for the PMIS admin client tests.

Provides the controllable transport double (see tests/fakes.py) and a
FastAPI TestClient over a freshly seeded mock API for end-to-end tests.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from api.app import create_app  # noqa: E402
from api.database import RecordStore  # noqa: E402
from tests.fakes import BASE_URL, FakeResource  # noqa: E402


# ── Fixtures ──────────────────────────────────────────────────────────────────

@pytest.fixture()
def fake():
    return FakeResource()


@pytest.fixture()
def store():
    """Freshly seeded in-memory record store."""
    s = RecordStore()
    yield s
    s.close()


@pytest.fixture()
def client(store):
    """TestClient over the mock API; usable as a requests-style session."""
    from fastapi.testclient import TestClient

    with TestClient(create_app(store=store), base_url=BASE_URL) as c:
        yield c
