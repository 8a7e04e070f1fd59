"""Station-management endpoints of the PMIS API."""

from __future__ import annotations

from typing import Any

from services.rest import RestResource

COMPLAINTS_PATH = "/station-management/api/complaints/"
STAFF_DEPLOYMENTS_PATH = "/station-management/api/staff-deployments/"
JOURNALS_PATH = "/station-management/api/journals/"

RESOURCE_PATHS = {
    "complaints": COMPLAINTS_PATH,
    "staff-deployments": STAFF_DEPLOYMENTS_PATH,
    "journals": JOURNALS_PATH,
}


def complaints(**kwargs: Any) -> RestResource:
    return RestResource(COMPLAINTS_PATH, name="complaints", **kwargs)


def staff_deployments(**kwargs: Any) -> RestResource:
    return RestResource(STAFF_DEPLOYMENTS_PATH, name="staff-deployments", **kwargs)


def journals(**kwargs: Any) -> RestResource:
    return RestResource(JOURNALS_PATH, name="journals", **kwargs)


def resource(name: str, **kwargs: Any) -> RestResource:
    """Look up a station resource by its CLI/URL name."""
    try:
        path = RESOURCE_PATHS[name]
    except KeyError:
        choices = ", ".join(sorted(RESOURCE_PATHS))
        raise ValueError(f"Unknown resource {name!r}; expected one of: {choices}") from None
    return RestResource(path, name=name, **kwargs)
