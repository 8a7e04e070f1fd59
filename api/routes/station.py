"""
Station-management CRUD endpoints of the mock PMIS API.

Every resource gets the same DRF-shaped contract:

    GET    /station-management/api/{resource}/        paginated list
    POST   /station-management/api/{resource}/        create (201)
    GET    /station-management/api/{resource}/{id}/   detail
    PUT    /station-management/api/{resource}/{id}/   full update
    DELETE /station-management/api/{resource}/{id}/   delete (204)

List query params: ``page`` (1-based), ``page_size``, ``ordering``
(``field`` or ``-field``), ``search``, and the location filters
``region``/``district``/``station``. A page past the end answers
404 ``{"detail": "Invalid page."}`` like DRF's paginator.
"""

import logging
import math
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from pydantic import BaseModel

from api.database import COMPLAINTS, JOURNALS, STAFF_DEPLOYMENTS, RecordStore, TableSpec, get_store
from api.models import (
    ComplaintIn, ComplaintOut, ErrorResponse, JournalIn, JournalOut, Page,
    StaffDeploymentIn, StaffDeploymentOut,
)

logger = logging.getLogger(__name__)

PREFIX = "/station-management/api"
MAX_PAGE_SIZE = 100

_ERRORS = {
    400: {"model": ErrorResponse, "description": "Bad ordering field or invalid body"},
    404: {"model": ErrorResponse, "description": "Record or page not found"},
}


def _page_url(request: Request, page: int | None) -> str | None:
    if page is None:
        return None
    return str(request.url.include_query_params(page=page))


def crud_router(
    path: str,
    spec: TableSpec,
    in_model: type[BaseModel],
    out_model: type[BaseModel],
    tag: str,
) -> APIRouter:
    """Build the list/create/detail/update/delete routes for one table."""
    router = APIRouter(prefix=f"{PREFIX}/{path}", tags=[tag])
    label = tag.rstrip("s").replace("-", " ")

    @router.get(
        "/",
        response_model=Page[out_model],
        responses=_ERRORS,
        summary=f"List {tag}",
    )
    def list_records(
        request: Request,
        page: int = Query(1, description="1-based page number"),
        page_size: int = Query(10, ge=1, le=MAX_PAGE_SIZE, description="Records per page"),
        ordering: str | None = Query(None, description="Sort field; prefix with '-' for descending"),
        search: str | None = Query(None, description="Case-insensitive substring search"),
        region: str | None = Query(None, description="Filter by region id"),
        district: str | None = Query(None, description="Filter by district id"),
        station: str | None = Query(None, description="Filter by station id"),
        store: RecordStore = Depends(get_store),
    ) -> dict[str, Any]:
        """Return one page of records, filtered, searched and ordered."""
        if page < 1:
            raise HTTPException(status_code=404, detail="Invalid page.")
        filters = {"region": region, "district": district, "station": station}
        total, rows = store.list(
            spec.name,
            page=page,
            page_size=page_size,
            ordering=ordering,
            search=search,
            filters=filters,
        )
        last_page = max(1, math.ceil(total / page_size))
        if page > last_page:
            raise HTTPException(status_code=404, detail="Invalid page.")
        return {
            "count": total,
            "next": _page_url(request, page + 1 if page < last_page else None),
            "previous": _page_url(request, page - 1 if page > 1 else None),
            "results": rows,
        }

    @router.post(
        "/",
        status_code=status.HTTP_201_CREATED,
        response_model=out_model,
        responses=_ERRORS,
        summary=f"Create a {label}",
    )
    def create_record(body: in_model, store: RecordStore = Depends(get_store)) -> dict[str, Any]:  # type: ignore[valid-type]
        record = store.create(spec.name, body.model_dump())
        logger.info("created %s id=%s", spec.name, record["id"])
        return record

    @router.get(
        "/{record_id}/",
        response_model=out_model,
        responses=_ERRORS,
        summary=f"Get a {label}",
    )
    def get_record(record_id: int, store: RecordStore = Depends(get_store)) -> dict[str, Any]:
        record = store.get(spec.name, record_id)
        if record is None:
            raise HTTPException(status_code=404, detail="Not found.")
        return record

    @router.put(
        "/{record_id}/",
        response_model=out_model,
        responses=_ERRORS,
        summary=f"Update a {label}",
    )
    def update_record(
        record_id: int,
        body: in_model,  # type: ignore[valid-type]
        store: RecordStore = Depends(get_store),
    ) -> dict[str, Any]:
        record = store.update(spec.name, record_id, body.model_dump())
        if record is None:
            raise HTTPException(status_code=404, detail="Not found.")
        logger.info("updated %s id=%s", spec.name, record_id)
        return record

    @router.delete(
        "/{record_id}/",
        status_code=status.HTTP_204_NO_CONTENT,
        response_class=Response,
        responses=_ERRORS,
        summary=f"Delete a {label}",
    )
    def delete_record(record_id: int, store: RecordStore = Depends(get_store)) -> Response:
        if not store.delete(spec.name, record_id):
            raise HTTPException(status_code=404, detail="Not found.")
        logger.info("deleted %s id=%s", spec.name, record_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router


complaints_router = crud_router("complaints", COMPLAINTS, ComplaintIn, ComplaintOut, "complaints")
staff_deployments_router = crud_router(
    "staff-deployments", STAFF_DEPLOYMENTS, StaffDeploymentIn, StaffDeploymentOut, "staff-deployments",
)
journals_router = crud_router("journals", JOURNALS, JournalIn, JournalOut, "journals")

routers = (complaints_router, staff_deployments_router, journals_router)
