"""
Pydantic request/response models for the mock PMIS API.

Input models validate create/update bodies; output models document the
rows the list and detail endpoints return. Optional fields default to None
so partially-filled seed rows validate.
"""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


# ── Envelopes ─────────────────────────────────────────────────────────────────

class Page(BaseModel, Generic[T]):
    """DRF-style paginated list response."""
    count: int = Field(..., ge=0, description="Total matching records across all pages", examples=[37])
    next: str | None = Field(None, description="URL of the next page, if any")
    previous: str | None = Field(None, description="URL of the previous page, if any")
    results: list[T] = Field(default_factory=list, description="Records on this page")


class ErrorResponse(BaseModel):
    """Error body for 4xx/5xx responses."""
    detail: str = Field(..., description="Human-readable error message", examples=["Invalid page."])


# ── Shared location fields ────────────────────────────────────────────────────

class _Located(BaseModel):
    region: str | None = Field(None, description="Region id", examples=["1"])
    district: str | None = Field(None, description="District id", examples=["10"])
    station: str = Field(..., min_length=1, description="Station id", examples=["100"])
    station_name: str | None = Field(None, description="Station display name", examples=["Luzira Upper"])


class _Record(BaseModel):
    id: int = Field(..., description="Unique record ID", examples=[1])
    is_active: bool | None = Field(None, description="Soft-delete flag")
    created_datetime: str | None = Field(None, description="ISO timestamp the record was created")


# ── Complaints ────────────────────────────────────────────────────────────────

class ComplaintIn(_Located):
    """Create/update body for a prisoner complaint."""
    prisoner_name: str = Field(..., min_length=1, description="Complainant", examples=["Prisoner 001"])
    complaint: str = Field(..., min_length=1, description="Complaint text")
    complaint_date: str = Field(..., description="ISO date the complaint was made", examples=["2024-01-01"])
    force_number: str | None = Field(None, description="Officer force number", examples=["UPS/1000"])
    rank_name: str | None = Field(None, description="Officer rank")
    nature_of_complaint_name: str | None = Field(None, description="Nature of complaint")
    complaint_priority_name: str | None = Field(None, description="LOW | MEDIUM | HIGH")
    complaint_status: str = Field("OPEN", description="OPEN | IN_PROGRESS | RESOLVED | CLOSED")
    complaint_remark: str | None = Field(None, description="Free-text remark")
    response: str | None = Field(None, description="Response given")
    date_of_response: str | None = Field(None, description="ISO date of the response")


class ComplaintOut(_Record, ComplaintIn):
    """A complaint row."""
    station: str | None = Field(None, description="Station id")
    prisoner_name: str | None = Field(None, description="Complainant")
    complaint: str | None = Field(None, description="Complaint text")
    complaint_date: str | None = Field(None, description="ISO date the complaint was made")
    complaint_status: str | None = Field(None, description="OPEN | IN_PROGRESS | RESOLVED | CLOSED")


# ── Staff deployments ─────────────────────────────────────────────────────────

class StaffDeploymentIn(_Located):
    """Create/update body for a staff deployment to a station."""
    full_name: str = Field(..., min_length=1, description="Officer name", examples=["John Smith"])
    force_number: str = Field(..., min_length=1, description="Officer force number", examples=["UPS/2000"])
    rank: str | None = Field(None, description="Officer rank", examples=["Sgt"])
    start_date: str = Field(..., description="ISO date the deployment starts", examples=["2024-01-01"])
    end_date: str | None = Field(None, description="ISO date the deployment ends")
    is_active: bool = Field(True, description="Whether the deployment is current")


class StaffDeploymentOut(_Record, StaffDeploymentIn):
    """A staff deployment row."""
    station: str | None = Field(None, description="Station id")
    full_name: str | None = Field(None, description="Officer name")
    force_number: str | None = Field(None, description="Officer force number")
    start_date: str | None = Field(None, description="ISO date the deployment starts")
    is_active: bool | None = Field(None, description="Whether the deployment is current")


# ── Journals ──────────────────────────────────────────────────────────────────

class JournalIn(_Located):
    """Create/update body for a station journal entry."""
    journal_date: str = Field(..., description="ISO date of the entry", examples=["2024-01-01"])
    type_of_journal_name: str | None = Field(None, description="Journal type", examples=["Occurrence"])
    duty_officer_username: str | None = Field(None, description="Duty officer", examples=["john.smith"])
    rank_name: str | None = Field(None, description="Duty officer rank")
    force_number: str | None = Field(None, description="Duty officer force number")
    activity: str = Field(..., min_length=1, description="What happened")


class JournalOut(_Record, JournalIn):
    """A journal row."""
    station: str | None = Field(None, description="Station id")
    journal_date: str | None = Field(None, description="ISO date of the entry")
    activity: str | None = Field(None, description="What happened")
