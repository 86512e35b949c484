"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from cabroute.domain.enums import BookingStatus


# ── Requests ──────────────────────────────────────────────────────────


class QuoteRequest(BaseModel):
    source: str = Field(..., min_length=1, max_length=64)
    destination: str = Field(..., min_length=1, max_length=64)


class BookingCreateRequest(BaseModel):
    source: str = Field(..., min_length=1, max_length=64)
    destination: str = Field(..., min_length=1, max_length=64)
    vehicle_id: str = Field(..., min_length=1)
    start_time: datetime
    rider_contact: Optional[str] = Field(
        None,
        max_length=255,
        description="Optional email address for booking notifications.",
    )


class StatusUpdateRequest(BaseModel):
    status: BookingStatus


class RouteEdgeCreateRequest(BaseModel):
    source: str = Field(..., min_length=1, max_length=64)
    target: str = Field(..., min_length=1, max_length=64)
    duration_minutes: int


class RouteEdgeUpdateRequest(BaseModel):
    duration_minutes: int


class VehicleCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    rate_per_minute: float
    id: Optional[str] = Field(None, max_length=36)


class VehicleUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    rate_per_minute: Optional[float] = None
    active: Optional[bool] = None


class AvailabilityRequest(BaseModel):
    start_time: datetime
    end_time: datetime


# ── Responses ─────────────────────────────────────────────────────────


class VehicleOptionResponse(BaseModel):
    vehicle_id: str
    name: str
    rate_per_minute: float
    estimated_cost: float

    model_config = {"from_attributes": True}


class QuoteResponse(BaseModel):
    source: str
    destination: str
    path: list[str]
    total_duration: int
    options: list[VehicleOptionResponse]

    model_config = {"from_attributes": True}


class BookingResponse(BaseModel):
    id: str
    human_code: str
    rider_contact: Optional[str] = None
    source: str
    destination: str
    vehicle_id: str
    path: list[str]
    total_duration: int
    estimated_cost: float
    start: datetime
    end: datetime
    status: BookingStatus
    notification_sent: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ReservationResponse(BaseModel):
    booking_id: str
    start: datetime
    end: datetime

    model_config = {"from_attributes": True}


class VehicleSummaryResponse(BaseModel):
    id: str
    name: str
    rate_per_minute: float
    active: bool

    model_config = {"from_attributes": True}


class VehicleResponse(VehicleSummaryResponse):
    reservations: list[ReservationResponse] = []


class RouteEdgeResponse(BaseModel):
    source: str
    target: str
    duration_minutes: int

    model_config = {"from_attributes": True}


class AvailabilityResponse(BaseModel):
    available: bool


class HealthResponse(BaseModel):
    status: str = "ok"


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    detail: str
    code: str
