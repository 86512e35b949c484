"""
Vehicle endpoints
=================

GET    /api/v1/vehicles                         -- active vehicles
GET    /api/v1/vehicles/{vehicle_id}            -- one vehicle with reservations
POST   /api/v1/vehicles                         -- add a vehicle (201)
PUT    /api/v1/vehicles/{vehicle_id}            -- edit name / rate / active
DELETE /api/v1/vehicles/{vehicle_id}            -- soft delete (deactivate)
POST   /api/v1/vehicles/{vehicle_id}/availability -- check an interval
"""

from fastapi import APIRouter, Depends, Request

from cabroute.api.dependencies import get_fleet
from cabroute.api.middleware import RATE_LIMIT, limiter
from cabroute.api.schemas import (
    AvailabilityRequest,
    AvailabilityResponse,
    MessageResponse,
    VehicleCreateRequest,
    VehicleResponse,
    VehicleSummaryResponse,
    VehicleUpdateRequest,
)
from cabroute.services.fleet import FleetManager

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


@router.get(
    "",
    response_model=list[VehicleSummaryResponse],
    summary="List active vehicles",
)
@limiter.limit(RATE_LIMIT)
async def list_vehicles(
    request: Request,
    fleet: FleetManager = Depends(get_fleet),
):
    return await fleet.list_active()


@router.get("/{vehicle_id}", response_model=VehicleResponse, summary="Get a vehicle")
@limiter.limit(RATE_LIMIT)
async def get_vehicle(
    request: Request,
    vehicle_id: str,
    fleet: FleetManager = Depends(get_fleet),
):
    return await fleet.get(vehicle_id)


@router.post(
    "",
    status_code=201,
    response_model=VehicleResponse,
    summary="Add a vehicle",
)
@limiter.limit(RATE_LIMIT)
async def create_vehicle(
    request: Request,
    body: VehicleCreateRequest,
    fleet: FleetManager = Depends(get_fleet),
):
    return await fleet.add_vehicle(body.name, body.rate_per_minute, vehicle_id=body.id)


@router.put("/{vehicle_id}", response_model=VehicleResponse, summary="Update a vehicle")
@limiter.limit(RATE_LIMIT)
async def update_vehicle(
    request: Request,
    vehicle_id: str,
    body: VehicleUpdateRequest,
    fleet: FleetManager = Depends(get_fleet),
):
    return await fleet.update_vehicle(
        vehicle_id,
        name=body.name,
        rate_per_minute=body.rate_per_minute,
        active=body.active,
    )


@router.delete(
    "/{vehicle_id}",
    response_model=MessageResponse,
    summary="Deactivate a vehicle",
)
@limiter.limit(RATE_LIMIT)
async def deactivate_vehicle(
    request: Request,
    vehicle_id: str,
    fleet: FleetManager = Depends(get_fleet),
):
    await fleet.deactivate(vehicle_id)
    return MessageResponse(message="Vehicle deactivated successfully")


@router.post(
    "/{vehicle_id}/availability",
    response_model=AvailabilityResponse,
    summary="Check whether a vehicle is free for an interval",
)
@limiter.limit(RATE_LIMIT)
async def check_availability(
    request: Request,
    vehicle_id: str,
    body: AvailabilityRequest,
    fleet: FleetManager = Depends(get_fleet),
):
    available = await fleet.check_availability(vehicle_id, body.start_time, body.end_time)
    return AvailabilityResponse(available=available)
