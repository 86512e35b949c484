"""
Fleet management: the vehicle collaborator's write side.

Vehicle edits run inside the same per-vehicle lock as bookings so a rate
or name change never overwrites a reservation committed concurrently.
Vehicles are never removed; ``deactivate`` is a soft delete.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional

from cabroute.domain.entities import Vehicle, as_utc
from cabroute.domain.errors import (
    DuplicateVehicle,
    InvalidInterval,
    InvalidVehicle,
    VehicleNotFound,
)
from cabroute.infrastructure.locks import LockManager
from cabroute.infrastructure.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def _validate(name: str, rate_per_minute: float) -> None:
    if not name or not name.strip():
        raise InvalidVehicle("Vehicle name is required")
    if rate_per_minute <= 0:
        raise InvalidVehicle("Price per minute must be positive")


class FleetManager:
    def __init__(self, uow_factory: Callable[[], UnitOfWork], locks: LockManager):
        self.uow_factory = uow_factory
        self.locks = locks

    async def list_active(self) -> list[Vehicle]:
        async with self.uow_factory() as uow:
            return await uow.vehicles.list_active()

    async def get(self, vehicle_id: str) -> Vehicle:
        async with self.uow_factory() as uow:
            vehicle = await uow.vehicles.get(vehicle_id)
        if vehicle is None:
            raise VehicleNotFound(f"Vehicle {vehicle_id} not found")
        return vehicle

    async def add_vehicle(
        self, name: str, rate_per_minute: float, vehicle_id: Optional[str] = None
    ) -> Vehicle:
        _validate(name, rate_per_minute)
        vehicle = Vehicle(
            id=vehicle_id or str(uuid.uuid4()),
            name=name.strip(),
            rate_per_minute=rate_per_minute,
            active=True,
        )
        async with self.locks.hold(vehicle.id):
            async with self.uow_factory() as uow:
                if await uow.vehicles.get(vehicle.id) is not None:
                    raise DuplicateVehicle(f"Vehicle {vehicle.id} already exists")
                await uow.vehicles.upsert(vehicle)
                await uow.commit()
        logger.info("Vehicle %s (%s) added", vehicle.id, vehicle.name)
        return vehicle

    async def update_vehicle(
        self,
        vehicle_id: str,
        name: Optional[str] = None,
        rate_per_minute: Optional[float] = None,
        active: Optional[bool] = None,
    ) -> Vehicle:
        async with self.locks.hold(vehicle_id):
            async with self.uow_factory() as uow:
                vehicle = await uow.vehicles.get(vehicle_id)
                if vehicle is None:
                    raise VehicleNotFound(f"Vehicle {vehicle_id} not found")
                updated = replace(
                    vehicle,
                    name=vehicle.name if name is None else name.strip(),
                    rate_per_minute=(
                        vehicle.rate_per_minute if rate_per_minute is None else rate_per_minute
                    ),
                    active=vehicle.active if active is None else active,
                )
                _validate(updated.name, updated.rate_per_minute)
                await uow.vehicles.upsert(updated)
                await uow.commit()
        return updated

    async def deactivate(self, vehicle_id: str) -> Vehicle:
        vehicle = await self.update_vehicle(vehicle_id, active=False)
        logger.info("Vehicle %s deactivated", vehicle_id)
        return vehicle

    async def check_availability(
        self, vehicle_id: str, start: datetime, end: datetime
    ) -> bool:
        start, end = as_utc(start), as_utc(end)
        if start >= end:
            raise InvalidInterval("End time must be after start time")
        vehicle = await self.get(vehicle_id)
        return vehicle.is_available(start, end)
