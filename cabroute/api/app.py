"""
FastAPI application factory.

* Registers routes for bookings, locations, the route network, vehicles
  and admin.
* Starts / stops the notification worker via lifespan events.
* Applies rate-limiting middleware and maps core failures to HTTP errors.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging
from typing import Optional

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from cabroute.api.errors import booking_error_handler
from cabroute.api.middleware import limiter
from cabroute.api.routes import admin, bookings, edges, locations, vehicles
from cabroute.bootstrap import Services, build_services
from cabroute.config import settings
from cabroute.domain.errors import BookingError

logging.basicConfig(level=settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Seed the store and start the notification worker; stop on shutdown."""
    await app.state.services.startup()
    yield
    await app.state.services.shutdown()


def create_app(services: Optional[Services] = None) -> FastAPI:
    app = FastAPI(
        title="Cab Route Booking API",
        description=(
            "Finds the fastest route between two locations, quotes every "
            "active vehicle, and books a vehicle for the trip without "
            "double-booking it."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.services = services or build_services(settings)

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(BookingError, booking_error_handler)

    # Routers
    app.include_router(bookings.router, prefix="/api/v1")
    app.include_router(locations.router, prefix="/api/v1")
    app.include_router(edges.router, prefix="/api/v1")
    app.include_router(vehicles.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
