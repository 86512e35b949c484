"""FastAPI dependency injection helpers."""

from fastapi import Request

from cabroute.bootstrap import Services
from cabroute.services.catalog import RouteCatalog
from cabroute.services.fleet import FleetManager
from cabroute.services.lifecycle import BookingLifecycle


def get_services(request: Request) -> Services:
    """Return the services the app was created with."""
    return request.app.state.services


def get_lifecycle(request: Request) -> BookingLifecycle:
    return get_services(request).lifecycle


def get_fleet(request: Request) -> FleetManager:
    return get_services(request).fleet


def get_catalog(request: Request) -> RouteCatalog:
    return get_services(request).catalog
