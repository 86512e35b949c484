"""
Route network endpoints
=======================

GET    /api/v1/routes                   -- list directed edges
POST   /api/v1/routes                   -- add an edge (201)
PUT    /api/v1/routes/{source}/{target} -- change an edge's duration
DELETE /api/v1/routes/{source}/{target} -- remove an edge
"""

from fastapi import APIRouter, Depends, Request

from cabroute.api.dependencies import get_catalog
from cabroute.api.middleware import RATE_LIMIT, limiter
from cabroute.api.schemas import (
    MessageResponse,
    RouteEdgeCreateRequest,
    RouteEdgeResponse,
    RouteEdgeUpdateRequest,
)
from cabroute.services.catalog import RouteCatalog

router = APIRouter(prefix="/routes", tags=["routes"])


@router.get("", response_model=list[RouteEdgeResponse], summary="List route edges")
@limiter.limit(RATE_LIMIT)
async def list_edges(
    request: Request,
    catalog: RouteCatalog = Depends(get_catalog),
):
    return await catalog.list_edges()


@router.post(
    "",
    status_code=201,
    response_model=RouteEdgeResponse,
    summary="Add a directed route edge",
)
@limiter.limit(RATE_LIMIT)
async def create_edge(
    request: Request,
    body: RouteEdgeCreateRequest,
    catalog: RouteCatalog = Depends(get_catalog),
):
    return await catalog.add_edge(body.source, body.target, body.duration_minutes)


@router.put(
    "/{source}/{target}",
    response_model=RouteEdgeResponse,
    summary="Update an edge's travel time",
)
@limiter.limit(RATE_LIMIT)
async def update_edge(
    request: Request,
    source: str,
    target: str,
    body: RouteEdgeUpdateRequest,
    catalog: RouteCatalog = Depends(get_catalog),
):
    return await catalog.update_duration(source, target, body.duration_minutes)


@router.delete(
    "/{source}/{target}",
    response_model=MessageResponse,
    summary="Delete a route edge",
)
@limiter.limit(RATE_LIMIT)
async def delete_edge(
    request: Request,
    source: str,
    target: str,
    catalog: RouteCatalog = Depends(get_catalog),
):
    await catalog.delete_edge(source, target)
    return MessageResponse(message="Route deleted successfully")
