"""
CatAPI Backend — Cat Route Handlers
=====================================

What:  /api/v1/cats endpoints.
How:   Handlers resolve the principal, the stored upload and the location
       through dependencies and hand them to CatService as explicit
       arguments.

Create Flow (POST /api/v1/cats, multipart/form-data):
    1. Principal from the bearer token (401 without one)
    2. Location: explicit lat/lng form fields, else geocode `address`
    3. Image validated and stored by FileService
    4. CatService.create_cat persists the record
    5. If step 4 fails the stored image is removed again

Path order matters: /cats/area and /cats/user are declared before
/cats/{cat_id} so they are not captured as ids.
"""

import logging
from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from catapi.database import get_db_session
from catapi.exceptions import ValidationError
from catapi.schemas.cat import (
    CatAdminUpdate,
    CatCreate,
    CatCreateCommand,
    CatResponse,
    CatUpdate,
)
from catapi.schemas.common import ErrorResponse, MessageResponse
from catapi.security.deps import get_current_principal
from catapi.security.principal import Principal
from catapi.services.cat_service import cat_service
from catapi.services.file_service import file_service
from catapi.services.geocoding_service import geocoding_service
from catapi.utils.geo import Coordinates, validate_coordinates

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/cats", tags=["Cats"])

_ERRORS = {
    400: {"description": "Invalid input", "model": ErrorResponse},
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Not allowed", "model": ErrorResponse},
    404: {"description": "Cat not found", "model": ErrorResponse},
}


async def resolve_coordinates(
    address: Optional[str] = Form(default=None, description="Free-form address to geocode"),
    lat: Optional[float] = Form(default=None, description="Latitude, skips geocoding together with lng"),
    lng: Optional[float] = Form(default=None, description="Longitude, skips geocoding together with lat"),
) -> Coordinates:
    """Location of a new cat: explicit coordinates win over the address."""
    if lat is not None and lng is not None:
        return validate_coordinates(lat, lng, field="location")
    if address and address.strip():
        return await geocoding_service.geocode(address)
    raise ValidationError("Location is required: address", field="address")


# ── Reads ─────────────────────────────────────────────────────────────────


@router.get("", response_model=List[CatResponse], summary="List all cats")
async def list_cats(db: AsyncSession = Depends(get_db_session)) -> List[CatResponse]:
    return await cat_service.list_cats(db)


@router.get(
    "/area",
    response_model=List[CatResponse],
    responses={400: _ERRORS[400]},
    summary="Cats inside a bounding box",
    description="Both corners are given as 'lat,lng', e.g. topRight=60.3,25.2&bottomLeft=60.1,24.8.",
)
async def get_cats_in_bounding_box(
    top_right: str = Query(..., alias="topRight", description="Corner as 'lat,lng'"),
    bottom_left: str = Query(..., alias="bottomLeft", description="Opposite corner as 'lat,lng'"),
    db: AsyncSession = Depends(get_db_session),
) -> List[CatResponse]:
    return await cat_service.get_cats_in_bounding_box(db, top_right, bottom_left)


@router.get(
    "/user",
    response_model=List[CatResponse],
    responses={401: _ERRORS[401]},
    summary="Cats owned by the current user",
)
async def get_cats_by_owner(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> List[CatResponse]:
    return await cat_service.get_cats_by_owner(db, principal)


@router.get(
    "/{cat_id}",
    response_model=CatResponse,
    responses={404: _ERRORS[404]},
    summary="Get a cat by id",
)
async def get_cat(cat_id: UUID, db: AsyncSession = Depends(get_db_session)) -> CatResponse:
    return await cat_service.get_cat(db, cat_id)


# ── Writes ────────────────────────────────────────────────────────────────


@router.post(
    "",
    status_code=201,
    response_model=MessageResponse[CatResponse],
    responses={k: _ERRORS[k] for k in (400, 401)},
    summary="Create a cat",
    description=(
        "Multipart form with the image in `file`. Location is either `lat` + `lng` "
        "or an `address` that is geocoded. The owner is always the caller."
    ),
)
async def create_cat(
    principal: Principal = Depends(get_current_principal),
    cat_name: str = Form(..., min_length=1, max_length=100),
    weight: float = Form(..., gt=0),
    birthdate: date = Form(...),
    file: UploadFile = File(..., description="Cat photo (png, jpg, jpeg, gif, webp)"),
    coordinates: Coordinates = Depends(resolve_coordinates),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse[CatResponse]:
    try:
        content = await file.read()
        logger.info("Received cat upload: filename=%s, size=%d bytes", file.filename or "unknown", len(content))
        stored_name = await file_service.validate_and_store(
            filename=file.filename,
            content=content,
            content_length=file.size,
        )
    finally:
        await file.close()

    command = CatCreateCommand(
        principal=principal,
        data=CatCreate(cat_name=cat_name, weight=weight, birthdate=birthdate),
        filename=stored_name,
        coordinates=coordinates,
    )
    try:
        return await cat_service.create_cat(db, command)
    except Exception:
        await file_service.cleanup_file(stored_name)
        raise


@router.put(
    "/admin/{cat_id}",
    response_model=MessageResponse[CatResponse],
    responses=_ERRORS,
    summary="Update any cat (admin only)",
)
async def update_cat_admin(
    cat_id: UUID,
    data: CatAdminUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse[CatResponse]:
    return await cat_service.update_cat_admin(db, principal, cat_id, data)


@router.delete(
    "/admin/{cat_id}",
    response_model=MessageResponse[CatResponse],
    responses={k: _ERRORS[k] for k in (401, 403, 404)},
    summary="Delete any cat (admin only)",
)
async def delete_cat_admin(
    cat_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse[CatResponse]:
    return await cat_service.delete_cat_admin(db, principal, cat_id)


@router.put(
    "/{cat_id}",
    response_model=MessageResponse[CatResponse],
    responses=_ERRORS,
    summary="Update one of your cats",
)
async def update_cat(
    cat_id: UUID,
    data: CatUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse[CatResponse]:
    return await cat_service.update_cat(db, principal, cat_id, data)


@router.delete(
    "/{cat_id}",
    response_model=MessageResponse[CatResponse],
    responses={k: _ERRORS[k] for k in (401, 403, 404)},
    summary="Delete one of your cats",
)
async def delete_cat(
    cat_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse[CatResponse]:
    return await cat_service.delete_cat(db, principal, cat_id)
