"""
CatAPI Backend — Uploaded Image Route
=======================================

What:  Serves cat photos stored by FileService.
Who:   Clients build image URLs from a cat's `filename`:
       /api/v1/uploads/<filename>

Only names that resolve to a file directly inside the storage root are
served; anything else, including `../` tricks, is a 404.
"""

import mimetypes

from fastapi import APIRouter
from fastapi.responses import FileResponse

from catapi.schemas.common import ErrorResponse
from catapi.services.file_service import file_service

router = APIRouter(prefix="/api/v1/uploads", tags=["Uploads"])


@router.get(
    "/{filename}",
    responses={
        200: {"description": "Image file"},
        404: {"description": "File not found", "model": ErrorResponse},
    },
    summary="Serve an uploaded cat image",
)
async def serve_upload(filename: str) -> FileResponse:
    path = file_service.resolve_path(filename)
    media_type, _ = mimetypes.guess_type(path.name)
    return FileResponse(
        path=str(path),
        media_type=media_type or "application/octet-stream",
        headers={"Cache-Control": "public, max-age=86400"},
    )
