"""
DevCamper API — Uploaded File Serving
======================================

Serves stored bootcamp photos at /uploads/{filename}. The photo store
resolves names inside the upload directory only, so `../` cannot escape it.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from devcamper.dependencies import get_photo_store
from devcamper.schemas.common import ErrorResponse
from devcamper.services.file_service import PhotoStore

router = APIRouter(tags=["Uploads"])


@router.get(
    "/uploads/{filename}",
    summary="Serve an uploaded photo",
    responses={200: {"description": "Image file"}, 404: {"model": ErrorResponse}},
)
async def serve_upload(
    filename: str, photo_store: PhotoStore = Depends(get_photo_store)
) -> FileResponse:
    path = photo_store.resolve(filename)
    # 24h cache; a re-upload with the same extension keeps the name
    return FileResponse(path=str(path), headers={"Cache-Control": "public, max-age=86400"})
