"""API controller for serving stored media files at their public URLs."""

import mimetypes

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from ..domain.exceptions import RecordNotFoundError, ValidationFailedError
from ..services.storage_service import StorageService
from .dependencies import get_storage_service

router = APIRouter(prefix="/media", tags=["media"])


@router.get("/{storage_path:path}")
async def get_media(
    storage_path: str,
    storage: StorageService = Depends(get_storage_service),
) -> FileResponse:
    """
    Serve a stored file.

    Unauthenticated: the transcription provider downloads media from here.

    Raises:
        RecordNotFoundError: If the path is invalid or no file exists there
    """
    try:
        file_path = storage.resolve(storage_path)
    except ValidationFailedError:
        raise RecordNotFoundError("Media file", storage_path)

    if not file_path.is_file():
        raise RecordNotFoundError("Media file", storage_path)

    media_type, _ = mimetypes.guess_type(file_path.name)
    return FileResponse(
        file_path,
        media_type=media_type or "application/octet-stream",
        headers={"Accept-Ranges": "bytes"},
    )
