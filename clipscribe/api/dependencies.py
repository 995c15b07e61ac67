"""FastAPI dependencies shared by the routers."""

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from ..database.connection import get_db
from ..domain.exceptions import AuthenticationRequiredError
from ..repositories.project_repository import SqlProjectRepository
from ..repositories.video_repository import SqlVideoRepository
from ..services.project_service import ProjectService
from ..services.storage_service import StorageService
from ..services.transcription_service import DeepgramClient, TranscriptionService
from ..services.video_service import VideoService

# Set by the authenticating gateway in front of the API
CALLER_HEADER = "X-User-Id"


def get_current_user(
    x_user_id: str | None = Header(default=None, alias=CALLER_HEADER),
) -> str:
    """Resolve the caller identity passed down every service call."""
    if not x_user_id or not x_user_id.strip():
        raise AuthenticationRequiredError()
    return x_user_id.strip()


def get_storage_service() -> StorageService:
    """Dependency injection for StorageService."""
    return StorageService()


def get_deepgram_client() -> DeepgramClient:
    """Dependency injection for DeepgramClient."""
    return DeepgramClient()


def get_project_service(
    session: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
) -> ProjectService:
    """Dependency injection for ProjectService."""
    return ProjectService(
        SqlProjectRepository(session), SqlVideoRepository(session), storage
    )


def get_video_service(
    session: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
) -> VideoService:
    """Dependency injection for VideoService."""
    return VideoService(
        SqlVideoRepository(session), SqlProjectRepository(session), storage
    )


def get_transcription_service(
    session: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
    client: DeepgramClient = Depends(get_deepgram_client),
) -> TranscriptionService:
    """Dependency injection for TranscriptionService."""
    return TranscriptionService(SqlVideoRepository(session), storage, client)
