import logging
from uuid import uuid4

from ..domain.exceptions import RecordNotFoundError, ValidationFailedError
from ..domain.models import VIDEO_STATUSES, Video
from ..domain.synchronizer import Word, coerce_words
from ..domain.transcript_payload import StructuredTranscript, parse_transcript_payload
from ..repositories.interfaces import ProjectRepository, VideoRepository
from .storage_service import StorageService

logger = logging.getLogger(__name__)

# Sentinel for "field not supplied" where None is a meaningful value
UNSET = object()


def caller_owns_storage_path(
    project_repository: ProjectRepository,
    storage: StorageService,
    caller_id: str,
    storage_path: str,
) -> bool:
    """Check that a storage path lies under one of the caller's projects."""
    project_id = storage.project_id_of(storage_path)
    return bool(project_id) and bool(
        project_repository.find_owned(project_id, caller_id)
    )


def release_stored_file(
    video_repository: VideoRepository, storage: StorageService, storage_path: str
) -> bool:
    """Delete a stored file unless some video record still points at it.

    Returns:
        True if the file was removed
    """
    if video_repository.find_by_storage_path(storage_path):
        logger.info(f"Keeping {storage_path}, still referenced by another video")
        return False
    return storage.delete(storage_path)


class VideoService:
    """Service layer for Video business operations."""

    def __init__(
        self,
        video_repository: VideoRepository,
        project_repository: ProjectRepository,
        storage: StorageService,
    ):
        self.video_repository = video_repository
        self.project_repository = project_repository
        self.storage = storage

    def _require_project(self, caller_id: str, project_id: str) -> None:
        if not self.project_repository.find_owned(project_id, caller_id):
            raise RecordNotFoundError("Project", project_id)

    def _validate_status(self, status: str) -> None:
        if status not in VIDEO_STATUSES:
            raise ValidationFailedError(
                "status", f"Status must be one of: {', '.join(VIDEO_STATUSES)}"
            )

    def _require_owned_path(self, caller_id: str, storage_path: str) -> None:
        if not caller_owns_storage_path(
            self.project_repository, self.storage, caller_id, storage_path
        ):
            raise ValidationFailedError(
                "storage_path",
                "Storage path must be inside one of your projects "
                "(videos/<project_id>/<file>)",
            )

    def create_video(
        self,
        caller_id: str,
        project_id: str,
        storage_path: str,
        status: str = "uploaded",
        transcript_text=None,
    ) -> Video:
        """Create a video record in one of the caller's projects."""
        self._validate_status(status)
        self._require_project(caller_id, project_id)
        self._require_owned_path(caller_id, storage_path)

        video = Video(
            id=str(uuid4()),
            project_id=project_id,
            storage_path=storage_path,
            status=status,
            transcript_text=transcript_text,
        )
        created = self.video_repository.save(video)
        logger.info(f"Created video {created.id} in project {project_id}")
        return created

    def check_upload(
        self, filename: str | None, content_type: str | None, size: int
    ) -> None:
        """Reject an upload from its declared metadata, before reading it."""
        self.storage.validate_upload(filename, content_type, size)

    def upload_video(
        self,
        caller_id: str,
        project_id: str,
        filename: str | None,
        content_type: str | None,
        data: bytes,
    ) -> Video:
        """Validate, store and register an uploaded video file.

        The stored file is removed again if the record cannot be created.
        """
        self.storage.validate_upload(filename, content_type, len(data))
        self._require_project(caller_id, project_id)

        storage_path = self.storage.build_storage_path(project_id, filename)
        self.storage.upload(storage_path, data)
        try:
            return self.create_video(caller_id, project_id, storage_path)
        except Exception:
            logger.error(f"Failed to register upload {storage_path}, removing file")
            self.storage.delete(storage_path)
            raise

    def get_video(self, caller_id: str, video_id: str) -> Video:
        """Get a video whose project is owned by the caller.

        Raises:
            RecordNotFoundError: If it does not exist or is owned by someone else
        """
        video = self.video_repository.find_owned(video_id, caller_id)
        if not video:
            raise RecordNotFoundError("Video", video_id)
        return video

    def list_project_videos(self, caller_id: str, project_id: str) -> list[Video]:
        """List videos of one of the caller's projects, newest first."""
        self._require_project(caller_id, project_id)
        return self.video_repository.find_by_project(project_id)

    def list_videos(self, caller_id: str) -> list[Video]:
        """List videos across all of the caller's projects."""
        return self.video_repository.find_by_user(caller_id)

    def update_video(
        self,
        caller_id: str,
        video_id: str,
        project_id: str | None = None,
        storage_path: str | None = None,
        status: str | None = None,
    ) -> Video:
        """Update video fields; moving to another project requires owning it."""
        video = self.get_video(caller_id, video_id)

        if project_id is not None and project_id != video.project_id:
            if not self.project_repository.find_owned(project_id, caller_id):
                raise RecordNotFoundError("Target project", project_id)
            video.project_id = project_id
        if storage_path is not None:
            self._require_owned_path(caller_id, storage_path)
            video.storage_path = storage_path
        if status is not None:
            self._validate_status(status)
            video.status = status

        return self.video_repository.save(video)

    def update_transcript(
        self,
        caller_id: str,
        video_id: str,
        transcript,
        status: str | None = None,
        words=UNSET,
    ) -> Video:
        """Replace a video's transcript wholesale.

        The word array is replaced when ``words`` is given, or when the new
        transcript is a provider response carrying its own words. Otherwise
        the existing words are kept.
        """
        video = self.get_video(caller_id, video_id)
        if status is not None:
            self._validate_status(status)
            video.status = status

        video.transcript_text = transcript
        if words is not UNSET:
            video.transcript_data_full = words
        else:
            payload = parse_transcript_payload(transcript)
            if isinstance(payload, StructuredTranscript) and payload.transcript.words:
                video.transcript_data_full = [
                    word.to_dict() for word in payload.transcript.words
                ]

        return self.video_repository.save(video)

    def delete_video(self, caller_id: str, video_id: str) -> None:
        """Delete the record, then make a best-effort attempt at the file.

        The file is only removed when it lies under one of the caller's
        projects and no other video still points at it.
        """
        video = self.get_video(caller_id, video_id)
        owned = bool(video.storage_path) and caller_owns_storage_path(
            self.project_repository, self.storage, caller_id, video.storage_path
        )
        self.video_repository.delete(video.id)
        logger.info(f"Deleted video {video.id}")

        if not owned:
            logger.warning(
                f"Video {video.id} deleted, keeping file outside caller's projects"
            )
            return
        if not release_stored_file(
            self.video_repository, self.storage, video.storage_path
        ):
            logger.warning(f"Video {video.id} deleted but file was not removed")

    def get_public_url(self, caller_id: str, video_id: str) -> str:
        """Get the public media URL of a video."""
        video = self.get_video(caller_id, video_id)
        return self.storage.public_url(video.storage_path)

    def get_words(self, caller_id: str, video_id: str) -> list[Word]:
        """Get the interactive transcript words of a video, [] if unusable."""
        video = self.get_video(caller_id, video_id)
        return coerce_words(video.transcript_data_full)
