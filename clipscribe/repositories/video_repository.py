from sqlalchemy.orm import Session

from ..database.models import Project as ProjectEntity
from ..database.models import Video as VideoEntity
from ..domain.models import Video
from .interfaces import VideoRepository

# Columns copied between domain model and entity on every save
_MUTABLE_FIELDS = (
    "project_id",
    "storage_path",
    "status",
    "transcript_text",
    "transcript_data_full",
    "transcription_request_id",
)


class SqlVideoRepository(VideoRepository):
    """SQLAlchemy implementation of VideoRepository."""

    def __init__(self, session: Session):
        self.session = session

    def save(self, video: Video) -> Video:
        """Save video to database."""
        existing = (
            self.session.query(VideoEntity).filter(VideoEntity.id == video.id).first()
        )

        if existing:
            # Transcript fields may legitimately be cleared, so copy Nones too
            for key in _MUTABLE_FIELDS:
                setattr(existing, key, getattr(video, key))
            self.session.commit()
            self.session.refresh(existing)
            return self._to_domain(existing)
        else:
            entity = self._to_entity(video)
            self.session.add(entity)
            self.session.commit()
            self.session.refresh(entity)
            return self._to_domain(entity)

    def find_owned(self, video_id: str, user_id: str) -> Video | None:
        """Find video by ID, joined through its project's owner."""
        entity = (
            self.session.query(VideoEntity)
            .join(ProjectEntity, VideoEntity.project_id == ProjectEntity.id)
            .filter(VideoEntity.id == video_id, ProjectEntity.user_id == user_id)
            .first()
        )
        return self._to_domain(entity) if entity else None

    def find_by_project(self, project_id: str) -> list[Video]:
        """Find videos of a project, newest first."""
        entities = (
            self.session.query(VideoEntity)
            .filter(VideoEntity.project_id == project_id)
            .order_by(VideoEntity.created_at.desc(), VideoEntity.id)
            .all()
        )
        return [self._to_domain(entity) for entity in entities]

    def find_by_user(self, user_id: str) -> list[Video]:
        """Find videos across all projects of an owner, newest first."""
        entities = (
            self.session.query(VideoEntity)
            .join(ProjectEntity, VideoEntity.project_id == ProjectEntity.id)
            .filter(ProjectEntity.user_id == user_id)
            .order_by(VideoEntity.created_at.desc(), VideoEntity.id)
            .all()
        )
        return [self._to_domain(entity) for entity in entities]

    def find_by_request_id(self, request_id: str) -> list[Video]:
        """Find videos by transcription provider request ID."""
        entities = (
            self.session.query(VideoEntity)
            .filter(VideoEntity.transcription_request_id == request_id)
            .all()
        )
        return [self._to_domain(entity) for entity in entities]

    def find_by_storage_path(self, storage_path: str) -> list[Video]:
        """Find videos referencing a stored file."""
        entities = (
            self.session.query(VideoEntity)
            .filter(VideoEntity.storage_path == storage_path)
            .all()
        )
        return [self._to_domain(entity) for entity in entities]

    def delete(self, video_id: str) -> bool:
        """Delete video by ID."""
        entity = (
            self.session.query(VideoEntity).filter(VideoEntity.id == video_id).first()
        )
        if entity:
            self.session.delete(entity)
            self.session.commit()
            return True
        return False

    def _to_entity(self, domain: Video) -> VideoEntity:
        """Convert domain model to SQLAlchemy entity."""
        return VideoEntity(
            id=domain.id,
            project_id=domain.project_id,
            storage_path=domain.storage_path,
            status=domain.status,
            transcript_text=domain.transcript_text,
            transcript_data_full=domain.transcript_data_full,
            transcription_request_id=domain.transcription_request_id,
        )

    def _to_domain(self, entity: VideoEntity) -> Video:
        """Convert SQLAlchemy entity to domain model."""
        return Video(
            id=entity.id,
            project_id=entity.project_id,
            storage_path=entity.storage_path,
            status=entity.status,
            transcript_text=entity.transcript_text,
            transcript_data_full=entity.transcript_data_full,
            transcription_request_id=entity.transcription_request_id,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
