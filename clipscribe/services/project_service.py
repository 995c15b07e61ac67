import logging
from uuid import uuid4

from ..domain.exceptions import RecordNotFoundError
from ..domain.models import Project
from ..repositories.interfaces import ProjectRepository, VideoRepository
from .storage_service import StorageService
from .video_service import caller_owns_storage_path, release_stored_file

logger = logging.getLogger(__name__)


class ProjectService:
    """Service layer for Project business operations.

    Every operation takes the caller's identity explicitly and only touches
    projects owned by it.
    """

    def __init__(
        self,
        project_repository: ProjectRepository,
        video_repository: VideoRepository,
        storage: StorageService,
    ):
        self.project_repository = project_repository
        self.video_repository = video_repository
        self.storage = storage

    def create_project(
        self,
        caller_id: str,
        project_title: str,
        internal_link_sources: list[str] | None = None,
    ) -> Project:
        """Create a new project owned by the caller."""
        project = Project(
            id=str(uuid4()),
            user_id=caller_id,
            project_title=project_title,
            internal_link_sources=internal_link_sources or None,
        )
        created = self.project_repository.save(project)
        logger.info(f"Created project {created.id} for user {caller_id}")
        return created

    def list_projects(self, caller_id: str) -> list[Project]:
        """List the caller's projects, newest first."""
        return self.project_repository.find_by_user(caller_id)

    def get_project(self, caller_id: str, project_id: str) -> Project:
        """Get a project owned by the caller.

        Raises:
            RecordNotFoundError: If it does not exist or is owned by someone else
        """
        project = self.project_repository.find_owned(project_id, caller_id)
        if not project:
            raise RecordNotFoundError("Project", project_id)
        return project

    def update_project(
        self,
        caller_id: str,
        project_id: str,
        project_title: str | None = None,
        internal_link_sources: list[str] | None = None,
    ) -> Project:
        """Update title and/or link sources; omitted fields stay unchanged."""
        project = self.get_project(caller_id, project_id)
        if project_title is not None:
            project.project_title = project_title
        if internal_link_sources is not None:
            project.internal_link_sources = internal_link_sources
        return self.project_repository.save(project)

    def delete_project(self, caller_id: str, project_id: str) -> None:
        """Delete a project together with its videos and their files.

        Files outside the caller's projects, or still referenced by a video
        elsewhere, are left in place.
        """
        project = self.get_project(caller_id, project_id)
        videos = self.video_repository.find_by_project(project.id)
        owned_paths = {
            video.storage_path
            for video in videos
            if video.storage_path
            and caller_owns_storage_path(
                self.project_repository, self.storage, caller_id, video.storage_path
            )
        }

        for video in videos:
            self.video_repository.delete(video.id)
        self.project_repository.delete(project.id)
        logger.info(f"Deleted project {project.id} and {len(videos)} videos")

        # Records are gone; orphaned files are tolerated
        for storage_path in sorted(owned_paths):
            release_stored_file(self.video_repository, self.storage, storage_path)
