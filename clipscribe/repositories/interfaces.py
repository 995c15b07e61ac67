from abc import ABC, abstractmethod

from ..domain.models import Project, Video


class ProjectRepository(ABC):
    """Abstract repository interface for Project persistence."""

    @abstractmethod
    def save(self, project: Project) -> Project:
        """Save project to persistence layer."""
        pass

    @abstractmethod
    def find_owned(self, project_id: str, user_id: str) -> Project | None:
        """Find project by ID if it belongs to the given identity."""
        pass

    @abstractmethod
    def find_by_user(self, user_id: str) -> list[Project]:
        """Find all projects of an identity, newest first."""
        pass

    @abstractmethod
    def delete(self, project_id: str) -> bool:
        """Delete project by ID."""
        pass


class VideoRepository(ABC):
    """Abstract repository interface for Video persistence."""

    @abstractmethod
    def save(self, video: Video) -> Video:
        """Save video to persistence layer."""
        pass

    @abstractmethod
    def find_owned(self, video_id: str, user_id: str) -> Video | None:
        """Find video by ID if its project belongs to the given identity."""
        pass

    @abstractmethod
    def find_by_project(self, project_id: str) -> list[Video]:
        """Find all videos of a project, newest first."""
        pass

    @abstractmethod
    def find_by_user(self, user_id: str) -> list[Video]:
        """Find all videos across an identity's projects, newest first."""
        pass

    @abstractmethod
    def find_by_request_id(self, request_id: str) -> list[Video]:
        """Find videos waiting on a transcription provider request."""
        pass

    @abstractmethod
    def delete(self, video_id: str) -> bool:
        """Delete video by ID."""
        pass

    @abstractmethod
    def find_by_storage_path(self, storage_path: str) -> list[Video]:
        """Find videos whose records point at a stored file."""
        pass
