from sqlalchemy.orm import Session

from ..database.models import Project as ProjectEntity
from ..domain.models import Project
from .interfaces import ProjectRepository


class SqlProjectRepository(ProjectRepository):
    """SQLAlchemy implementation of ProjectRepository."""

    def __init__(self, session: Session):
        self.session = session

    def save(self, project: Project) -> Project:
        """Save project to database."""
        existing = (
            self.session.query(ProjectEntity)
            .filter(ProjectEntity.id == project.id)
            .first()
        )

        if existing:
            existing.project_title = project.project_title
            existing.internal_link_sources = project.internal_link_sources
            self.session.commit()
            self.session.refresh(existing)
            return self._to_domain(existing)
        else:
            entity = self._to_entity(project)
            self.session.add(entity)
            self.session.commit()
            self.session.refresh(entity)
            return self._to_domain(entity)

    def find_owned(self, project_id: str, user_id: str) -> Project | None:
        """Find project by ID scoped to its owner."""
        entity = (
            self.session.query(ProjectEntity)
            .filter(ProjectEntity.id == project_id, ProjectEntity.user_id == user_id)
            .first()
        )
        return self._to_domain(entity) if entity else None

    def find_by_user(self, user_id: str) -> list[Project]:
        """Find projects of an owner, newest first."""
        entities = (
            self.session.query(ProjectEntity)
            .filter(ProjectEntity.user_id == user_id)
            .order_by(ProjectEntity.created_at.desc(), ProjectEntity.id)
            .all()
        )
        return [self._to_domain(entity) for entity in entities]

    def delete(self, project_id: str) -> bool:
        """Delete project by ID."""
        entity = (
            self.session.query(ProjectEntity)
            .filter(ProjectEntity.id == project_id)
            .first()
        )
        if entity:
            self.session.delete(entity)
            self.session.commit()
            return True
        return False

    def _to_entity(self, domain: Project) -> ProjectEntity:
        """Convert domain model to SQLAlchemy entity."""
        return ProjectEntity(
            id=domain.id,
            user_id=domain.user_id,
            project_title=domain.project_title,
            internal_link_sources=domain.internal_link_sources,
        )

    def _to_domain(self, entity: ProjectEntity) -> Project:
        """Convert SQLAlchemy entity to domain model."""
        return Project(
            id=entity.id,
            user_id=entity.user_id,
            project_title=entity.project_title,
            internal_link_sources=entity.internal_link_sources,
            created_at=entity.created_at,
        )
