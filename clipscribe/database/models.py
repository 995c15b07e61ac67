from sqlalchemy import JSON, Column, DateTime, ForeignKey, String
from sqlalchemy.sql import func

from .connection import Base


class Project(Base):
    __tablename__ = "projects"

    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=False, index=True)  # Owning identity
    project_title = Column(String(255))
    internal_link_sources = Column(JSON)  # List of URLs
    created_at = Column(DateTime, server_default=func.now())


class Video(Base):
    __tablename__ = "videos"

    id = Column(String, primary_key=True)
    project_id = Column(
        String,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    storage_path = Column(String(500), nullable=False, index=True)
    status = Column(String, nullable=False, default="uploaded", index=True)
    transcript_text = Column(JSON)  # Plain string or provider JSON
    transcript_data_full = Column(JSON)  # Word array from the provider
    transcription_request_id = Column(String, index=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
