from datetime import datetime

VIDEO_STATUSES = ("uploaded", "transcribing", "transcribed", "error")


class Project:
    """Domain model for Project - pure business object."""

    def __init__(
        self,
        id: str,
        user_id: str,
        project_title: str | None = None,
        internal_link_sources: list[str] | None = None,
        created_at: datetime | None = None,
    ):
        self.id = id
        self.user_id = user_id
        self.project_title = project_title
        self.internal_link_sources = internal_link_sources
        self.created_at = created_at


class Video:
    """Domain model for Video - pure business object."""

    def __init__(
        self,
        id: str,
        project_id: str,
        storage_path: str,
        status: str = "uploaded",
        transcript_text=None,
        transcript_data_full=None,
        transcription_request_id: str | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ):
        self.id = id
        self.project_id = project_id
        self.storage_path = storage_path
        self.status = status
        self.transcript_text = transcript_text
        self.transcript_data_full = transcript_data_full
        self.transcription_request_id = transcription_request_id
        self.created_at = created_at
        self.updated_at = updated_at

    def mark_as_transcribing(self, request_id: str) -> None:
        """Record the provider request and mark transcription as pending."""
        self.transcription_request_id = request_id
        self.status = "transcribing"

    def mark_as_transcribed(self, transcript_text, words) -> None:
        """Store a delivered transcript wholesale."""
        self.transcript_text = transcript_text
        self.transcript_data_full = words
        self.status = "transcribed"

    def mark_as_failed(self) -> None:
        """Mark transcription as failed."""
        self.status = "error"
