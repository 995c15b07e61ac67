from datetime import datetime
from typing import Any, Generic, Literal, TypeVar
from uuid import UUID

from pydantic import BaseModel, Field, HttpUrl

VideoStatus = Literal["uploaded", "transcribing", "transcribed", "error"]

T = TypeVar("T")


class ErrorResponseSchema(BaseModel):
    """Schema for error responses with consistent format.

    All error responses carry success=false, a human-readable error, a
    machine-readable error_code and a timestamp. Validation failures also
    carry per-field messages.
    """

    success: bool = Field(False, description="Always false for errors")
    error: str = Field(
        ...,
        description="Human-readable error message describing what went wrong",
        examples=["Video not found or access denied"],
    )
    error_code: str = Field(
        ...,
        description="Machine-readable error code for programmatic handling",
        examples=["NOT_FOUND"],
    )
    timestamp: datetime = Field(
        ..., description="UTC timestamp when the error occurred"
    )
    fields: dict[str, str] | None = Field(
        None, description="Per-field validation messages"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "success": False,
                "error": "Video not found or access denied",
                "error_code": "NOT_FOUND",
                "timestamp": "2026-09-14T08:12:40Z",
            }
        }


class ActionResultSchema(BaseModel, Generic[T]):
    """Uniform envelope for successful results."""

    success: bool = Field(True, description="Always true for successful results")
    data: T | None = Field(None, description="Operation result")


# ============================================================================
# Projects
# ============================================================================


class ProjectCreateSchema(BaseModel):
    """Schema for creating a project."""

    project_title: str = Field(
        ..., min_length=1, max_length=255, description="Project title"
    )
    internal_link_sources: list[HttpUrl] | None = Field(
        None, description="Reference URLs attached to the project"
    )


class ProjectUpdateSchema(BaseModel):
    """Schema for updating a project; omitted fields stay unchanged."""

    project_title: str | None = Field(None, min_length=1, max_length=255)
    internal_link_sources: list[HttpUrl] | None = None


class ProjectResponseSchema(BaseModel):
    """Schema for project response."""

    id: str
    user_id: str
    project_title: str | None = None
    internal_link_sources: list[str] | None = None
    created_at: datetime | None = None


# ============================================================================
# Videos
# ============================================================================


class VideoCreateSchema(BaseModel):
    """Schema for registering an already-stored video."""

    project_id: UUID = Field(..., description="Owning project ID")
    storage_path: str = Field(..., min_length=1, max_length=500)
    status: VideoStatus = "uploaded"
    transcript: Any | None = Field(None, description="Initial transcript, if any")


class VideoUpdateSchema(BaseModel):
    """Schema for updating video fields."""

    project_id: UUID | None = None
    storage_path: str | None = Field(None, min_length=1, max_length=500)
    status: VideoStatus | None = None


class TranscriptUpdateSchema(BaseModel):
    """Schema for manually replacing a transcript.

    ``transcript`` may be a string or any JSON value, and null clears it.
    ``words`` replaces the timestamped word array when present.
    """

    transcript: Any | None = None
    status: VideoStatus | None = None
    words: list[dict[str, Any]] | None = None


class VideoResponseSchema(BaseModel):
    """Schema for video response."""

    id: str
    project_id: str
    storage_path: str
    status: str
    transcript_text: Any | None = None
    transcript_data_full: Any | None = None
    transcription_request_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PublicUrlSchema(BaseModel):
    public_url: str = Field(..., description="Publicly reachable media URL")


# ============================================================================
# Transcripts
# ============================================================================


class TranscriptResponseSchema(BaseModel):
    """Display form of a video's transcript."""

    video_id: str
    status: str
    has_transcript: bool
    text: str = Field("", description="Transcript text for display")
    metadata: dict[str, Any] | None = Field(
        None, description="Provider metadata for structured transcripts"
    )


class InteractiveWordSchema(BaseModel):
    index: int
    text: str = Field(..., description="Display text (punctuated when available)")
    start: float
    end: float
    start_label: str = Field(..., description="Start time formatted as m:ss")
    confidence: float | None = None
    confidence_band: Literal["low", "medium", "high"] | None = None


class TranscriptStatsSchema(BaseModel):
    word_count: int
    duration: float
    duration_label: str
    average_confidence: int = Field(..., description="Mean confidence in percent")


class InteractiveTranscriptSchema(BaseModel):
    """Words and playback state for an interactive transcript."""

    video_id: str
    interactive: bool = Field(
        ..., description="False when the transcript has no usable timestamped words"
    )
    message: str | None = None
    current_time: float | None = None
    current_word_index: int = Field(-1, description="Active word index, -1 for none")
    words: list[InteractiveWordSchema] = []
    stats: TranscriptStatsSchema


class SeekResponseSchema(BaseModel):
    index: int
    seek_time: float = Field(..., description="Position to seek the player to")
    seek_label: str
