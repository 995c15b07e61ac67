import logging
from pathlib import PurePosixPath
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import PlainTextResponse

from ..domain.exceptions import RecordNotFoundError, TranscriptionProviderError
from ..domain.models import Video
from ..domain.synchronizer import (
    NO_WORD,
    WordTimeline,
    classify_confidence,
    format_timestamp,
    on_word_activate,
    transcript_stats,
)
from ..domain.transcript_payload import (
    parse_transcript_payload,
    transcript_display_text,
    transcript_metadata,
)
from ..services.transcription_service import TranscriptionService
from ..services.video_service import UNSET, VideoService
from .dependencies import get_current_user, get_transcription_service, get_video_service
from .schemas import (
    ActionResultSchema,
    InteractiveTranscriptSchema,
    InteractiveWordSchema,
    PublicUrlSchema,
    SeekResponseSchema,
    TranscriptResponseSchema,
    TranscriptStatsSchema,
    TranscriptUpdateSchema,
    VideoCreateSchema,
    VideoResponseSchema,
    VideoUpdateSchema,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/videos", tags=["videos"])
project_videos_router = APIRouter(prefix="/projects", tags=["videos"])

NO_INTERACTIVE_TRANSCRIPT = (
    "Transcript needs to include timestamped words for interactive features."
)


def _to_schema(video: Video) -> VideoResponseSchema:
    return VideoResponseSchema.model_validate(video.__dict__)


# ============================================================================
# Project-scoped video routes
# ============================================================================


@project_videos_router.get(
    "/{project_id}/videos",
    response_model=ActionResultSchema[list[VideoResponseSchema]],
)
async def list_project_videos(
    project_id: UUID,
    caller_id: str = Depends(get_current_user),
    service: VideoService = Depends(get_video_service),
) -> ActionResultSchema[list[VideoResponseSchema]]:
    """List videos of a project, newest first."""
    videos = service.list_project_videos(caller_id, str(project_id))
    return ActionResultSchema(data=[_to_schema(v) for v in videos])


@project_videos_router.post(
    "/{project_id}/videos/upload",
    response_model=ActionResultSchema[VideoResponseSchema],
    status_code=status.HTTP_201_CREATED,
)
async def upload_video(
    project_id: UUID,
    file: UploadFile = File(...),
    auto_transcribe: bool = Form(False),
    caller_id: str = Depends(get_current_user),
    service: VideoService = Depends(get_video_service),
    transcription: TranscriptionService = Depends(get_transcription_service),
) -> ActionResultSchema[VideoResponseSchema]:
    """Upload a video file into a project, optionally requesting transcription.

    A failed transcription request does not undo the upload; the returned
    video then has status ``error``.
    """
    if file.size is not None:
        service.check_upload(file.filename, file.content_type, file.size)
    data = await file.read()
    video = service.upload_video(
        caller_id, str(project_id), file.filename, file.content_type, data
    )

    if auto_transcribe:
        try:
            video = await transcription.transcribe_video(caller_id, video.id)
        except TranscriptionProviderError as e:
            logger.error(f"Automatic transcription failed for video {video.id}: {e}")
            video = service.get_video(caller_id, video.id)

    return ActionResultSchema(data=_to_schema(video))


# ============================================================================
# Video routes
# ============================================================================


@router.post(
    "/",
    response_model=ActionResultSchema[VideoResponseSchema],
    status_code=status.HTTP_201_CREATED,
)
async def create_video(
    video_data: VideoCreateSchema,
    caller_id: str = Depends(get_current_user),
    service: VideoService = Depends(get_video_service),
) -> ActionResultSchema[VideoResponseSchema]:
    """Register a video that is already in storage."""
    video = service.create_video(
        caller_id,
        project_id=str(video_data.project_id),
        storage_path=video_data.storage_path,
        status=video_data.status,
        transcript_text=video_data.transcript,
    )
    return ActionResultSchema(data=_to_schema(video))


@router.get("/", response_model=ActionResultSchema[list[VideoResponseSchema]])
async def list_videos(
    caller_id: str = Depends(get_current_user),
    service: VideoService = Depends(get_video_service),
) -> ActionResultSchema[list[VideoResponseSchema]]:
    """List videos across all of the caller's projects."""
    videos = service.list_videos(caller_id)
    return ActionResultSchema(data=[_to_schema(v) for v in videos])


@router.get("/{video_id}", response_model=ActionResultSchema[VideoResponseSchema])
async def get_video(
    video_id: UUID,
    caller_id: str = Depends(get_current_user),
    service: VideoService = Depends(get_video_service),
) -> ActionResultSchema[VideoResponseSchema]:
    """Get video by ID."""
    video = service.get_video(caller_id, str(video_id))
    return ActionResultSchema(data=_to_schema(video))


@router.patch("/{video_id}", response_model=ActionResultSchema[VideoResponseSchema])
async def update_video(
    video_id: UUID,
    update_data: VideoUpdateSchema,
    caller_id: str = Depends(get_current_user),
    service: VideoService = Depends(get_video_service),
) -> ActionResultSchema[VideoResponseSchema]:
    """Update video project, storage path or status."""
    video = service.update_video(
        caller_id,
        str(video_id),
        project_id=str(update_data.project_id) if update_data.project_id else None,
        storage_path=update_data.storage_path,
        status=update_data.status,
    )
    return ActionResultSchema(data=_to_schema(video))


@router.delete("/{video_id}", response_model=ActionResultSchema[None])
async def delete_video(
    video_id: UUID,
    caller_id: str = Depends(get_current_user),
    service: VideoService = Depends(get_video_service),
) -> ActionResultSchema[None]:
    """Delete video record and, best effort, its stored file."""
    service.delete_video(caller_id, str(video_id))
    return ActionResultSchema()


@router.get("/{video_id}/public-url", response_model=ActionResultSchema[PublicUrlSchema])
async def get_public_url(
    video_id: UUID,
    caller_id: str = Depends(get_current_user),
    service: VideoService = Depends(get_video_service),
) -> ActionResultSchema[PublicUrlSchema]:
    """Get the public media URL of a video."""
    public_url = service.get_public_url(caller_id, str(video_id))
    return ActionResultSchema(data=PublicUrlSchema(public_url=public_url))


@router.post(
    "/{video_id}/transcribe", response_model=ActionResultSchema[VideoResponseSchema]
)
async def transcribe_video(
    video_id: UUID,
    caller_id: str = Depends(get_current_user),
    transcription: TranscriptionService = Depends(get_transcription_service),
) -> ActionResultSchema[VideoResponseSchema]:
    """Request transcription; the result arrives later via the callback."""
    video = await transcription.transcribe_video(caller_id, str(video_id))
    return ActionResultSchema(data=_to_schema(video))


# ============================================================================
# Transcript routes
# ============================================================================


@router.get(
    "/{video_id}/transcript",
    response_model=ActionResultSchema[TranscriptResponseSchema],
)
async def get_transcript(
    video_id: UUID,
    caller_id: str = Depends(get_current_user),
    service: VideoService = Depends(get_video_service),
) -> ActionResultSchema[TranscriptResponseSchema]:
    """Get the display text and provider metadata of a transcript."""
    video = service.get_video(caller_id, str(video_id))
    payload = parse_transcript_payload(video.transcript_text)
    return ActionResultSchema(
        data=TranscriptResponseSchema(
            video_id=video.id,
            status=video.status,
            has_transcript=payload is not None,
            text=transcript_display_text(payload),
            metadata=transcript_metadata(payload),
        )
    )


@router.put(
    "/{video_id}/transcript",
    response_model=ActionResultSchema[VideoResponseSchema],
)
async def update_transcript(
    video_id: UUID,
    update_data: TranscriptUpdateSchema,
    caller_id: str = Depends(get_current_user),
    service: VideoService = Depends(get_video_service),
) -> ActionResultSchema[VideoResponseSchema]:
    """Replace a transcript wholesale."""
    words = update_data.words if "words" in update_data.model_fields_set else UNSET
    video = service.update_transcript(
        caller_id,
        str(video_id),
        update_data.transcript,
        status=update_data.status,
        words=words,
    )
    return ActionResultSchema(data=_to_schema(video))


@router.get("/{video_id}/transcript/download", response_class=PlainTextResponse)
async def download_transcript(
    video_id: UUID,
    caller_id: str = Depends(get_current_user),
    service: VideoService = Depends(get_video_service),
) -> PlainTextResponse:
    """Download the transcript text as a file."""
    video = service.get_video(caller_id, str(video_id))
    text = transcript_display_text(parse_transcript_payload(video.transcript_text))
    stem = PurePosixPath(video.storage_path).stem or f"video_{video.id}"
    return PlainTextResponse(
        text,
        headers={"Content-Disposition": f'attachment; filename="{stem}_transcript.txt"'},
    )


@router.get(
    "/{video_id}/transcript/interactive",
    response_model=ActionResultSchema[InteractiveTranscriptSchema],
)
async def get_interactive_transcript(
    video_id: UUID,
    current_time: float | None = Query(
        None, ge=0, description="Playback position in seconds"
    ),
    caller_id: str = Depends(get_current_user),
    service: VideoService = Depends(get_video_service),
) -> ActionResultSchema[InteractiveTranscriptSchema]:
    """Get timestamped words with the word active at ``current_time``.

    Transcripts without usable word data come back with
    ``interactive=false`` instead of an error.
    """
    words = service.get_words(caller_id, str(video_id))
    timeline = WordTimeline(words)
    index = timeline.locate(current_time) if current_time is not None else NO_WORD
    stats = transcript_stats(words)

    return ActionResultSchema(
        data=InteractiveTranscriptSchema(
            video_id=str(video_id),
            interactive=bool(words),
            message=None if words else NO_INTERACTIVE_TRANSCRIPT,
            current_time=current_time,
            current_word_index=index,
            words=[
                InteractiveWordSchema(
                    index=i,
                    text=word.display_text,
                    start=word.start,
                    end=word.end,
                    start_label=format_timestamp(word.start),
                    confidence=word.confidence,
                    confidence_band=(
                        classify_confidence(word.confidence).value
                        if word.confidence is not None
                        else None
                    ),
                )
                for i, word in enumerate(words)
            ],
            stats=TranscriptStatsSchema(
                word_count=stats.word_count,
                duration=stats.duration,
                duration_label=format_timestamp(stats.duration),
                average_confidence=stats.average_confidence,
            ),
        )
    )


@router.get(
    "/{video_id}/transcript/words/{index}/seek",
    response_model=ActionResultSchema[SeekResponseSchema],
)
async def get_word_seek_time(
    video_id: UUID,
    index: int,
    caller_id: str = Depends(get_current_user),
    service: VideoService = Depends(get_video_service),
) -> ActionResultSchema[SeekResponseSchema]:
    """Get the playback position for a selected word."""
    words = service.get_words(caller_id, str(video_id))
    if not 0 <= index < len(words):
        raise RecordNotFoundError("Word", str(index))

    seek_time = on_word_activate(words[index])
    return ActionResultSchema(
        data=SeekResponseSchema(
            index=index, seek_time=seek_time, seek_label=format_timestamp(seek_time)
        )
    )
