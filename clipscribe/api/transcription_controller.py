import logging

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import PlainTextResponse

from ..services.transcription_service import TranscriptionService
from .dependencies import get_transcription_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/deepgram", tags=["transcription"])


@router.post("/callback", response_class=PlainTextResponse)
async def deepgram_callback(
    request: Request,
    token: str | None = Query(None, description="Shared callback secret"),
    service: TranscriptionService = Depends(get_transcription_service),
) -> PlainTextResponse:
    """Receive a finished transcription from Deepgram.

    Replies ``ok`` even when no video waits on the request ID, so the
    provider does not retry deliveries for deleted videos.
    """
    if not service.verify_callback_token(token):
        logger.warning("Rejected transcription callback with invalid token")
        return PlainTextResponse(
            "unauthorized", status_code=status.HTTP_401_UNAUTHORIZED
        )

    try:
        payload = await request.json()
        updated = service.handle_callback(payload)
    except Exception as e:
        logger.error(f"Failed to process transcription callback: {e}", exc_info=True)
        return PlainTextResponse(
            "error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    logger.info(f"Transcription callback updated {updated} video(s)")
    return PlainTextResponse("ok")
