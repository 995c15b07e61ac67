"""WebSocket endpoint that keeps a browser player and its transcript in step.

Client messages:
    {"type": "timeupdate", "current_time": 12.3}
    {"type": "activate", "index": 4}
    {"type": "play"} / {"type": "pause"}

Server messages:
    {"type": "transcript", "interactive": true, "words": [...]}
    {"type": "active_word", "index": 4, "word": {...}}
    {"type": "seek", "time": 3.2}
    {"type": "error", "error": "..."}
"""

import json
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from ..domain.exceptions import RecordNotFoundError
from ..domain.synchronizer import NO_WORD, Word
from ..services.transcript_sync_service import (
    TranscriptSynchronizer,
    WebSocketMediaPlayer,
)
from ..services.video_service import VideoService
from .dependencies import CALLER_HEADER, get_video_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/videos", tags=["sync"])

# Application-defined close codes (4000-4999)
CLOSE_UNAUTHENTICATED = 4401
CLOSE_NOT_FOUND = 4404


async def _handle_message(
    message: dict, player: WebSocketMediaPlayer, sync: TranscriptSynchronizer
) -> str | None:
    """Apply one client message; returns an error text for bad messages."""
    kind = message.get("type")
    if kind == "timeupdate":
        current_time = message.get("current_time")
        if (
            isinstance(current_time, bool)
            or not isinstance(current_time, (int, float))
            or current_time < 0
        ):
            return "current_time must be a non-negative number"
        player.report_time(float(current_time))
    elif kind == "activate":
        index = message.get("index")
        if isinstance(index, bool) or not isinstance(index, int):
            return "index must be an integer"
        try:
            await sync.activate(index)
        except IndexError:
            return f"No word at index {index}"
    elif kind == "play":
        player.set_paused(False)
    elif kind == "pause":
        player.set_paused(True)
    else:
        return f"Unknown message type: {kind}"
    return None


@router.websocket("/{video_id}/sync")
async def sync_transcript(
    websocket: WebSocket,
    video_id: UUID,
    service: VideoService = Depends(get_video_service),
):
    """Follow a client's playback clock and push the active transcript word."""
    await websocket.accept()

    caller_id = (websocket.headers.get(CALLER_HEADER) or "").strip()
    if not caller_id:
        await websocket.send_json({"type": "error", "error": "Authentication required"})
        await websocket.close(code=CLOSE_UNAUTHENTICATED)
        return

    try:
        video = service.get_video(caller_id, str(video_id))
    except RecordNotFoundError as e:
        await websocket.send_json({"type": "error", "error": str(e)})
        await websocket.close(code=CLOSE_NOT_FOUND)
        return

    async def send_active_word(index: int, word: Word | None) -> None:
        await websocket.send_json(
            {
                "type": "active_word",
                "index": index,
                "word": word.to_dict() if word is not None else None,
            }
        )

    player = WebSocketMediaPlayer(websocket.send_json)
    sync = TranscriptSynchronizer(player, send_active_word)
    try:
        sync.load(video.transcript_data_full)
        await websocket.send_json(
            {
                "type": "transcript",
                "interactive": sync.interactive,
                "current_word_index": NO_WORD,
                "words": [word.to_dict() for word in sync.timeline.words],
            }
        )
        logger.info(f"Sync session opened for video {video.id}")

        while True:
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
            except json.JSONDecodeError:
                error = "Message must be valid JSON"
            else:
                if isinstance(message, dict):
                    error = await _handle_message(message, player, sync)
                else:
                    error = "Message must be a JSON object"
            if error:
                await websocket.send_json({"type": "error", "error": error})
    except WebSocketDisconnect:
        logger.info(f"Sync session closed for video {video.id}")
    finally:
        sync.close()
