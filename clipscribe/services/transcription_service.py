"""Asynchronous transcription through Deepgram.

A transcription is requested with a single POST that names a callback URL.
Deepgram later delivers the result to that URL, where the webhook hands the
payload to ``TranscriptionService.handle_callback``.
"""

import hmac
import logging

import httpx

from ..config import settings
from ..domain.exceptions import RecordNotFoundError, TranscriptionProviderError
from ..domain.models import Video
from ..repositories.interfaces import VideoRepository
from .storage_service import StorageService

logger = logging.getLogger(__name__)


class DeepgramClient:
    """Minimal client for Deepgram's pre-recorded listen endpoint."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        callback_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.DEEPGRAM_API_KEY
        self.base_url = base_url or settings.DEEPGRAM_API_URL
        self.callback_url = callback_url or settings.get_deepgram_callback_url()
        self.timeout = timeout or settings.DEEPGRAM_TIMEOUT_SECONDS
        self.transport = transport

    def _headers(self) -> dict[str, str]:
        api_key = (self.api_key or "").strip()
        if not api_key:
            raise TranscriptionProviderError(
                "Deepgram API key is missing (DEEPGRAM_API_KEY)"
            )
        return {
            "Accept": "application/json",
            "Authorization": f"Token {api_key}",
            "Content-Type": "application/json",
        }

    async def request_transcription(self, media_url: str) -> str:
        """Ask Deepgram to transcribe a publicly reachable media file.

        Args:
            media_url: URL Deepgram will fetch the media from

        Returns:
            Deepgram request ID, echoed back in the callback payload

        Raises:
            TranscriptionProviderError: If the request fails or the response
                carries no request ID
        """
        headers = self._headers()
        logger.info(f"Requesting Deepgram transcription for {media_url}")

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.post(
                    "/v1/listen",
                    params={"callback": self.callback_url},
                    headers=headers,
                    json={"url": media_url},
                )
        except httpx.HTTPError as e:
            logger.error(f"Deepgram request error: {e}")
            raise TranscriptionProviderError("Deepgram request failed") from e

        if response.status_code >= 400:
            logger.error(
                f"Deepgram request rejected ({response.status_code}): {response.text}"
            )
            raise TranscriptionProviderError(
                f"Deepgram request failed with status {response.status_code}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise TranscriptionProviderError("Unexpected Deepgram response") from e

        request_id = payload.get("request_id") if isinstance(payload, dict) else None
        if not isinstance(request_id, str) or not request_id:
            raise TranscriptionProviderError("Deepgram response has no request_id")

        logger.info(f"Deepgram accepted transcription request {request_id}")
        return request_id


def parse_callback_payload(payload) -> tuple[str, str, list]:
    """Extract request ID, full text and word array from a callback body.

    Raises:
        KeyError, IndexError, TypeError: If the payload is malformed
    """
    request_id = payload["metadata"]["request_id"]
    alternative = payload["results"]["channels"][0]["alternatives"][0]
    transcript_text = alternative["transcript"]
    words = alternative["words"]

    if not isinstance(request_id, str) or not request_id:
        raise TypeError("metadata.request_id must be a non-empty string")
    if not isinstance(words, list):
        raise TypeError("words must be an array")
    return request_id, transcript_text, words


class TranscriptionService:
    """Service layer for requesting and receiving transcriptions."""

    def __init__(
        self,
        video_repository: VideoRepository,
        storage: StorageService,
        client: DeepgramClient,
        callback_secret: str | None = None,
    ):
        self.video_repository = video_repository
        self.storage = storage
        self.client = client
        self.callback_secret = (
            callback_secret
            if callback_secret is not None
            else settings.DEEPGRAM_CALLBACK_SECRET
        )

    async def transcribe_video(self, caller_id: str, video_id: str) -> Video:
        """Request transcription and record the pending request.

        The video is saved as ``transcribing`` with the provider request ID
        before returning; the transcript itself arrives via the callback.
        """
        video = self.video_repository.find_owned(video_id, caller_id)
        if not video:
            raise RecordNotFoundError("Video", video_id)

        media_url = self.storage.public_url(video.storage_path)
        try:
            request_id = await self.client.request_transcription(media_url)
        except TranscriptionProviderError:
            logger.error(f"Transcription request failed for video {video.id}")
            video.mark_as_failed()
            self.video_repository.save(video)
            raise

        video.mark_as_transcribing(request_id)
        return self.video_repository.save(video)

    def verify_callback_token(self, token: str | None) -> bool:
        """Check a callback's shared-secret token.

        Always passes when no secret is configured.
        """
        if not self.callback_secret:
            return True
        return hmac.compare_digest(
            (token or "").encode(), self.callback_secret.encode()
        )

    def apply_transcription_result(
        self, request_id: str, transcript_text: str, words: list
    ) -> int:
        """Store a delivered transcript on every video waiting on the request.

        Applying the same result twice leaves the same state.

        Returns:
            Number of videos updated
        """
        videos = self.video_repository.find_by_request_id(request_id)
        for video in videos:
            video.mark_as_transcribed(transcript_text, words)
            self.video_repository.save(video)

        if videos:
            logger.info(
                f"Stored transcript with {len(words)} words for request {request_id}"
            )
        else:
            logger.warning(f"No video matches transcription request {request_id}")
        return len(videos)

    def handle_callback(self, payload) -> int:
        """Apply a raw callback body; malformed payloads raise."""
        request_id, transcript_text, words = parse_callback_payload(payload)
        return self.apply_transcription_result(request_id, transcript_text, words)
