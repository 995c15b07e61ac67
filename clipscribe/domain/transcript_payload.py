"""Normalization of stored transcript payloads.

A video's ``transcript_text`` may hold a plain string, a full Deepgram
response, or whatever JSON a user saved through a manual edit. Every reader
goes through ``parse_transcript_payload`` instead of sniffing the shape
itself.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from .synchronizer import Word, coerce_words


@dataclass(frozen=True)
class Transcript:
    """Ordered words plus the provider metadata that came with them."""

    words: tuple[Word, ...] = ()
    duration: float | None = None
    channels: int | None = None
    models: list[str] | None = None
    created: str | None = None
    request_id: str | None = None


@dataclass(frozen=True)
class PlainText:
    text: str


@dataclass(frozen=True)
class StructuredTranscript:
    transcript: Transcript
    text: str


@dataclass(frozen=True)
class Unrecognized:
    raw: Any = field(default=None)


TranscriptPayload = Union[PlainText, StructuredTranscript, Unrecognized]


def _first_alternative(raw: Mapping) -> Mapping | None:
    results = raw.get("results")
    if not isinstance(results, Mapping):
        return None
    channels = results.get("channels")
    if not isinstance(channels, list) or not channels:
        return None
    channel = channels[0]
    if not isinstance(channel, Mapping):
        return None
    alternatives = channel.get("alternatives")
    if not isinstance(alternatives, list) or not alternatives:
        return None
    alternative = alternatives[0]
    return alternative if isinstance(alternative, Mapping) else None


def _parse_structured(raw: Mapping) -> StructuredTranscript | None:
    alternative = _first_alternative(raw)
    if alternative is None or not isinstance(alternative.get("transcript"), str):
        return None

    metadata = raw.get("metadata")
    if not isinstance(metadata, Mapping):
        metadata = {}
    models = metadata.get("models")

    transcript = Transcript(
        words=tuple(coerce_words(alternative.get("words"))),
        duration=metadata.get("duration"),
        channels=metadata.get("channels"),
        models=list(models) if isinstance(models, list) else None,
        created=metadata.get("created"),
        request_id=metadata.get("request_id"),
    )
    return StructuredTranscript(transcript=transcript, text=alternative["transcript"])


def parse_transcript_payload(raw) -> TranscriptPayload | None:
    """Classify a stored transcript value.

    Args:
        raw: JSON-decoded ``transcript_text`` value

    Returns:
        PlainText for strings and ``{"transcript": str}`` objects,
        StructuredTranscript for Deepgram responses, Unrecognized for any
        other JSON, or None when there is no transcript
    """
    if raw is None:
        return None
    if isinstance(raw, str):
        return PlainText(raw)
    if isinstance(raw, Mapping):
        structured = _parse_structured(raw)
        if structured is not None:
            return structured
        if isinstance(raw.get("transcript"), str):
            return PlainText(raw["transcript"])
    return Unrecognized(raw)


def transcript_display_text(payload: TranscriptPayload | None) -> str:
    """Render a payload as the text shown to users."""
    if payload is None:
        return ""
    if isinstance(payload, (PlainText, StructuredTranscript)):
        return payload.text
    return json.dumps(payload.raw, indent=2, default=str)


def transcript_metadata(payload: TranscriptPayload | None) -> dict | None:
    """Get provider metadata for a structured payload, if any."""
    if not isinstance(payload, StructuredTranscript):
        return None
    transcript = payload.transcript
    return {
        "duration": transcript.duration,
        "channels": transcript.channels,
        "models": transcript.models,
        "created": transcript.created,
        "request_id": transcript.request_id,
    }
