"""Playback-to-transcript synchronization.

Maps a playback position to the word being spoken at that moment, and a
selected word back to the position the player should seek to. Everything in
this module is pure: no I/O, no clocks, no hidden state. Malformed transcript
input is absorbed into an empty word list rather than raised, so callers can
always fall back to "no interactive transcript available".
"""

import bisect
import itertools
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum

# Index reported when no word is active at the current playback time
NO_WORD = -1

DEFAULT_LOW_CONFIDENCE = 0.7
DEFAULT_HIGH_CONFIDENCE = 0.9


@dataclass(frozen=True)
class Word:
    """A single recognized token.

    Attributes:
        text: Raw token as recognized
        start: Start time in seconds
        end: End time in seconds
        confidence: Recognition confidence in [0, 1], if the provider sent one
        punctuated_word: Punctuated/cased form, if the provider sent one
    """

    text: str
    start: float
    end: float
    confidence: float | None = None
    punctuated_word: str | None = None

    @property
    def display_text(self) -> str:
        """Text to render, preferring the punctuated form."""
        return self.punctuated_word or self.text

    def contains(self, current_time: float) -> bool:
        """Check if the word is being spoken at the given time."""
        return self.start <= current_time <= self.end

    def to_dict(self) -> dict:
        """Serialize using the provider's word field names."""
        data = {
            "word": self.text,
            "start": self.start,
            "end": self.end,
            "confidence": self.confidence,
        }
        if self.punctuated_word is not None:
            data["punctuated_word"] = self.punctuated_word
        return data


class ConfidenceBand(Enum):
    """Display band for a word's recognition confidence."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class TranscriptStats:
    """Summary figures shown beneath an interactive transcript."""

    word_count: int
    duration: float
    average_confidence: int  # percent, 0-100


def _as_number(value) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    value = float(value)
    return value if math.isfinite(value) else None


def _coerce_word(raw) -> Word | None:
    if isinstance(raw, Word):
        return raw
    if not isinstance(raw, Mapping):
        return None

    punctuated = raw.get("punctuated_word")
    if not isinstance(punctuated, str):
        punctuated = None

    text = raw.get("word", raw.get("text"))
    if not isinstance(text, str):
        text = punctuated
    if text is None:
        return None

    start = _as_number(raw.get("start"))
    end = _as_number(raw.get("end"))
    if start is None or end is None or start < 0 or end < start:
        return None

    confidence = raw.get("confidence")
    if confidence is not None:
        confidence = _as_number(confidence)
        if confidence is None or not 0.0 <= confidence <= 1.0:
            return None

    return Word(
        text=text,
        start=start,
        end=end,
        confidence=confidence,
        punctuated_word=punctuated,
    )


def coerce_words(raw) -> list[Word]:
    """Turn stored transcript word data into a list of Words.

    Anything that is not a sequence of well-formed word mappings (a plain
    string, a dict, None, an empty list, or a list with a single element
    missing its text or timestamps) yields an empty list. Never raises.

    Args:
        raw: Value of a video's ``transcript_data_full`` field, or Words

    Returns:
        Words in their original order, or [] if the data is unusable
    """
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
        return []

    words = []
    for item in raw:
        word = _coerce_word(item)
        if word is None:
            return []
        words.append(word)
    return words


def _is_valid_time(current_time) -> bool:
    return _as_number(current_time) is not None


def locate_current_word(words: Sequence[Word], current_time: float) -> int:
    """Find the word being spoken at ``current_time``.

    Returns the first index ``i`` with ``words[i].start <= current_time <=
    words[i].end``. When words overlap, the earliest one in sequence order
    wins.

    Args:
        words: Transcript words, possibly empty
        current_time: Playback position in seconds

    Returns:
        Index of the active word, or NO_WORD
    """
    if not _is_valid_time(current_time):
        return NO_WORD
    for index, word in enumerate(words):
        if word.contains(current_time):
            return index
    return NO_WORD


class WordTimeline:
    """Indexed word sequence for repeated lookups during playback.

    Built once per transcript and never mutated; a replaced transcript gets
    a new timeline. Lookups are O(log n) when words are sorted by start and
    fall back to a linear scan otherwise. Either way the result is identical
    to ``locate_current_word``.
    """

    def __init__(self, words: Sequence[Word]):
        self.words = tuple(words)
        self._starts = [word.start for word in self.words]
        self._is_sorted = all(a <= b for a, b in zip(self._starts, self._starts[1:]))
        # Running maximum of end times; non-decreasing even with overlaps
        self._max_ends = list(itertools.accumulate((w.end for w in self.words), max))

    def __len__(self) -> int:
        return len(self.words)

    def __getitem__(self, index: int) -> Word:
        return self.words[index]

    def locate(self, current_time: float) -> int:
        """Find the active word index at ``current_time``, or NO_WORD."""
        if not self.words or not _is_valid_time(current_time):
            return NO_WORD
        if not self._is_sorted:
            return locate_current_word(self.words, current_time)

        # Only words[:limit] have started by current_time
        limit = bisect.bisect_right(self._starts, current_time)
        # First word whose running max end reaches current_time is the first
        # word that itself ends at or after current_time
        index = bisect.bisect_left(self._max_ends, current_time, 0, limit)
        return index if index < limit else NO_WORD


def on_word_activate(word: Word) -> float:
    """Get the playback position to seek to when a word is selected."""
    return word.start


def classify_confidence(
    confidence: float,
    low: float = DEFAULT_LOW_CONFIDENCE,
    high: float = DEFAULT_HIGH_CONFIDENCE,
) -> ConfidenceBand:
    """Map a confidence score to a display band.

    Raises:
        ValueError: If the thresholds are not strictly increasing
    """
    if not low < high:
        raise ValueError(f"Confidence thresholds must increase: {low} >= {high}")
    if confidence >= high:
        return ConfidenceBand.HIGH
    if confidence >= low:
        return ConfidenceBand.MEDIUM
    return ConfidenceBand.LOW


def transcript_stats(words: Sequence[Word]) -> TranscriptStats:
    """Compute word count, spoken duration and mean confidence."""
    if not words:
        return TranscriptStats(word_count=0, duration=0.0, average_confidence=0)

    scores = [w.confidence for w in words if w.confidence is not None]
    average = round(sum(scores) / len(scores) * 100) if scores else 0
    return TranscriptStats(
        word_count=len(words),
        duration=words[-1].end,
        average_confidence=average,
    )


def format_timestamp(seconds: float) -> str:
    """Format seconds as m:ss, or h:mm:ss from one hour on."""
    total = max(int(seconds), 0)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
