"""Live synchronization between a media player and a transcript.

A ``TranscriptSynchronizer`` listens to a player's time updates and keeps
track of the active word. Lookups are debounced: every tick cancels the
pending recompute and schedules a new one, so a burst of ticks inside one
debounce window costs a single lookup. Each loaded transcript gets a new
generation number, and a recompute scheduled for an older generation is
dropped when it wakes up.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Protocol

from ..config import settings
from ..domain.synchronizer import NO_WORD, Word, WordTimeline, coerce_words, on_word_activate

logger = logging.getLogger(__name__)

TimeListener = Callable[[float], None]
ActiveWordCallback = Callable[[int, Word | None], Awaitable[None]]


class MediaPlayer(Protocol):
    """Playback clock the synchronizer follows.

    ``seek_to`` moves the playback position and must leave the play/pause
    state as it was.
    """

    def get_current_time(self) -> float: ...

    async def seek_to(self, seconds: float) -> None: ...

    def add_time_listener(self, listener: TimeListener) -> None: ...

    def remove_time_listener(self, listener: TimeListener) -> None: ...


class WebSocketMediaPlayer:
    """Server-side stand-in for a browser video element.

    The browser reports its clock and play/pause changes; seek commands are
    sent back as ``{"type": "seek", "time": ...}`` messages.
    """

    def __init__(self, send_json: Callable[[dict], Awaitable[None]]):
        self._send_json = send_json
        self._listeners: list[TimeListener] = []
        self.current_time = 0.0
        self.paused = True

    def get_current_time(self) -> float:
        return self.current_time

    async def seek_to(self, seconds: float) -> None:
        self.current_time = seconds
        await self._send_json({"type": "seek", "time": seconds})

    def add_time_listener(self, listener: TimeListener) -> None:
        self._listeners.append(listener)

    def remove_time_listener(self, listener: TimeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def report_time(self, seconds: float) -> None:
        """Record a time update from the client and notify listeners."""
        self.current_time = seconds
        for listener in list(self._listeners):
            listener(seconds)

    def set_paused(self, paused: bool) -> None:
        self.paused = paused


class TranscriptSynchronizer:
    """Tracks the active transcript word for one playback session."""

    def __init__(
        self,
        player: MediaPlayer,
        on_change: ActiveWordCallback,
        debounce_seconds: float | None = None,
    ):
        self.player = player
        self.on_change = on_change
        self.debounce_seconds = (
            debounce_seconds
            if debounce_seconds is not None
            else settings.SYNC_DEBOUNCE_SECONDS
        )
        self.timeline = WordTimeline(())
        self.current_time = player.get_current_time()
        self.current_word_index = NO_WORD
        self.lookups = 0
        self._generation = 0
        self._pending: asyncio.Task | None = None
        self._notifying: set[asyncio.Task] = set()
        self._closed = False
        player.add_time_listener(self.handle_time_update)

    @property
    def interactive(self) -> bool:
        """Whether the loaded transcript has usable timestamped words."""
        return len(self.timeline) > 0

    @property
    def closed(self) -> bool:
        return self._closed

    def load(self, raw_words) -> int:
        """Replace the transcript, discarding all derived state.

        Returns:
            Number of usable words; 0 means no interactive transcript
        """
        self._cancel_all()
        self._generation += 1
        self.timeline = WordTimeline(coerce_words(raw_words))
        self.current_word_index = NO_WORD
        logger.debug(
            f"Loaded {len(self.timeline)} words (generation {self._generation})"
        )
        return len(self.timeline)

    def handle_time_update(self, current_time: float) -> None:
        """Record a playback tick and (re)schedule the debounced lookup."""
        if self._closed:
            return
        self.current_time = current_time
        self._cancel_pending()
        task = asyncio.get_running_loop().create_task(
            self._refresh_later(self._generation)
        )
        task.add_done_callback(self._collect)
        self._pending = task

    async def _refresh_later(self, generation: int) -> None:
        await asyncio.sleep(self.debounce_seconds)
        # Past the debounce window ticks no longer cancel this task;
        # close() and load() still do
        task = asyncio.current_task()
        if self._pending is task:
            self._pending = None
        if self._closed or generation != self._generation:
            return
        self._notifying.add(task)
        await self.refresh()

    def _collect(self, task: asyncio.Task) -> None:
        self._notifying.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Active word notification failed: {error!r}")

    async def refresh(self) -> int:
        """Look up the active word now and notify if it changed."""
        self.lookups += 1
        index = self.timeline.locate(self.current_time)
        if index != self.current_word_index:
            self.current_word_index = index
            word = self.timeline[index] if index != NO_WORD else None
            await self.on_change(index, word)
        return index

    async def activate(self, index: int) -> float:
        """Seek the player to the start of the word at ``index``.

        Raises:
            IndexError: If no word exists at ``index``
        """
        if not 0 <= index < len(self.timeline):
            raise IndexError(f"No word at index {index}")
        seek_time = on_word_activate(self.timeline[index])
        await self.player.seek_to(seek_time)
        return seek_time

    def close(self) -> None:
        """Cancel pending and in-flight work and stop following the player."""
        if self._closed:
            return
        self._closed = True
        self._cancel_all()
        self.player.remove_time_listener(self.handle_time_update)

    def _cancel_pending(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    def _cancel_all(self) -> None:
        self._cancel_pending()
        for task in list(self._notifying):
            if task is not asyncio.current_task():
                task.cancel()
