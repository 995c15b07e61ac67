"""Test the debounced transcript synchronizer and the WebSocket player proxy."""

import asyncio
import gc
import logging

import pytest

from clipscribe.domain.synchronizer import NO_WORD
from clipscribe.services.transcript_sync_service import (
    TranscriptSynchronizer,
    WebSocketMediaPlayer,
)

WORDS = [
    {"word": "cuban", "start": 1.3, "end": 1.8, "confidence": 0.97},
    {"word": "food", "start": 1.8, "end": 2.1, "confidence": 0.96},
]

DEBOUNCE = 0.02


class Recorder:
    """Collects messages and active-word notifications."""

    def __init__(self):
        self.sent = []
        self.changes = []

    async def send_json(self, message):
        self.sent.append(message)

    async def on_change(self, index, word):
        self.changes.append((index, word.text if word else None))


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def player(recorder):
    return WebSocketMediaPlayer(recorder.send_json)


@pytest.fixture
def sync(player, recorder):
    synchronizer = TranscriptSynchronizer(
        player, recorder.on_change, debounce_seconds=DEBOUNCE
    )
    synchronizer.load(WORDS)
    yield synchronizer
    synchronizer.close()


async def settle():
    await asyncio.sleep(DEBOUNCE * 5)


@pytest.mark.asyncio
async def test_time_update_reports_active_word(player, sync, recorder):
    player.report_time(1.5)
    await settle()

    assert sync.current_word_index == 0
    assert recorder.changes == [(0, "cuban")]


@pytest.mark.asyncio
async def test_active_word_walks_through_transcript(player, sync, recorder):
    for current_time in (1.5, 2.0, 5.0):
        player.report_time(current_time)
        await settle()

    assert recorder.changes == [(0, "cuban"), (1, "food"), (NO_WORD, None)]


@pytest.mark.asyncio
async def test_burst_of_updates_costs_one_lookup(player, sync, recorder):
    for i in range(20):
        player.report_time(1.3 + i * 0.01)
    await settle()

    assert sync.lookups == 1
    assert sync.current_time == pytest.approx(1.49)
    assert recorder.changes == [(0, "cuban")]


@pytest.mark.asyncio
async def test_unchanged_word_is_not_reported_again(player, sync, recorder):
    player.report_time(1.4)
    await settle()
    player.report_time(1.6)
    await settle()

    assert sync.lookups == 2
    assert recorder.changes == [(0, "cuban")]


@pytest.mark.asyncio
async def test_loading_new_transcript_drops_pending_lookup(player, sync, recorder):
    player.report_time(1.5)
    sync.load([{"word": "other", "start": 10.0, "end": 11.0}])
    await settle()

    assert sync.lookups == 0
    assert recorder.changes == []
    assert sync.current_word_index == NO_WORD


@pytest.mark.asyncio
async def test_stale_generation_is_ignored(sync, recorder):
    sync.current_time = 1.5
    stale = asyncio.get_running_loop().create_task(sync._refresh_later(0))
    await stale

    assert sync.lookups == 0
    assert recorder.changes == []


@pytest.mark.asyncio
async def test_plain_text_transcript_is_not_interactive(player, recorder):
    sync = TranscriptSynchronizer(player, recorder.on_change, debounce_seconds=DEBOUNCE)
    try:
        assert sync.load("hello world") == 0
        assert not sync.interactive

        player.report_time(1.5)
        await settle()
        assert sync.current_word_index == NO_WORD
        assert recorder.changes == []
    finally:
        sync.close()


@pytest.mark.asyncio
async def test_close_cancels_pending_and_detaches(player, sync, recorder):
    player.report_time(1.5)
    sync.close()
    sync.close()
    player.report_time(2.0)
    await settle()

    assert sync.closed
    assert sync.lookups == 0
    assert recorder.changes == []


@pytest.mark.asyncio
async def test_activate_seeks_to_word_start(player, sync, recorder):
    seek_time = await sync.activate(1)

    assert seek_time == 1.8
    assert player.get_current_time() == 1.8
    assert recorder.sent == [{"type": "seek", "time": 1.8}]


@pytest.mark.asyncio
async def test_activate_out_of_range(sync):
    with pytest.raises(IndexError):
        await sync.activate(5)


@pytest.mark.asyncio
@pytest.mark.parametrize("paused", [True, False])
async def test_seek_keeps_play_state(player, paused):
    player.set_paused(paused)

    await player.seek_to(12.0)

    assert player.paused is paused
    assert player.get_current_time() == 12.0


class BlockingCallback:
    """Active-word callback that waits to be released, then optionally fails."""

    def __init__(self, fail=False):
        self.fail = fail
        self.calls = 0
        self.finished = False
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def __call__(self, index, word):
        self.calls += 1
        self.started.set()
        await self.release.wait()
        self.finished = True
        if self.fail:
            raise RuntimeError("client went away")


def collect_loop_errors():
    """Record errors the running loop would otherwise print."""
    errors = []
    asyncio.get_running_loop().set_exception_handler(
        lambda _, context: errors.append(context["message"])
    )
    return errors


@pytest.mark.asyncio
@pytest.mark.parametrize("interrupt", ["close", "load"])
async def test_interrupt_cancels_notification_in_flight(player, interrupt):
    loop_errors = collect_loop_errors()
    callback = BlockingCallback(fail=True)
    sync = TranscriptSynchronizer(player, callback, debounce_seconds=DEBOUNCE)
    sync.load(WORDS)
    try:
        player.report_time(1.5)
        await asyncio.wait_for(callback.started.wait(), timeout=1)

        if interrupt == "close":
            sync.close()
        else:
            sync.load(WORDS)
        callback.release.set()
        await settle()
        gc.collect()

        assert not callback.finished
        assert loop_errors == []
    finally:
        sync.close()


@pytest.mark.asyncio
async def test_tick_during_notification_does_not_cancel_it(player):
    callback = BlockingCallback()
    sync = TranscriptSynchronizer(player, callback, debounce_seconds=DEBOUNCE)
    sync.load(WORDS)
    try:
        player.report_time(1.5)
        await asyncio.wait_for(callback.started.wait(), timeout=1)

        player.report_time(1.6)
        callback.release.set()
        await settle()

        assert callback.finished
        assert callback.calls == 1
        assert sync.current_word_index == 0
    finally:
        sync.close()


@pytest.mark.asyncio
async def test_failed_notification_is_logged(player, caplog):
    loop_errors = collect_loop_errors()
    callback = BlockingCallback(fail=True)
    callback.release.set()
    sync = TranscriptSynchronizer(player, callback, debounce_seconds=DEBOUNCE)
    sync.load(WORDS)
    try:
        with caplog.at_level(logging.ERROR):
            player.report_time(1.5)
            await settle()
            gc.collect()

        assert callback.finished
        assert "Active word notification failed" in caplog.text
        assert loop_errors == []
    finally:
        sync.close()
