"""Test playback-to-word lookup and transcript display helpers."""

import math
import random

import pytest

from clipscribe.domain.synchronizer import (
    NO_WORD,
    ConfidenceBand,
    Word,
    WordTimeline,
    classify_confidence,
    coerce_words,
    format_timestamp,
    locate_current_word,
    on_word_activate,
    transcript_stats,
)

CUBAN_FOOD = [
    Word(text="cuban", start=1.3, end=1.8),
    Word(text="food", start=1.8, end=2.1),
]


def make_words(spans):
    return [Word(text=f"w{i}", start=s, end=e) for i, (s, e) in enumerate(spans)]


class TestLocateCurrentWord:
    """Test first-match lookup of the active word."""

    @pytest.mark.parametrize(
        "current_time, expected", [(1.5, 0), (2.0, 1), (5.0, NO_WORD), (0.0, NO_WORD)]
    )
    def test_cuban_food_scenario(self, current_time, expected):
        assert locate_current_word(CUBAN_FOOD, current_time) == expected

    def test_shared_boundary_goes_to_earlier_word(self):
        assert locate_current_word(CUBAN_FOOD, 1.8) == 0

    @pytest.mark.parametrize("current_time", [0.0, 1.5, 100.0, -3.0])
    def test_empty_words_never_match(self, current_time):
        assert locate_current_word([], current_time) == NO_WORD

    def test_gap_between_words(self):
        words = make_words([(0.0, 1.0), (2.0, 3.0)])
        assert locate_current_word(words, 1.5) == NO_WORD

    def test_overlapping_words_pick_first_in_sequence(self):
        words = make_words([(0.0, 5.0), (1.0, 2.0)])
        assert locate_current_word(words, 1.5) == 0

    @pytest.mark.parametrize("current_time", [math.nan, math.inf, None, "1.5", True])
    def test_invalid_time_matches_nothing(self, current_time):
        assert locate_current_word(CUBAN_FOOD, current_time) == NO_WORD

    def test_repeated_calls_agree(self):
        first = locate_current_word(CUBAN_FOOD, 1.9)
        assert locate_current_word(CUBAN_FOOD, 1.9) == first == 1

    def test_result_is_first_matching_index(self):
        rng = random.Random(7)
        for _ in range(200):
            starts = sorted(rng.uniform(0, 20) for _ in range(rng.randint(1, 12)))
            words = make_words([(s, s + rng.uniform(0, 3)) for s in starts])
            current_time = rng.uniform(-1, 25)

            index = locate_current_word(words, current_time)

            if index == NO_WORD:
                assert not any(w.contains(current_time) for w in words)
            else:
                assert words[index].contains(current_time)
                assert not any(w.contains(current_time) for w in words[:index])


class TestWordTimeline:
    """Test indexed lookup against the linear scan."""

    def test_agrees_with_linear_scan(self):
        rng = random.Random(42)
        for _ in range(200):
            starts = sorted(rng.uniform(0, 30) for _ in range(rng.randint(0, 15)))
            words = make_words([(s, s + rng.uniform(0, 4)) for s in starts])
            timeline = WordTimeline(words)
            for _ in range(10):
                current_time = rng.uniform(-1, 35)
                assert timeline.locate(current_time) == locate_current_word(
                    words, current_time
                )

    def test_long_word_spanning_later_ones(self):
        words = make_words([(0.0, 10.0), (1.0, 2.0), (3.0, 4.0)])
        timeline = WordTimeline(words)
        assert timeline.locate(3.5) == 0
        assert timeline.locate(10.5) == NO_WORD

    def test_unsorted_input_falls_back_to_first_match(self):
        words = make_words([(5.0, 6.0), (1.0, 2.0), (5.5, 7.0)])
        timeline = WordTimeline(words)
        assert timeline.locate(5.7) == 0
        assert timeline.locate(6.5) == 2
        assert timeline.locate(1.5) == 1

    def test_empty_timeline(self):
        timeline = WordTimeline([])
        assert len(timeline) == 0
        assert timeline.locate(1.0) == NO_WORD

    def test_zero_length_word(self):
        timeline = WordTimeline(make_words([(1.0, 1.0)]))
        assert timeline.locate(1.0) == 0
        assert timeline.locate(1.01) == NO_WORD


class TestCoerceWords:
    """Test normalization of stored word data."""

    def test_provider_words(self):
        words = coerce_words(
            [
                {"word": "hello", "start": 0.1, "end": 0.4, "confidence": 0.98},
                {
                    "word": "world",
                    "punctuated_word": "World.",
                    "start": 0.5,
                    "end": 0.9,
                    "confidence": 0.75,
                },
            ]
        )

        assert [w.text for w in words] == ["hello", "world"]
        assert words[1].display_text == "World."
        assert words[0].confidence == 0.98

    def test_text_key_and_missing_confidence(self):
        words = coerce_words([{"text": "hi", "start": 0, "end": 1}])
        assert words == [Word(text="hi", start=0.0, end=1.0)]

    @pytest.mark.parametrize(
        "raw", ["hello world", None, {"words": []}, 42, [], b"bytes"]
    )
    def test_non_array_data_gives_no_words(self, raw):
        assert coerce_words(raw) == []

    @pytest.mark.parametrize(
        "bad_item",
        [
            {"start": 0.0, "end": 1.0},
            {"word": "x", "end": 1.0},
            {"word": "x", "start": 2.0, "end": 1.0},
            {"word": "x", "start": -1.0, "end": 1.0},
            {"word": "x", "start": "0", "end": 1.0},
            {"word": "x", "start": 0.0, "end": math.inf},
            {"word": "x", "start": 0.0, "end": 1.0, "confidence": 1.5},
            "x",
        ],
    )
    def test_one_malformed_element_rejects_all(self, bad_item):
        raw = [{"word": "ok", "start": 0.0, "end": 0.5}, bad_item]
        assert coerce_words(raw) == []

    def test_round_trips_through_to_dict(self):
        word = Word(text="a", start=1.0, end=2.0, confidence=0.5, punctuated_word="A")
        assert coerce_words([word.to_dict()]) == [word]


def test_on_word_activate_returns_start():
    for word in CUBAN_FOOD:
        assert on_word_activate(word) == word.start


class TestConfidence:
    @pytest.mark.parametrize(
        "confidence, band",
        [
            (0.95, ConfidenceBand.HIGH),
            (0.9, ConfidenceBand.HIGH),
            (0.8, ConfidenceBand.MEDIUM),
            (0.7, ConfidenceBand.MEDIUM),
            (0.69, ConfidenceBand.LOW),
            (0.0, ConfidenceBand.LOW),
        ],
    )
    def test_default_bands(self, confidence, band):
        assert classify_confidence(confidence) is band

    def test_bands_are_monotonic(self):
        order = [ConfidenceBand.LOW, ConfidenceBand.MEDIUM, ConfidenceBand.HIGH]
        ranks = [order.index(classify_confidence(c / 100)) for c in range(101)]
        assert ranks == sorted(ranks)

    def test_thresholds_must_increase(self):
        with pytest.raises(ValueError, match="must increase"):
            classify_confidence(0.5, low=0.9, high=0.9)


class TestTranscriptStats:
    def test_empty(self):
        stats = transcript_stats([])
        assert (stats.word_count, stats.duration, stats.average_confidence) == (0, 0, 0)

    def test_counts_duration_and_mean_confidence(self):
        words = [
            Word(text="a", start=0.0, end=1.0, confidence=0.9),
            Word(text="b", start=1.0, end=2.5, confidence=0.7),
            Word(text="c", start=2.5, end=3.0),
        ]
        stats = transcript_stats(words)
        assert stats.word_count == 3
        assert stats.duration == 3.0
        assert stats.average_confidence == 80


@pytest.mark.parametrize(
    "seconds, label",
    [(0, "0:00"), (5.9, "0:05"), (65, "1:05"), (3599, "59:59"), (3661, "1:01:01")],
)
def test_format_timestamp(seconds, label):
    assert format_timestamp(seconds) == label
