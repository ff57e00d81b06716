"""Tests for the combo streak engine."""

from __future__ import annotations

import asyncio
import sys
from datetime import timedelta
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from find_words_game.services.combo import ComboEngine, ComboStreak, level_for_count, multiplier_for_level


@pytest.mark.parametrize(
    ("count", "level"),
    [(1, 1), (2, 1), (3, 2), (4, 2), (5, 3), (7, 3), (8, 4), (11, 4), (12, 5), (15, 5), (16, 6), (40, 6)],
)
def test_level_thresholds(count, level):
    assert level_for_count(count) == level


def test_multipliers():
    assert [multiplier_for_level(level) for level in range(1, 7)] == [1.0, 1.2, 1.5, 1.8, 2.0, 2.5]
    assert multiplier_for_level(99) == 1.0


def test_two_quick_words_stay_at_level_one(t0):
    engine = ComboEngine()
    engine.add_word("CAB", t0)
    streak = engine.add_word("CAT", t0 + timedelta(seconds=2))
    assert streak.words_in_streak == 2
    assert streak.level == 1
    assert streak.multiplier == 1.0

    third = engine.add_word("BAT", t0 + timedelta(seconds=4))
    assert third.level == 2
    assert third.multiplier == 1.2
    assert third.words_in_combo == ("CAB", "CAT", "BAT")


def test_idle_streak_is_replaced(t0):
    engine = ComboEngine()
    first = engine.add_word("CAB", t0)
    streak = engine.add_word("CAT", t0 + timedelta(seconds=11))
    assert streak.level == 1
    assert streak.words_in_streak == 1
    assert engine.completed_combos == (first,)


def test_window_is_inclusive(t0):
    streak = ComboStreak.initial("CAB", t0)
    assert streak.is_active(t0 + timedelta(seconds=10))
    assert not streak.is_active(t0 + timedelta(seconds=10, microseconds=1))


def test_check_expiry(t0):
    engine = ComboEngine()
    engine.add_word("CAB", t0)
    assert engine.check_expiry(t0 + timedelta(seconds=5)) is False
    assert engine.has_active_combo(t0 + timedelta(seconds=5))
    assert engine.check_expiry(t0 + timedelta(seconds=12)) is True
    assert engine.current_combo is None
    assert engine.current_multiplier == 1.0
    assert len(engine.completed_combos) == 1


def test_hooks_fire_in_order(t0):
    events = []
    engine = ComboEngine(
        on_started=lambda s: events.append(("started", s.words_in_streak)),
        on_extended=lambda s: events.append(("extended", s.words_in_streak)),
        on_level_up=lambda s: events.append(("level", s.level)),
        on_ended=lambda s: events.append(("ended", s.words_in_streak)),
    )
    for offset, word in enumerate(["CAB", "CAT", "BAT"]):
        engine.add_word(word, t0 + timedelta(seconds=offset))
    engine.force_end()
    assert events == [
        ("started", 1),
        ("extended", 2),
        ("extended", 3),
        ("level", 2),
        ("ended", 3),
    ]


def test_failing_hook_is_logged(t0, caplog):
    def explode(streak):
        raise ValueError("boom")

    engine = ComboEngine(on_started=explode)
    streak = engine.add_word("CAB", t0)
    assert streak.words_in_streak == 1
    assert "Combo hook" in caplog.text


def test_statistics(t0):
    engine = ComboEngine()
    assert engine.statistics().max_level == 0
    for offset in range(3):
        engine.add_word(f"W{offset}", t0 + timedelta(seconds=offset))
    engine.add_word("LATE", t0 + timedelta(seconds=30))
    stats = engine.statistics()
    assert stats.max_level == 2
    assert stats.max_words_in_combo == 3
    assert stats.total_combos == 1
    assert stats.average_level == pytest.approx(1.5)
    assert stats.current_combo is engine.current_combo


def test_reset_clears_history(t0):
    engine = ComboEngine()
    engine.add_word("CAB", t0)
    engine.force_end()
    engine.reset()
    assert engine.completed_combos == ()
    assert engine.current_combo is None


@pytest.mark.anyio
async def test_timer_ends_combo():
    ended = []
    engine = ComboEngine(timedelta(milliseconds=20), on_ended=ended.append)
    engine.add_word("CAB")
    assert engine.current_combo is not None
    await asyncio.sleep(0.1)
    assert engine.current_combo is None
    assert [streak.words_in_combo for streak in ended] == [("CAB",)]


@pytest.mark.anyio
async def test_new_word_restarts_timer():
    ended = []
    engine = ComboEngine(timedelta(milliseconds=80), on_ended=ended.append)
    engine.add_word("CAB")
    await asyncio.sleep(0.05)
    engine.add_word("CAT")
    await asyncio.sleep(0.05)
    assert ended == []
    assert engine.current_combo.words_in_streak == 2
    engine.close()
    await asyncio.sleep(0.1)
    assert ended == []
