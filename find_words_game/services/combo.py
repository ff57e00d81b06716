"""Combo streak bookkeeping: levels, multipliers and expiry."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Tuple

from shared.expiry_timer import ExpiryTimer, schedule_expiry

from ..state.models import utcnow

logger = logging.getLogger(__name__)

DEFAULT_COMBO_TIME_LIMIT = timedelta(seconds=10)

# (exclusive upper bound on words in streak, level)
_LEVEL_THRESHOLDS: Tuple[Tuple[int, int], ...] = ((3, 1), (5, 2), (8, 3), (12, 4), (16, 5))
MAX_LEVEL = 6

_MULTIPLIERS = {1: 1.0, 2: 1.2, 3: 1.5, 4: 1.8, 5: 2.0, 6: 2.5}

_DESCRIPTIONS = {
    1: "Getting Started",
    2: "Nice Streak!",
    3: "Great Combo!",
    4: "Amazing Chain!",
    5: "Incredible Streak!",
    6: "LEGENDARY COMBO!",
}


def level_for_count(words_in_streak: int) -> int:
    for bound, level in _LEVEL_THRESHOLDS:
        if words_in_streak < bound:
            return level
    return MAX_LEVEL


def multiplier_for_level(level: int) -> float:
    return _MULTIPLIERS.get(level, 1.0)


@dataclass(frozen=True, slots=True)
class ComboStreak:
    """Immutable view of a streak; extending it yields a new instance."""

    level: int
    words_in_streak: int
    start_time: datetime
    last_word_time: datetime
    multiplier: float
    words_in_combo: Tuple[str, ...]

    @classmethod
    def initial(cls, first_word: str, now: datetime) -> "ComboStreak":
        return cls(
            level=1,
            words_in_streak=1,
            start_time=now,
            last_word_time=now,
            multiplier=multiplier_for_level(1),
            words_in_combo=(first_word,),
        )

    def add_word(self, word: str, now: datetime) -> "ComboStreak":
        count = self.words_in_streak + 1
        level = level_for_count(count)
        return ComboStreak(
            level=level,
            words_in_streak=count,
            start_time=self.start_time,
            last_word_time=now,
            multiplier=multiplier_for_level(level),
            words_in_combo=self.words_in_combo + (word,),
        )

    def is_active(self, now: datetime, time_limit: timedelta = DEFAULT_COMBO_TIME_LIMIT) -> bool:
        return now - self.last_word_time <= time_limit

    @property
    def duration(self) -> timedelta:
        return self.last_word_time - self.start_time

    @property
    def description(self) -> str:
        return _DESCRIPTIONS.get(self.level, "Combo")


@dataclass(frozen=True, slots=True)
class ComboStatistics:
    max_level: int = 0
    max_words_in_combo: int = 0
    total_combos: int = 0
    average_level: float = 0.0
    current_combo: Optional[ComboStreak] = None


ComboHook = Callable[[ComboStreak], None]
Clock = Callable[[], datetime]


class ComboEngine:
    """Track the rolling streak of word submissions for one live game.

    A streak stays open while consecutive words arrive within ``time_limit``
    of each other.  Expiry is checked lazily against the supplied time on
    every call and, when an asyncio loop is running, also pushed by a single
    :class:`ExpiryTimer` that each new word cancels and replaces.
    """

    def __init__(
        self,
        time_limit: timedelta = DEFAULT_COMBO_TIME_LIMIT,
        *,
        clock: Clock = utcnow,
        on_started: Optional[ComboHook] = None,
        on_extended: Optional[ComboHook] = None,
        on_level_up: Optional[ComboHook] = None,
        on_ended: Optional[ComboHook] = None,
    ) -> None:
        self.time_limit = time_limit
        self._clock = clock
        self.on_started = on_started
        self.on_extended = on_extended
        self.on_level_up = on_level_up
        self.on_ended = on_ended
        self._current: Optional[ComboStreak] = None
        self._completed: List[ComboStreak] = []
        self._timer: Optional[ExpiryTimer] = None

    # Read helpers -----------------------------------------------------
    @property
    def current_combo(self) -> Optional[ComboStreak]:
        return self._current

    @property
    def completed_combos(self) -> Tuple[ComboStreak, ...]:
        return tuple(self._completed)

    def has_active_combo(self, now: Optional[datetime] = None) -> bool:
        if self._current is None:
            return False
        return self._current.is_active(now or self._clock(), self.time_limit)

    @property
    def current_multiplier(self) -> float:
        return self._current.multiplier if self._current else 1.0

    # Mutation helpers -------------------------------------------------
    def add_word(self, word: str, now: Optional[datetime] = None) -> ComboStreak:
        """Register a found word and return the resulting streak."""

        moment = now or self._clock()
        if self._current is None or not self._current.is_active(moment, self.time_limit):
            self._end_combo()
            self._current = ComboStreak.initial(word, moment)
            logger.debug("Combo started with %s", word)
            self._fire(self.on_started, self._current)
        else:
            previous_level = self._current.level
            self._current = self._current.add_word(word, moment)
            self._fire(self.on_extended, self._current)
            if self._current.level > previous_level:
                logger.info("Combo level up: %s (%.1fx)", self._current.level, self._current.multiplier)
                self._fire(self.on_level_up, self._current)
        self._reset_timer()
        return self._current

    def check_expiry(self, now: Optional[datetime] = None) -> bool:
        """Close the streak if its window has lapsed; return True if closed."""

        if self._current is None or self._current.is_active(now or self._clock(), self.time_limit):
            return False
        self._end_combo()
        return True

    def force_end(self) -> None:
        """Close the current streak regardless of its window (e.g. game over)."""

        self._end_combo()

    def reset(self) -> None:
        """Forget the current streak and the completed history."""

        self._cancel_timer()
        self._current = None
        self._completed.clear()

    def close(self) -> None:
        """Release the pending expiry timer."""

        self._cancel_timer()

    def statistics(self) -> ComboStatistics:
        streaks = list(self._completed)
        if self._current is not None:
            streaks.append(self._current)
        if not streaks:
            return ComboStatistics()
        levels = [streak.level for streak in streaks]
        return ComboStatistics(
            max_level=max(levels),
            max_words_in_combo=max(streak.words_in_streak for streak in streaks),
            total_combos=len(self._completed),
            average_level=sum(levels) / len(levels),
            current_combo=self._current,
        )

    # Internal helpers -------------------------------------------------
    def _end_combo(self) -> None:
        self._cancel_timer()
        if self._current is None:
            return
        ended = self._current
        self._completed.append(ended)
        self._current = None
        logger.debug("Combo ended after %s words", ended.words_in_streak)
        self._fire(self.on_ended, ended)

    def _reset_timer(self) -> None:
        self._cancel_timer()
        self._timer = schedule_expiry(self.time_limit.total_seconds(), self._end_combo)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    @staticmethod
    def _fire(hook: Optional[ComboHook], streak: ComboStreak) -> None:
        if hook is None:
            return
        try:
            hook(streak)
        except Exception:
            logger.exception("Combo hook %r failed", hook)


__all__ = [
    "ComboEngine",
    "ComboStatistics",
    "ComboStreak",
    "DEFAULT_COMBO_TIME_LIMIT",
    "level_for_count",
    "multiplier_for_level",
]
