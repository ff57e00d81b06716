"""Utility helpers that summarize Find Words sessions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from ..state.models import GameSession


@dataclass(slots=True)
class GameStatistics:
    """High-level snapshot of a game used for the results screen."""

    total_words: int
    total_score: int
    longest_word: str
    average_word_length: float
    words_by_length: Dict[int, int]
    time_elapsed: int
    duration_text: str
    words_per_minute: float


def _format_duration(seconds: int) -> str:
    seconds = max(seconds, 0)
    minutes, seconds = divmod(seconds, 60)
    return f"{minutes:02d}:{seconds:02d}"


def collect_game_stats(session: GameSession, *, now: Optional[datetime] = None) -> GameStatistics:
    """Aggregate metrics; nothing is cached so results never go stale."""

    words = session.found_words
    counts: Dict[int, int] = {}
    for length, grouped in session.words_by_length.items():
        counts[length] = len(grouped)
    elapsed = int(max(session.duration(now=now).total_seconds(), 0))
    minutes = elapsed // 60
    longest = session.longest_word
    return GameStatistics(
        total_words=len(words),
        total_score=session.total_score,
        longest_word=longest.text if longest else "",
        average_word_length=sum(len(word.text) for word in words) / len(words) if words else 0.0,
        words_by_length=counts,
        time_elapsed=elapsed,
        duration_text=_format_duration(elapsed),
        words_per_minute=len(words) / minutes if minutes > 0 else 0.0,
    )


def format_stats_message(stats: GameStatistics) -> str:
    """Render the plain-text summary shown when a game ends."""

    lines = [
        "Game Stats",
        f"Words found: {stats.total_words}",
        f"Score: {stats.total_score}",
        f"Longest word: {stats.longest_word or '-'}",
        f"Duration: {stats.duration_text}",
    ]
    by_length: List[str] = [f"{length}: {count}" for length, count in sorted(stats.words_by_length.items())]
    if by_length:
        lines.append("By length: " + ", ".join(by_length))
    return "\n".join(lines)


__all__ = ["GameStatistics", "collect_game_stats", "format_stats_message"]
