"""Per-difficulty leaderboard rules."""

from __future__ import annotations

from typing import List, Sequence

from ..state.models import Difficulty, HighScore

MAX_SCORES_PER_DIFFICULTY = 10
DUPLICATE_WINDOW_SECONDS = 2


def sort_by_score(scores: Sequence[HighScore]) -> List[HighScore]:
    return sorted(scores, key=lambda entry: entry.score, reverse=True)


def filter_by_difficulty(scores: Sequence[HighScore], difficulty: Difficulty) -> List[HighScore]:
    return [entry for entry in scores if entry.difficulty is difficulty]


def get_top_scores(scores: Sequence[HighScore], difficulty: Difficulty) -> List[HighScore]:
    return sort_by_score(filter_by_difficulty(scores, difficulty))[:MAX_SCORES_PER_DIFFICULTY]


def is_high_score(scores: Sequence[HighScore], new_score: int, difficulty: Difficulty) -> bool:
    """A score qualifies while the table has room or when it beats the last entry."""

    top = get_top_scores(scores, difficulty)
    if len(top) < MAX_SCORES_PER_DIFFICULTY:
        return True
    return new_score > top[-1].score


def add_high_score(scores: Sequence[HighScore], new_score: HighScore) -> List[HighScore]:
    """Insert ``new_score`` and trim its difficulty back to the top entries."""

    if not is_high_score(scores, new_score.score, new_score.difficulty):
        return list(scores)
    combined = list(scores) + [new_score]
    others = [entry for entry in combined if entry.difficulty is not new_score.difficulty]
    return others + get_top_scores(combined, new_score.difficulty)


def remove_duplicates(scores: Sequence[HighScore]) -> List[HighScore]:
    """Drop entries repeating player, score and difficulty within two seconds."""

    unique: List[HighScore] = []
    for entry in scores:
        duplicate = any(
            existing.player_name == entry.player_name
            and existing.score == entry.score
            and existing.difficulty is entry.difficulty
            and abs((existing.achieved_at - entry.achieved_at).total_seconds()) < DUPLICATE_WINDOW_SECONDS
            for existing in unique
        )
        if not duplicate:
            unique.append(entry)
    return unique


__all__ = [
    "MAX_SCORES_PER_DIFFICULTY",
    "add_high_score",
    "filter_by_difficulty",
    "get_top_scores",
    "is_high_score",
    "remove_duplicates",
    "sort_by_score",
]
