"""Dataclasses describing the Find Words session and its records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Dict, List, Optional, Tuple


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""

    return datetime.now(timezone.utc)


class GameState(Enum):
    NOT_STARTED = "not_started"
    PLAYING = "playing"
    PAUSED = "paused"
    FINISHED = "finished"


class Difficulty(Enum):
    """Named preset bundling letter count, time limit and minimum word length."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def letter_count(self) -> int:
        return _DIFFICULTY_PRESETS[self][0]

    @property
    def time_limit(self) -> int:
        return _DIFFICULTY_PRESETS[self][1]

    @property
    def min_word_length(self) -> int:
        return _DIFFICULTY_PRESETS[self][2]


# letter_count, time_limit (seconds), min_word_length
_DIFFICULTY_PRESETS: Dict[Difficulty, Tuple[int, int, int]] = {
    Difficulty.EASY: (9, 120, 2),
    Difficulty.MEDIUM: (12, 90, 3),
    Difficulty.HARD: (15, 60, 4),
}


@dataclass(frozen=True, slots=True)
class GameSettings:
    """Player preferences read by the engine, never mutated by it."""

    difficulty: Difficulty = Difficulty.MEDIUM
    player_name: str = "Player"
    sound_enabled: bool = True
    vibration_enabled: bool = True
    show_hints: bool = True
    learning_mode_enabled: bool = False
    auto_save_words: bool = True
    show_definitions: bool = True
    enable_pronunciation: bool = True


@dataclass(frozen=True, slots=True)
class WordDefinition:
    """Dictionary entry returned by the definition lookup."""

    word: str
    phonetic: str = ""
    meanings: Tuple[str, ...] = ()
    part_of_speech: str = ""
    examples: Tuple[str, ...] = ()

    @property
    def primary_definition(self) -> str:
        return self.meanings[0] if self.meanings else ""

    @property
    def primary_example(self) -> str:
        return self.examples[0] if self.examples else ""


@dataclass(frozen=True, slots=True, eq=False)
class Word:
    """A word found by the player.

    ``letter_indices`` point back into the session letters in selection
    order.  Two words compare equal when their text matches.
    """

    text: str
    score: int
    found_at: datetime
    letter_indices: Tuple[int, ...]
    definition: Optional[WordDefinition] = None
    time_to_find: float = 0.0
    is_learned: bool = False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Word):
            return NotImplemented
        return self.text == other.text

    def __hash__(self) -> int:
        return hash(self.text)


@dataclass(frozen=True, slots=True)
class GameSession:
    """Immutable snapshot of a single game.

    Every engine operation returns a new snapshot; ``current_input`` is
    always the letters at ``selected_letter_indices`` joined in order.
    """

    id: str
    letters: Tuple[str, ...]
    settings: GameSettings
    start_time: datetime
    state: GameState
    time_remaining: int
    found_words: Tuple[Word, ...] = ()
    end_time: Optional[datetime] = None
    current_input: str = ""
    selected_letter_indices: Tuple[int, ...] = ()

    @property
    def total_score(self) -> int:
        return sum(word.score for word in self.found_words)

    @property
    def longest_word(self) -> Optional[Word]:
        longest: Optional[Word] = None
        for word in self.found_words:
            if longest is None or len(word.text) > len(longest.text):
                longest = word
        return longest

    @property
    def words_by_length(self) -> Dict[int, List[Word]]:
        grouped: Dict[int, List[Word]] = {}
        for word in self.found_words:
            grouped.setdefault(len(word.text), []).append(word)
        return grouped

    @property
    def is_active(self) -> bool:
        return self.state in (GameState.PLAYING, GameState.PAUSED)

    @property
    def is_finished(self) -> bool:
        return self.state is GameState.FINISHED or self.time_remaining <= 0

    def duration(self, *, now: Optional[datetime] = None) -> timedelta:
        end = self.end_time or now or utcnow()
        return end - self.start_time

    def has_found(self, text: str) -> bool:
        normalized = text.upper()
        return any(word.text.upper() == normalized for word in self.found_words)


@dataclass(frozen=True, slots=True)
class HighScore:
    """Entry of the per-difficulty leaderboard."""

    player_name: str
    score: int
    words_found: int
    longest_word: str
    difficulty: Difficulty
    achieved_at: datetime
    game_duration: int

    @property
    def formatted_duration(self) -> str:
        minutes, seconds = divmod(max(self.game_duration, 0), 60)
        return f"{minutes:02d}:{seconds:02d}"


@dataclass(frozen=True, slots=True)
class LearnedWord:
    """A found word saved together with its definition."""

    word: str
    definition: str
    phonetic: str = ""
    part_of_speech: str = ""
    example: str = ""
    learned_at: datetime = field(default_factory=utcnow)
    times_encountered: int = 1
    correct_answers: int = 1
    average_time_to_find: float = 0.0
    is_favorite: bool = False
    tags: Tuple[str, ...] = ()

    @classmethod
    def from_word(
        cls,
        word: str,
        definition: Optional[WordDefinition],
        *,
        time_to_find: float = 0.0,
        now: Optional[datetime] = None,
    ) -> "LearnedWord":
        return cls(
            word=word.upper(),
            definition=definition.primary_definition if definition else "No definition available",
            phonetic=definition.phonetic if definition else "",
            part_of_speech=definition.part_of_speech if definition else "",
            example=definition.primary_example if definition else "",
            learned_at=now or utcnow(),
            average_time_to_find=time_to_find,
        )


class GameContractError(RuntimeError):
    """Raised when a caller asks for something the session state forbids."""
