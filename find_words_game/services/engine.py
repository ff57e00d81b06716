"""Game session state machine.

Every operation takes a :class:`GameSession` snapshot and returns a new one.
Requests that the current state does not allow return the input unchanged,
so callers never need to guard before calling.
"""

from __future__ import annotations

import logging
import random
import secrets
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Optional, Protocol, Sequence, Tuple

from ..state.models import (
    GameContractError,
    GameSession,
    GameSettings,
    GameState,
    HighScore,
    LearnedWord,
    Word,
    WordDefinition,
    utcnow,
)
from . import high_scores
from .combo import ComboEngine, ComboStreak
from .letters import generate_playable_letters
from .validator import Reason, WordValidator

logger = logging.getLogger(__name__)

_FAILURE_MESSAGES = {
    Reason.GAME_NOT_ACTIVE: "Game is not active",
    Reason.NO_WORD_ENTERED: "No word entered",
    Reason.ALREADY_FOUND: "Word already found",
}


class EventKind(Enum):
    WORD_FOUND = "word_found"
    COMBO_LEVEL = "combo_level"
    TIME_BONUS = "time_bonus"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class GameEvent:
    """Feedback signal for the presentation layer (sound, haptics, speech)."""

    kind: EventKind
    value: int = 0
    detail: str = ""


@dataclass(frozen=True, slots=True)
class SubmissionResult:
    success: bool
    message: str
    session: GameSession
    reason: Optional[Reason] = None
    word: Optional[Word] = None
    combo: Optional[ComboStreak] = None
    events: Tuple[GameEvent, ...] = ()


class DefinitionLookup(Protocol):
    async def get_definition(self, word: str) -> Optional[WordDefinition]: ...


class LearnedWordStore(Protocol):
    def add_learned_word(self, entry: LearnedWord) -> None: ...


def calculate_score(text: str) -> int:
    """Base score for a word from its length alone."""

    length = len(text)
    if length < 3:
        return 0
    table = {3: 10, 4: 20, 5: 35, 6: 55, 7: 80, 8: 110}
    if length in table:
        return table[length]
    return 110 + (length - 8) * 40


def _generate_game_id(now: datetime) -> str:
    return f"game_{int(now.timestamp() * 1000)}_{secrets.token_hex(3)}"


# Lifecycle ------------------------------------------------------------
def create_new_game(
    settings: GameSettings,
    *,
    rng: Optional[random.Random] = None,
    letters: Optional[Sequence[str]] = None,
    now: Optional[datetime] = None,
) -> GameSession:
    """Build a NOT_STARTED session with freshly generated letters.

    ``letters`` overrides generation, mostly for tests and replays.
    """

    moment = now or utcnow()
    if letters is None:
        letters = generate_playable_letters(settings.difficulty.letter_count, rng=rng)
    session = GameSession(
        id=_generate_game_id(moment),
        letters=tuple(letter.upper() for letter in letters),
        settings=settings,
        start_time=moment,
        state=GameState.NOT_STARTED,
        time_remaining=settings.difficulty.time_limit,
    )
    logger.info("Created game %s (%s): %s", session.id, settings.difficulty.value, "".join(session.letters))
    return session


def start_game(session: GameSession, *, now: Optional[datetime] = None) -> GameSession:
    if session.state is not GameState.NOT_STARTED:
        return session
    return replace(
        session,
        state=GameState.PLAYING,
        start_time=now or utcnow(),
        time_remaining=session.settings.difficulty.time_limit,
    )


def pause_game(session: GameSession) -> GameSession:
    if session.state is not GameState.PLAYING:
        return session
    return replace(session, state=GameState.PAUSED)


def resume_game(session: GameSession) -> GameSession:
    if session.state is not GameState.PAUSED:
        return session
    return replace(session, state=GameState.PLAYING)


def end_game(
    session: GameSession,
    *,
    combo: Optional[ComboEngine] = None,
    now: Optional[datetime] = None,
) -> GameSession:
    """Finish the game from any state; a finished game is returned as is."""

    if combo is not None:
        combo.force_end()
    if session.state is GameState.FINISHED:
        return session
    logger.info("Game %s finished with %d points", session.id, session.total_score)
    return replace(
        session,
        state=GameState.FINISHED,
        end_time=now or utcnow(),
        time_remaining=0,
    )


def update_timer(
    session: GameSession,
    new_remaining: int,
    *,
    combo: Optional[ComboEngine] = None,
    now: Optional[datetime] = None,
) -> GameSession:
    """Apply a countdown value; reaching zero finishes the game.

    Only time bonuses may raise the countdown, so larger values are ignored.
    """

    if session.state is not GameState.PLAYING:
        return session
    remaining = min(new_remaining, session.time_remaining)
    updated = replace(session, time_remaining=remaining)
    if remaining <= 0:
        return end_game(updated, combo=combo, now=now)
    return updated


def tick(
    session: GameSession,
    *,
    combo: Optional[ComboEngine] = None,
    now: Optional[datetime] = None,
) -> GameSession:
    """Advance the countdown by one second."""

    return update_timer(session, session.time_remaining - 1, combo=combo, now=now)


def add_time_bonus(session: GameSession, bonus_seconds: int) -> GameSession:
    if session.state is not GameState.PLAYING or bonus_seconds <= 0:
        return session
    return replace(session, time_remaining=session.time_remaining + bonus_seconds)


# Selection ------------------------------------------------------------
def select_letter(session: GameSession, index: int) -> GameSession:
    if session.state is not GameState.PLAYING:
        return session
    if index < 0 or index >= len(session.letters):
        return session
    if index in session.selected_letter_indices:
        return session
    return replace(
        session,
        selected_letter_indices=session.selected_letter_indices + (index,),
        current_input=session.current_input + session.letters[index].upper(),
    )


def deselect_last_letter(session: GameSession) -> GameSession:
    if session.state is not GameState.PLAYING or not session.selected_letter_indices:
        return session
    remaining = session.selected_letter_indices[:-1]
    return replace(
        session,
        selected_letter_indices=remaining,
        current_input="".join(session.letters[i].upper() for i in remaining),
    )


def clear_selection(session: GameSession) -> GameSession:
    if session.state is not GameState.PLAYING:
        return session
    return replace(session, selected_letter_indices=(), current_input="")


def select_word(session: GameSession, text: str) -> Optional[GameSession]:
    """Replace the selection with letters spelling ``text``, first free tile first.

    Returns ``None`` when the letters cannot spell ``text``; non-playing
    sessions are returned unchanged.
    """

    if session.state is not GameState.PLAYING:
        return session
    updated = clear_selection(session)
    for char in text.strip().upper():
        index = next(
            (
                i
                for i, letter in enumerate(updated.letters)
                if letter.upper() == char and i not in updated.selected_letter_indices
            ),
            None,
        )
        if index is None:
            return None
        updated = select_letter(updated, index)
    return updated


# Submission -----------------------------------------------------------
def _failure(session: GameSession, reason: Reason, message: str = "") -> SubmissionResult:
    text = message or _FAILURE_MESSAGES.get(reason, "Invalid word")
    logger.debug("Rejected submission %r in game %s: %s", session.current_input, session.id, reason.value)
    return SubmissionResult(
        success=False,
        message=text,
        session=session,
        reason=reason,
        events=(GameEvent(EventKind.ERROR, detail=reason.value),),
    )


def commit_word(
    session: GameSession,
    validator: WordValidator,
    *,
    combo: Optional[ComboEngine] = None,
    now: Optional[datetime] = None,
) -> SubmissionResult:
    """Validate and score the current input synchronously.

    The word, its score and the time bonus are all applied here, so the
    returned session is complete even if no definition is ever fetched.
    """

    if session.state is not GameState.PLAYING:
        return _failure(session, Reason.GAME_NOT_ACTIVE)
    if not session.current_input:
        return _failure(session, Reason.NO_WORD_ENTERED)

    text = session.current_input.upper()
    if session.has_found(text):
        return _failure(clear_selection(session), Reason.ALREADY_FOUND)

    validation = validator.validate(
        text,
        session.letters,
        min_length=session.settings.difficulty.min_word_length,
    )
    if not validation.valid:
        return _failure(clear_selection(session), validation.reason, validation.message)

    moment = now or utcnow()
    # Seconds since the game began, not since the previous word.
    time_to_find = float(int(max((moment - session.start_time).total_seconds(), 0)))

    base_score = calculate_score(text)
    streak = combo.add_word(text, moment) if combo is not None else None
    multiplier = streak.multiplier if streak is not None else 1.0
    final_score = int(base_score * multiplier + 0.5)

    word = Word(
        text=text,
        score=final_score,
        found_at=moment,
        letter_indices=session.selected_letter_indices,
        time_to_find=time_to_find,
    )
    updated = replace(
        session,
        found_words=session.found_words + (word,),
        selected_letter_indices=(),
        current_input="",
    )
    updated = add_time_bonus(updated, final_score)

    events = [GameEvent(EventKind.WORD_FOUND, value=len(text), detail=text)]
    message = f"Word found! +{final_score} points (+{final_score}s time)"
    if streak is not None and streak.level > 1:
        events.append(GameEvent(EventKind.COMBO_LEVEL, value=streak.level, detail=streak.description))
        message += f" • {streak.multiplier:.1f}x COMBO"
    events.append(GameEvent(EventKind.TIME_BONUS, value=final_score))

    logger.info("Game %s: %s scored %d (base %d, x%.1f)", session.id, text, final_score, base_score, multiplier)
    return SubmissionResult(
        success=True,
        message=message,
        session=updated,
        word=word,
        combo=streak,
        events=tuple(events),
    )


def attach_definition(session: GameSession, word: Word) -> GameSession:
    """Swap ``word`` in for the found word with the same text.

    Returns ``session`` unchanged when that word is no longer among the
    found words.
    """

    for index, existing in enumerate(session.found_words):
        if existing == word:
            words = session.found_words[:index] + (word,) + session.found_words[index + 1 :]
            return replace(session, found_words=words)
    return session


async def lookup_definition(
    word: Word,
    settings: GameSettings,
    *,
    definitions: Optional[DefinitionLookup] = None,
    learned_words: Optional[LearnedWordStore] = None,
) -> Optional[Word]:
    """Fetch a definition for a committed word when learning mode asks for one.

    Returns the enriched word, or None when nothing was looked up or found.
    The lookup is best effort: failures are logged and never raised.
    """

    if definitions is None:
        return None
    if not (settings.learning_mode_enabled and settings.show_definitions):
        return None
    try:
        definition = await definitions.get_definition(word.text)
    except Exception:
        logger.exception("Definition lookup failed for %s", word.text)
        return None
    if definition is None:
        return None

    word = replace(word, definition=definition)
    if settings.auto_save_words and learned_words is not None:
        try:
            learned_words.add_learned_word(
                LearnedWord.from_word(word.text, definition, time_to_find=word.time_to_find)
            )
            word = replace(word, is_learned=True)
        except Exception:
            logger.exception("Failed to save %s to the learned words", word.text)
    return word


async def submit_word(
    session: GameSession,
    validator: WordValidator,
    *,
    combo: Optional[ComboEngine] = None,
    settings: Optional[GameSettings] = None,
    definitions: Optional[DefinitionLookup] = None,
    learned_words: Optional[LearnedWordStore] = None,
    now: Optional[datetime] = None,
) -> SubmissionResult:
    """Commit the current input, then attach a definition when learning mode asks for one."""

    result = commit_word(session, validator, combo=combo, now=now)
    if not result.success or result.word is None:
        return result
    word = await lookup_definition(
        result.word,
        settings or session.settings,
        definitions=definitions,
        learned_words=learned_words,
    )
    if word is None:
        return result
    return replace(result, session=attach_definition(result.session, word), word=word)


# Queries --------------------------------------------------------------
def get_hints(session: GameSession, validator: WordValidator, max_hints: int = 3) -> list:
    return validator.get_hints(
        session.letters,
        [word.text for word in session.found_words],
        max_hints=max_hints,
    )


def is_high_score(session: GameSession, existing_scores: Sequence[HighScore]) -> bool:
    if session.state is not GameState.FINISHED:
        return False
    return high_scores.is_high_score(existing_scores, session.total_score, session.settings.difficulty)


def create_high_score(session: GameSession) -> HighScore:
    """Build a leaderboard entry; only finished games qualify."""

    if session.state is not GameState.FINISHED:
        raise GameContractError("Cannot create high score from unfinished game")
    longest = session.longest_word
    achieved_at = session.end_time or utcnow()
    return HighScore(
        player_name=session.settings.player_name,
        score=session.total_score,
        words_found=len(session.found_words),
        longest_word=longest.text if longest else "",
        difficulty=session.settings.difficulty,
        achieved_at=achieved_at,
        game_duration=int(session.duration(now=achieved_at).total_seconds()),
    )


__all__ = [
    "EventKind",
    "GameEvent",
    "SubmissionResult",
    "add_time_bonus",
    "attach_definition",
    "calculate_score",
    "clear_selection",
    "commit_word",
    "create_high_score",
    "create_new_game",
    "deselect_last_letter",
    "end_game",
    "get_hints",
    "is_high_score",
    "lookup_definition",
    "pause_game",
    "resume_game",
    "select_letter",
    "select_word",
    "start_game",
    "submit_word",
    "tick",
    "update_timer",
]
