"""Conversion of Find Words records to and from JSON-compatible dicts.

Closed sets (difficulty, game state) are stored as enum indices so that the
payloads stay stable across releases; timestamps use ISO-8601.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Optional, Type, TypeVar

from ..services.combo import ComboStatistics, ComboStreak
from .models import (
    Difficulty,
    GameSession,
    GameSettings,
    GameState,
    HighScore,
    LearnedWord,
    Word,
    WordDefinition,
    utcnow,
)

LOGGER = logging.getLogger(__name__)

Payload = Dict[str, Any]
E = TypeVar("E", Difficulty, GameState)


def enum_index(value: E) -> int:
    return list(type(value)).index(value)


def enum_from_index(enum_type: Type[E], index: Any, default: E) -> E:
    members = list(enum_type)
    try:
        return members[int(index)]
    except (IndexError, TypeError, ValueError):
        LOGGER.warning("Invalid %s index %r, using %s", enum_type.__name__, index, default)
        return default


def _parse_datetime(value: Optional[str]) -> datetime:
    if not value:
        return utcnow()
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        LOGGER.warning("Invalid datetime value %s in persisted snapshot", value)
        return utcnow()


# Settings -------------------------------------------------------------
def settings_to_dict(settings: GameSettings) -> Payload:
    return {
        "difficulty": enum_index(settings.difficulty),
        "soundEnabled": settings.sound_enabled,
        "vibrationEnabled": settings.vibration_enabled,
        "showHints": settings.show_hints,
        "playerName": settings.player_name,
        "learningModeEnabled": settings.learning_mode_enabled,
        "autoSaveWords": settings.auto_save_words,
        "showDefinitions": settings.show_definitions,
        "enablePronunciation": settings.enable_pronunciation,
    }


def settings_from_dict(payload: Payload) -> GameSettings:
    return GameSettings(
        difficulty=enum_from_index(Difficulty, payload.get("difficulty", 1), Difficulty.MEDIUM),
        sound_enabled=bool(payload.get("soundEnabled", True)),
        vibration_enabled=bool(payload.get("vibrationEnabled", True)),
        show_hints=bool(payload.get("showHints", True)),
        player_name=str(payload.get("playerName", "Player")),
        learning_mode_enabled=bool(payload.get("learningModeEnabled", False)),
        auto_save_words=bool(payload.get("autoSaveWords", True)),
        show_definitions=bool(payload.get("showDefinitions", True)),
        enable_pronunciation=bool(payload.get("enablePronunciation", True)),
    )


# Words ----------------------------------------------------------------
def definition_to_dict(definition: WordDefinition) -> Payload:
    return {
        "word": definition.word,
        "phonetic": definition.phonetic,
        "meanings": list(definition.meanings),
        "partOfSpeech": definition.part_of_speech,
        "examples": list(definition.examples),
    }


def definition_from_dict(payload: Payload) -> WordDefinition:
    return WordDefinition(
        word=str(payload.get("word", "")),
        phonetic=str(payload.get("phonetic", "")),
        meanings=tuple(str(item) for item in payload.get("meanings", [])),
        part_of_speech=str(payload.get("partOfSpeech", "")),
        examples=tuple(str(item) for item in payload.get("examples", [])),
    )


def word_to_dict(word: Word) -> Payload:
    return {
        "text": word.text,
        "score": word.score,
        "foundAt": word.found_at.isoformat(),
        "letterIndices": list(word.letter_indices),
        "definition": definition_to_dict(word.definition) if word.definition else None,
        "timeToFind": word.time_to_find,
        "isLearned": word.is_learned,
    }


def word_from_dict(payload: Payload) -> Word:
    definition_payload = payload.get("definition")
    return Word(
        text=str(payload["text"]),
        score=int(payload["score"]),
        found_at=_parse_datetime(payload.get("foundAt")),
        letter_indices=tuple(int(index) for index in payload.get("letterIndices", [])),
        definition=definition_from_dict(definition_payload) if definition_payload else None,
        time_to_find=float(payload.get("timeToFind", 0.0)),
        is_learned=bool(payload.get("isLearned", False)),
    )


# Sessions -------------------------------------------------------------
def session_to_dict(session: GameSession) -> Payload:
    return {
        "id": session.id,
        "letters": list(session.letters),
        "foundWords": [word_to_dict(word) for word in session.found_words],
        "settings": settings_to_dict(session.settings),
        "startTime": session.start_time.isoformat(),
        "endTime": session.end_time.isoformat() if session.end_time else None,
        "state": enum_index(session.state),
        "timeRemaining": session.time_remaining,
        "currentInput": session.current_input,
        "selectedLetterIndices": list(session.selected_letter_indices),
    }


def session_from_dict(payload: Payload) -> GameSession:
    letters = tuple(str(letter) for letter in payload["letters"])
    selected = tuple(int(index) for index in payload.get("selectedLetterIndices", []))
    end_time_raw = payload.get("endTime")
    return GameSession(
        id=str(payload["id"]),
        letters=letters,
        found_words=tuple(word_from_dict(entry) for entry in payload.get("foundWords", [])),
        settings=settings_from_dict(payload.get("settings", {})),
        start_time=_parse_datetime(payload.get("startTime")),
        end_time=_parse_datetime(end_time_raw) if end_time_raw else None,
        state=enum_from_index(GameState, payload.get("state", 0), GameState.NOT_STARTED),
        time_remaining=int(payload.get("timeRemaining", 0)),
        # Rebuilt from the indices so a hand-edited payload cannot desync them.
        current_input="".join(letters[index] for index in selected),
        selected_letter_indices=selected,
    )


# High scores and learned words ----------------------------------------
def high_score_to_dict(score: HighScore) -> Payload:
    return {
        "playerName": score.player_name,
        "score": score.score,
        "wordsFound": score.words_found,
        "longestWord": score.longest_word,
        "difficulty": enum_index(score.difficulty),
        "achievedAt": score.achieved_at.isoformat(),
        "gameDuration": score.game_duration,
    }


def high_score_from_dict(payload: Payload) -> HighScore:
    return HighScore(
        player_name=str(payload["playerName"]),
        score=int(payload["score"]),
        words_found=int(payload["wordsFound"]),
        longest_word=str(payload.get("longestWord", "")),
        difficulty=enum_from_index(Difficulty, payload.get("difficulty"), Difficulty.MEDIUM),
        achieved_at=_parse_datetime(payload.get("achievedAt")),
        game_duration=int(payload.get("gameDuration", 0)),
    )


def learned_word_to_dict(entry: LearnedWord) -> Payload:
    return {
        "word": entry.word,
        "definition": entry.definition,
        "phonetic": entry.phonetic,
        "partOfSpeech": entry.part_of_speech,
        "example": entry.example,
        "learnedAt": entry.learned_at.isoformat(),
        "timesEncountered": entry.times_encountered,
        "correctAnswers": entry.correct_answers,
        "averageTimeToFind": entry.average_time_to_find,
        "isFavorite": entry.is_favorite,
        "tags": list(entry.tags),
    }


def learned_word_from_dict(payload: Payload) -> LearnedWord:
    return LearnedWord(
        word=str(payload.get("word", "")),
        definition=str(payload.get("definition", "")),
        phonetic=str(payload.get("phonetic", "")),
        part_of_speech=str(payload.get("partOfSpeech", "")),
        example=str(payload.get("example", "")),
        learned_at=_parse_datetime(payload.get("learnedAt")),
        times_encountered=int(payload.get("timesEncountered", 1)),
        correct_answers=int(payload.get("correctAnswers", 1)),
        average_time_to_find=float(payload.get("averageTimeToFind", 0.0)),
        is_favorite=bool(payload.get("isFavorite", False)),
        tags=tuple(str(tag) for tag in payload.get("tags", [])),
    )


# Combo ----------------------------------------------------------------
def combo_to_dict(combo: ComboStreak) -> Payload:
    return {
        "level": combo.level,
        "wordsInStreak": combo.words_in_streak,
        "startTime": combo.start_time.isoformat(),
        "lastWordTime": combo.last_word_time.isoformat(),
        "multiplier": combo.multiplier,
        "wordsInCombo": list(combo.words_in_combo),
    }


def combo_from_dict(payload: Payload) -> ComboStreak:
    return ComboStreak(
        level=int(payload["level"]),
        words_in_streak=int(payload["wordsInStreak"]),
        start_time=_parse_datetime(payload.get("startTime")),
        last_word_time=_parse_datetime(payload.get("lastWordTime")),
        multiplier=float(payload["multiplier"]),
        words_in_combo=tuple(str(word) for word in payload.get("wordsInCombo", [])),
    )


def combo_statistics_to_dict(stats: ComboStatistics) -> Payload:
    return {
        "maxLevel": stats.max_level,
        "maxWordsInCombo": stats.max_words_in_combo,
        "totalCombos": stats.total_combos,
        "averageLevel": stats.average_level,
        "currentCombo": combo_to_dict(stats.current_combo) if stats.current_combo else None,
    }


def combo_statistics_from_dict(payload: Payload) -> ComboStatistics:
    current = payload.get("currentCombo")
    return ComboStatistics(
        max_level=int(payload.get("maxLevel", 0)),
        max_words_in_combo=int(payload.get("maxWordsInCombo", 0)),
        total_combos=int(payload.get("totalCombos", 0)),
        average_level=float(payload.get("averageLevel", 0.0)),
        current_combo=combo_from_dict(current) if current else None,
    )


__all__ = [
    "combo_from_dict",
    "combo_statistics_from_dict",
    "combo_statistics_to_dict",
    "combo_to_dict",
    "definition_from_dict",
    "definition_to_dict",
    "enum_from_index",
    "enum_index",
    "high_score_from_dict",
    "high_score_to_dict",
    "learned_word_from_dict",
    "learned_word_to_dict",
    "session_from_dict",
    "session_to_dict",
    "settings_from_dict",
    "settings_to_dict",
    "word_from_dict",
    "word_to_dict",
]
