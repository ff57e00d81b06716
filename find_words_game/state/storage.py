"""Key-value snapshot store backed by a local JSON file."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .models import GameSession, GameSettings, HighScore, LearnedWord
from .serialization import (
    high_score_from_dict,
    high_score_to_dict,
    learned_word_from_dict,
    learned_word_to_dict,
    session_from_dict,
    session_to_dict,
    settings_from_dict,
    settings_to_dict,
)

LOGGER = logging.getLogger(__name__)

KEY_CURRENT_GAME = "current_game"
KEY_HIGH_SCORES = "high_scores"
KEY_GAME_SETTINGS = "game_settings"
KEY_LEARNED_WORDS = "learned_words"


class SnapshotStorage:
    """Read and write plain snapshots under fixed string keys.

    Every failure is logged and degrades to a default value; callers never
    see I/O errors.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    # Raw access -------------------------------------------------------
    def _read_all(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            LOGGER.error("Failed to read snapshots from %s: %s", self._path, exc)
            return {}
        if not isinstance(payload, dict):
            LOGGER.error("Snapshot file %s does not hold an object", self._path)
            return {}
        return payload

    def _write_all(self, payload: Dict[str, Any]) -> bool:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._path.with_suffix(f"{self._path.suffix}.tmp")
            tmp_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
            tmp_path.replace(self._path)
        except OSError as exc:
            LOGGER.error("Failed to persist snapshots to %s: %s", self._path, exc)
            return False
        return True

    def get(self, key: str) -> Optional[Any]:
        return self._read_all().get(key)

    def put(self, key: str, value: Any) -> bool:
        payload = self._read_all()
        payload[key] = value
        return self._write_all(payload)

    def remove(self, key: str) -> bool:
        payload = self._read_all()
        if key not in payload:
            return True
        payload.pop(key)
        return self._write_all(payload)

    def clear(self) -> None:
        """Remove the persisted file entirely."""

        try:
            if self._path.exists():
                self._path.unlink()
        except OSError as exc:
            LOGGER.error("Failed to delete snapshot file %s: %s", self._path, exc)

    # Typed helpers ----------------------------------------------------
    def save_current_game(self, session: GameSession) -> bool:
        return self.put(KEY_CURRENT_GAME, session_to_dict(session))

    def load_current_game(self) -> Optional[GameSession]:
        data = self.get(KEY_CURRENT_GAME)
        if not data:
            return None
        try:
            return session_from_dict(data)
        except (IndexError, KeyError, TypeError, ValueError) as exc:
            LOGGER.error("Failed to deserialize saved game: %s", exc)
            return None

    def clear_current_game(self) -> bool:
        return self.remove(KEY_CURRENT_GAME)

    def save_settings(self, settings: GameSettings) -> bool:
        return self.put(KEY_GAME_SETTINGS, settings_to_dict(settings))

    def load_settings(self) -> GameSettings:
        data = self.get(KEY_GAME_SETTINGS)
        if not isinstance(data, dict):
            return GameSettings()
        return settings_from_dict(data)

    def save_high_scores(self, scores: List[HighScore]) -> bool:
        return self.put(KEY_HIGH_SCORES, [high_score_to_dict(score) for score in scores])

    def load_high_scores(self) -> List[HighScore]:
        scores: List[HighScore] = []
        for entry in self.get(KEY_HIGH_SCORES) or []:
            try:
                scores.append(high_score_from_dict(entry))
            except (KeyError, TypeError, ValueError) as exc:
                LOGGER.error("Skipping invalid high score entry %s: %s", entry, exc)
        return scores

    def load_learned_words(self) -> List[LearnedWord]:
        words: List[LearnedWord] = []
        for entry in self.get(KEY_LEARNED_WORDS) or []:
            try:
                words.append(learned_word_from_dict(entry))
            except (TypeError, ValueError) as exc:
                LOGGER.error("Skipping invalid learned word %s: %s", entry, exc)
        return words

    def add_learned_word(self, entry: LearnedWord) -> None:
        """Save a learned word, bumping the counters if it is already known."""

        words = self.load_learned_words()
        for index, existing in enumerate(words):
            if existing.word != entry.word:
                continue
            encountered = existing.times_encountered + 1
            average = (
                existing.average_time_to_find * existing.times_encountered + entry.average_time_to_find
            ) / encountered
            words[index] = LearnedWord(
                word=existing.word,
                definition=existing.definition,
                phonetic=existing.phonetic,
                part_of_speech=existing.part_of_speech,
                example=existing.example,
                learned_at=existing.learned_at,
                times_encountered=encountered,
                correct_answers=existing.correct_answers + 1,
                average_time_to_find=average,
                is_favorite=existing.is_favorite,
                tags=existing.tags,
            )
            break
        else:
            words.append(entry)
        self.put(KEY_LEARNED_WORDS, [learned_word_to_dict(word) for word in words])


__all__ = [
    "KEY_CURRENT_GAME",
    "KEY_GAME_SETTINGS",
    "KEY_HIGH_SCORES",
    "KEY_LEARNED_WORDS",
    "SnapshotStorage",
]
