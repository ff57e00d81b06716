"""Find Words: build words from a random letter set against the clock."""

from .services import ComboEngine, WordDictionary, WordValidator
from .services.engine import SubmissionResult, create_new_game, submit_word
from .state import Difficulty, GameSession, GameSettings, GameState

__all__ = [
    "ComboEngine",
    "Difficulty",
    "GameSession",
    "GameSettings",
    "GameState",
    "SubmissionResult",
    "WordDictionary",
    "WordValidator",
    "create_new_game",
    "submit_word",
]
