"""State primitives for the Find Words game."""

from .models import (
    Difficulty,
    GameContractError,
    GameSession,
    GameSettings,
    GameState,
    HighScore,
    LearnedWord,
    Word,
    WordDefinition,
)

__all__ = [
    "Difficulty",
    "GameContractError",
    "GameSession",
    "GameSettings",
    "GameState",
    "HighScore",
    "LearnedWord",
    "Word",
    "WordDefinition",
]
