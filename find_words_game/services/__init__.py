"""Service layer for the Find Words game."""

from .combo import ComboEngine, ComboStatistics, ComboStreak
from .dictionary import WordDictionary
from .validator import Reason, ValidationResult, WordValidator

__all__ = [
    "ComboEngine",
    "ComboStatistics",
    "ComboStreak",
    "Reason",
    "ValidationResult",
    "WordDictionary",
    "WordValidator",
]
