"""Word validation against the dictionary and the available letters."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Set

from .dictionary import WordDictionary, normalize_word


class Reason(str, Enum):
    """Machine-distinguishable reasons for a rejected submission."""

    GAME_NOT_ACTIVE = "game not active"
    NO_WORD_ENTERED = "no word entered"
    ALREADY_FOUND = "already found"
    TOO_SHORT = "too short"
    CANNOT_FORM = "cannot form"
    NOT_A_WORD = "not a word"


@dataclass(frozen=True, slots=True)
class ValidationResult:
    valid: bool
    reason: Optional[Reason] = None
    message: str = ""


def can_make(word: str, letters: Counter) -> bool:
    c = Counter(word)
    for k, v in c.items():
        if letters.get(k, 0) < v:
            return False
    return True


def _letter_counts(letters: Iterable[str]) -> Counter:
    return Counter(letter.upper() for letter in letters)


class WordValidator:
    """Validate candidate words using an injected :class:`WordDictionary`."""

    def __init__(self, dictionary: WordDictionary) -> None:
        self.dictionary = dictionary

    def is_valid(self, word: str) -> bool:
        if not word:
            return False
        return self.dictionary.contains(word)

    def can_form_word(self, word: str, available_letters: Sequence[str]) -> bool:
        if not word:
            return False
        return can_make(normalize_word(word), _letter_counts(available_letters))

    def validate(self, word: str, available_letters: Sequence[str], min_length: int = 3) -> ValidationResult:
        """Check length, formability and membership; the first failure wins."""

        if len(word) < min_length:
            return ValidationResult(
                valid=False,
                reason=Reason.TOO_SHORT,
                message=f"Word must be at least {min_length} letters long",
            )
        if not self.can_form_word(word, available_letters):
            return ValidationResult(
                valid=False,
                reason=Reason.CANNOT_FORM,
                message="Cannot form word with available letters",
            )
        if not self.is_valid(word):
            return ValidationResult(
                valid=False,
                reason=Reason.NOT_A_WORD,
                message="Word not found in dictionary",
            )
        return ValidationResult(valid=True)

    def find_possible_words(
        self,
        available_letters: Sequence[str],
        min_length: int = 3,
        max_length: int = 10,
    ) -> Set[str]:
        counts = _letter_counts(available_letters)
        return {
            word
            for word in self.dictionary
            if min_length <= len(word) <= max_length and can_make(word, counts)
        }

    def get_hints(
        self,
        available_letters: Sequence[str],
        already_found: Iterable[str],
        max_hints: int = 3,
        min_length: int = 3,
        max_length: int = 10,
    ) -> List[str]:
        """Return up to ``max_hints`` unfound words, shortest first then alphabetical."""

        if max_hints <= 0:
            return []
        found = {normalize_word(word) for word in already_found}
        candidates = self.find_possible_words(available_letters, min_length, max_length) - found
        return sorted(candidates, key=lambda word: (len(word), word))[:max_hints]


__all__ = ["Reason", "ValidationResult", "WordValidator", "can_make"]
