"""Random letter generation biased toward playable English words."""

from __future__ import annotations

import math
import random
from collections import Counter
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

# Approximate English letter frequencies (percent of running text).
LETTER_FREQUENCY: Dict[str, float] = {
    "A": 8.12, "B": 1.49, "C": 2.78, "D": 4.25, "E": 12.02,
    "F": 2.23, "G": 2.02, "H": 6.09, "I": 6.97, "J": 0.15,
    "K": 0.77, "L": 4.03, "M": 2.41, "N": 6.75, "O": 7.51,
    "P": 1.93, "Q": 0.10, "R": 5.99, "S": 6.33, "T": 9.06,
    "U": 2.76, "V": 0.98, "W": 2.36, "X": 0.15, "Y": 1.97,
    "Z": 0.07,
}

VOWELS: Tuple[str, ...] = ("A", "E", "I", "O", "U")

_CONSONANTS: Tuple[str, ...] = tuple(letter for letter in LETTER_FREQUENCY if letter not in VOWELS)
_CONSONANT_WEIGHTS: Tuple[float, ...] = tuple(LETTER_FREQUENCY[letter] for letter in _CONSONANTS)

COMMON_TRIGRAMS: Tuple[frozenset, ...] = tuple(
    frozenset(combo)
    for combo in ("THE", "AND", "THA", "ERS", "HAS", "HIS", "THI", "FOR", "ARE", "WIT")
)

DEFAULT_MAX_ATTEMPTS = 10

_RANDOM = random.Random()


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _fill(count: int, vowel_count: int, rng: random.Random) -> List[str]:
    letters = [rng.choice(VOWELS) for _ in range(vowel_count)]
    letters.extend(rng.choices(_CONSONANTS, weights=_CONSONANT_WEIGHTS, k=count - vowel_count))
    rng.shuffle(letters)
    return letters


def generate_letters(count: int, rng: Optional[random.Random] = None) -> List[str]:
    """Return ``count`` uppercase letters with roughly 30% vowels."""

    if count <= 0:
        return []
    rng = rng or _RANDOM
    min_vowels = 1 if count <= 3 else 2
    max_vowels = max(count // 2, min_vowels)
    vowel_count = min(max(_round_half_up(count * 0.3), min_vowels), max_vowels)
    return _fill(count, vowel_count, rng)


def has_minimum_playability(letters: Iterable[str]) -> bool:
    """Heuristic check: two vowels and one common trigram present as a set."""

    letters = [letter.upper() for letter in letters]
    if sum(1 for letter in letters if letter in VOWELS) < 2:
        return False
    available = set(letters)
    return any(trigram <= available for trigram in COMMON_TRIGRAMS)


def generate_playable_letters(
    count: int,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    rng: Optional[random.Random] = None,
) -> List[str]:
    """Retry :func:`generate_letters` until the set looks playable.

    After ``max_attempts`` the last attempt is returned as is.
    """

    letters = generate_letters(count, rng)
    attempts = 1
    while attempts < max_attempts and not has_minimum_playability(letters):
        letters = generate_letters(count, rng)
        attempts += 1
    return letters


def generate_themed_letters(
    count: int,
    theme: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> List[str]:
    """Generate letters for a named theme; unknown themes fall back to playable sets."""

    if count <= 0:
        return []
    rng = rng or _RANDOM
    theme = (theme or "").lower()
    if theme == "vowel_heavy":
        return _fill(count, min(_round_half_up(count * 0.5), count), rng)
    if theme == "consonant_heavy":
        upper = max(count - 1, 1)
        return _fill(count, min(max(_round_half_up(count * 0.2), 1), upper), rng)
    return generate_playable_letters(count, rng=rng)


def letter_distribution(letters: Sequence[str]) -> Dict[str, int]:
    return dict(Counter(letters))


__all__ = [
    "COMMON_TRIGRAMS",
    "LETTER_FREQUENCY",
    "VOWELS",
    "generate_letters",
    "generate_playable_letters",
    "generate_themed_letters",
    "has_minimum_playability",
    "letter_distribution",
]
