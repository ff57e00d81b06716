import random
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from find_words_game.services import letters


def test_generate_letters_count_and_alphabet():
    rng = random.Random(1)
    for count in (1, 3, 9, 12, 15):
        result = letters.generate_letters(count, rng)
        assert len(result) == count
        assert all(letter in letters.LETTER_FREQUENCY for letter in result)


def test_generate_letters_vowel_bounds():
    rng = random.Random(7)
    for _ in range(50):
        result = letters.generate_letters(12, rng)
        vowels = sum(1 for letter in result if letter in letters.VOWELS)
        # round(12 * 0.3) == 4, clamped to [2, 6]
        assert vowels == 4


def test_generate_letters_small_counts_keep_a_vowel():
    rng = random.Random(3)
    result = letters.generate_letters(3, rng)
    assert sum(1 for letter in result if letter in letters.VOWELS) == 1


def test_generate_letters_rounds_half_up():
    rng = random.Random(5)
    # 15 * 0.3 == 4.5 rounds up to 5
    result = letters.generate_letters(15, rng)
    assert sum(1 for letter in result if letter in letters.VOWELS) == 5


def test_generate_letters_empty():
    assert letters.generate_letters(0) == []


def test_has_minimum_playability():
    assert letters.has_minimum_playability(list("THEAXZ")) is True
    assert letters.has_minimum_playability(list("THXZQE")) is False
    assert letters.has_minimum_playability(list("ANDEXZ")) is True
    assert letters.has_minimum_playability(list("BCDFGA")) is False


def test_generate_playable_letters_is_reproducible():
    first = letters.generate_playable_letters(12, rng=random.Random(42))
    second = letters.generate_playable_letters(12, rng=random.Random(42))
    assert first == second
    assert len(first) == 12


def test_generate_playable_letters_returns_last_attempt(monkeypatch):
    calls = []

    def fake_generate(count, rng=None):
        calls.append(count)
        return ["X"] * count

    monkeypatch.setattr(letters, "generate_letters", fake_generate)
    result = letters.generate_playable_letters(5, max_attempts=4)
    assert result == ["X"] * 5
    assert len(calls) == 4


def test_themed_letters():
    rng = random.Random(9)
    heavy = letters.generate_themed_letters(10, "vowel_heavy", rng)
    assert sum(1 for letter in heavy if letter in letters.VOWELS) == 5
    light = letters.generate_themed_letters(10, "consonant_heavy", rng)
    assert sum(1 for letter in light if letter in letters.VOWELS) == 2
    assert len(letters.generate_themed_letters(9, "unknown", rng)) == 9


def test_letter_distribution():
    assert letters.letter_distribution(["A", "B", "A"]) == {"A": 2, "B": 1}
