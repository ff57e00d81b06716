"""Shared fixtures for the Find Words tests."""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from find_words_game.services import WordDictionary, WordValidator


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO tests to run on asyncio only (expiry timers use asyncio)."""

    return "asyncio"


@pytest.fixture
def dictionary() -> WordDictionary:
    return WordDictionary(
        ["cab", "cat", "act", "bat", "tab", "at", "ab", "cabs", "scab", "bats", "tabs", "stab", "acts", "cast"]
    )


@pytest.fixture
def validator(dictionary: WordDictionary) -> WordValidator:
    return WordValidator(dictionary)


@pytest.fixture
def t0() -> datetime:
    return datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)
