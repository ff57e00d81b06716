"""Read-only word set used for membership checks and hint scans."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, Iterator, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_DICTIONARY_PATH = Path(__file__).resolve().parent.parent / "data" / "words_en.jsonl"


def normalize_word(word: str) -> str:
    """Normalize words for lookups: trim and uppercase."""

    return word.strip().upper()


class WordDictionary:
    """Immutable set of uppercase words.

    Built once and passed by reference to every validator.  Iteration is
    sorted so that scans over the dictionary are reproducible.
    """

    __slots__ = ("_words", "_ordered")

    def __init__(self, words: Iterable[str] = ()) -> None:
        normalized = {normalize_word(word) for word in words}
        normalized.discard("")
        self._words = frozenset(word for word in normalized if word.isalpha())
        self._ordered = tuple(sorted(self._words))

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "WordDictionary":
        """Load a ``.jsonl`` file of ``{"word": ...}`` rows or a plain word list."""

        path = Path(path)
        if not path.exists():
            logger.warning("Dictionary file %s does not exist, using an empty dictionary", path)
            return cls()
        words = []
        is_jsonl = path.suffix == ".jsonl"
        with path.open("r", encoding="utf-8") as handle:
            for line in handle:
                line = line.strip()
                if not line:
                    continue
                if not is_jsonl:
                    words.append(line)
                    continue
                try:
                    data = json.loads(line)
                except json.JSONDecodeError:
                    continue
                word = data.get("word") if isinstance(data, dict) else None
                if word:
                    words.append(str(word))
        dictionary = cls(words)
        logger.info("Loaded %d words from %s", len(dictionary), path)
        return dictionary

    @classmethod
    def load_default(cls, path: Optional[Union[str, Path]] = None) -> "WordDictionary":
        return cls.from_file(path or DEFAULT_DICTIONARY_PATH)

    def contains(self, word: str) -> bool:
        return normalize_word(word) in self._words

    def __contains__(self, word: object) -> bool:
        return isinstance(word, str) and self.contains(word)

    def __iter__(self) -> Iterator[str]:
        return iter(self._ordered)

    def __len__(self) -> int:
        return len(self._words)


__all__ = ["DEFAULT_DICTIONARY_PATH", "WordDictionary", "normalize_word"]
