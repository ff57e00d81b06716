"""Best-effort word definitions for learning mode.

Lookups never raise: each provider failure falls through to the next one,
then to a small offline table, then to ``None``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

from ..config import DEFINITION_TIMEOUT_SECONDS
from ..state.models import WordDefinition

logger = logging.getLogger(__name__)

SyncLookup = Callable[[str], Optional[Any]]
AsyncLookup = Callable[[str], Awaitable[Optional[Mapping[str, str]]]]

OFFLINE_DEFINITIONS: Dict[str, WordDefinition] = {
    "cat": WordDefinition(
        word="cat",
        phonetic="/kæt/",
        meanings=("A small domesticated carnivorous mammal with soft fur, a short snout, and retractable claws.",),
        part_of_speech="noun",
        examples=("The cat sat on the mat.",),
    ),
    "dog": WordDefinition(
        word="dog",
        phonetic="/dɔːɡ/",
        meanings=(
            "A domesticated carnivorous mammal that typically has a long snout, "
            "an acute sense of smell, and a barking voice.",
        ),
        part_of_speech="noun",
        examples=("The dog barked loudly.",),
    ),
    "house": WordDefinition(
        word="house",
        phonetic="/haʊs/",
        meanings=("A building for human habitation.",),
        part_of_speech="noun",
        examples=("They live in a big house.",),
    ),
    "book": WordDefinition(
        word="book",
        phonetic="/bʊk/",
        meanings=("A written or printed work consisting of pages bound in covers.",),
        part_of_speech="noun",
        examples=("She read a good book.",),
    ),
    "water": WordDefinition(
        word="water",
        phonetic="/ˈwɔːtə/",
        meanings=("A colourless, transparent, odourless liquid that forms the seas, lakes and rivers.",),
        part_of_speech="noun",
        examples=("A glass of water.",),
    ),
}


def parse_dictionary_entry(entry: Mapping[str, Any]) -> WordDefinition:
    """Flatten a Free Dictionary API entry into a :class:`WordDefinition`."""

    meanings: List[str] = []
    examples: List[str] = []
    part_of_speech = ""
    for meaning in entry.get("meanings") or []:
        if not isinstance(meaning, Mapping):
            continue
        if meaning.get("partOfSpeech") and not part_of_speech:
            part_of_speech = str(meaning["partOfSpeech"])
        for definition in meaning.get("definitions") or []:
            if not isinstance(definition, Mapping):
                continue
            if definition.get("definition"):
                meanings.append(str(definition["definition"]))
            if definition.get("example"):
                examples.append(str(definition["example"]))
    return WordDefinition(
        word=str(entry.get("word", "")),
        phonetic=str(entry.get("phonetic", "") or ""),
        meanings=tuple(meanings),
        part_of_speech=part_of_speech,
        examples=tuple(examples),
    )


class DefinitionService:
    """Fetch and cache definitions from the configured providers.

    ``dictionary_lookup`` and ``wiktionary_lookup`` are blocking calls and run
    in a worker thread under ``timeout``; ``llm_lookup`` is awaited directly.
    Providers default to the HTTP helpers in :mod:`wiktionary_utils` and
    :mod:`llm_utils`.
    """

    def __init__(
        self,
        *,
        dictionary_lookup: Optional[SyncLookup] = None,
        wiktionary_lookup: Optional[SyncLookup] = None,
        llm_lookup: Optional[AsyncLookup] = None,
        timeout: float = DEFINITION_TIMEOUT_SECONDS,
        offline: Optional[Mapping[str, WordDefinition]] = None,
    ) -> None:
        self._dictionary_lookup = dictionary_lookup
        self._wiktionary_lookup = wiktionary_lookup
        self._llm_lookup = llm_lookup
        self._timeout = timeout
        self._offline = dict(OFFLINE_DEFINITIONS if offline is None else offline)
        self._cache: Dict[str, WordDefinition] = {}

    @classmethod
    def with_default_providers(cls, **kwargs: Any) -> "DefinitionService":
        import llm_utils
        import wiktionary_utils

        return cls(
            dictionary_lookup=wiktionary_utils.lookup_dictionary_api,
            wiktionary_lookup=wiktionary_utils.lookup_wiktionary_meaning,
            llm_lookup=llm_utils.describe_word,
            **kwargs,
        )

    async def get_definition(self, word: str) -> Optional[WordDefinition]:
        key = word.strip().lower()
        if not key:
            return None
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        definition = await self._lookup(key)
        if definition is None:
            definition = self._offline.get(key)
        if definition is not None:
            self._cache[key] = definition
        else:
            logger.info("No definition found for %s", key)
        return definition

    async def _lookup(self, key: str) -> Optional[WordDefinition]:
        entry = await self._run_blocking(self._dictionary_lookup, key)
        if isinstance(entry, Mapping):
            parsed = parse_dictionary_entry(entry)
            if parsed.meanings:
                return parsed

        meaning = await self._run_blocking(self._wiktionary_lookup, key)
        if isinstance(meaning, str) and meaning:
            return WordDefinition(word=key, meanings=(meaning,))

        if self._llm_lookup is not None:
            try:
                described = await asyncio.wait_for(self._llm_lookup(key), timeout=self._timeout)
            except asyncio.TimeoutError:
                logger.warning("LLM definition lookup timed out for %s", key)
                described = None
            except Exception:
                logger.exception("LLM definition lookup failed for %s", key)
                described = None
            if described and described.get("definition"):
                return WordDefinition(
                    word=key,
                    meanings=(described["definition"],),
                    part_of_speech=described.get("part_of_speech", ""),
                )
        return None

    async def _run_blocking(self, lookup: Optional[SyncLookup], key: str) -> Optional[Any]:
        if lookup is None:
            return None
        try:
            return await asyncio.wait_for(asyncio.to_thread(lookup, key), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.warning("Definition lookup %s timed out for %s", getattr(lookup, "__name__", lookup), key)
        except Exception:
            logger.exception("Definition lookup %s failed for %s", getattr(lookup, "__name__", lookup), key)
        return None

    def clear_cache(self) -> None:
        self._cache.clear()


__all__ = ["DefinitionService", "OFFLINE_DEFINITIONS", "parse_dictionary_entry"]
