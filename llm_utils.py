"""Utilities for asking an LLM about English words using LangChain."""

import json
import logging
import os
from typing import Any, Dict, Optional

from langchain_core.prompts import PromptTemplate
from langchain_openai import ChatOpenAI

from find_words_game.config import OPENAI_LLM_MODEL
from shared.logging_utils import configure_logging

configure_logging(extra_values=[os.environ.get("OPENAI_API_KEY")])
logger = logging.getLogger(__name__)


_prompt = PromptTemplate(
    input_variables=["word"],
    template=(
        "You are a lexicographer. Analyse the English word '{word}'. "
        "The word may be rare, archaic or a loanword. "
        "Treat it as existing if it appears in a dictionary or a well-known expression. "
        "If it has several senses, pick the most common one. "
        "Answer strictly as JSON with the fields 'exists', 'part_of_speech' and 'definition'. "
        "Example answers: {{\"exists\": false, \"part_of_speech\": \"\", \"definition\": \"\"}} "
        "or {{\"exists\": true, \"part_of_speech\": \"noun\", \"definition\": \"a short definition\"}}. "
        "If the word does not exist, set exists=false and leave the other fields empty."
    ),
)


class _DummyChain:
    async def ainvoke(self, *args, **kwargs):  # pragma: no cover - stub
        raise RuntimeError("LLM not available")


_chain: Optional[Any] = None


def _get_chain() -> Any:
    """Build the prompt | model pipeline on first use."""

    global _chain
    if _chain is not None:
        return _chain
    try:  # pragma: no cover - environment dependent
        _chain = _prompt | ChatOpenAI(model=OPENAI_LLM_MODEL)
    except TypeError:  # pragma: no cover - unsupported parameters
        logger.error(
            "ChatOpenAI initialization failed for model %s due to unsupported parameter configuration",
            OPENAI_LLM_MODEL,
            exc_info=True,
        )
        _chain = _DummyChain()
    except Exception:  # pragma: no cover - initialization failures
        logger.warning("ChatOpenAI initialization failed", exc_info=True)
        _chain = _DummyChain()
    return _chain


_cache: Dict[str, Optional[Dict[str, str]]] = {}


async def describe_word(word: str) -> Optional[Dict[str, str]]:
    """Return ``{"part_of_speech", "definition"}`` for an existing word.

    ``None`` is returned when the model says the word does not exist or when
    the model cannot be reached or answers with malformed JSON.
    """
    key = word.lower()
    logger.info("Querying word: %s", key)

    if key in _cache:
        logger.info("Cache hit for word: %s", key)
        return _cache[key]

    try:
        result = await _get_chain().ainvoke({"word": key})
    except Exception:  # pragma: no cover - network errors
        logger.exception("LLM request failed")
        return None
    raw = getattr(result, "content", result)
    logger.info("LLM raw response: %s", raw)

    try:
        data = json.loads(raw)
        exists = bool(data["exists"])
        definition = data.get("definition", "")
        part_of_speech = data.get("part_of_speech", "")
        if not isinstance(definition, str) or not isinstance(part_of_speech, str):
            raise ValueError("definition and part_of_speech must be strings")
    except Exception:
        logger.exception("Failed to parse LLM response")
        return None

    described: Optional[Dict[str, str]] = None
    if exists and definition:
        described = {"part_of_speech": part_of_speech, "definition": definition}
    logger.info("LLM parsed response: %s | exists: %s", data, exists)
    _cache[key] = described
    return described
