"""Runtime configuration read from environment variables."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default


def _env_path(name: str, default: Optional[Path]) -> Optional[Path]:
    raw = os.environ.get(name)
    return Path(raw) if raw else default


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DICTIONARY_PATH = _env_path("FIND_WORDS_DICTIONARY_PATH", BASE_DIR / "data" / "words_en.jsonl")
STATE_PATH = _env_path("FIND_WORDS_STATE_PATH", BASE_DIR / ".find_words_state.json")

COMBO_TIME_LIMIT_SECONDS = _env_float("FIND_WORDS_COMBO_TIME_LIMIT", 10.0)
DEFINITION_TIMEOUT_SECONDS = _env_float("FIND_WORDS_DEFINITION_TIMEOUT", 10.0)
DEFINITION_API_URL = os.environ.get(
    "FIND_WORDS_DEFINITION_API_URL", "https://api.dictionaryapi.dev/api/v2/entries/en"
)

OPENAI_LLM_MODEL = os.environ.get("OPENAI_LLM_MODEL", "o4-mini")
