"""Utilities for querying English word definitions over HTTP."""

import json
import logging
import re
from typing import Any, Dict, Optional

from urllib import parse, request
from urllib.error import HTTPError, URLError

from bs4 import BeautifulSoup, NavigableString, Tag

from find_words_game.config import DEFINITION_API_URL, DEFINITION_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

USER_AGENT = "find-words/1.0"


def lookup_dictionary_api(word: str) -> Optional[Dict[str, Any]]:
    """Return the first entry from the Free Dictionary API for ``word``.

    The response is a JSON list of entries; only the first one is returned.
    ``None`` means the word is unknown or the service could not be reached.
    The network call is performed with ``urllib`` so it can be easily mocked
    in tests.
    """

    url = f"{DEFINITION_API_URL.rstrip('/')}/{parse.quote(word.lower())}"
    req = request.Request(url, headers={"User-Agent": USER_AGENT})
    try:
        with request.urlopen(req, timeout=DEFINITION_TIMEOUT_SECONDS) as resp:  # pragma: no cover - network
            data = json.loads(resp.read())
    except HTTPError as e:
        if e.code == 404:
            logger.info("Dictionary API has no entry for '%s'", word)
        else:
            logger.exception("Dictionary API HTTP error: %s", e)
        return None
    except URLError as e:  # pragma: no cover - network errors
        logger.exception("Dictionary API URL error: %s", e.reason)
        return None
    except json.JSONDecodeError as e:
        logger.exception("Dictionary API JSON error: %s", e)
        return None

    if not isinstance(data, list) or not data or not isinstance(data[0], dict):
        logger.info("Unexpected dictionary API payload for word '%s'", word)
        return None
    return data[0]


def lookup_wiktionary_meaning(word: str) -> Optional[str]:
    """Return the first definition from the English Wiktionary article.

    The function downloads ``/wiki/{word}``, scopes the search to the
    ``English`` section and returns the text of the first ``<li>`` in the
    first ordered list of that section (recursing into nested containers
    when needed).  Nested example lists and quotations are dropped.
    ``None`` is returned when the section is not present or no definition
    list is found.
    """

    url = f"https://en.wiktionary.org/wiki/{parse.quote(word.lower())}"
    req = request.Request(url, headers={"User-Agent": USER_AGENT})
    try:
        with request.urlopen(req, timeout=DEFINITION_TIMEOUT_SECONDS) as resp:  # pragma: no cover - network
            html = resp.read()
    except HTTPError as e:  # pragma: no cover - network errors
        logger.exception("Wiktionary HTTP error: %s", e)
        return None
    except URLError as e:  # pragma: no cover - network errors
        logger.exception("Wiktionary URL error: %s", e.reason)
        return None

    soup = BeautifulSoup(html, "html.parser")

    english_anchor = soup.find(id="English")
    if english_anchor is None:
        return None

    english_heading = english_anchor.find_parent(re.compile(r"^h[2-6]$")) or english_anchor
    # Newer skins wrap headings in a div.mw-heading; walk from the wrapper.
    wrapper = english_heading.parent
    if isinstance(wrapper, Tag) and "mw-heading" in (wrapper.get("class") or []):
        english_heading = wrapper

    definition_list: Optional[Tag] = None
    for sibling in english_heading.next_siblings:
        if isinstance(sibling, NavigableString) or not isinstance(sibling, Tag):
            continue
        if sibling.name == "h2" or sibling.find("h2") is not None:
            # Another language section has started.
            break
        if sibling.name == "ol":
            definition_list = sibling
            break
        found = sibling.find("ol")
        if found is not None:
            definition_list = found
            break

    if definition_list is None:
        return None

    item = definition_list.find("li")
    if item is None:
        return None
    for nested in item.find_all(["ul", "ol", "dl"]):
        nested.decompose()
    cleaned = " ".join(item.get_text(" ", strip=True).split())
    return cleaned or None
