"""Cache key construction.

Every key starts with a fixed namespace so unrelated artifacts never share
a key. Variable parts are either used verbatim (dates, language codes) or
hashed (raw query strings).
"""

import hashlib

LATEST_KEY = "apod:latest"
RECORD_PREFIX = "apod:date:"
RANGE_PREFIX = "apods:range:"
SEARCH_PREFIX = "search:"
TRANSLATION_PREFIX = "translation:"

# Texts longer than this are summarized instead of used verbatim
MAX_TEXT_KEY = 32
_EDGE = 16


def latest_key() -> str:
    """Key for the most recent record."""
    return LATEST_KEY


def record_key(date: str) -> str:
    """Key for the record published on ``date`` (YYYY-MM-DD)."""
    return f"{RECORD_PREFIX}{date}"


def date_range_key(start: str, end: str) -> str:
    """Key for records between ``start`` and ``end``."""
    return f"{RANGE_PREFIX}{start}:{end}"


def search_key(raw_query: str) -> str:
    """Key for a search, hashed from the raw query string."""
    digest = hashlib.md5(raw_query.encode("utf-8")).hexdigest()
    return f"{SEARCH_PREFIX}{digest}"


def text_key(text: str) -> str:
    """Bounded stand-in for ``text`` inside a translation key.

    Short texts are used as-is. Longer ones keep their first and last 16
    characters plus their length. Two different long texts that share both
    edges and the length collide; the cost is a wrong cached translation.
    """
    if len(text) <= MAX_TEXT_KEY:
        return text
    return f"{text[:_EDGE]}...{text[-_EDGE:]}:{len(text)}"


def translation_key(text: str, source_lang: str, target_lang: str) -> str:
    """Key for a translation of ``text`` between two languages."""
    return f"{source_lang}:{target_lang}:{text_key(text)}"
