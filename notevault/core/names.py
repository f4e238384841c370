# notevault/core/names.py

from __future__ import annotations

import re
import uuid

from notevault.settings import ID_TOKEN_COUNT


INVALID_ID_CHARS_RE = re.compile(r"[^A-Za-z0-9_-]")
WHITESPACE_RE = re.compile(r"\s+")

UNTITLED_PREFIX = "untitled_"


def sanitize_identifier(raw: str) -> str:
    """
    Drop every character outside [A-Za-z0-9_-].

    Nothing is escaped or replaced, so the result may be empty.
    """
    return INVALID_ID_CHARS_RE.sub("", raw or "")


def normalize_whitespace(raw: str) -> str:
    """Trim and collapse every run of whitespace to a single space."""
    return WHITESPACE_RE.sub(" ", (raw or "").strip())


def identifier_from_content(content: str, *, tokens: int = ID_TOKEN_COUNT) -> str:
    """
    Build an id from the first `tokens` whitespace-delimited words.

    "Hello world example with [[Link]]" -> "Hello-world-example"
    """
    words = (content or "").split()[:tokens]
    return _usable(sanitize_identifier("-".join(words)))


def derive_canonical_id(title: str | None, content: str) -> str:
    """
    Canonical id of a note: the sanitized title when it has any usable
    characters, otherwise the leading content tokens.
    """
    from_title = _usable(sanitize_identifier(title or ""))
    if from_title:
        return from_title
    return identifier_from_content(content)


def _usable(identifier: str) -> str:
    # an id made only of separators ("--") names no note
    return identifier if identifier.strip("-") else ""


def display_title(title: str | None) -> str:
    title = normalize_whitespace(title or "")
    if title:
        return title
    return _generate_untitled()


def _generate_untitled() -> str:
    return f"{UNTITLED_PREFIX}{uuid.uuid4().hex[:8]}"
