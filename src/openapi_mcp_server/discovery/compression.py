"""Compress arbitrary operation identifiers into short, stable tool-name slugs.

The pipeline is a chain of pure stages::

    sanitize -> abbreviate -> elide_vowels -> truncate_with_hash -> finalize

``compress`` composes them. Output is deterministic for a given input and
table set, never longer than ``max_length`` and limited to ``[a-z0-9-]``.
Inputs longer than ``max_length`` always receive a short hash suffix of the
original string so names that only differ past the cut stay distinct.
"""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass

from .abbreviations import DEFAULT_TABLES, AbbreviationTables

DEFAULT_MAX_LENGTH = 64
UNNAMED_TOOL = "unnamed-tool"

_NON_WORD = re.compile(r"[^A-Za-z0-9_]")
_NON_SLUG = re.compile(r"[^a-z0-9-]")
_HYPHEN_RUN = re.compile(r"-+")
_VOWELS = re.compile(r"[aeiouAEIOU]")

# Boundary rules for splitting a chunk into word-like tokens, applied in order.
_UPPER_RUN = re.compile(r"([A-Z]+)")
_UPPER_LOWER = re.compile(r"([A-Z][a-z])")
_LOWER_DIGIT = re.compile(r"([a-z])([0-9])")
_DIGIT_ALPHA = re.compile(r"([0-9])([A-Za-z])")


def short_hash(text: str, length: int = 4) -> str:
    """Return the first *length* hex chars of the SHA-256 of *text*."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:length]


def _collapse_hyphens(text: str) -> str:
    return _HYPHEN_RUN.sub("-", text).strip("-")


def _cut(text: str, max_length: int) -> str:
    if len(text) > max_length:
        text = text[:max_length].rstrip("-")
    return text


def _hashed_fallback(original_id: str, max_length: int) -> str:
    return _cut("tool-" + short_hash(original_id, 8), max_length)


# ----------------------------------------------------------------------
# Stage 1: sanitize
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class SanitizeResult:
    name: str
    original_was_long: bool
    fallback: str | None = None


def sanitize(original_id: str, max_length: int) -> SanitizeResult:
    """Replace non-word characters with hyphens and record overlength input.

    ``fallback`` is set when nothing usable is left; it is the final name.
    """
    if not original_id or not original_id.strip():
        return SanitizeResult("", False, UNNAMED_TOOL)

    original_was_long = len(original_id) > max_length
    name = _collapse_hyphens(_NON_WORD.sub("-", original_id))
    if not name:
        return SanitizeResult(
            "", original_was_long, "tool-" + short_hash(original_id, 8)
        )
    return SanitizeResult(name, original_was_long)


# ----------------------------------------------------------------------
# Stage 2: semantic abbreviation
# ----------------------------------------------------------------------


def split_words(name: str) -> list[str]:
    """Split on underscores, camelCase boundaries and letter/digit changes.

    Hyphens are not split points, so a token may still contain them.
    """
    words: list[str] = []
    for chunk in name.split("_"):
        spaced = _UPPER_RUN.sub(r" \1", chunk)
        spaced = _UPPER_LOWER.sub(r" \1", spaced)
        spaced = _LOWER_DIGIT.sub(r"\1 \2", spaced)
        spaced = _DIGIT_ALPHA.sub(r"\1 \2", spaced)
        words.extend(w.strip() for w in spaced.split(" ") if w.strip())
    return words


def _match_case(word: str, abbr: str) -> str:
    if word[0].isupper() and word[1:] == word[1:].lower():
        return abbr[0].upper() + abbr[1:].lower()
    if word == word.upper() and len(word) > 1 and len(abbr) > 1:
        return abbr.upper()
    if word[0].isupper():
        return abbr[0].upper() + abbr[1:].lower()
    return abbr.lower()


def abbreviate(name: str, tables: AbbreviationTables = DEFAULT_TABLES) -> str:
    """Drop stoplisted words and shorten known long words."""
    words = [
        w for w in split_words(name) if w.lower().rstrip("-") not in tables.common_words
    ]
    result: list[str] = []
    for word in words:
        abbr = tables.abbreviations.get(word.lower())
        result.append(_match_case(word, abbr) if abbr else word)
    return "-".join(result)


# ----------------------------------------------------------------------
# Stage 3: vowel elision
# ----------------------------------------------------------------------


def elide_vowels(
    name: str, max_length: int, tables: AbbreviationTables = DEFAULT_TABLES
) -> str:
    """Strip inner vowels from long words, only while *name* is too long."""
    if len(name) <= max_length:
        return name

    parts: list[str] = []
    for part in name.split("-"):
        if len(part) > 5 and part.lower() not in tables.abbreviation_values:
            shorter = part[0] + _VOWELS.sub("", part[1:])
            if len(part) > len(shorter) > 1:
                part = shorter
        parts.append(part)
    return "-".join(parts)


# ----------------------------------------------------------------------
# Stage 4: truncate and hash
# ----------------------------------------------------------------------


def truncate_with_hash(
    name: str, original_id: str, original_was_long: bool, max_length: int
) -> str:
    """Cut *name* and append a 4-char hash of *original_id* when needed."""
    name = _collapse_hyphens(name)
    if not original_was_long and len(name) <= max_length:
        return name

    suffix = short_hash(original_id, 4)
    base_length = max(max_length - len(suffix) - 1, 0)
    if len(name) > base_length:
        name = name[:base_length].rstrip("-")
    return f"{name}-{suffix}"


# ----------------------------------------------------------------------
# Stage 5: finalize
# ----------------------------------------------------------------------


def finalize(name: str, original_id: str, max_length: int) -> str:
    """Lower-case, restrict to ``[a-z0-9-]`` and enforce the hard limit."""
    name = _collapse_hyphens(_NON_SLUG.sub("-", name.lower()))
    name = _cut(name, max_length)
    if not name:
        return _hashed_fallback(original_id, max_length)
    return name


# ----------------------------------------------------------------------
# Orchestrator
# ----------------------------------------------------------------------


def compress(
    original_id: str,
    max_length: int = DEFAULT_MAX_LENGTH,
    tables: AbbreviationTables = DEFAULT_TABLES,
) -> str:
    """Turn *original_id* into a bounded, readable, lower-case slug.

    >>> compress("getUserConfigurationById")
    'user-config-id'
    """
    if max_length < 1:
        raise ValueError(f"max_length must be at least 1, got {max_length}")

    sanitized = sanitize(original_id, max_length)
    if sanitized.fallback is not None:
        return _cut(sanitized.fallback, max_length)

    name = abbreviate(sanitized.name, tables)
    name = elide_vowels(name, max_length, tables)
    name = truncate_with_hash(
        name, original_id, sanitized.original_was_long, max_length
    )
    return finalize(name, original_id, max_length)
