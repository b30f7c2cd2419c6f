"""Normalisation helpers shared by the lookup cache and remote client."""

from __future__ import annotations

import hashlib
import re
import unicodedata
from typing import List, Optional
from urllib.parse import quote

DICTIONARY_HOST = "https://dictionary.cambridge.org"
# Leaves room for suffixes such as "_ADJ_US.mp3" and temp-file markers.
MAX_FILE_TOKEN = 80

_EXTRA_FOLDS = str.maketrans({"đ": "d", "Đ": "D"})
_LOOKUP_STRIP_PATTERN = re.compile(r"[^a-z0-9'-]")
_FILE_TOKEN_PATTERN = re.compile(r"[^a-zA-Z0-9]+")
_WHITESPACE_PATTERN = re.compile(r"\s+")
_EDGE_PUNCTUATION_PATTERN = re.compile(r"^[^a-zA-Z0-9]+|[^a-zA-Z0-9]+$")

# Checked in order; "adverb" must win over "verb".
_POS_SHORTHANDS = (
    ("noun", "N"),
    ("adverb", "ADV"),
    ("verb", "V"),
    ("adjective", "ADJ"),
    ("pronoun", "PRO"),
    ("preposition", "PREP"),
    ("conjunction", "CONJ"),
    ("interjection", "INTJ"),
)


def fold_ascii(text: str) -> str:
    """Decompose ``text`` and drop diacritics, folding đ/Đ to d/D."""

    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(char for char in decomposed if not unicodedata.combining(char))
    return stripped.translate(_EXTRA_FOLDS)


def compact_text(text: Optional[str]) -> str:
    return _WHITESPACE_PATTERN.sub(" ", str(text or "")).strip()


def normalize_lookup_word(raw: Optional[str]) -> str:
    """Return the cache/lookup key for ``raw``: folded, lowercased, ``[a-z0-9'-]``."""

    if not raw or not isinstance(raw, str):
        return ""
    return _LOOKUP_STRIP_PATTERN.sub("", fold_ascii(raw.strip()).lower())


def to_safe_file_token(text: Optional[str]) -> str:
    folded = fold_ascii(compact_text(text))
    return _FILE_TOKEN_PATTERN.sub("_", folded).strip("_")


def file_token(text: Optional[str]) -> str:
    """Return a lowercase file name stem for ``text`` that fits on any filesystem.

    Over-long tokens are truncated and suffixed with a digest of the full
    token so distinct words keep distinct files.
    """

    token = to_safe_file_token(text).lower() or "word"
    if len(token) <= MAX_FILE_TOKEN:
        return token
    digest = hashlib.sha1(token.encode("utf-8")).hexdigest()[:10]
    return f"{token[: MAX_FILE_TOKEN - len(digest) - 1]}_{digest}"


def word_slug(word: str) -> str:
    return quote(_WHITESPACE_PATTERN.sub("-", word.strip()), safe="'")


def lookup_url(word: str, base_url: str = DICTIONARY_HOST) -> str:
    return f"{base_url.rstrip('/')}/dictionary/english/{word_slug(word)}"


def to_absolute_url(src: Optional[str], base_url: str = DICTIONARY_HOST) -> Optional[str]:
    value = compact_text(src)
    if not value:
        return None
    if value.startswith(("http://", "https://")):
        return value
    if value.startswith("//"):
        return f"https:{value}"
    return f"{base_url.rstrip('/')}/{value.lstrip('/')}"


def pos_shorthand(part_of_speech: Optional[str]) -> str:
    lower = compact_text(part_of_speech).lower()
    for name, short in _POS_SHORTHANDS:
        if re.search(rf"\b{name}\b", lower):
            return short
    return "X"


def word_candidates(raw: Optional[str]) -> List[str]:
    """Return local file name candidates for a single-word ``raw`` text.

    Multi-word input yields no candidates.
    """

    if not raw or not isinstance(raw, str):
        return []
    trimmed = raw.strip()
    if not trimmed or _WHITESPACE_PATTERN.search(trimmed):
        return []

    base = _EDGE_PUNCTUATION_PATTERN.sub("", fold_ascii(trimmed))
    if not base:
        return []

    candidates: List[str] = []
    for candidate in (
        base,
        base.lower(),
        base.replace("'", ""),
        base.lower().replace("'", ""),
    ):
        if candidate and candidate not in candidates:
            candidates.append(candidate)
    return candidates


def strip_ipa_slashes(ipa: Optional[str]) -> str:
    return compact_text(ipa).strip("/").strip()


__all__ = [
    "DICTIONARY_HOST",
    "MAX_FILE_TOKEN",
    "compact_text",
    "file_token",
    "fold_ascii",
    "lookup_url",
    "normalize_lookup_word",
    "pos_shorthand",
    "strip_ipa_slashes",
    "to_absolute_url",
    "to_safe_file_token",
    "word_candidates",
    "word_slug",
]
