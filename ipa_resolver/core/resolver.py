"""Resolve arbitrary word tokens to IPA against a :class:`DictionaryIndex`."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .cmudict_loader import EMPTY_INDEX, DictionaryIndex
from .transcriber import transcribe_phones

_COMPOUND_STRIP_PATTERN = re.compile(r"[^a-z']")
MIN_COMPOUND_PART = 3


@dataclass(frozen=True)
class PrefixRule:
    """Fixed pronunciation for a word-initial prefix.

    The rule applies only while ``requires_entry`` is present in the index;
    ``fallback_ipa`` is used when the prefix itself has no dictionary entry.
    """

    prefix: str
    fallback_ipa: str
    requires_entry: str


DEFAULT_PREFIX_RULES: Tuple[PrefixRule, ...] = (
    PrefixRule(prefix="cyber", fallback_ipa="ˈsaɪbər", requires_entry="crime"),
)


@dataclass(frozen=True)
class ResolutionContext:
    index: DictionaryIndex = field(default_factory=lambda: EMPTY_INDEX)
    prefix_rules: Tuple[PrefixRule, ...] = DEFAULT_PREFIX_RULES

    def transcribe(self, word: str) -> Optional[str]:
        phones = self.index.primary(word)
        if phones is None:
            return None
        return transcribe_phones(phones)


def split_compound(word: str, index: DictionaryIndex) -> Optional[Tuple[str, str]]:
    """Return the first ``(left, right)`` split whose halves are both indexed."""

    for split_at in range(MIN_COMPOUND_PART, len(word) - 2):
        left, right = word[:split_at], word[split_at:]
        if left in index and right in index:
            return left, right
    return None


def _apply_prefix_rules(clean: str, context: ResolutionContext) -> Optional[str]:
    for rule in context.prefix_rules:
        if not clean.startswith(rule.prefix) or rule.requires_entry not in context.index:
            continue
        head = context.transcribe(rule.prefix) or rule.fallback_ipa
        return head + resolve_word(clean[len(rule.prefix):], context)
    return None


def resolve_word(token: str, context: ResolutionContext) -> str:
    """Resolve ``token`` to IPA, returning it unchanged when nothing matches.

    Strategies are tried in order: direct dictionary hit, hyphen splitting,
    prefix rules, then two-way compound decomposition.
    """

    clean = token.lower().strip()
    if not clean:
        return token

    direct = context.transcribe(clean)
    if direct is not None:
        return direct

    if "-" in clean:
        return "-".join(resolve_word(part, context) for part in clean.split("-"))

    prefixed = _apply_prefix_rules(clean, context)
    if prefixed is not None:
        return prefixed

    parts = split_compound(_COMPOUND_STRIP_PATTERN.sub("", clean), context.index)
    if parts is not None:
        return " ".join(resolve_word(part, context) for part in parts)

    return token


__all__ = [
    "DEFAULT_PREFIX_RULES",
    "PrefixRule",
    "ResolutionContext",
    "resolve_word",
    "split_compound",
]
