"""Sentence segmentation and sentence-level IPA composition."""

from __future__ import annotations

import asyncio
import re
from typing import Awaitable, Callable, List, Optional

from .resolver import ResolutionContext, resolve_word

THE_BEFORE_VOWEL = "ði"
THE_BEFORE_CONSONANT = "ðə"
VOWEL_LETTERS = frozenset("aeiou")

_SENTENCE_PATTERN = re.compile(r"[^.!?]+[.!?]*|[.!?]+")
_WORD_CLEAN_PATTERN = re.compile(r"[^a-z-]")

AsyncWordResolver = Callable[[str], Awaitable[str]]


def split_sentences(text: str) -> List[str]:
    """Split ``text`` after each run of terminal punctuation (``. ! ?``)."""

    if not text:
        return []
    return [chunk for chunk in _SENTENCE_PATTERN.findall(text) if chunk.strip()]


def clean_word(raw: str) -> str:
    return _WORD_CLEAN_PATTERN.sub("", raw.lower())


def _the_variant(next_word: Optional[str]) -> str:
    if next_word and next_word[0] in VOWEL_LETTERS:
        return THE_BEFORE_VOWEL
    return THE_BEFORE_CONSONANT


def _wrap(resolved: List[str]) -> str:
    body = " ".join(part for part in resolved if part)
    return f"/{body}/" if body else ""


def transcribe_sentence(text: str, context: ResolutionContext) -> str:
    """Transcribe free text with the dictionary resolver.

    Every sentence becomes one ``/.../`` group; punctuation is dropped and
    "the" is pronounced from the word that follows it.
    """

    groups: List[str] = []
    for chunk in split_sentences(text):
        words = [word for word in (clean_word(raw) for raw in chunk.split()) if word]
        resolved: List[str] = []
        for position, word in enumerate(words):
            if word == "the":
                following = words[position + 1] if position + 1 < len(words) else None
                resolved.append(_the_variant(following))
            else:
                resolved.append(resolve_word(word, context))
        group = _wrap(resolved)
        if group:
            groups.append(group)
    return " ".join(groups)


async def transcribe_sentence_async(
    text: str,
    resolve: AsyncWordResolver,
    *,
    max_concurrency: int = 8,
) -> str:
    """Asynchronous counterpart of :func:`transcribe_sentence`.

    Words of a sentence are resolved concurrently, at most
    ``max_concurrency`` at a time, and joined back in their original order.
    """

    semaphore = asyncio.Semaphore(max(1, int(max_concurrency)))

    async def _bounded(word: str) -> str:
        async with semaphore:
            return await resolve(word)

    groups: List[str] = []
    for chunk in split_sentences(text):
        words = [word for word in (clean_word(raw) for raw in chunk.split()) if word]
        tasks: List[Awaitable[str]] = []
        for position, word in enumerate(words):
            if word == "the":
                following = words[position + 1] if position + 1 < len(words) else None
                tasks.append(_constant(_the_variant(following)))
            else:
                tasks.append(_bounded(word))
        resolved = list(await asyncio.gather(*tasks))
        group = _wrap(resolved)
        if group:
            groups.append(group)
    return " ".join(groups)


async def _constant(value: str) -> str:
    return value


def strip_delimiters(ipa: str) -> List[str]:
    """Split a composed transcription into words, dropping ``/`` delimiters."""

    return ipa.replace("/", " ").split()


__all__ = [
    "THE_BEFORE_CONSONANT",
    "THE_BEFORE_VOWEL",
    "clean_word",
    "split_sentences",
    "strip_delimiters",
    "transcribe_sentence",
    "transcribe_sentence_async",
]
