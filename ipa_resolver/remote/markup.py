"""Extract pronunciation rows from Cambridge Dictionary entry pages."""

from __future__ import annotations

from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from .models import PronunciationEntry, merge_entries
from .normalize import DICTIONARY_HOST, compact_text, normalize_lookup_word, to_absolute_url

ENTRY_SELECTOR = ".entry-body__el"
HEADWORD_SELECTOR = ".hw.dhw"
PAGE_TITLE_SELECTOR = ".di-title"
POS_HEADER_SELECTOR = ".pos-header"
RUNON_SELECTOR = ".runon"
RUNON_TITLE_SELECTOR = ".runon-title"
AUDIO_SOURCE = 'source[type="audio/mpeg"]'


def _text(node: Optional[Tag], selector: str) -> Optional[str]:
    if node is None:
        return None
    found = node.select_one(selector)
    if found is None:
        return None
    return compact_text(found.get_text()) or None


def _audio(node: Tag, region: str, base_url: str) -> Optional[str]:
    source = node.select_one(f".{region} {AUDIO_SOURCE}")
    if source is None:
        return None
    return to_absolute_url(source.get("src"), base_url)


def _row(node: Tag, headword: str, base_url: str) -> Optional[PronunciationEntry]:
    entry = PronunciationEntry(
        headword=headword,
        part_of_speech=_text(node, ".pos"),
        ipa_us=_text(node, ".us .ipa"),
        ipa_uk=_text(node, ".uk .ipa"),
        audio_us=_audio(node, "us", base_url),
        audio_uk=_audio(node, "uk", base_url),
    )
    if entry.part_of_speech is None and not entry.has_pronunciation:
        return None
    return entry


def _inside_runon(node: Tag) -> bool:
    return node.find_parent(class_="runon") is not None


def _entry_headword(entry: Tag) -> str:
    return _text(entry, HEADWORD_SELECTOR) or ""


def _page_headword(soup: BeautifulSoup) -> str:
    return _text(soup, PAGE_TITLE_SELECTOR) or _text(soup, HEADWORD_SELECTOR) or ""


def match_entries(soup: BeautifulSoup, requested: str) -> List[Tag]:
    """Return the entry blocks whose headword normalizes to ``requested``.

    When no block matches on its own headword, the first block is accepted
    only if the page headword normalizes to ``requested``.
    """

    entries = soup.select(ENTRY_SELECTOR)
    matched = [
        entry for entry in entries if normalize_lookup_word(_entry_headword(entry)) == requested
    ]
    if matched or not entries:
        return matched
    if normalize_lookup_word(_page_headword(soup)) == requested:
        return entries[:1]
    return []


def extract_entry_rows(entry: Tag, requested: str, base_url: str) -> List[PronunciationEntry]:
    headword = _entry_headword(entry) or requested
    rows: List[PronunciationEntry] = []

    for header in entry.select(POS_HEADER_SELECTOR):
        if _inside_runon(header):
            continue
        row = _row(header, headword, base_url)
        if row is not None:
            rows.append(row)

    for runon in entry.select(RUNON_SELECTOR):
        runon_headword = _text(runon, RUNON_TITLE_SELECTOR) or _text(runon, ".w")
        if not runon_headword:
            continue
        row = _row(runon, runon_headword, base_url)
        if row is not None:
            rows.append(row)
    return rows


def extract_pronunciations(
    html: str,
    requested: str,
    *,
    base_url: str = DICTIONARY_HOST,
) -> List[PronunciationEntry]:
    """Parse ``html`` into merged pronunciation rows for ``requested``.

    ``requested`` must already be normalized. An empty list means the page
    holds no entry for the word.
    """

    soup = BeautifulSoup(html, "html.parser")
    rows: List[PronunciationEntry] = []
    for entry in match_entries(soup, requested):
        rows.extend(extract_entry_rows(entry, requested, base_url))
    return merge_entries(rows)


__all__ = ["extract_entry_rows", "extract_pronunciations", "match_entries"]
