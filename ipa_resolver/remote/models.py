"""Data model for remote pronunciation lookups and their cache records."""

from __future__ import annotations

import time
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Iterable, List, Optional, Tuple

_ENTRY_KEYS = {
    "headword": "headword",
    "part_of_speech": "partOfSpeech",
    "ipa_us": "ipaUs",
    "ipa_uk": "ipaUk",
    "audio_us": "audioUs",
    "audio_uk": "audioUk",
}


@dataclass
class PronunciationEntry:
    """One pronunciation row for a ``(headword, part of speech)`` pair."""

    headword: str
    part_of_speech: Optional[str] = None
    ipa_us: Optional[str] = None
    ipa_uk: Optional[str] = None
    audio_us: Optional[str] = None
    audio_uk: Optional[str] = None

    @property
    def key(self) -> Tuple[str, str]:
        return (self.headword, self.part_of_speech or "")

    @property
    def has_pronunciation(self) -> bool:
        return any((self.ipa_us, self.ipa_uk, self.audio_us, self.audio_uk))

    def fill_missing(self, other: "PronunciationEntry") -> None:
        """Copy fields from ``other`` only where this row has none."""

        for item in fields(self):
            if getattr(self, item.name) is None:
                setattr(self, item.name, getattr(other, item.name))

    def to_dict(self) -> Dict[str, Any]:
        return {json_key: getattr(self, attr) for attr, json_key in _ENTRY_KEYS.items()}

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "PronunciationEntry":
        if not isinstance(payload, dict) or not payload.get("headword"):
            raise ValueError("pronunciation row is missing 'headword'")
        return cls(**{attr: payload.get(json_key) for attr, json_key in _ENTRY_KEYS.items()})


def merge_entries(entries: Iterable[PronunciationEntry]) -> List[PronunciationEntry]:
    """Merge rows sharing a key; the first non-null value of each field wins."""

    merged: Dict[Tuple[str, str], PronunciationEntry] = {}
    for entry in entries:
        existing = merged.get(entry.key)
        if existing is None:
            merged[entry.key] = replace(entry)
        else:
            existing.fill_missing(entry)
    return list(merged.values())


def now_millis() -> int:
    return int(time.time() * 1000)


@dataclass
class LookupCacheRecord:
    """Persisted outcome of a definitive lookup for one normalized word."""

    word: str
    exists: bool
    url: Optional[str] = None
    pronunciations: Optional[List[PronunciationEntry]] = None
    cached_at: int = field(default_factory=now_millis)

    def __post_init__(self) -> None:
        if self.exists and self.pronunciations is None:
            raise ValueError("a positive lookup record needs a pronunciation list")
        if not self.exists and self.pronunciations:
            raise ValueError("a negative lookup record cannot carry pronunciations")

    @property
    def headword(self) -> Optional[str]:
        if not self.pronunciations:
            return None
        return self.pronunciations[0].headword

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "exists": self.exists,
            "word": self.word,
            "url": self.url,
        }
        if self.pronunciations is not None:
            payload["pronunciations"] = [entry.to_dict() for entry in self.pronunciations]
        payload["cachedAt"] = self.cached_at
        return payload

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "LookupCacheRecord":
        if not isinstance(payload, dict) or not isinstance(payload.get("exists"), bool):
            raise ValueError("lookup record is missing 'exists'")

        rows = payload.get("pronunciations")
        pronunciations: Optional[List[PronunciationEntry]] = None
        if payload["exists"]:
            if not isinstance(rows, list):
                raise ValueError("positive lookup record has no pronunciation list")
            pronunciations = [PronunciationEntry.from_dict(row) for row in rows]
        elif rows:
            raise ValueError("negative lookup record carries pronunciations")
        elif isinstance(rows, list):
            pronunciations = []

        cached_at = payload.get("cachedAt")
        return cls(
            word=str(payload.get("word") or ""),
            exists=payload["exists"],
            url=payload.get("url"),
            pronunciations=pronunciations,
            cached_at=int(cached_at) if isinstance(cached_at, (int, float)) else 0,
        )


@dataclass
class LookupResult:
    """What callers of the lookup operations receive."""

    exists: bool
    url: Optional[str] = None
    headword: Optional[str] = None
    pronunciations: Optional[List[PronunciationEntry]] = None

    @classmethod
    def from_record(cls, record: LookupCacheRecord) -> "LookupResult":
        return cls(
            exists=record.exists,
            url=record.url,
            headword=record.headword,
            pronunciations=list(record.pronunciations) if record.pronunciations else None,
        )

    @classmethod
    def not_found(cls, url: Optional[str] = None) -> "LookupResult":
        return cls(exists=False, url=url)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"exists": self.exists, "url": self.url}
        if self.headword is not None:
            payload["headword"] = self.headword
        if self.pronunciations is not None:
            payload["pronunciations"] = [entry.to_dict() for entry in self.pronunciations]
        return payload


__all__ = [
    "LookupCacheRecord",
    "LookupResult",
    "PronunciationEntry",
    "merge_entries",
    "now_millis",
]
