"""Utilities for working with the CMU pronouncing dictionary."""

from __future__ import annotations

import re
import threading
from contextlib import suppress
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

import httpx

from ..utils.observability import get_logger

CMUDICT_URL = "https://raw.githubusercontent.com/cmusphinx/cmudict/master/cmudict.dict"
DOWNLOAD_TIMEOUT = 30.0

_WORD_VARIANT_PATTERN = re.compile(r"\(\d+\)$")

Pronunciation = Tuple[str, ...]

logger = get_logger(__name__).bind(component="cmudict_loader")


def _strip_variant(word: str) -> str:
    return _WORD_VARIANT_PATTERN.sub("", word).lower()


class DictionaryIndex(Mapping[str, Tuple[Pronunciation, ...]]):
    """Read-only mapping of lowercased words to their pronunciations.

    Each value holds every pronunciation listed for the word in file order;
    the first one is the primary pronunciation used for transcription.
    """

    def __init__(self, entries: Optional[Mapping[str, Tuple[Pronunciation, ...]]] = None) -> None:
        self._entries: Mapping[str, Tuple[Pronunciation, ...]] = MappingProxyType(
            dict(entries or {})
        )

    @classmethod
    def from_phones(cls, entries: Mapping[str, str]) -> "DictionaryIndex":
        """Build an index from ``{"word": "PH ON ES"}`` pairs."""

        return cls(
            {
                word.lower(): (tuple(phones.split()),)
                for word, phones in entries.items()
                if phones.split()
            }
        )

    def __getitem__(self, word: str) -> Tuple[Pronunciation, ...]:
        return self._entries[word]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def primary(self, word: str) -> Optional[Pronunciation]:
        stored = self._entries.get(word)
        if not stored:
            return None
        return stored[0]


EMPTY_INDEX = DictionaryIndex()


def parse_dictionary_lines(lines) -> DictionaryIndex:
    """Parse ``word PHONE PHONE ...`` lines into a :class:`DictionaryIndex`."""

    pronunciations: Dict[str, List[Pronunciation]] = {}
    for line in lines:
        entry = line.strip()
        if not entry or entry.startswith(";;;"):
            continue

        parts = entry.split()
        if len(parts) < 2:
            continue

        raw_word, *phones = parts
        word = _strip_variant(raw_word)
        if not word:
            continue

        # cmudict.dict appends "# comment" tails to a handful of entries.
        if "#" in phones:
            phones = phones[: phones.index("#")]
            if not phones:
                continue

        pronunciations.setdefault(word, []).append(tuple(phones))

    return DictionaryIndex(
        {word: tuple(entries) for word, entries in pronunciations.items()}
    )


class CMUDictLoader:
    """Lazy loader for the CMU pronouncing dictionary.

    The dictionary file is downloaded once when missing. Any failure to
    obtain or read it degrades to an empty index so every word falls
    through to literal passthrough instead of failing the caller.
    """

    def __init__(
        self,
        dict_path: Path | str,
        *,
        download_url: Optional[str] = CMUDICT_URL,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self.dict_path: Path = Path(dict_path)
        self.download_url = download_url
        self._http_client = http_client
        self._index: DictionaryIndex = EMPTY_INDEX
        self._loaded: bool = False
        self._lock = threading.RLock()

    @property
    def loaded(self) -> bool:
        return self._loaded

    def load(self) -> DictionaryIndex:
        """Return the index, reading (and if needed downloading) it once.

        Safe to call from worker threads; concurrent first calls share one load.
        """

        if self._loaded:
            return self._index

        with self._lock:
            if not self._loaded:
                self._index = self._read_index()
                self._loaded = True
            return self._index

    def reload(self) -> DictionaryIndex:
        """Discard the current index and load the dictionary again."""

        with self._lock:
            self._loaded = False
            return self.load()

    @property
    def index(self) -> DictionaryIndex:
        return self.load()

    def _read_index(self) -> DictionaryIndex:
        if not self.dict_path.exists() and not self._download():
            logger.warning(
                "Pronunciation dictionary unavailable; resolving words literally",
                context={"dict_path": str(self.dict_path)},
            )
            return EMPTY_INDEX

        try:
            with self.dict_path.open("r", encoding="utf-8") as handle:
                index = parse_dictionary_lines(handle)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning(
                "Failed to parse pronunciation dictionary",
                context={"dict_path": str(self.dict_path), "error": str(exc)},
            )
            return EMPTY_INDEX

        logger.info(
            "Pronunciation dictionary loaded",
            context={"dict_path": str(self.dict_path), "words": len(index)},
        )
        return index

    def _download(self) -> bool:
        if not self.download_url:
            return False

        logger.info(
            "Pronunciation dictionary missing; downloading",
            context={"url": self.download_url, "dict_path": str(self.dict_path)},
        )
        tmp_path = self.dict_path.with_name(self.dict_path.name + ".tmp")
        try:
            self.dict_path.parent.mkdir(parents=True, exist_ok=True)
            if self._http_client is not None:
                response = self._http_client.get(self.download_url)
            else:
                response = httpx.get(
                    self.download_url, timeout=DOWNLOAD_TIMEOUT, follow_redirects=True
                )
            response.raise_for_status()
            tmp_path.write_bytes(response.content)
            tmp_path.replace(self.dict_path)
        except (httpx.HTTPError, OSError) as exc:
            logger.warning(
                "Failed to download pronunciation dictionary",
                context={"url": self.download_url, "error": str(exc)},
            )
            with suppress(OSError):
                tmp_path.unlink()
            return False
        return True


__all__ = [
    "CMUDICT_URL",
    "CMUDictLoader",
    "DictionaryIndex",
    "EMPTY_INDEX",
    "Pronunciation",
    "parse_dictionary_lines",
]
