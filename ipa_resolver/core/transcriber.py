"""ARPABET phone sequences to IPA, with syllable-level stress marks."""

from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, List, Optional, Sequence

PRIMARY_STRESS = "ˈ"
SECONDARY_STRESS = "ˌ"
SCHWA = "ə"

PHONEME_MAP = MappingProxyType(
    {
        "AA": "ɑ",
        "AE": "æ",
        "AH": "ʌ",
        "AO": "ɔ",
        "AW": "aʊ",
        "AY": "aɪ",
        "EH": "ɛ",
        "ER": "ɝ",
        "EY": "eɪ",
        "IH": "ɪ",
        "IY": "iː",
        "OW": "oʊ",
        "OY": "ɔɪ",
        "UH": "ʊ",
        "UW": "uː",
        "P": "p",
        "B": "b",
        "T": "t",
        "D": "d",
        "K": "k",
        "G": "ɡ",
        "F": "f",
        "V": "v",
        "TH": "θ",
        "DH": "ð",
        "S": "s",
        "Z": "z",
        "SH": "ʃ",
        "ZH": "ʒ",
        "M": "m",
        "N": "n",
        "NG": "ŋ",
        "L": "l",
        "R": "r",
        "W": "w",
        "Y": "j",
        "CH": "tʃ",
        "JH": "dʒ",
        "HH": "h",
    }
)

_PHONE_PATTERN = re.compile(r"^([A-Z]+)([012])?$")


@dataclass(frozen=True)
class PhonemeSymbol:
    code: str
    stress: Optional[str] = None

    @classmethod
    def parse(cls, token: str) -> Optional["PhonemeSymbol"]:
        match = _PHONE_PATTERN.match(token)
        if match is None:
            return None
        return cls(match.group(1), match.group(2))

    @property
    def is_nucleus(self) -> bool:
        return self.stress is not None

    def to_ipa(self) -> str:
        # Unstressed AH is the reduced vowel, not the full STRUT vowel.
        if self.code == "AH" and self.stress in (None, "0"):
            return SCHWA
        return PHONEME_MAP.get(self.code, "")


@dataclass
class Syllable:
    stress: Optional[str]
    text: str


def parse_phones(phones: Iterable[str]) -> List[PhonemeSymbol]:
    symbols: List[PhonemeSymbol] = []
    for token in phones:
        symbol = PhonemeSymbol.parse(token)
        if symbol is not None:
            symbols.append(symbol)
    return symbols


def split_syllables(phones: Iterable[str] | str) -> List[Syllable]:
    """Group a phone sequence into syllables.

    Consonants preceding a vowel become its onset; consonants after the last
    vowel become the coda of the final syllable.
    """

    if isinstance(phones, str):
        phones = phones.split()

    syllables: List[Syllable] = []
    pending: List[str] = []
    for symbol in parse_phones(phones):
        if symbol.is_nucleus:
            syllables.append(Syllable(symbol.stress, "".join(pending) + symbol.to_ipa()))
            pending = []
        else:
            pending.append(symbol.to_ipa())

    if pending:
        if syllables:
            syllables[-1].text += "".join(pending)
        else:
            syllables.append(Syllable(None, "".join(pending)))
    return syllables


def compose_syllables(syllables: Sequence[Syllable]) -> str:
    nuclei = sum(1 for syllable in syllables if syllable.stress is not None)
    if nuclei <= 1:
        return "".join(syllable.text for syllable in syllables)

    output: List[str] = []
    primary_seen = False
    for syllable in syllables:
        if syllable.stress == "1" and not primary_seen:
            output.append(PRIMARY_STRESS)
            primary_seen = True
        elif syllable.stress in ("1", "2"):
            output.append(SECONDARY_STRESS)
        output.append(syllable.text)
    return "".join(output)


def transcribe_phones(phones: Iterable[str] | str) -> str:
    """Return the IPA transcription of one dictionary pronunciation.

    >>> transcribe_phones("HH AH0 L OW1")
    'həˈloʊ'
    >>> transcribe_phones("K AE1 T")
    'kæt'
    """

    return compose_syllables(split_syllables(phones))


__all__ = [
    "PHONEME_MAP",
    "PRIMARY_STRESS",
    "SECONDARY_STRESS",
    "SCHWA",
    "PhonemeSymbol",
    "Syllable",
    "compose_syllables",
    "parse_phones",
    "split_syllables",
    "transcribe_phones",
]
