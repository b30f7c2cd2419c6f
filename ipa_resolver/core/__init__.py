"""Dictionary-driven IPA transcription for words and sentences."""

from .cmudict_loader import CMUDICT_URL, CMUDictLoader, DictionaryIndex, EMPTY_INDEX
from .resolver import DEFAULT_PREFIX_RULES, PrefixRule, ResolutionContext, resolve_word
from .sentence import (
    split_sentences,
    strip_delimiters,
    transcribe_sentence,
    transcribe_sentence_async,
)
from .transcriber import PHONEME_MAP, PhonemeSymbol, Syllable, split_syllables, transcribe_phones

__all__ = [
    "CMUDICT_URL",
    "CMUDictLoader",
    "DictionaryIndex",
    "EMPTY_INDEX",
    "DEFAULT_PREFIX_RULES",
    "PrefixRule",
    "ResolutionContext",
    "resolve_word",
    "split_sentences",
    "strip_delimiters",
    "transcribe_sentence",
    "transcribe_sentence_async",
    "PHONEME_MAP",
    "PhonemeSymbol",
    "Syllable",
    "split_syllables",
    "transcribe_phones",
]
