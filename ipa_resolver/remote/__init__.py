"""Online dictionary lookups and the records they produce."""

from .client import LOOKUP_TIMEOUT, RemoteDictionaryClient
from .errors import InvalidRequestError, RemoteLookupError, TransientLookupError
from .markup import extract_pronunciations
from .models import LookupCacheRecord, LookupResult, PronunciationEntry, merge_entries
from .normalize import DICTIONARY_HOST, lookup_url, normalize_lookup_word

__all__ = [
    "DICTIONARY_HOST",
    "LOOKUP_TIMEOUT",
    "RemoteDictionaryClient",
    "InvalidRequestError",
    "RemoteLookupError",
    "TransientLookupError",
    "extract_pronunciations",
    "LookupCacheRecord",
    "LookupResult",
    "PronunciationEntry",
    "merge_entries",
    "lookup_url",
    "normalize_lookup_word",
]
