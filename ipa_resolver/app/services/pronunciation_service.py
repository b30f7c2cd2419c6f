"""Pronunciation service dispatching requests across the resolution pipelines."""

from __future__ import annotations

import asyncio
import enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ipa_resolver.core import (
    CMUDictLoader,
    ResolutionContext,
    resolve_word,
    strip_delimiters,
    transcribe_sentence,
    transcribe_sentence_async,
)
from ipa_resolver.remote.client import RemoteDictionaryClient
from ipa_resolver.remote.errors import InvalidRequestError
from ipa_resolver.remote.models import LookupResult
from ipa_resolver.remote.normalize import strip_ipa_slashes
from ipa_resolver.utils.observability import (
    add_span_attributes,
    create_counter,
    create_histogram,
    get_logger,
    record_exception,
    start_span,
)


class ResolutionMode(str, enum.Enum):
    """How a request is resolved.

    ``cmu`` uses the local dictionary only, ``online`` sends single words to
    the online dictionary, and ``hybrid`` tries the online dictionary for
    every word of a sentence before falling back to the local one.
    """

    CMU = "cmu"
    ONLINE = "online"
    HYBRID = "hybrid"

    @classmethod
    def parse(cls, value: Union["ResolutionMode", str, int, None]) -> "ResolutionMode":
        if value is None or value == "":
            return cls.CMU
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        if key in _MODE_ALIASES:
            return _MODE_ALIASES[key]
        raise InvalidRequestError(f"unknown resolution mode: {value!r}")


_MODE_ALIASES = {
    "1": ResolutionMode.CMU,
    "cmu": ResolutionMode.CMU,
    "2": ResolutionMode.ONLINE,
    "online": ResolutionMode.ONLINE,
    "3": ResolutionMode.HYBRID,
    "hybrid": ResolutionMode.HYBRID,
}


class PronunciationService:
    """Entry point used by the UI and any other caller of the engine."""

    def __init__(
        self,
        loader: CMUDictLoader,
        remote_client: RemoteDictionaryClient,
        *,
        max_concurrent_lookups: int = 8,
    ) -> None:
        self.loader = loader
        self.remote_client = remote_client
        self.max_concurrent_lookups = max(1, int(max_concurrent_lookups))
        self._logger = get_logger(__name__).bind(component="pronunciation_service")

        self._metric_request_total = create_counter(
            "ipa_resolve_requests_total",
            "Transcription requests received by mode.",
            label_names=("mode",),
        )
        self._metric_request_failures = create_counter(
            "ipa_resolve_request_failures_total",
            "Transcription requests rejected or failed.",
        )
        self._metric_request_duration = create_histogram(
            "ipa_resolve_request_seconds",
            "Latency of transcription requests.",
        )
        self._metric_fallbacks = create_counter(
            "ipa_hybrid_fallbacks_total",
            "Hybrid-mode words resolved from the local dictionary instead.",
        )

    @property
    def context(self) -> ResolutionContext:
        return ResolutionContext(index=self.loader.load())

    async def resolve_text(
        self,
        text: str,
        mode: Union[ResolutionMode, str, int, None] = ResolutionMode.CMU,
    ) -> Dict[str, Any]:
        """Transcribe ``text`` according to ``mode``.

        Returns ``{"text", "ipa", "ipaWords"}``, or the lookup record when a
        single word is resolved in online mode.
        """

        cleaned = (text or "").strip() if isinstance(text, str) else ""
        try:
            if not cleaned:
                raise InvalidRequestError("text must not be empty")
            resolved_mode = ResolutionMode.parse(mode)
        except InvalidRequestError as exc:
            self._metric_request_failures.inc()
            self._logger.warning(
                "Rejected transcription request",
                context={"mode": str(mode), "error": str(exc)},
            )
            raise

        request_context = {"mode": resolved_mode.value, "length": len(cleaned)}
        self._metric_request_total.labels(mode=resolved_mode.value).inc()
        self._logger.info("Transcription request received", context=request_context)

        with start_span("ipa.resolve_text", request_context) as span:
            try:
                with self._metric_request_duration.time():
                    if resolved_mode is ResolutionMode.ONLINE and len(cleaned.split()) == 1:
                        result = await self.remote_client.lookup(cleaned)
                        add_span_attributes(span, {"ipa.exists": result.exists})
                        return result.to_dict()

                    if resolved_mode is ResolutionMode.HYBRID:
                        ipa = await self._transcribe_hybrid(cleaned)
                    else:
                        ipa = transcribe_sentence(cleaned, await self._load_context())
            except Exception as exc:
                self._metric_request_failures.inc()
                self._logger.error(
                    "Transcription request failed",
                    context={**request_context, "error": str(exc)},
                )
                record_exception(span, exc)
                raise

        return {"text": cleaned, "ipa": ipa, "ipaWords": strip_delimiters(ipa)}

    async def _load_context(self) -> ResolutionContext:
        # The first load may download and parse the whole dictionary.
        if not self.loader.loaded:
            await asyncio.to_thread(self.loader.load)
        return self.context

    async def _transcribe_hybrid(self, text: str) -> str:
        context = await self._load_context()

        async def _resolve(word: str) -> str:
            online = _first_us_ipa(await self.remote_client.lookup(word))
            if online:
                return online
            self._metric_fallbacks.inc()
            return resolve_word(word, context)

        return await transcribe_sentence_async(
            text, _resolve, max_concurrency=self.max_concurrent_lookups
        )

    async def lookup_word(self, word: str) -> Dict[str, Any]:
        result = await self.remote_client.lookup(word)
        return result.to_dict()

    async def lookup_word_cache_only(self, word: str) -> Dict[str, Any]:
        return self.remote_client.lookup_cached(word).to_dict()

    def find_local_audio(self, word: str) -> Optional[Path]:
        """Return the cached default audio file for a single word, if present."""

        audio_cache = self.remote_client.audio_cache
        if audio_cache is None:
            return None
        return audio_cache.find_local_audio(word)

    def reload_dictionary(self) -> int:
        """Reload the pronunciation dictionary and return its entry count."""

        index = self.loader.reload()
        self._logger.info("Dictionary reloaded", context={"entries": len(index)})
        return len(index)

    def invalidate_word(self, word: str) -> bool:
        removed = self.remote_client.cache.invalidate(word)
        self._logger.info(
            "Lookup invalidation requested",
            context={"word": word, "removed": removed},
        )
        return removed


def _first_us_ipa(result: LookupResult) -> Optional[str]:
    if not result.exists or not result.pronunciations:
        return None
    for entry in result.pronunciations:
        if entry.ipa_us:
            return strip_ipa_slashes(entry.ipa_us) or None
    return None


__all__ = ["PronunciationService", "ResolutionMode"]
