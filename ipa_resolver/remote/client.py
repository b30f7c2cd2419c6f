"""Cache-backed client for the Cambridge online dictionary."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Dict, List, Optional

import httpx

from ..utils.observability import (
    add_span_attributes,
    create_counter,
    create_histogram,
    get_logger,
    record_exception,
    start_span,
)
from .errors import TransientLookupError
from .markup import extract_pronunciations
from .models import LookupCacheRecord, LookupResult, PronunciationEntry
from .normalize import DICTIONARY_HOST, lookup_url, normalize_lookup_word

if TYPE_CHECKING:
    from ipa_resolver.app.data.audio_cache import AudioAssetCache
    from ipa_resolver.app.data.lookup_cache import LookupCacheStore

LOOKUP_TIMEOUT = 10.0
BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Referer": f"{DICTIONARY_HOST}/",
}


class _PageNotFound(Exception):
    """The dictionary answered 404 for the requested slug."""


class RemoteDictionaryClient:
    """Look words up online, remembering every definitive answer.

    The cache is consulted before any request. A 404, or a page without
    any pronunciation data, is cached as a negative record; timeouts,
    connection problems and other error statuses are reported as not-found
    without touching the cache so the next call retries. Concurrent lookups
    of the same word share a single request.
    """

    def __init__(
        self,
        cache: "LookupCacheStore",
        *,
        audio_cache: Optional["AudioAssetCache"] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = LOOKUP_TIMEOUT,
        base_url: str = DICTIONARY_HOST,
    ) -> None:
        self.cache = cache
        self.audio_cache = audio_cache
        self.base_url = base_url.rstrip("/")
        self.timeout = min(float(timeout), LOOKUP_TIMEOUT)
        self._http_client = http_client
        self._in_flight: Dict[str, asyncio.Task] = {}
        self._logger = get_logger(__name__).bind(component="remote_dictionary")

        self._metric_lookups = create_counter(
            "ipa_remote_lookups_total",
            "Remote dictionary lookups by outcome.",
            label_names=("outcome",),
        )
        self._metric_fetch_seconds = create_histogram(
            "ipa_remote_fetch_seconds",
            "Latency of remote dictionary page fetches.",
        )

    async def lookup(self, word: str) -> LookupResult:
        """Return the pronunciation record for ``word``, fetching on a cache miss."""

        requested = normalize_lookup_word(word)
        if not requested:
            return LookupResult.not_found()

        cached = self.cache.read(requested)
        if cached is not None:
            self._metric_lookups.labels(outcome="cache_hit").inc()
            return LookupResult.from_record(cached)

        task = self._in_flight.get(requested)
        if task is None:
            task = asyncio.ensure_future(self._lookup_remote(requested))
            self._in_flight[requested] = task
            task.add_done_callback(lambda _: self._in_flight.pop(requested, None))
        else:
            self._metric_lookups.labels(outcome="joined").inc()
        return await asyncio.shield(task)

    def lookup_cached(self, word: str) -> LookupResult:
        """Answer from the cache alone; a miss reads as not-found."""

        requested = normalize_lookup_word(word)
        if not requested:
            return LookupResult.not_found()
        cached = self.cache.read(requested)
        if cached is None:
            return LookupResult.not_found(self.url_for(requested))
        return LookupResult.from_record(cached)

    def url_for(self, requested: str) -> str:
        return lookup_url(requested, self.base_url)

    async def _lookup_remote(self, requested: str) -> LookupResult:
        url = self.url_for(requested)
        with start_span("ipa.remote_lookup", {"ipa.word": requested}) as span:
            try:
                html = await self._fetch(requested, url)
            except _PageNotFound:
                self._store_negative(requested, url)
                add_span_attributes(span, {"ipa.outcome": "not_found"})
                return LookupResult.not_found(url)
            except TransientLookupError as exc:
                self._logger.warning(
                    "Remote lookup failed; not caching",
                    context={"word": requested, "url": url, "reason": exc.reason},
                )
                self._metric_lookups.labels(outcome="transient").inc()
                add_span_attributes(span, {"ipa.outcome": "transient"})
                return LookupResult.not_found(url)

            try:
                pronunciations = extract_pronunciations(
                    html, requested, base_url=self.base_url
                )
            except Exception as exc:
                record_exception(span, exc)
                self._logger.exception(
                    "Failed to parse dictionary page; not caching",
                    context={"word": requested, "url": url},
                )
                self._metric_lookups.labels(outcome="transient").inc()
                return LookupResult.not_found(url)

            if not any(entry.has_pronunciation for entry in pronunciations):
                self._logger.info(
                    "No pronunciation data on dictionary page",
                    context={"word": requested, "url": url, "rows": len(pronunciations)},
                )
                self._store_negative(requested, url)
                add_span_attributes(span, {"ipa.outcome": "no_pronunciation"})
                return LookupResult.not_found(url)

            if self.audio_cache is not None:
                await self.audio_cache.materialize(pronunciations)

            record = self._store_positive(requested, url, pronunciations)
            add_span_attributes(
                span, {"ipa.outcome": "found", "ipa.rows": len(pronunciations)}
            )
            return LookupResult.from_record(record)

    async def _fetch(self, requested: str, url: str) -> str:
        try:
            with self._metric_fetch_seconds.time():
                if self._http_client is not None:
                    response = await self._http_client.get(
                        url, headers=BROWSER_HEADERS, timeout=self.timeout
                    )
                else:
                    async with httpx.AsyncClient(follow_redirects=True) as client:
                        response = await client.get(
                            url, headers=BROWSER_HEADERS, timeout=self.timeout
                        )
        except httpx.TimeoutException as exc:
            raise TransientLookupError(requested, "timeout") from exc
        except httpx.HTTPError as exc:
            raise TransientLookupError(requested, f"network error: {exc}") from exc

        if response.status_code == httpx.codes.NOT_FOUND:
            raise _PageNotFound(url)
        if not response.is_success:
            raise TransientLookupError(requested, f"status {response.status_code}")
        return response.text

    def _store_negative(self, requested: str, url: str) -> None:
        self.cache.write(requested, LookupCacheRecord(word=requested, exists=False, url=url))
        self._metric_lookups.labels(outcome="not_found").inc()
        self._logger.info(
            "Dictionary has no entry; cached as not found",
            context={"word": requested, "url": url},
        )

    def _store_positive(
        self,
        requested: str,
        url: str,
        pronunciations: List[PronunciationEntry],
    ) -> LookupCacheRecord:
        record = LookupCacheRecord(
            word=requested, exists=True, url=url, pronunciations=pronunciations
        )
        self.cache.write(requested, record)

        resolved = normalize_lookup_word(record.headword)
        if resolved and resolved != requested:
            alias = LookupCacheRecord(
                word=resolved,
                exists=True,
                url=url,
                pronunciations=pronunciations,
                cached_at=record.cached_at,
            )
            self.cache.write(resolved, alias)

        self._metric_lookups.labels(outcome="found").inc()
        self._logger.info(
            "Dictionary entry cached",
            context={
                "word": requested,
                "headword": record.headword,
                "rows": len(pronunciations),
            },
        )
        return record


__all__ = ["BROWSER_HEADERS", "LOOKUP_TIMEOUT", "RemoteDictionaryClient"]
