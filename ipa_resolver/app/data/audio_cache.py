"""Local materialisation of remote pronunciation audio."""

from __future__ import annotations

import shutil
import uuid
from contextlib import asynccontextmanager, suppress
from pathlib import Path
from typing import AsyncIterator, Iterable, Optional, Set
from urllib.parse import quote

import httpx

from ipa_resolver.remote.models import PronunciationEntry
from ipa_resolver.remote.normalize import (
    DICTIONARY_HOST,
    MAX_FILE_TOKEN,
    file_token,
    pos_shorthand,
    word_candidates,
)
from ipa_resolver.utils.observability import create_counter, get_logger

DEFAULT_STREAM_PREFIX = "/api/audio/stream/Quality_Sound"
AUDIO_TIMEOUT = 15.0
AUDIO_EXTENSIONS = (".mp3", ".wav", ".m4a", ".ogg", ".aac", ".flac", ".webm", ".aiff")
AUDIO_HEADERS = {
    "User-Agent": "Mozilla/5.0",
    "Referer": f"{DICTIONARY_HOST}/",
}

_REGIONS = (("US", "audio_us"), ("UK", "audio_uk"))


class AudioAssetCache:
    """Download pronunciation audio once and point entries at local copies.

    Files are named ``<headword>_<POS>_<REGION>.mp3``. The first US file
    stored for a headword is also copied to ``<headword>.mp3``, the default
    asset for the word.
    """

    def __init__(
        self,
        audio_dir: Optional[Path | str],
        *,
        stream_prefix: str = DEFAULT_STREAM_PREFIX,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = AUDIO_TIMEOUT,
    ) -> None:
        self.audio_dir: Optional[Path] = Path(audio_dir) if audio_dir is not None else None
        self.stream_prefix = stream_prefix.rstrip("/")
        self.timeout = min(float(timeout), AUDIO_TIMEOUT)
        self._http_client = http_client
        self._logger = get_logger(__name__).bind(component="audio_cache")
        self._metric_downloads = create_counter(
            "ipa_audio_downloads_total",
            "Audio downloads attempted by outcome.",
            label_names=("outcome",),
        )

    def stream_path(self, filename: str) -> str:
        return f"{self.stream_prefix}/{quote(filename)}"

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient(headers=AUDIO_HEADERS, follow_redirects=True) as client:
            yield client

    async def materialize(self, entries: Iterable[PronunciationEntry]) -> int:
        """Cache every remote audio URL in ``entries``, rewriting them in place.

        Returns the number of fields now pointing at a local file. Rows whose
        download fails keep their remote URL.
        """

        if self.audio_dir is None:
            return 0

        localized = 0
        defaults_written: Set[str] = set()
        async with self._client() as client:
            for entry in entries:
                token = file_token(entry.headword)
                pos = pos_shorthand(entry.part_of_speech)
                for region, attr in _REGIONS:
                    url = getattr(entry, attr)
                    if not url or not url.startswith(("http://", "https://")):
                        continue
                    filename = f"{token}_{pos}_{region}.mp3"
                    target = self.audio_dir / filename
                    if not await self.ensure_file(url, target, client=client):
                        continue
                    setattr(entry, attr, self.stream_path(filename))
                    localized += 1
                    if region == "US" and token not in defaults_written:
                        self._write_default(target, token)
                        defaults_written.add(token)
        return localized

    async def ensure_file(
        self,
        url: str,
        target: Path,
        *,
        client: Optional[httpx.AsyncClient] = None,
    ) -> bool:
        """Download ``url`` to ``target`` unless it already exists."""

        if target.exists():
            self._metric_downloads.labels(outcome="present").inc()
            return True

        if client is None:
            async with self._client() as owned:
                return await self.ensure_file(url, target, client=owned)

        tmp_path = target.with_name(f"{target.name}.{uuid.uuid4().hex}.tmp")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            size = 0
            async with client.stream(
                "GET", url, headers=AUDIO_HEADERS, timeout=self.timeout
            ) as response:
                response.raise_for_status()
                with tmp_path.open("wb") as handle:
                    async for chunk in response.aiter_bytes():
                        if not chunk:
                            continue
                        handle.write(chunk)
                        size += len(chunk)
            if not size:
                raise ValueError("empty audio response")
            tmp_path.replace(target)
        except (httpx.HTTPError, OSError, ValueError) as exc:
            self._logger.warning(
                "Failed to cache pronunciation audio",
                context={"url": url, "target": str(target), "error": str(exc)},
            )
            with suppress(OSError):
                tmp_path.unlink()
            self._metric_downloads.labels(outcome="failed").inc()
            return False

        self._logger.info(
            "Cached pronunciation audio",
            context={"url": url, "target": str(target), "bytes": size},
        )
        self._metric_downloads.labels(outcome="downloaded").inc()
        return True

    def _write_default(self, source: Path, token: str) -> None:
        default_path = source.with_name(f"{token}.mp3")
        if default_path.exists():
            return
        tmp_path = default_path.with_name(f"{default_path.name}.{uuid.uuid4().hex}.tmp")
        try:
            shutil.copyfile(source, tmp_path)
            tmp_path.replace(default_path)
        except OSError as exc:
            self._logger.warning(
                "Failed to write default pronunciation audio",
                context={"source": str(source), "target": str(default_path), "error": str(exc)},
            )
            with suppress(OSError):
                tmp_path.unlink()

    def find_local_audio(self, word: str) -> Optional[Path]:
        """Return an existing default audio file for a single word, if any.

        Both the spellings of ``word`` and the file token used by
        :meth:`materialize` are tried.
        """

        if self.audio_dir is None or not self.audio_dir.exists():
            return None

        candidates = word_candidates(word)
        if candidates:
            candidates.append(file_token(word))

        root = self.audio_dir.resolve()
        for candidate in candidates:
            if len(candidate) > MAX_FILE_TOKEN:
                continue
            for extension in AUDIO_EXTENSIONS:
                path = (root / f"{candidate}{extension}").resolve()
                if path.is_relative_to(root) and path.is_file():
                    return path
        return None


__all__ = ["AUDIO_EXTENSIONS", "AudioAssetCache", "DEFAULT_STREAM_PREFIX"]
