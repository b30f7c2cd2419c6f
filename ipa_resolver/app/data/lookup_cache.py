"""File-backed cache of remote dictionary lookup outcomes."""

from __future__ import annotations

import json
import time
import uuid
from contextlib import suppress
from pathlib import Path
from typing import Callable, Optional

from ipa_resolver.remote.models import LookupCacheRecord
from ipa_resolver.remote.normalize import file_token, normalize_lookup_word
from ipa_resolver.utils.observability import create_counter, get_logger


class LookupCacheStore:
    """Store one JSON record per normalized word under ``cache_dir``.

    Positive records never expire. Negative records expire only when
    ``negative_ttl`` (seconds) is set. Records that no longer match the
    current schema are deleted on read so the next lookup refetches them.
    Passing ``cache_dir=None`` disables the store entirely.
    """

    def __init__(
        self,
        cache_dir: Optional[Path | str],
        *,
        negative_ttl: Optional[float] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.cache_dir: Optional[Path] = Path(cache_dir) if cache_dir is not None else None
        self.negative_ttl = negative_ttl
        self._clock = clock or time.time
        self._logger = get_logger(__name__).bind(
            component="lookup_cache",
            cache_dir=str(self.cache_dir) if self.cache_dir else None,
        )
        self._metric_reads = create_counter(
            "ipa_lookup_cache_reads_total",
            "Lookup cache reads by outcome.",
            label_names=("outcome",),
        )

    @property
    def enabled(self) -> bool:
        return self.cache_dir is not None

    def path_for(self, word: str) -> Optional[Path]:
        if self.cache_dir is None:
            return None
        return self.cache_dir / f"{file_token(word)}.json"

    def read(self, word: str) -> Optional[LookupCacheRecord]:
        path = self.path_for(word)
        if path is None or not path.exists():
            self._metric_reads.labels(outcome="miss").inc()
            return None

        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
            record = LookupCacheRecord.from_dict(payload)
        except OSError as exc:
            self._logger.warning(
                "Failed to read cached lookup",
                context={"word": word, "path": str(path), "error": str(exc)},
            )
            self._metric_reads.labels(outcome="error").inc()
            return None
        except (ValueError, TypeError) as exc:
            self._logger.info(
                "Discarding cached lookup with outdated schema",
                context={"word": word, "path": str(path), "error": str(exc)},
            )
            with suppress(OSError):
                path.unlink()
            self._metric_reads.labels(outcome="invalid").inc()
            return None

        requested = normalize_lookup_word(word)
        if record.word and requested and record.word != requested:
            # Distinct words can share a file token, e.g. "o'clock" and "o-clock".
            self._logger.debug(
                "Cached lookup belongs to another word",
                context={"word": word, "stored_word": record.word, "path": str(path)},
            )
            self._metric_reads.labels(outcome="mismatch").inc()
            return None

        if not record.exists and self._negative_expired(record):
            self._logger.debug(
                "Negative lookup record expired",
                context={"word": word, "cached_at": record.cached_at},
            )
            self._metric_reads.labels(outcome="expired").inc()
            return None

        self._metric_reads.labels(outcome="positive" if record.exists else "negative").inc()
        return record

    def write(self, word: str, record: LookupCacheRecord) -> None:
        path = self.path_for(word)
        if path is None:
            return

        tmp_path = path.with_name(f"{path.name}.{uuid.uuid4().hex}.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(
                json.dumps(record.to_dict(), ensure_ascii=False, indent=2),
                encoding="utf-8",
            )
            tmp_path.replace(path)
        except OSError as exc:
            self._logger.warning(
                "Failed writing lookup cache",
                context={"word": word, "path": str(path), "error": str(exc)},
            )
            with suppress(OSError):
                tmp_path.unlink()
            return

        self._logger.debug(
            "Lookup cached",
            context={"word": word, "exists": record.exists, "path": str(path)},
        )

    def invalidate(self, word: str) -> bool:
        """Delete the record for ``word``; return whether one existed."""

        path = self.path_for(word)
        if path is None or not path.exists():
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            self._logger.warning(
                "Failed to invalidate cached lookup",
                context={"word": word, "path": str(path), "error": str(exc)},
            )
            return False
        self._logger.info("Lookup cache invalidated", context={"word": word})
        return True

    def _negative_expired(self, record: LookupCacheRecord) -> bool:
        if self.negative_ttl is None:
            return False
        age_ms = self._clock() * 1000 - record.cached_at
        return age_ms > self.negative_ttl * 1000


__all__ = ["LookupCacheStore"]
