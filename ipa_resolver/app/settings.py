"""Environment-driven configuration for the resolver application."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from ipa_resolver.app.data.audio_cache import AUDIO_TIMEOUT, DEFAULT_STREAM_PREFIX
from ipa_resolver.core.cmudict_loader import CMUDICT_URL
from ipa_resolver.remote.client import LOOKUP_TIMEOUT

_TRUTHY = {"1", "true", "yes", "on"}

DEFAULT_DICT_PATH = Path("data") / "cmudict.dict"
DEFAULT_CACHE_DIR = Path("data") / "lookup_cache"
DEFAULT_SERVER_PORT = 7860


def _env_flag(value: Optional[str]) -> bool:
    if not value:
        return False
    return value.strip().lower() in _TRUTHY


def _env_float(value: Optional[str], default: Optional[float]) -> Optional[float]:
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(value: Optional[str], default: int) -> int:
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class EngineSettings:
    """Paths, limits and launch options for one engine instance.

    Timeouts are capped at the remote and audio limits; an empty
    ``IPA_DICT_URL`` disables the dictionary download.
    """

    dict_path: Path = DEFAULT_DICT_PATH
    dict_url: Optional[str] = CMUDICT_URL
    cache_dir: Optional[Path] = DEFAULT_CACHE_DIR
    audio_dir: Optional[Path] = None
    stream_prefix: str = DEFAULT_STREAM_PREFIX
    lookup_timeout: float = LOOKUP_TIMEOUT
    audio_timeout: float = AUDIO_TIMEOUT
    negative_cache_ttl: Optional[float] = None
    max_concurrent_lookups: int = 8
    log_level: Optional[str] = None
    share: bool = False
    server_port: int = DEFAULT_SERVER_PORT

    def __post_init__(self) -> None:
        object.__setattr__(self, "lookup_timeout", min(self.lookup_timeout, LOOKUP_TIMEOUT))
        object.__setattr__(self, "audio_timeout", min(self.audio_timeout, AUDIO_TIMEOUT))
        object.__setattr__(self, "max_concurrent_lookups", max(1, self.max_concurrent_lookups))
        if self.audio_dir is None and self.cache_dir is not None:
            object.__setattr__(self, "audio_dir", self.cache_dir)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineSettings":
        env = os.environ if environ is None else environ

        cache_dir = env.get("IPA_CACHE_DIR")
        audio_dir = env.get("IPA_AUDIO_DIR")
        dict_url = env.get("IPA_DICT_URL")
        return cls(
            dict_path=Path(env.get("IPA_DICT_PATH") or DEFAULT_DICT_PATH),
            dict_url=CMUDICT_URL if dict_url is None else (dict_url.strip() or None),
            cache_dir=Path(cache_dir) if cache_dir else DEFAULT_CACHE_DIR,
            audio_dir=Path(audio_dir) if audio_dir else None,
            stream_prefix=env.get("IPA_STREAM_PREFIX") or DEFAULT_STREAM_PREFIX,
            lookup_timeout=_env_float(env.get("IPA_LOOKUP_TIMEOUT"), LOOKUP_TIMEOUT),
            audio_timeout=_env_float(env.get("IPA_AUDIO_TIMEOUT"), AUDIO_TIMEOUT),
            negative_cache_ttl=_env_float(env.get("IPA_NEGATIVE_CACHE_TTL"), None),
            max_concurrent_lookups=_env_int(env.get("IPA_MAX_CONCURRENT_LOOKUPS"), 8),
            log_level=env.get("IPA_LOG_LEVEL") or None,
            share=_env_flag(env.get("IPA_SHARE")),
            server_port=_env_int(env.get("IPA_SERVER_PORT"), DEFAULT_SERVER_PORT),
        )


__all__ = ["EngineSettings"]
