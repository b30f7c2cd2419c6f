"""Application wiring for the IPA resolver."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

if __package__ in {None, ""}:
    import sys

    repo_root = Path(__file__).resolve().parents[2]
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))

from ipa_resolver.core import CMUDictLoader
from ipa_resolver.remote.client import RemoteDictionaryClient
from ipa_resolver.utils.logging_config import configure_logging
from ipa_resolver.utils.observability import get_logger

from ipa_resolver.app.data.audio_cache import AudioAssetCache
from ipa_resolver.app.data.lookup_cache import LookupCacheStore
from ipa_resolver.app.services.pronunciation_service import (
    PronunciationService,
    ResolutionMode,
)
from ipa_resolver.app.settings import EngineSettings
from ipa_resolver.app.ui.gradio import create_interface


class IpaResolverApp:
    """High-level application facade bundling dependencies."""

    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        *,
        loader: Optional[CMUDictLoader] = None,
        lookup_cache: Optional[LookupCacheStore] = None,
        audio_cache: Optional[AudioAssetCache] = None,
        remote_client: Optional[RemoteDictionaryClient] = None,
        service: Optional[PronunciationService] = None,
    ) -> None:
        self.settings = settings or EngineSettings()
        self._logger = get_logger(__name__).bind(component="app_facade")
        self._logger.info(
            "Initialising application facade",
            context={
                "dict_path": str(self.settings.dict_path),
                "cache_dir": str(self.settings.cache_dir) if self.settings.cache_dir else None,
            },
        )

        self.loader = loader or CMUDictLoader(
            self.settings.dict_path, download_url=self.settings.dict_url
        )
        self.lookup_cache = lookup_cache or LookupCacheStore(
            self.settings.cache_dir, negative_ttl=self.settings.negative_cache_ttl
        )
        self.audio_cache = audio_cache or AudioAssetCache(
            self.settings.audio_dir,
            stream_prefix=self.settings.stream_prefix,
            timeout=self.settings.audio_timeout,
        )
        self.remote_client = remote_client or RemoteDictionaryClient(
            self.lookup_cache,
            audio_cache=self.audio_cache,
            timeout=self.settings.lookup_timeout,
        )
        self.service = service or PronunciationService(
            self.loader,
            self.remote_client,
            max_concurrent_lookups=self.settings.max_concurrent_lookups,
        )

        self._logger.info(
            "Application dependencies wired",
            context={
                "audio_enabled": self.settings.audio_dir is not None,
                "negative_cache_ttl": self.settings.negative_cache_ttl,
            },
        )

    # Public API ------------------------------------------------------------
    async def resolve_text(self, text: str, mode: ResolutionMode | str = "cmu") -> Dict[str, Any]:
        return await self.service.resolve_text(text, mode)

    async def lookup_word(self, word: str) -> Dict[str, Any]:
        return await self.service.lookup_word(word)

    async def lookup_word_cache_only(self, word: str) -> Dict[str, Any]:
        return await self.service.lookup_word_cache_only(word)

    def reload_dictionary(self) -> int:
        return self.service.reload_dictionary()

    def invalidate_word(self, word: str) -> bool:
        return self.service.invalidate_word(word)

    def find_local_audio(self, word: str) -> Optional[Path]:
        return self.service.find_local_audio(word)

    def create_gradio_interface(self):
        return create_interface(self.service)


def main() -> None:
    settings = EngineSettings.from_env()
    configure_logging(settings.log_level)

    app = IpaResolverApp(settings)
    app.loader.load()
    interface = app.create_gradio_interface()
    interface.launch(
        server_name="0.0.0.0",
        server_port=settings.server_port,
        share=settings.share,
        allowed_paths=[str(settings.audio_dir)] if settings.audio_dir else None,
    )


__all__ = ["IpaResolverApp", "main"]


if __name__ == "__main__":
    main()
