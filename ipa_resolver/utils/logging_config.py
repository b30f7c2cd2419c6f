"""Helpers for configuring consistent project logging output."""

from __future__ import annotations

import logging
import os
from typing import Optional

_DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_LEVEL_ENV = "IPA_LOG_LEVEL"
_CONFIGURED = False


def _resolve_level(level: str | int | None) -> int:
    if level is None:
        return logging.INFO
    if isinstance(level, int):
        return level
    try:
        return int(level)
    except (TypeError, ValueError):
        normalized = str(level).strip().upper()
        return getattr(logging, normalized, logging.INFO)


def configure_logging(level: Optional[str | int] = None, *, force: bool = False) -> None:
    """Initialise root logging handlers for the resolver.

    Dictionary loading, remote lookups and audio downloads all report through
    the ``ipa_resolver`` logger hierarchy. The level comes from ``level`` when
    given, otherwise from ``IPA_LOG_LEVEL``, and defaults to ``INFO``.
    """

    global _CONFIGURED

    if _CONFIGURED and not force:
        return

    env_level = os.environ.get(_LEVEL_ENV)
    resolved_level = _resolve_level(level if level is not None else env_level)

    logging.basicConfig(level=resolved_level, format=_DEFAULT_FORMAT, force=force)
    logging.getLogger("ipa_resolver").setLevel(resolved_level)
    # httpx logs every request at INFO which drowns out lookup outcomes.
    logging.getLogger("httpx").setLevel(max(resolved_level, logging.WARNING))
    _CONFIGURED = True


__all__ = ["configure_logging"]
