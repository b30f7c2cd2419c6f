"""Exceptions raised by the remote lookup pipeline."""

from __future__ import annotations


class RemoteLookupError(Exception):
    """Base class for remote dictionary failures."""


class TransientLookupError(RemoteLookupError):
    """The remote dictionary could not answer right now.

    Raised for timeouts, connection errors and error statuses other than
    404. Results derived from it are never cached.
    """

    def __init__(self, word: str, reason: str) -> None:
        super().__init__(f"{word}: {reason}")
        self.word = word
        self.reason = reason


class InvalidRequestError(ValueError):
    """A request to the pronunciation service was malformed."""


__all__ = ["InvalidRequestError", "RemoteLookupError", "TransientLookupError"]
