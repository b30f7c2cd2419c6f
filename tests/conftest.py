import sys
from pathlib import Path
from typing import Callable, Dict, List

import httpx
import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ipa_resolver.app.data.lookup_cache import LookupCacheStore
from ipa_resolver.core import DictionaryIndex, ResolutionContext

SAMPLE_PHONES = {
    "apple": "AE1 P AH0 L",
    "bird": "B ER1 D",
    "black": "B L AE1 K",
    "cat": "K AE1 T",
    "crime": "K R AY1 M",
    "dog": "D AO1 G",
    "flower": "F L AW1 ER0",
    "hello": "HH AH0 L OW1",
    "is": "IH1 Z",
    "known": "N OW1 N",
    "red": "R EH1 D",
    "sun": "S AH1 N",
    "the": "DH AH0",
    "university": "Y UW2 N AH0 V ER1 S AH0 T IY0",
    "well": "W EH1 L",
}


@pytest.fixture
def sample_index() -> DictionaryIndex:
    return DictionaryIndex.from_phones(SAMPLE_PHONES)


@pytest.fixture
def context(sample_index) -> ResolutionContext:
    return ResolutionContext(index=sample_index)


@pytest.fixture
def dictionary_file(tmp_path) -> Path:
    """A small on-disk dictionary in cmudict format."""

    path = tmp_path / "cmudict.dict"
    lines = [";;; sample dictionary"]
    lines.extend(f"{word} {phones}" for word, phones in sorted(SAMPLE_PHONES.items()))
    lines.append("hello(2) HH EH0 L OW1")
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def lookup_cache(tmp_path) -> LookupCacheStore:
    return LookupCacheStore(tmp_path / "lookup_cache")


class RecordingTransport:
    """Route requests to per-path handlers and count every call."""

    def __init__(self, routes: Dict[str, Callable[[httpx.Request], httpx.Response]]) -> None:
        self.routes = routes
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get(request.url.path)
        if handler is None:
            return httpx.Response(404, text="not found")
        return handler(request)

    def calls_to(self, path: str) -> int:
        return sum(1 for request in self.requests if request.url.path == path)


@pytest.fixture
def recording_transport() -> Callable[..., RecordingTransport]:
    return RecordingTransport
