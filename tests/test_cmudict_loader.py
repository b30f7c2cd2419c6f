import logging
import time
from concurrent.futures import ThreadPoolExecutor

import httpx

from ipa_resolver.core import EMPTY_INDEX, CMUDictLoader
from ipa_resolver.core.cmudict_loader import parse_dictionary_lines


def test_loader_reads_words_and_folds_variants(dictionary_file):
    loader = CMUDictLoader(dictionary_file, download_url=None)

    index = loader.load()

    assert loader.loaded is True
    assert index.primary("hello") == ("HH", "AH0", "L", "OW1")
    assert index["hello"] == (
        ("HH", "AH0", "L", "OW1"),
        ("HH", "EH0", "L", "OW1"),
    )
    assert ";;;" not in index
    assert loader.load() is index


def test_parse_dictionary_lines_skips_malformed_entries():
    index = parse_dictionary_lines(
        [
            ";;; comment line",
            "",
            "lonely",
            "Quote K W OW1 T",
            "d'artagnan D AH0 R T AE1 NG Y AH0 N # place, french",
            "abc # only a comment",
        ]
    )

    assert "lonely" not in index
    assert index.primary("quote") == ("K", "W", "OW1", "T")
    assert index.primary("d'artagnan")[-1] == "N"
    assert "abc" not in index


def test_missing_dictionary_is_downloaded_once(tmp_path):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, text="cat K AE1 T\n")

    dict_path = tmp_path / "nested" / "cmudict.dict"
    client = httpx.Client(transport=httpx.MockTransport(handler))
    loader = CMUDictLoader(dict_path, download_url="https://example.test/cmudict.dict", http_client=client)

    index = loader.load()

    assert len(calls) == 1
    assert dict_path.read_text(encoding="utf-8") == "cat K AE1 T\n"
    assert index.primary("cat") == ("K", "AE1", "T")
    assert not list(dict_path.parent.glob("*.tmp"))


def test_failed_download_degrades_to_empty_index(tmp_path, caplog):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(503)

    caplog.set_level(logging.WARNING, logger="ipa_resolver.core.cmudict_loader")
    dict_path = tmp_path / "cmudict.dict"
    client = httpx.Client(transport=httpx.MockTransport(handler))
    loader = CMUDictLoader(dict_path, download_url="https://example.test/cmudict.dict", http_client=client)

    assert loader.load() is EMPTY_INDEX
    assert loader.load() is EMPTY_INDEX
    assert len(calls) == 1, "a failed download is not retried until reload()"
    assert not dict_path.exists()
    assert any("Failed to download" in record.message for record in caplog.records)


def test_reload_picks_up_a_dictionary_written_later(tmp_path):
    dict_path = tmp_path / "cmudict.dict"
    loader = CMUDictLoader(dict_path, download_url=None)

    assert len(loader.load()) == 0

    dict_path.write_text("TEST  T EH1 S T\n", encoding="utf-8")

    assert len(loader.reload()) == 1
    assert loader.index.primary("test") == ("T", "EH1", "S", "T")


def test_concurrent_first_loads_share_one_download(tmp_path):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        time.sleep(0.05)
        return httpx.Response(200, text="cat K AE1 T\n")

    client = httpx.Client(transport=httpx.MockTransport(handler))
    loader = CMUDictLoader(tmp_path / "cmudict.dict", download_url="https://example.test/d", http_client=client)

    with ThreadPoolExecutor(max_workers=4) as executor:
        indexes = list(executor.map(lambda _: loader.load(), range(4)))

    assert len(calls) == 1
    assert all(index is indexes[0] for index in indexes)
    assert indexes[0].primary("cat") == ("K", "AE1", "T")
