import pytest

from ipa_resolver.app.app import IpaResolverApp
from ipa_resolver.app.settings import EngineSettings
from ipa_resolver.app.ui.gradio import format_lookup, format_transcription


@pytest.fixture
def app(tmp_path, dictionary_file):
    settings = EngineSettings(
        dict_path=dictionary_file,
        dict_url=None,
        cache_dir=tmp_path / "cache",
        negative_cache_ttl=3600,
    )
    return IpaResolverApp(settings)


def test_app_wires_settings_into_components(app, tmp_path):
    assert app.lookup_cache.cache_dir == tmp_path / "cache"
    assert app.lookup_cache.negative_ttl == 3600
    assert app.audio_cache.audio_dir == tmp_path / "cache"
    assert app.remote_client.cache is app.lookup_cache
    assert app.remote_client.audio_cache is app.audio_cache
    assert app.service.remote_client is app.remote_client


@pytest.mark.asyncio
async def test_app_resolves_text_through_service(app):
    result = await app.resolve_text("Hello cat.", "1")

    assert result["ipa"] == "/həˈloʊ kæt/"
    assert app.reload_dictionary() == 15


def test_format_transcription_lists_words():
    markdown = format_transcription({"text": "cat", "ipa": "/kæt/", "ipaWords": ["kæt"]})

    assert markdown.startswith("### /kæt/")
    assert "`kæt`" in markdown


def test_format_lookup_renders_rows_and_misses():
    found = format_lookup(
        {
            "exists": True,
            "url": "https://dictionary.cambridge.org/dictionary/english/run",
            "headword": "run",
            "pronunciations": [
                {"headword": "run", "partOfSpeech": "verb", "ipaUs": "rʌn", "ipaUk": "rʌn"},
            ],
        }
    )
    missing = format_lookup({"exists": False, "url": "https://example.test/x"})

    assert "| run | verb | rʌn | rʌn |" in found
    assert missing == "No pronunciation found ([searched](https://example.test/x))."
    assert format_transcription({"exists": False, "url": None}) == "No pronunciation found."
