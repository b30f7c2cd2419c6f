import asyncio

import pytest

from ipa_resolver.core import (
    split_sentences,
    strip_delimiters,
    transcribe_sentence,
    transcribe_sentence_async,
)
from ipa_resolver.core.sentence import clean_word


def test_split_sentences_keeps_terminal_punctuation():
    assert split_sentences("Hello there. Is it red?! Yes") == [
        "Hello there.",
        " Is it red?!",
        " Yes",
    ]
    assert split_sentences("") == []


def test_clean_word_keeps_letters_and_hyphens():
    assert clean_word("Well-Known,") == "well-known"
    assert clean_word("42!") == ""


def test_the_before_vowel_letter(context):
    assert transcribe_sentence("The apple is red.", context) == "/ði ˈæpəl ɪz rɛd/"


def test_the_before_consonant_and_at_sentence_end(context):
    assert transcribe_sentence("The cat. Cat the", context) == "/ðə kæt/ /kæt ðə/"


def test_the_looks_only_within_its_sentence(context):
    assert transcribe_sentence("The. Apple", context) == "/ðə/ /ˈæpəl/"


def test_punctuation_only_sentences_are_dropped(context):
    assert transcribe_sentence("!!! ... ?", context) == ""
    assert transcribe_sentence("Cat! 123.", context) == "/kæt/"


def test_unknown_words_pass_through_lowercased(context):
    assert transcribe_sentence("Zorblax cat", context) == "/zorblax kæt/"


def test_strip_delimiters_returns_words():
    assert strip_delimiters("/ði ˈæpəl/ /kæt/") == ["ði", "ˈæpəl", "kæt"]
    assert strip_delimiters("") == []


@pytest.mark.asyncio
async def test_async_pipeline_preserves_order_under_concurrency():
    active = 0
    peak = 0

    async def resolve(word: str) -> str:
        nonlocal active, peak
        active += 1
        peak = max(peak, active)
        # Later words finish first.
        await asyncio.sleep(0.01 * (10 - len(word)))
        active -= 1
        return word.upper()

    result = await transcribe_sentence_async(
        "a bb ccc dddd eeeee. The owl", resolve, max_concurrency=2
    )

    assert result == "/A BB CCC DDDD EEEEE/ /ði OWL/"
    assert peak <= 2


@pytest.mark.asyncio
async def test_async_pipeline_matches_sync_pipeline(context):
    from ipa_resolver.core import resolve_word

    async def resolve(word: str) -> str:
        return resolve_word(word, context)

    text = "The apple is red. The blackbird!"
    assert await transcribe_sentence_async(text, resolve) == transcribe_sentence(text, context)
