import pytest

from ipa_resolver.core import EMPTY_INDEX, PrefixRule, ResolutionContext, resolve_word
from ipa_resolver.core.resolver import split_compound


def test_direct_hit_uses_primary_pronunciation(context):
    assert resolve_word("cat", context) == "kæt"
    assert resolve_word("  Hello ", context) == "həˈloʊ"


def test_unknown_word_with_empty_index_is_returned_verbatim():
    assert resolve_word("xyzzyplugh", ResolutionContext(index=EMPTY_INDEX)) == "xyzzyplugh"


def test_unknown_word_keeps_original_casing(context):
    assert resolve_word("Xyzzyplugh", context) == "Xyzzyplugh"


def test_empty_token_is_returned_unchanged(context):
    assert resolve_word("", context) == ""
    assert resolve_word("   ", context) == "   "


def test_hyphenated_words_resolve_per_segment(context):
    assert resolve_word("well-known", context) == "wɛl-noʊn"
    assert resolve_word("cat-xyz", context) == "kæt-xyz"


def test_compound_words_split_into_known_halves(context):
    assert resolve_word("blackbird", context) == "blæk bɝd"
    assert resolve_word("suncat", context) == "sʌn kæt"


def test_compound_split_requires_three_letter_halves(sample_index):
    assert split_compound("blackbird", sample_index) == ("black", "bird")
    assert split_compound("catis", sample_index) is None


@pytest.mark.parametrize("word", ["blackbird", "sunflower", "redcat", "hellocat"])
def test_compound_law_both_halves_are_indexed(word, sample_index):
    parts = split_compound(word, sample_index)

    assert parts is not None
    left, right = parts
    assert left + right == word
    assert left in sample_index and right in sample_index


def test_compound_ignores_characters_outside_letters_and_apostrophes(context):
    assert resolve_word("black_bird", context) == "blæk bɝd"


def test_cyber_prefix_uses_fallback_when_gated_entry_exists(context):
    assert resolve_word("cybercrime", context) == "ˈsaɪbərkraɪm"


def test_prefix_rule_is_skipped_without_gating_entry(sample_index):
    rules = (PrefixRule(prefix="cyber", fallback_ipa="ˈsaɪbər", requires_entry="missing"),)
    context = ResolutionContext(index=sample_index, prefix_rules=rules)

    assert resolve_word("cybercrime", context) == "cybercrime"


def test_prefix_rules_can_be_extended(sample_index):
    rules = (PrefixRule(prefix="mega", fallback_ipa="ˈmɛɡə", requires_entry="cat"),)
    context = ResolutionContext(index=sample_index, prefix_rules=rules)

    assert resolve_word("megacat", context) == "ˈmɛɡəkæt"


def test_resolution_is_deterministic(context):
    assert {resolve_word("sunflower", context) for _ in range(5)} == {"sʌn ˈflaʊɝ"}


def test_default_context_uses_an_empty_index():
    context = ResolutionContext()

    assert context.index is EMPTY_INDEX
    assert resolve_word("cat", context) == "cat"
