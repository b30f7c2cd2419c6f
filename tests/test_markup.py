from bs4 import BeautifulSoup

from ipa_resolver.remote.markup import extract_pronunciations, match_entries

HELLO_PAGE = """
<html><body>
<div class="di-title"><span class="hw dhw">hello</span></div>
<div class="entry-body__el">
  <div class="pos-header">
    <span class="hw dhw">hello</span>
    <span class="pos">exclamation</span>
    <span class="uk">
      <audio><source type="audio/mpeg" src="/media/english/uk_pron/hello.mp3"/></audio>
      <span class="pron"><span class="ipa">heˈl<span class="sp">ə</span>ʊ</span></span>
    </span>
    <span class="us">
      <audio><source type="audio/mpeg" src="/media/english/us_pron/hello.mp3"/></audio>
      <span class="pron"><span class="ipa">heˈloʊ</span></span>
    </span>
  </div>
  <div class="pos-header">
    <span class="hw dhw">hello</span>
    <span class="pos">exclamation</span>
    <span class="us"><span class="ipa">həˈloʊ</span></span>
  </div>
  <div class="pos-header">
    <span class="hw dhw">hello</span>
    <span class="pos">noun</span>
    <span class="us"><span class="ipa">heˈloʊ</span></span>
  </div>
  <div class="runon">
    <div class="runon-title"><span class="w">hellos</span></div>
    <span class="pos">noun</span>
    <span class="us">
      <audio><source type="audio/mpeg" src="https://cdn.example.test/hellos.mp3"/></audio>
      <span class="ipa">heˈloʊz</span>
    </span>
  </div>
</div>
<div class="entry-body__el">
  <div class="pos-header">
    <span class="hw dhw">hell</span>
    <span class="pos">noun</span>
    <span class="us"><span class="ipa">hel</span></span>
  </div>
</div>
</body></html>
"""


def test_extracts_rows_for_matching_entry_only():
    rows = extract_pronunciations(HELLO_PAGE, "hello")

    assert [(row.headword, row.part_of_speech) for row in rows] == [
        ("hello", "exclamation"),
        ("hello", "noun"),
        ("hellos", "noun"),
    ]


def test_duplicate_rows_only_fill_missing_fields():
    exclamation = extract_pronunciations(HELLO_PAGE, "hello")[0]

    assert exclamation.ipa_us == "heˈloʊ", "first non-null value wins"
    assert exclamation.ipa_uk == "heˈləʊ"


def test_relative_audio_urls_become_absolute():
    rows = extract_pronunciations(HELLO_PAGE, "hello")

    assert rows[0].audio_uk == "https://dictionary.cambridge.org/media/english/uk_pron/hello.mp3"
    assert rows[0].audio_us == "https://dictionary.cambridge.org/media/english/us_pron/hello.mp3"
    assert rows[2].audio_us == "https://cdn.example.test/hellos.mp3"
    assert rows[2].audio_uk is None


def test_page_title_fallback_accepts_first_entry():
    page = """
    <div class="di-title">colour</div>
    <div class="entry-body__el">
      <div class="pos-header">
        <span class="hw dhw">color</span><span class="pos">noun</span>
        <span class="uk"><span class="ipa">ˈkʌl.ər</span></span>
      </div>
    </div>
    <div class="entry-body__el">
      <div class="pos-header"><span class="hw dhw">colourful</span></div>
    </div>
    """

    rows = extract_pronunciations(page, "colour")

    assert len(rows) == 1
    assert rows[0].headword == "color"
    assert rows[0].ipa_uk == "ˈkʌl.ər"


def test_unrelated_page_yields_no_entries():
    page = """
    <div class="di-title">spell</div>
    <div class="entry-body__el">
      <div class="pos-header"><span class="hw dhw">spell</span><span class="pos">verb</span></div>
    </div>
    """

    assert match_entries(BeautifulSoup(page, "html.parser"), "spelt") == []
    assert extract_pronunciations(page, "spelt") == []
    assert extract_pronunciations("<html></html>", "anything") == []
