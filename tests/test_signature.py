"""Tests for per-word phonetic signatures."""

from charuz.niqqud import DAGESH, HIRIQ, QAMATS, SHEVA
from charuz.signature import analyze_word, anchor_signature, vowel_signature
from charuz.types import Syllable, Vowel

MIDBAR = "מ" + HIRIQ + "ד" + SHEVA + "ב" + DAGESH + QAMATS + "ר"


def test_vowel_signature_skips_empty_vowels():
    syllables = [
        Syllable("a", vowel=Vowel.A),
        Syllable("x"),
        Syllable("o", vowel=Vowel.O),
    ]
    assert vowel_signature(syllables) == "A-O"


def test_anchor_is_last_syllable_vowel():
    syllables = [Syllable("a", vowel=Vowel.A), Syllable("o", vowel=Vowel.O)]
    assert anchor_signature(syllables) == "O"


def test_anchor_empty_when_last_syllable_has_no_vowel():
    syllables = [Syllable("a", vowel=Vowel.A), Syllable("x")]
    assert anchor_signature(syllables) == ""


def test_empty_syllables():
    assert vowel_signature([]) == ""
    assert anchor_signature([]) == ""


def test_analyze_word_from_vocalized_form():
    word = analyze_word("מדבר", vocalized=MIDBAR, line_id="line-0", position=3)
    assert word.clean_text == "מדבר"
    assert word.vocalized_text == MIDBAR
    assert len(word.syllables) == 3
    assert word.vowel_signature == "I-E-A"
    assert word.anchor_signature == "A"
    assert word.line_id == "line-0"
    assert word.position == 3


def test_analyze_word_defaults_to_text_as_vocalized():
    word = analyze_word(MIDBAR)
    assert word.vocalized_text == MIDBAR
    assert word.clean_text == "מדבר"
    assert "".join(s.text for s in word.syllables) == MIDBAR


def test_analyze_word_non_hebrew_has_no_syllables():
    word = analyze_word("hello")
    assert word.syllables == []
    assert word.vowel_signature == ""
