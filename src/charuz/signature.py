"""Per-word phonetic signatures derived from syllables."""

from charuz.niqqud import has_hebrew, strip_niqqud
from charuz.syllabify import syllabify_word
from charuz.types import Syllable, Vowel, Word


def vowel_signature(syllables: list[Syllable]) -> str:
    """Dash-joined non-empty syllable vowels, e.g. "A-O"."""
    return "-".join(s.vowel.value for s in syllables if s.vowel is not Vowel.NONE)


def anchor_signature(syllables: list[Syllable]) -> str:
    """Vowel of the final syllable, or "" when it has none."""
    if not syllables:
        return ""
    return syllables[-1].vowel.value


def analyze_word(
    text: str,
    vocalized: str | None = None,
    line_id: str = "",
    position: int = 0,
) -> Word:
    """Build the phonetic view of one word.

    Args:
        text: The word as written.
        vocalized: Vocalized form; defaults to ``text`` (taken as already
            vocalized).
        line_id: Identifier of the line the word came from.
        position: Index of the word within its line.
    """
    if vocalized is None:
        vocalized = text
    clean = strip_niqqud(text).strip()
    syllables = syllabify_word(vocalized) if has_hebrew(vocalized) else []
    return Word(
        text=text,
        clean_text=clean,
        vocalized_text=vocalized,
        syllables=syllables,
        vowel_signature=vowel_signature(syllables),
        anchor_signature=anchor_signature(syllables),
        line_id=line_id,
        position=position,
    )
