"""Syllabification: vocalized Hebrew words -> syllable boundaries.

Boundaries are driven purely by niqqud. Walking consonant units left to
right, the accumulated syllable is closed before the next unit when:

1. the next unit carries a Dagesh and is not a guttural (the consonant
   doubles and closes the current syllable),
2. the current unit carries a Sheva (vocal or silent, treated alike),
3. the current unit carries a full vowel and the next one carries a full
   vowel or a Sheva.

Text without niqqud never meets a rule, so it comes back as one syllable.
"""

from charuz.niqqud import (
    DAGESH,
    GUTTURALS,
    NIQQUD_VOWELS,
    SHEVA,
    VAV,
    ConsonantUnit,
    group_units,
    is_hebrew_letter,
)
from charuz.types import Syllable, Vowel


def _closes_before(current: ConsonantUnit, nxt: ConsonantUnit) -> bool:
    if nxt.has_mark(DAGESH) and nxt.letter not in GUTTURALS:
        return True
    if current.has_mark(SHEVA):
        return True
    if current.has_core_vowel and (nxt.has_core_vowel or nxt.has_mark(SHEVA)):
        return True
    return False


def syllabify(text: str) -> list[str]:
    """Split a vocalized string into syllable substrings.

    Joining the result gives back the input exactly. Empty input gives [].
    """
    units = group_units(text)
    syllables: list[str] = []
    buffer: list[str] = []

    for current, nxt in zip(units, units[1:] + [None]):
        buffer.append(current.full_text)
        if nxt is None or _closes_before(current, nxt):
            syllables.append("".join(buffer))
            buffer = []

    return syllables


def _is_shuruq(unit: ConsonantUnit) -> bool:
    """Vav with a dagesh dot and no other vowel reads as U."""
    return (
        unit.letter == VAV
        and unit.has_mark(DAGESH)
        and not any(m in NIQQUD_VOWELS for m in unit.marks)
    )


def extract_syllable_details(text: str) -> Syllable:
    """Derive vowel, onset and coda from one syllable string.

    The first vowel mark wins. Onset and coda hold the Hebrew letters
    before and after it; a shuruq vav is the vowel itself, not a consonant.
    """
    vowel = Vowel.NONE
    onset: list[str] = []
    coda: list[str] = []

    for unit in group_units(text):
        if vowel is Vowel.NONE and _is_shuruq(unit):
            vowel = Vowel.U
            continue
        letter = unit.letter if is_hebrew_letter(unit.letter) else ""
        if vowel is not Vowel.NONE:
            coda.append(letter)
            continue
        onset.append(letter)
        for mark in unit.marks:
            mapped = NIQQUD_VOWELS.get(mark)
            if mapped is not None:
                vowel = mapped
                break

    return Syllable(text=text, vowel=vowel, onset="".join(onset), coda="".join(coda))


def syllabify_word(vocalized: str) -> list[Syllable]:
    """Syllabify a vocalized word and attach details and offsets.

    The last syllable is marked stressed. This is a fixed heuristic,
    not a stress assignment.
    """
    syllables = []
    offset = 0
    for text in syllabify(vocalized):
        syl = extract_syllable_details(text)
        syl.start_index = offset
        syl.end_index = offset + len(text)
        offset = syl.end_index
        syllables.append(syl)

    if syllables:
        syllables[-1].is_stressed = True
    return syllables
