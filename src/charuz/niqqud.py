"""Hebrew niqqud tables and consonant+marks unit grouping."""

import re
from dataclasses import dataclass, field

from charuz.types import Vowel

# Niqqud code points
SHEVA = "\u05B0"
HATAF_SEGOL = "\u05B1"
HATAF_PATAH = "\u05B2"
HATAF_QAMATS = "\u05B3"
HIRIQ = "\u05B4"
TSERE = "\u05B5"
SEGOL = "\u05B6"
PATAH = "\u05B7"
QAMATS = "\u05B8"
HOLAM = "\u05B9"
HOLAM_HASER = "\u05BA"
QUBUTS = "\u05BB"
DAGESH = "\u05BC"        # also mapiq / shuruq dot
METEG = "\u05BD"
MAQAF = "\u05BE"
RAFE = "\u05BF"
SHIN_DOT = "\u05C1"
SIN_DOT = "\u05C2"

VAV = "\u05D5"

LETTER_RANGE = ("\u05D0", "\u05EA")
MARK_RANGE = ("\u0591", "\u05C7")

GUTTURALS = frozenset("\u05D0\u05D4\u05D7\u05E2\u05E8")    # alef he het ayin resh
FINAL_LETTERS = frozenset("\u05DD\u05DF\u05DA")            # final mem, nun, kaf

# Niqqud -> vowel category. Sheva reads as E when it carries a vowel at all.
NIQQUD_VOWELS: dict[str, Vowel] = {
    QAMATS:       Vowel.A,
    PATAH:        Vowel.A,
    HATAF_PATAH:  Vowel.A,
    TSERE:        Vowel.E,
    SEGOL:        Vowel.E,
    HATAF_SEGOL:  Vowel.E,
    SHEVA:        Vowel.E,
    HIRIQ:        Vowel.I,
    HOLAM:        Vowel.O,
    HOLAM_HASER:  Vowel.O,
    HATAF_QAMATS: Vowel.O,
    QUBUTS:       Vowel.U,
}

# Marks the syllabifier treats as a full vowel (everything but Sheva)
CORE_VOWEL_MARKS = frozenset(m for m in NIQQUD_VOWELS if m != SHEVA)

_HEBREW_WORD = re.compile("[\u0590-\u05FF]+")
_MARKS = re.compile("[\u0591-\u05C7]")


def is_hebrew_letter(ch: str) -> bool:
    """Return True for a Hebrew consonant (alef through tav)."""
    return LETTER_RANGE[0] <= ch <= LETTER_RANGE[1]


def is_mark(ch: str) -> bool:
    """Return True for a niqqud/cantillation mark."""
    return MARK_RANGE[0] <= ch <= MARK_RANGE[1]


def has_hebrew(text: str) -> bool:
    return any(is_hebrew_letter(ch) for ch in text)


def strip_niqqud(text: str) -> str:
    """Remove all niqqud and cantillation marks, keeping letters."""
    return _MARKS.sub("", text)


def tokenize(line: str) -> list[tuple[int, int, str]]:
    """Find Hebrew word spans in a line as (start, end, text) tuples.

    Punctuation, Latin text and whitespace separate words and are dropped.
    """
    return [(m.start(), m.end(), m.group(0)) for m in _HEBREW_WORD.finditer(line)]


@dataclass
class ConsonantUnit:
    """One letter (or other character) plus its trailing diacritic marks."""
    letter: str
    marks: list[str] = field(default_factory=list)

    @property
    def full_text(self) -> str:
        return self.letter + "".join(self.marks)

    def has_mark(self, mark: str) -> bool:
        return mark in self.marks

    @property
    def has_core_vowel(self) -> bool:
        return any(m in CORE_VOWEL_MARKS for m in self.marks)


def group_units(text: str) -> list[ConsonantUnit]:
    """Group a vocalized string into consonant+marks units, left to right.

    A Hebrew letter opens a new unit and marks attach to the open unit.
    Any other character becomes a unit of its own. A mark with nothing
    to attach to (e.g. at the very start) becomes a letterless unit, so
    joining every unit's full_text always gives back the input.
    """
    units: list[ConsonantUnit] = []
    current: ConsonantUnit | None = None

    for ch in text:
        if is_mark(ch):
            if current is None:
                current = ConsonantUnit(letter="")
            current.marks.append(ch)
            continue
        if current is not None:
            units.append(current)
        current = ConsonantUnit(letter=ch)

    if current is not None:
        units.append(current)
    return units
