"""Hebrew syllabification, rhyme clustering and rhyme-scheme authoring."""

from charuz.clustering import find_rhyme_groups
from charuz.colors import get_scheme_shades
from charuz.engine import analyze_text
from charuz.scheme import VerseEditor, tap
from charuz.signature import analyze_word
from charuz.stats import compute_scheme_stats
from charuz.syllabify import extract_syllable_details, syllabify

__all__ = [
    "analyze_text",
    "analyze_word",
    "compute_scheme_stats",
    "extract_syllable_details",
    "find_rhyme_groups",
    "get_scheme_shades",
    "syllabify",
    "tap",
    "VerseEditor",
]
