"""Aggregate statistics for one rhyme scheme."""

from dataclasses import dataclass, field

from charuz.types import Scheme, Verse, Vowel


@dataclass
class SchemeStats:
    total_syllables: int = 0
    bar_count: int = 0
    vowel_pattern: list[Vowel] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "total_syllables": self.total_syllables,
            "bar_count": self.bar_count,
            "vowel_pattern": [v.value for v in self.vowel_pattern],
        }


def compute_scheme_stats(scheme: Scheme, verse: Verse) -> SchemeStats:
    """Count covered syllables and bars, and collect the covered vowels.

    Hits on bars missing from the verse still count toward the totals but
    contribute no vowels.
    """
    bar_ids: set[str] = set()
    total = 0
    vowels: list[Vowel] = []

    for hit in scheme.hits:
        bar_ids.add(hit.bar_id)
        total += hit.length
        bar = verse.bar(hit.bar_id)
        if bar is None:
            continue
        syllables = bar.syllables
        for i in range(hit.start_syllable, hit.end_syllable + 1):
            if i < len(syllables) and syllables[i].vowel is not Vowel.NONE:
                vowels.append(syllables[i].vowel)

    return SchemeStats(total_syllables=total, bar_count=len(bar_ids), vowel_pattern=vowels)
