"""Analyze multi-line text for rhymes: tokenize, vocalize, cluster."""

import logging
import time
from dataclasses import dataclass, field

from charuz.clustering import find_rhyme_groups
from charuz.niqqud import strip_niqqud, tokenize
from charuz.signature import analyze_word
from charuz.types import RhymeGroup, Word
from charuz.vocalize import MemoryVocalizationCache, VocalizationProvider, vocalize_words

logger = logging.getLogger(__name__)


@dataclass
class AnalyzedLine:
    id: str
    text: str
    words: list[Word] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"id": self.id, "text": self.text, "words": [w.to_dict() for w in self.words]}


@dataclass
class AnalysisResult:
    lines: list[AnalyzedLine]
    rhyme_groups: list[RhymeGroup]
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "lines": [line.to_dict() for line in self.lines],
            "rhyme_groups": [g.to_dict() for g in self.rhyme_groups],
        }


def analyze_text(
    text: str,
    provider: VocalizationProvider | None = None,
    cache: MemoryVocalizationCache | None = None,
) -> AnalysisResult:
    """Find rhyme groups across the lines of text.

    Each line gets the id "line-<n>". Hebrew words are tokenized per line,
    vocalized through provider (or taken as already vocalized when it is
    None), and clustered together across all lines. Distinct words are
    looked up once each, concurrently in small batches.
    """
    tokenized = [
        (f"line-{n}", line_text, [token for _, _, token in tokenize(line_text)])
        for n, line_text in enumerate(text.split("\n"))
    ]

    vocalized: dict[str, str] = {}
    if provider is not None:
        if cache is None:
            cache = MemoryVocalizationCache()
        all_tokens = [token for _, _, tokens in tokenized for token in tokens]
        vocalized = vocalize_words(all_tokens, provider, cache)

    lines: list[AnalyzedLine] = []
    for line_id, line_text, tokens in tokenized:
        line = AnalyzedLine(id=line_id, text=line_text)
        for position, token in enumerate(tokens):
            form = vocalized.get(strip_niqqud(token).strip(), token) if provider is not None else token
            line.words.append(analyze_word(token, form, line_id=line_id, position=position))
        lines.append(line)

    all_words = [w for line in lines for w in line.words]
    groups = find_rhyme_groups(all_words)
    logger.info(f"Analyzed {len(lines)} line(s), {len(all_words)} word(s): {len(groups)} rhyme group(s)")
    return AnalysisResult(lines=lines, rhyme_groups=groups)
