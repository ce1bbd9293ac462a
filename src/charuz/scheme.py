"""Tap-driven authoring of rhyme schemes over a verse.

A tap on a syllable either edits the hit that already covers it (delete,
shrink from an edge, or split around the tapped syllable), or grows the
active scheme, or starts a new scheme. After every tap, no two hits of one
scheme on the same bar overlap or touch.
"""

import copy
import logging
import threading
import uuid
from dataclasses import dataclass

from charuz.colors import RHYME_COLORS, get_rhyme_color
from charuz.types import Bar, Hit, Scheme, Verse, Word

logger = logging.getLogger(__name__)


@dataclass
class TapResult:
    verse: Verse
    active_scheme_id: str | None


def _new_scheme_id() -> str:
    return uuid.uuid4().hex


def merge_adjacent_hits(hits: list[Hit], bar_id: str) -> list[Hit]:
    """Combine touching or overlapping hits on bar_id into single hits.

    Hits on other bars keep their relative order. The merged hits for
    bar_id are sorted by start and take the place of the first hit on
    that bar.
    """
    bar_hits = sorted(
        (h for h in hits if h.bar_id == bar_id), key=lambda h: h.start_syllable
    )
    merged: list[Hit] = []
    for hit in bar_hits:
        last = merged[-1] if merged else None
        if last is not None and last.end_syllable + 1 >= hit.start_syllable:
            last.end_syllable = max(last.end_syllable, hit.end_syllable)
        else:
            merged.append(Hit(hit.bar_id, hit.start_syllable, hit.end_syllable))

    result: list[Hit] = []
    placed = False
    for hit in hits:
        if hit.bar_id != bar_id:
            result.append(hit)
        elif not placed:
            result.extend(merged)
            placed = True
    return result


def _edit_covering_hit(scheme: Scheme, hit_index: int, syllable_index: int) -> list[Hit]:
    """Return the scheme's hits after tapping inside hits[hit_index]."""
    hits = list(scheme.hits)
    hit = hits[hit_index]
    start, end = hit.start_syllable, hit.end_syllable

    if start == end:
        del hits[hit_index]
    elif syllable_index == start:
        hits[hit_index] = Hit(hit.bar_id, start + 1, end)
    elif syllable_index == end:
        hits[hit_index] = Hit(hit.bar_id, start, end - 1)
    else:
        hits[hit_index:hit_index + 1] = [
            Hit(hit.bar_id, start, syllable_index - 1),
            Hit(hit.bar_id, syllable_index + 1, end),
        ]
    return hits


def _grow_scheme(scheme: Scheme, bar_id: str, syllable_index: int) -> list[Hit]:
    """Return the scheme's hits after tapping an uncovered syllable."""
    hits = [Hit(h.bar_id, h.start_syllable, h.end_syllable) for h in scheme.hits]
    same_bar = [h for h in hits if h.bar_id == bar_id]

    right = next((h for h in same_bar if h.end_syllable + 1 == syllable_index), None)
    left = next((h for h in same_bar if h.start_syllable - 1 == syllable_index), None)
    if right is not None:
        right.end_syllable = syllable_index
    elif left is not None:
        left.start_syllable = syllable_index
    else:
        hits.append(Hit(bar_id, syllable_index, syllable_index))
        return hits
    return merge_adjacent_hits(hits, bar_id)


def tap(
    verse: Verse,
    active_scheme_id: str | None,
    bar_id: str,
    syllable_index: int,
    palette: list[str] = RHYME_COLORS,
) -> TapResult:
    """Apply one syllable tap to a verse snapshot.

    The input verse is left untouched; the result carries a new verse and
    the new active scheme id. A tap on an unknown bar or outside the bar's
    syllables changes nothing.
    """
    bar = verse.bar(bar_id)
    if bar is None or not 0 <= syllable_index < len(bar.syllables):
        logger.debug(f"Ignoring tap on {bar_id}:{syllable_index}")
        return TapResult(verse, active_scheme_id)

    new = copy.deepcopy(verse)

    # A: the syllable already belongs to a hit
    for pos, scheme in enumerate(new.schemes):
        hit_index = next(
            (i for i, h in enumerate(scheme.hits) if h.covers(bar_id, syllable_index)),
            None,
        )
        if hit_index is None:
            continue

        scheme.hits = _edit_covering_hit(scheme, hit_index, syllable_index)
        if scheme.hits:
            return TapResult(new, scheme.id)

        del new.schemes[pos]
        if active_scheme_id != scheme.id:
            return TapResult(new, active_scheme_id)
        previous = new.schemes[pos - 1].id if pos > 0 else None
        return TapResult(new, previous)

    # B: grow the active scheme
    active = new.scheme(active_scheme_id) if active_scheme_id else None
    if active is not None:
        active.hits = _grow_scheme(active, bar_id, syllable_index)
        return TapResult(new, active.id)

    # C: start a new scheme
    scheme = Scheme(
        id=_new_scheme_id(),
        color=get_rhyme_color(len(new.schemes), palette),
        hits=[Hit(bar_id, syllable_index, syllable_index)],
    )
    new.schemes.append(scheme)
    return TapResult(new, scheme.id)


class VerseEditor:
    """Single owner of a verse being authored.

    Taps and scheme/bar operations are applied one at a time under a
    lock, each as a read-modify-write of the current verse.
    """

    def __init__(
        self,
        verse: Verse | None = None,
        active_scheme_id: str | None = None,
        palette: list[str] = RHYME_COLORS,
    ):
        self.verse = verse if verse is not None else Verse()
        self.active_scheme_id = active_scheme_id
        self.palette = palette
        self._lock = threading.Lock()
        self._revisions: dict[str, int] = {}

    # --- Taps ---

    def tap(self, bar_id: str, syllable_index: int) -> TapResult:
        with self._lock:
            result = tap(
                self.verse, self.active_scheme_id, bar_id, syllable_index,
                palette=self.palette,
            )
            self.verse = result.verse
            self.active_scheme_id = result.active_scheme_id
            return result

    # --- Scheme operations ---

    def _require_scheme(self, scheme_id: str) -> Scheme:
        scheme = self.verse.scheme(scheme_id)
        if scheme is None:
            raise KeyError(f"Unknown scheme: {scheme_id}")
        return scheme

    def select_scheme(self, scheme_id: str | None) -> None:
        with self._lock:
            if scheme_id is not None:
                self._require_scheme(scheme_id)
            self.active_scheme_id = scheme_id

    def rename_scheme(self, scheme_id: str, name: str | None) -> None:
        with self._lock:
            self._require_scheme(scheme_id).name = name

    def recolor_scheme(self, scheme_id: str, color: str) -> None:
        with self._lock:
            self._require_scheme(scheme_id).color = color

    def move_scheme(self, scheme_id: str, offset: int) -> bool:
        """Move a scheme up (negative) or down the list. False if blocked."""
        with self._lock:
            scheme = self._require_scheme(scheme_id)
            schemes = self.verse.schemes
            idx = schemes.index(scheme)
            new_idx = idx + offset
            if not 0 <= new_idx < len(schemes):
                return False
            schemes.insert(new_idx, schemes.pop(idx))
            return True

    def delete_scheme(self, scheme_id: str) -> None:
        with self._lock:
            scheme = self._require_scheme(scheme_id)
            self.verse.schemes.remove(scheme)
            if self.active_scheme_id == scheme_id:
                self.active_scheme_id = None

    # --- Bars ---

    def add_bar(self, text: str = "", bar_id: str | None = None) -> Bar:
        with self._lock:
            bar = Bar(id=bar_id or uuid.uuid4().hex, text=text)
            self.verse.bars.append(bar)
            self._revisions[bar.id] = 0
            return bar

    def bar_snapshot(self, bar_id: str) -> tuple[str, int] | None:
        """Current (text, revision) of a bar, or None if it is gone."""
        with self._lock:
            bar = self.verse.bar(bar_id)
            if bar is None:
                return None
            return bar.text, self._revisions.get(bar_id, 0)

    def set_bar_text(self, bar_id: str, text: str) -> int:
        """Replace a bar's text, drop its old syllables, return the new revision."""
        with self._lock:
            bar = self.verse.bar(bar_id)
            if bar is None:
                raise KeyError(f"Unknown bar: {bar_id}")
            bar.text = text
            bar.words = []
            revision = self._revisions.get(bar_id, 0) + 1
            self._revisions[bar_id] = revision
            return revision

    def apply_bar_words(self, bar_id: str, revision: int, words: list[Word]) -> bool:
        """Install analyzed words for a bar unless its text changed since.

        Returns False, leaving the bar alone, when the result is stale or
        the bar no longer exists.
        """
        with self._lock:
            bar = self.verse.bar(bar_id)
            if bar is None or self._revisions.get(bar_id, 0) != revision:
                logger.info(f"Dropping stale analysis for bar {bar_id} (revision {revision})")
                return False
            bar.words = words
            return True
