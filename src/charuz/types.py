"""Core data types for charuz."""

from dataclasses import dataclass, field
from enum import Enum


class Vowel(str, Enum):
    """Vowel category of a syllable. NONE means no vowel mark was found."""
    A = "A"
    E = "E"
    I = "I"
    O = "O"
    U = "U"
    NONE = ""


class RhymeType(str, Enum):
    MULTI = "multi"
    ASSONANCE = "assonance"
    ANCHOR = "anchor"
    PERFECT = "perfect"
    SLANT = "slant"


@dataclass
class Syllable:
    """One syllable of a vocalized word."""
    text: str
    vowel: Vowel = Vowel.NONE
    onset: str = ""
    coda: str = ""
    is_stressed: bool = False
    start_index: int = 0     # offset into the vocalized word
    end_index: int = 0       # exclusive

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "vowel": self.vowel.value,
            "onset": self.onset,
            "coda": self.coda,
            "is_stressed": self.is_stressed,
            "start_index": self.start_index,
            "end_index": self.end_index,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Syllable":
        return cls(
            text=data["text"],
            vowel=Vowel(data.get("vowel", "")),
            onset=data.get("onset", ""),
            coda=data.get("coda", ""),
            is_stressed=data.get("is_stressed", False),
            start_index=data.get("start_index", 0),
            end_index=data.get("end_index", 0),
        )


@dataclass
class Word:
    """Phonetic view of one word: its syllables and vowel fingerprints."""
    text: str
    clean_text: str = ""
    vocalized_text: str = ""
    syllables: list[Syllable] = field(default_factory=list)
    vowel_signature: str = ""    # e.g. "A-O"
    anchor_signature: str = ""   # vowel of the last syllable
    line_id: str = ""
    position: int = 0            # index of the word within its line

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "clean_text": self.clean_text,
            "vocalized_text": self.vocalized_text,
            "syllables": [s.to_dict() for s in self.syllables],
            "vowel_signature": self.vowel_signature,
            "anchor_signature": self.anchor_signature,
            "line_id": self.line_id,
            "position": self.position,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Word":
        return cls(
            text=data["text"],
            clean_text=data.get("clean_text", ""),
            vocalized_text=data.get("vocalized_text", ""),
            syllables=[Syllable.from_dict(s) for s in data.get("syllables", [])],
            vowel_signature=data.get("vowel_signature", ""),
            anchor_signature=data.get("anchor_signature", ""),
            line_id=data.get("line_id", ""),
            position=data.get("position", 0),
        )


@dataclass
class GroupMember:
    """Reference from a rhyme group back to a word in a line."""
    line_id: str
    position: int
    text: str

    def to_dict(self) -> dict:
        return {"line_id": self.line_id, "position": self.position, "text": self.text}


@dataclass
class RhymeGroup:
    """Words sharing one clustering key within one signature layer."""
    id: str
    signature: str
    type: RhymeType
    confidence: float
    members: list[GroupMember] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "signature": self.signature,
            "type": self.type.value,
            "confidence": self.confidence,
            "members": [m.to_dict() for m in self.members],
        }


@dataclass
class Hit:
    """Inclusive syllable range within one bar (global syllable indices)."""
    bar_id: str
    start_syllable: int
    end_syllable: int

    def __post_init__(self):
        if self.start_syllable < 0:
            raise ValueError(f"Hit start must be >= 0, got {self.start_syllable}")
        if self.start_syllable > self.end_syllable:
            raise ValueError(
                f"Hit start {self.start_syllable} is after end {self.end_syllable}"
            )

    @property
    def length(self) -> int:
        return self.end_syllable - self.start_syllable + 1

    def covers(self, bar_id: str, index: int) -> bool:
        return (
            self.bar_id == bar_id
            and self.start_syllable <= index <= self.end_syllable
        )

    def to_dict(self) -> dict:
        return {
            "bar_id": self.bar_id,
            "start_syllable": self.start_syllable,
            "end_syllable": self.end_syllable,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Hit":
        return cls(data["bar_id"], data["start_syllable"], data["end_syllable"])


@dataclass
class Scheme:
    """A named, colored collection of hits marking one rhyme pattern."""
    id: str
    color: str                   # base hex, e.g. "#FF5733"
    hits: list[Hit] = field(default_factory=list)
    name: str | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "color": self.color,
            "name": self.name,
            "hits": [h.to_dict() for h in self.hits],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Scheme":
        return cls(
            id=data["id"],
            color=data["color"],
            hits=[Hit.from_dict(h) for h in data.get("hits", [])],
            name=data.get("name"),
        )


@dataclass
class Bar:
    """One line of a verse and its analyzed words."""
    id: str
    text: str = ""
    words: list[Word] = field(default_factory=list)

    @property
    def syllables(self) -> list[Syllable]:
        """All syllables of the bar in word order; hit indices point here."""
        return [syl for word in self.words for syl in word.syllables]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "text": self.text,
            "words": [w.to_dict() for w in self.words],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Bar":
        return cls(
            id=data["id"],
            text=data.get("text", ""),
            words=[Word.from_dict(w) for w in data.get("words", [])],
        )


@dataclass
class Verse:
    """Root of the authoring model: bars plus the schemes marked over them."""
    bars: list[Bar] = field(default_factory=list)
    schemes: list[Scheme] = field(default_factory=list)
    title: str = ""

    def bar(self, bar_id: str) -> Bar | None:
        for bar in self.bars:
            if bar.id == bar_id:
                return bar
        return None

    def scheme(self, scheme_id: str) -> Scheme | None:
        for scheme in self.schemes:
            if scheme.id == scheme_id:
                return scheme
        return None

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "bars": [b.to_dict() for b in self.bars],
            "schemes": [s.to_dict() for s in self.schemes],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Verse":
        return cls(
            bars=[Bar.from_dict(b) for b in data.get("bars", [])],
            schemes=[Scheme.from_dict(s) for s in data.get("schemes", [])],
            title=data.get("title", ""),
        )
