"""Group words into rhyme groups across lines using vowel signatures.

Each word may join up to three buckets, one per layer. Layers are
independent, so a word can sit in several groups at once:

- multi: last two vowels of the signature (needs >= 2 vowels)
- assonance: last vowel alone
- anchor: last vowel plus a final-form letter (ם ן ך) ending the word
"""

from charuz.niqqud import FINAL_LETTERS, strip_niqqud
from charuz.types import GroupMember, RhymeGroup, RhymeType, Word

LAYER_CONFIDENCE: dict[RhymeType, float] = {
    RhymeType.MULTI: 0.95,
    RhymeType.ASSONANCE: 0.6,
    RhymeType.ANCHOR: 0.85,
}

_MIN_GROUP_SIZE = 2


def _final_letter(word: Word) -> str:
    base = strip_niqqud(word.clean_text or word.text).strip()
    return base[-1] if base else ""


def _layer_keys(word: Word) -> list[tuple[RhymeType, str]]:
    """Return the (layer, key) buckets a word belongs to, in layer order."""
    vowels = [v for v in word.vowel_signature.split("-") if v]
    if not vowels:
        return []

    keys = []
    if len(vowels) >= 2:
        keys.append((RhymeType.MULTI, "-".join(vowels[-2:])))
    keys.append((RhymeType.ASSONANCE, vowels[-1]))
    final = _final_letter(word)
    if final in FINAL_LETTERS:
        keys.append((RhymeType.ANCHOR, vowels[-1] + final))
    return keys


def find_rhyme_groups(words: list[Word]) -> list[RhymeGroup]:
    """Cluster words into rhyme groups.

    Groups come back in the order their buckets were first seen, members
    in input order. A word is added to a bucket at most once per
    (line_id, position). Buckets with fewer than two members are dropped.
    """
    buckets: dict[str, RhymeGroup] = {}
    seen: dict[str, set[tuple[str, int]]] = {}

    for word in words:
        for layer, key in _layer_keys(word):
            bucket_id = f"{layer.value}:{key}"
            group = buckets.get(bucket_id)
            if group is None:
                group = RhymeGroup(
                    id=bucket_id,
                    signature=key,
                    type=layer,
                    confidence=LAYER_CONFIDENCE[layer],
                )
                buckets[bucket_id] = group
                seen[bucket_id] = set()

            ref = (word.line_id, word.position)
            if ref in seen[bucket_id]:
                continue
            seen[bucket_id].add(ref)
            group.members.append(GroupMember(
                line_id=word.line_id,
                position=word.position,
                text=word.text,
            ))

    return [g for g in buckets.values() if len(g.members) >= _MIN_GROUP_SIZE]
