"""Vocalization lookup: raw Hebrew words -> niqqud-marked forms.

The provider is an external service and may fail or return nothing. The
first candidate is always taken; on any failure the raw word is used as
if it were already vocalized, so callers never see an exception.
"""

import json
import logging
import os
import tempfile
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

import requests

from charuz.niqqud import has_hebrew, strip_niqqud
from charuz.signature import analyze_word
from charuz.types import Word

if TYPE_CHECKING:
    from charuz.scheme import VerseEditor

logger = logging.getLogger(__name__)

CACHE_DIR = Path(os.environ.get("CHARUZ_CACHE_DIR", "~/.cache/charuz")).expanduser()
DICTA_URL = os.environ.get("CHARUZ_DICTA_URL", "https://charuzit-4-0.loadbalancer.dicta.org.il")

BATCH_SIZE = 5
DEFAULT_TIMEOUT = 10.0


class VocalizationError(Exception):
    """The vocalization service could not produce candidates."""


class VocalizationProvider(Protocol):
    def vocalize(self, raw_word: str) -> list[str]:
        """Return candidate vocalized forms, most likely first."""
        ...


class DictaVocalizer:
    """Vocalization candidates from the Dicta sound-play endpoint."""

    def __init__(self, base_url: str = DICTA_URL, timeout: float = DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def vocalize(self, raw_word: str) -> list[str]:
        try:
            response = requests.post(
                f"{self.base_url}/tipsoundplay",
                json={"w": raw_word},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise VocalizationError(f"Vocalization failed for {raw_word!r}: {e}") from e

        if isinstance(data, list):
            return [c for c in data if isinstance(c, str)]
        if isinstance(data, dict):
            return [c for c in data.get("all_nikud", []) if isinstance(c, str)]
        raise VocalizationError(f"Unexpected response for {raw_word!r}: {type(data).__name__}")


# --- Caches ---


class MemoryVocalizationCache:
    """Per-session cache of raw word -> vocalized form.

    Safe to share between the lookup threads of one session.
    """

    def __init__(self):
        self._entries: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, word: str) -> str | None:
        with self._lock:
            return self._entries.get(word)

    def put(self, word: str, vocalized: str) -> None:
        with self._lock:
            self._entries[word] = vocalized

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def _atomic_write(target: Path, data: bytes) -> None:
    """Write data to target atomically via temp file + rename."""
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=target.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp, target)
    except Exception:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise


class FileVocalizationCache(MemoryVocalizationCache):
    """Vocalization cache persisted as one JSON object on disk.

    Loaded once on construction; every put rewrites the file atomically.
    Puts are serialized so the file always holds the latest full snapshot.
    """

    def __init__(self, path: Path | None = None):
        super().__init__()
        self.path = Path(path) if path is not None else CACHE_DIR / "vocalization.json"
        if self.path.exists():
            try:
                data = json.loads(self.path.read_text(encoding="utf-8"))
            except (json.JSONDecodeError, OSError):
                logger.warning(f"Ignoring unreadable vocalization cache at {self.path}")
                data = {}
            if not isinstance(data, dict):
                data = {}
            self._entries.update(
                {k: v for k, v in data.items() if isinstance(k, str) and isinstance(v, str)}
            )
            logger.info(f"Loaded {len(self._entries)} cached vocalizations")

    def put(self, word: str, vocalized: str) -> None:
        with self._lock:
            self._entries[word] = vocalized
            _atomic_write(
                self.path,
                json.dumps(self._entries, ensure_ascii=False).encode("utf-8"),
            )


# --- Lookup ---


def vocalize_word(
    word: str,
    provider: VocalizationProvider,
    cache: MemoryVocalizationCache | None = None,
) -> str:
    """Return the first vocalization candidate for word, or the word itself.

    Niqqud already on the input is stripped before lookup. Failed or empty
    lookups fall back to the stripped word and are not cached.
    """
    clean = strip_niqqud(word).strip()
    if not clean:
        return word

    if cache is not None:
        cached = cache.get(clean)
        if cached is not None:
            return cached

    try:
        candidates = provider.vocalize(clean)
    except Exception as e:
        logger.warning(f"Vocalization failed for {clean!r}, using raw text: {e}")
        return clean

    if not candidates or not candidates[0]:
        logger.warning(f"No vocalization for {clean!r}, using raw text")
        return clean

    vocalized = candidates[0]
    if cache is not None:
        try:
            cache.put(clean, vocalized)
        except OSError as e:
            logger.warning(f"Could not cache vocalization for {clean!r}: {e}")
    return vocalized


def vocalize_words(
    words: list[str],
    provider: VocalizationProvider,
    cache: MemoryVocalizationCache | None = None,
    batch_size: int = BATCH_SIZE,
) -> dict[str, str]:
    """Vocalize each distinct word once, batch_size lookups at a time.

    Returns a mapping from the niqqud-stripped word to its vocalized form.
    """
    unique = list(dict.fromkeys(strip_niqqud(w).strip() for w in words))
    unique = [w for w in unique if w]

    result: dict[str, str] = {}
    if not unique:
        return result
    with ThreadPoolExecutor(max_workers=max(1, batch_size)) as pool:
        for i in range(0, len(unique), batch_size):
            batch = unique[i:i + batch_size]
            futures = [pool.submit(vocalize_word, w, provider, cache) for w in batch]
            result.update(zip(batch, (f.result() for f in futures)))
    logger.debug(f"Vocalized {len(unique)} distinct word(s)")
    return result


def _analyze_raw(
    raw: str,
    position: int,
    provider: VocalizationProvider | None,
    cache: MemoryVocalizationCache | None,
    line_id: str,
) -> Word:
    clean = strip_niqqud(raw).strip()
    if not has_hebrew(clean):
        return analyze_word(raw, vocalized=clean, line_id=line_id, position=position)
    if provider is None:
        vocalized = raw
    else:
        vocalized = vocalize_word(clean, provider, cache)
    return analyze_word(raw, vocalized=vocalized, line_id=line_id, position=position)


def vocalize_and_syllabify(
    text: str,
    provider: VocalizationProvider | None,
    cache: MemoryVocalizationCache | None = None,
    batch_size: int = BATCH_SIZE,
    line_id: str = "",
) -> list[Word]:
    """Vocalize and syllabify every whitespace-separated word of text.

    Words are looked up concurrently, batch_size at a time; results keep
    input order. With no provider, words are taken as already vocalized.
    """
    raw_words = text.split()
    if not raw_words:
        return []

    words: list[Word] = []
    with ThreadPoolExecutor(max_workers=max(1, batch_size)) as pool:
        for i in range(0, len(raw_words), batch_size):
            batch = raw_words[i:i + batch_size]
            futures = [
                pool.submit(_analyze_raw, raw, i + j, provider, cache, line_id)
                for j, raw in enumerate(batch)
            ]
            words.extend(f.result() for f in futures)
    return words


class BarVocalizer:
    """Runs bar analysis off the caller's thread with last-edit-wins.

    Each submission records the bar's revision at submit time. When the
    analysis finishes it is handed to the editor, which drops it if the
    bar's text has changed since.
    """

    def __init__(
        self,
        provider: VocalizationProvider | None,
        cache: MemoryVocalizationCache | None = None,
        max_workers: int = 2,
    ):
        self.provider = provider
        self.cache = cache if cache is not None else MemoryVocalizationCache()
        self._pool = ThreadPoolExecutor(max_workers=max_workers)

    def submit(self, editor: "VerseEditor", bar_id: str) -> Future:
        """Analyze the bar's current text; the future yields True if applied."""
        snapshot = editor.bar_snapshot(bar_id)
        if snapshot is None:
            done: Future = Future()
            done.set_result(False)
            return done
        text, revision = snapshot
        return self._pool.submit(self._run, editor, bar_id, text, revision)

    def _run(self, editor: "VerseEditor", bar_id: str, text: str, revision: int) -> bool:
        words = vocalize_and_syllabify(text, self.provider, self.cache, line_id=bar_id)
        return editor.apply_bar_words(bar_id, revision, words)

    def shutdown(self) -> None:
        self._pool.shutdown(wait=True)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.shutdown()
