"""Tests for the vocalization boundary and its caches."""

import json
import threading
import time
from unittest.mock import MagicMock, patch

import pytest
import requests

from charuz.niqqud import DAGESH, HIRIQ, QAMATS, SHEVA
from charuz.scheme import VerseEditor
from charuz.vocalize import (
    BarVocalizer,
    DictaVocalizer,
    FileVocalizationCache,
    MemoryVocalizationCache,
    VocalizationError,
    _atomic_write,
    vocalize_and_syllabify,
    vocalize_word,
    vocalize_words,
)

MIDBAR = "מ" + HIRIQ + "ד" + SHEVA + "ב" + DAGESH + QAMATS + "ר"
DAVAR = "ד" + QAMATS + "ב" + QAMATS + "ר"


class FakeProvider:
    """Returns canned candidates and records lookups."""

    def __init__(self, table=None, error=None):
        self.table = table or {}
        self.error = error
        self.calls = []
        self._lock = threading.Lock()

    def vocalize(self, raw_word):
        with self._lock:
            self.calls.append(raw_word)
        if self.error is not None:
            raise self.error
        return self.table.get(raw_word, [])


@pytest.fixture(autouse=True)
def isolated_cache(tmp_path, monkeypatch):
    """Redirect cache to tmp_path so tests don't pollute the real cache."""
    monkeypatch.setattr("charuz.vocalize.CACHE_DIR", tmp_path / "cache")


class TestVocalizeWord:
    def test_takes_first_candidate(self):
        provider = FakeProvider({"מדבר": [MIDBAR, "other"]})
        assert vocalize_word("מדבר", provider) == MIDBAR

    def test_strips_existing_niqqud_before_lookup(self):
        provider = FakeProvider({"מדבר": [MIDBAR]})
        vocalize_word(MIDBAR, provider)
        assert provider.calls == ["מדבר"]

    def test_provider_error_falls_back_to_raw(self):
        provider = FakeProvider(error=VocalizationError("down"))
        assert vocalize_word("מדבר", provider) == "מדבר"

    def test_unexpected_error_falls_back_to_raw(self):
        provider = FakeProvider(error=RuntimeError("boom"))
        assert vocalize_word("מדבר", provider) == "מדבר"

    def test_empty_result_falls_back_to_raw(self):
        assert vocalize_word("מדבר", FakeProvider()) == "מדבר"

    def test_cache_hit_skips_provider(self):
        cache = MemoryVocalizationCache()
        cache.put("מדבר", MIDBAR)
        provider = FakeProvider()
        assert vocalize_word("מדבר", provider, cache) == MIDBAR
        assert provider.calls == []

    def test_success_is_cached_failure_is_not(self):
        cache = MemoryVocalizationCache()
        vocalize_word("מדבר", FakeProvider({"מדבר": [MIDBAR]}), cache)
        vocalize_word("דבר", FakeProvider(error=VocalizationError("x")), cache)
        assert cache.get("מדבר") == MIDBAR
        assert cache.get("דבר") is None

    def test_cache_write_failure_still_returns_candidate(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        cache = FileVocalizationCache(blocker / "sub" / "voc.json")
        provider = FakeProvider({"מדבר": [MIDBAR]})
        assert vocalize_word("מדבר", provider, cache) == MIDBAR
        assert cache.get("מדבר") == MIDBAR

    def test_blank_word(self):
        provider = FakeProvider()
        assert vocalize_word("  ", provider) == "  "
        assert provider.calls == []


class TestDictaVocalizer:
    def _response(self, payload):
        response = MagicMock()
        response.json.return_value = payload
        response.raise_for_status.return_value = None
        return response

    def test_list_payload(self):
        with patch("charuz.vocalize.requests.post", return_value=self._response([DAVAR, "x"])) as post:
            result = DictaVocalizer(base_url="http://dicta.test/").vocalize("דבר")
        assert result == [DAVAR, "x"]
        args, kwargs = post.call_args
        assert args[0] == "http://dicta.test/tipsoundplay"
        assert kwargs["json"] == {"w": "דבר"}
        assert kwargs["timeout"] > 0

    def test_all_nikud_payload(self):
        with patch("charuz.vocalize.requests.post", return_value=self._response({"all_nikud": [DAVAR]})):
            assert DictaVocalizer().vocalize("דבר") == [DAVAR]

    def test_http_error_raises_vocalization_error(self):
        response = self._response([])
        response.raise_for_status.side_effect = requests.HTTPError("500")
        with patch("charuz.vocalize.requests.post", return_value=response):
            with pytest.raises(VocalizationError):
                DictaVocalizer().vocalize("דבר")

    def test_connection_error_raises_vocalization_error(self):
        with patch("charuz.vocalize.requests.post", side_effect=requests.ConnectionError("no route")):
            with pytest.raises(VocalizationError):
                DictaVocalizer().vocalize("דבר")

    def test_bad_json_raises_vocalization_error(self):
        response = self._response(None)
        response.json.side_effect = ValueError("not json")
        with patch("charuz.vocalize.requests.post", return_value=response):
            with pytest.raises(VocalizationError):
                DictaVocalizer().vocalize("דבר")

    def test_failure_absorbed_by_vocalize_word(self):
        with patch("charuz.vocalize.requests.post", side_effect=requests.Timeout("slow")):
            assert vocalize_word("דבר", DictaVocalizer()) == "דבר"


class TestFileCache:
    def test_miss(self, tmp_path):
        assert FileVocalizationCache(tmp_path / "v.json").get("דבר") is None

    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "v.json"
        FileVocalizationCache(path).put("דבר", DAVAR)
        assert FileVocalizationCache(path).get("דבר") == DAVAR
        assert json.loads(path.read_text(encoding="utf-8")) == {"דבר": DAVAR}

    def test_default_location_under_cache_dir(self, tmp_path):
        cache = FileVocalizationCache()
        cache.put("דבר", DAVAR)
        assert cache.path == tmp_path / "cache" / "vocalization.json"
        assert cache.path.exists()

    def test_unreadable_file_starts_empty(self, tmp_path):
        path = tmp_path / "v.json"
        path.write_text("{not json", encoding="utf-8")
        cache = FileVocalizationCache(path)
        assert len(cache) == 0
        cache.put("דבר", DAVAR)
        assert FileVocalizationCache(path).get("דבר") == DAVAR

    def test_concurrent_puts_keep_every_entry(self, tmp_path):
        path = tmp_path / "v.json"
        raw = ["אבג", "דהו", "זחט", "יכל", "מנס"]
        table = {w: [w[0] + QAMATS + w[1:]] for w in raw}

        def slow_write(target, data):
            # smaller snapshots take longer to land
            time.sleep(0.02 * (len(raw) - len(json.loads(data))))
            _atomic_write(target, data)

        with patch("charuz.vocalize._atomic_write", side_effect=slow_write):
            vocalize_and_syllabify(" ".join(raw), FakeProvider(table), FileVocalizationCache(path))

        reloaded = FileVocalizationCache(path)
        assert len(reloaded) == len(raw)
        assert all(reloaded.get(w) == table[w][0] for w in raw)


class TestVocalizeWords:
    def test_each_distinct_word_looked_up_once(self):
        provider = FakeProvider({"מדבר": [MIDBAR], "דבר": [DAVAR]})
        result = vocalize_words(["דבר", DAVAR, "מדבר", "דבר"], provider)
        assert result == {"דבר": DAVAR, "מדבר": MIDBAR}
        assert sorted(provider.calls) == sorted(["דבר", "מדבר"])

    def test_lookups_in_a_batch_run_concurrently(self):
        barrier = threading.Barrier(2, timeout=5)

        class WaitingProvider(FakeProvider):
            def vocalize(self, raw_word):
                barrier.wait()
                return super().vocalize(raw_word)

        provider = WaitingProvider({"מדבר": [MIDBAR], "דבר": [DAVAR]})
        assert vocalize_words(["מדבר", "דבר"], provider) == {"מדבר": MIDBAR, "דבר": DAVAR}

    def test_empty(self):
        provider = FakeProvider()
        assert vocalize_words([], provider) == {}
        assert provider.calls == []


class TestVocalizeAndSyllabify:
    def test_keeps_input_order_across_batches(self):
        table = {"מדבר": [MIDBAR], "דבר": [DAVAR]}
        text = " ".join(["מדבר", "דבר"] * 6)
        words = vocalize_and_syllabify(text, FakeProvider(table), batch_size=5)
        assert len(words) == 12
        assert [w.vocalized_text for w in words] == [MIDBAR, DAVAR] * 6
        assert [w.position for w in words] == list(range(12))

    def test_syllables_and_signatures(self):
        words = vocalize_and_syllabify("מדבר", FakeProvider({"מדבר": [MIDBAR]}))
        assert len(words[0].syllables) == 3
        assert words[0].vowel_signature == "I-E-A"

    def test_non_hebrew_word_not_looked_up(self):
        provider = FakeProvider()
        words = vocalize_and_syllabify("hello", provider)
        assert words[0].syllables == []
        assert provider.calls == []

    def test_without_provider_uses_text_as_vocalized(self):
        words = vocalize_and_syllabify(DAVAR, None)
        assert words[0].vowel_signature == "A-A"

    def test_failures_degrade_to_raw(self):
        words = vocalize_and_syllabify("מדבר דבר", FakeProvider(error=VocalizationError("x")))
        assert [w.vocalized_text for w in words] == ["מדבר", "דבר"]

    def test_empty_text(self):
        assert vocalize_and_syllabify("   ", FakeProvider()) == []


class TestBarVocalizer:
    def test_applies_current_result(self):
        editor = VerseEditor()
        editor.add_bar(DAVAR, bar_id="b1")
        with BarVocalizer(None) as vocalizer:
            assert vocalizer.submit(editor, "b1").result(timeout=10)
        bar = editor.verse.bar("b1")
        assert [w.vowel_signature for w in bar.words] == ["A-A"]
        assert bar.words[0].line_id == "b1"

    def test_drops_result_when_text_changed_meanwhile(self):
        editor = VerseEditor()
        editor.add_bar("דבר", bar_id="b1")

        class EditingProvider(FakeProvider):
            def vocalize(self, raw_word):
                editor.set_bar_text("b1", "מדבר")
                return [DAVAR]

        with BarVocalizer(EditingProvider()) as vocalizer:
            applied = vocalizer.submit(editor, "b1").result(timeout=10)
        assert applied is False
        assert editor.verse.bar("b1").words == []
        assert editor.verse.bar("b1").text == "מדבר"

    def test_missing_bar(self):
        with BarVocalizer(None) as vocalizer:
            assert vocalizer.submit(VerseEditor(), "nope").result(timeout=10) is False
