"""Unit tests for LineTranslationCache (per-line and batched)."""

import asyncio
import math

import pytest

from vocab_cache.exceptions import TranslationError
from vocab_cache.services import FetchGate, LineTranslationCache, TranslationResult


class RaisingTranslator:
    async def translate(self, text):
        raise TranslationError("connection reset")

    async def translate_batch(self, texts):
        raise TranslationError("connection reset")


class ShortBatchTranslator:
    async def translate(self, text):
        return TranslationResult(text="x", model="fake")

    async def translate_batch(self, texts):
        return [TranslationResult(text="only one", model="fake")]


class FailingChunkTranslator:
    def __init__(self, failing_text):
        self.failing_text = failing_text

    async def translate(self, text):
        return TranslationResult(text=text, model="fake")

    async def translate_batch(self, texts):
        if self.failing_text in texts:
            raise TranslationError("response truncated")
        return [TranslationResult(text=f"EN({text})", model="fake") for text in texts]


def test_resolve_line_fetches_once_then_reuses(database, fake_translator, make_gate):
    cache = LineTranslationCache(database, fake_translator, make_gate())

    first = asyncio.run(cache.resolve_line("猫が好きです"))
    second = asyncio.run(cache.resolve_line("猫が好きです"))

    assert first.translation == "I like cats"
    assert second.id == first.id
    assert fake_translator.calls == ["猫が好きです"]
    assert cache.fetched == 1
    assert cache.cache_hits == 1


def test_resolve_line_reuses_translation_stored_by_earlier_run(database, fake_translator, make_gate):
    database.insert_line("猫が好きです", "Cats are my favourite")
    cache = LineTranslationCache(database, fake_translator, make_gate())

    line = asyncio.run(cache.resolve_line("猫が好きです"))

    assert line.translation == "Cats are my favourite"
    assert fake_translator.calls == []


def test_failed_translation_is_not_stored_and_retried_later(database, translator_factory, make_gate):
    translator = translator_factory(failing=["犬が走った"])
    cache = LineTranslationCache(database, translator, make_gate())

    assert asyncio.run(cache.resolve_line("犬が走った")) is None
    assert cache.failed == 1
    assert database.get_line("犬が走った") is None

    translator.failing.clear()
    line = asyncio.run(cache.resolve_line("犬が走った"))
    assert line.translation == "The dog ran"
    assert translator.calls == ["犬が走った", "犬が走った"]


def test_service_exception_is_caught_per_line(database, make_gate):
    cache = LineTranslationCache(database, RaisingTranslator(), make_gate())

    assert asyncio.run(cache.resolve_line("猫が好きです")) is None
    assert asyncio.run(cache.resolve_lines(["猫が好きです", "犬が走った"])) == {}
    assert cache.failed == 3
    assert database.count_rows()["lines"] == 0


def test_resolve_lines_sends_one_deduplicated_batch(database, fake_translator, make_gate):
    database.insert_line("犬が走った", "The dog ran")
    cache = LineTranslationCache(database, fake_translator, make_gate())

    resolved = asyncio.run(
        cache.resolve_lines(["猫が好きです", "犬が走った", "猫が好きです", "ねこ。"])
    )

    assert fake_translator.batch_calls == [["猫が好きです", "ねこ。"]]
    assert fake_translator.calls == []
    assert set(resolved) == {"猫が好きです", "犬が走った", "ねこ。"}
    assert resolved["ねこ。"].translation == "Cat."
    assert database.count_rows()["lines"] == 3


def test_resolve_lines_skips_call_when_everything_cached(database, fake_translator, make_gate):
    database.insert_line("猫が好きです", "I like cats")
    cache = LineTranslationCache(database, fake_translator, make_gate())

    resolved = asyncio.run(cache.resolve_lines(["猫が好きです"]))

    assert resolved["猫が好きです"].translation == "I like cats"
    assert fake_translator.batch_calls == []


def test_resolve_lines_keeps_successes_when_some_items_fail(database, translator_factory, make_gate):
    translator = translator_factory(failing=["ねこ。"])
    cache = LineTranslationCache(database, translator, make_gate())

    resolved = asyncio.run(cache.resolve_lines(["猫が好きです", "ねこ。"]))

    assert list(resolved) == ["猫が好きです"]
    assert cache.failed == 1
    assert database.get_line("ねこ。") is None


def test_resolve_lines_rejects_mismatched_batch(database, make_gate):
    cache = LineTranslationCache(database, ShortBatchTranslator(), make_gate())

    resolved = asyncio.run(cache.resolve_lines(["猫が好きです", "犬が走った"]))

    assert resolved == {}
    assert cache.failed == 2
    assert database.count_rows()["lines"] == 0


def test_resolve_lines_splits_misses_into_bounded_gated_batches(database, fake_translator):
    gate = FetchGate("translation", 0)
    cache = LineTranslationCache(database, fake_translator, gate, batch_size=2)
    texts = [f"行{i}" for i in range(5)]

    resolved = asyncio.run(cache.resolve_lines(texts))

    assert fake_translator.batch_calls == [["行0", "行1"], ["行2", "行3"], ["行4"]]
    assert gate.calls == math.ceil(len(texts) / 2)
    assert set(resolved) == set(texts)
    assert cache.fetched == 5


def test_failed_batch_only_loses_its_own_lines(database, make_gate):
    translator = FailingChunkTranslator(failing_text="行1")
    cache = LineTranslationCache(database, translator, make_gate(), batch_size=2)

    resolved = asyncio.run(cache.resolve_lines(["行0", "行1", "行2", "行3"]))

    assert set(resolved) == {"行2", "行3"}
    assert cache.failed == 2
    assert database.get_line("行0") is None


def test_batch_size_must_be_positive(database, fake_translator, make_gate):
    with pytest.raises(ValueError):
        LineTranslationCache(database, fake_translator, make_gate(), batch_size=0)
