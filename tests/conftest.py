"""Shared fakes for the external collaborators (tokenizer, dictionary, translator)."""

from typing import Dict, List, Sequence

import pytest

from vocab_cache.core import RawToken
from vocab_cache.coordinators import PipelineContext
from vocab_cache.exceptions import DictionaryLookupError, TokenizerBuildError
from vocab_cache.io import DatabaseManager
from vocab_cache.services import (
    DictionaryCandidate,
    DictionaryLookupResult,
    FetchGate,
    TranslationResult,
    TranslationService,
)


def raw(surface, canonical, category, sub1="*", conj_type="*", conj_form="*", reading=""):
    return RawToken(
        surface=surface,
        canonical_form=canonical,
        category=category,
        subcategory1=sub1,
        conjugation_type=conj_type,
        conjugation_form=conj_form,
        reading=reading or surface,
        pronunciation=reading or surface,
    )


SENTENCES: Dict[str, List[RawToken]] = {
    "猫が好きです": [
        raw("猫", "猫", "名詞", "普通名詞", reading="ネコ"),
        raw("が", "が", "助詞", "格助詞", reading="ガ"),
        raw("好き", "好き", "形状詞", "一般", reading="スキ"),
        raw("です", "です", "助動詞", conj_type="助動詞-デス", conj_form="終止形-一般", reading="デス"),
    ],
    "犬が走った": [
        raw("犬", "犬", "名詞", "普通名詞", reading="イヌ"),
        raw("が", "が", "助詞", "格助詞", reading="ガ"),
        raw("走っ", "走る", "動詞", "一般", "五段-ラ行", "連用形-促音便", reading="ハシッ"),
        raw("た", "た", "助動詞", conj_type="助動詞-タ", conj_form="終止形-一般", reading="タ"),
    ],
    "猫が走る": [
        raw("猫", "猫", "名詞", "普通名詞", reading="ネコ"),
        raw("が", "が", "助詞", "格助詞", reading="ガ"),
        raw("走る", "走る", "動詞", "一般", "五段-ラ行", "終止形-一般", reading="ハシル"),
    ],
    "ねこ。": [
        raw("ねこ", "ねこ", "名詞", "普通名詞", reading="ネコ"),
        raw("。", "。", "補助記号", "句点", reading="。"),
    ],
    "ぴよぴよ！": [
        raw("ぴよぴよ", "*", "名詞", "普通名詞"),
        raw("！", "！", "補助記号", "句点"),
    ],
}


class FakeMorphology:
    """Tokenizer double backed by the SENTENCES table."""

    def __init__(self, fail_build: bool = False):
        self.fail_build = fail_build
        self.build_calls = 0
        self.tokenized: List[str] = []

    def build(self) -> None:
        self.build_calls += 1
        if self.fail_build:
            raise TokenizerBuildError("dictionary data missing")

    def tokenize(self, text: str) -> List[RawToken]:
        self.tokenized.append(text)
        return list(SENTENCES.get(text, []))


class FakeDictionary:
    """Dictionary double: canned candidate identities per term."""

    def __init__(self, entries: Dict[str, List[str]] = None, failing: Sequence[str] = ()):
        self.entries = entries if entries is not None else {
            "猫": ["猫", "猫舌", "猫背"],
            "好き": ["好き"],
            "犬": ["犬", "犬小屋"],
            "走る": ["走る"],
            "ねこ": [],
        }
        self.failing = set(failing)
        self.calls: List[str] = []

    def lookup(self, term: str) -> DictionaryLookupResult:
        self.calls.append(term)
        if term in self.failing:
            raise DictionaryLookupError(f"service unavailable for {term}")
        identities = self.entries.get(term, [])
        return DictionaryLookupResult(
            term=term,
            candidates=[DictionaryCandidate(identity=identity) for identity in identities],
        )


class FakeTranslator(TranslationService):
    """Translation double recording every single and batch call."""

    TRANSLATIONS = {
        "猫が好きです": "I like cats",
        "犬が走った": "The dog ran",
        "猫が走る": "The cat runs",
        "ねこ。": "Cat.",
        "ぴよぴよ！": "Tweet tweet!",
    }

    def __init__(self, failing: Sequence[str] = ()):
        self.failing = set(failing)
        self.calls: List[str] = []
        self.batch_calls: List[List[str]] = []

    def _result(self, text: str) -> TranslationResult:
        if text in self.failing:
            return TranslationResult(text="", model="fake", error="service unavailable")
        return TranslationResult(text=self.TRANSLATIONS.get(text, f"EN({text})"), model="fake")

    async def translate(self, text: str) -> TranslationResult:
        self.calls.append(text)
        return self._result(text)

    async def translate_batch(self, texts: Sequence[str]) -> List[TranslationResult]:
        self.batch_calls.append(list(texts))
        return [self._result(text) for text in texts]


@pytest.fixture
def database(tmp_path):
    db = DatabaseManager(tmp_path / "cache.db")
    db.ensure_schema()
    yield db
    db.close()


@pytest.fixture
def fake_morphology():
    return FakeMorphology()


@pytest.fixture
def fake_dictionary():
    return FakeDictionary()


@pytest.fixture
def fake_translator():
    return FakeTranslator()


@pytest.fixture
def make_gate():
    def _make(name: str = "test") -> FetchGate:
        return FetchGate(name, 0)

    return _make


@pytest.fixture
def make_context(tmp_path, fake_morphology, fake_dictionary, fake_translator):
    """Build a PipelineContext over the shared fakes; overrides via keyword arguments."""

    def _make(**overrides) -> PipelineContext:
        params = dict(
            db_path=tmp_path / "pipeline.db",
            morphology=fake_morphology,
            dictionary=fake_dictionary,
            translator=fake_translator,
            dictionary_gate=FetchGate("dictionary", 0),
            translation_gate=FetchGate("translation", 0),
        )
        params.update(overrides)
        return PipelineContext(**params)

    return _make


@pytest.fixture
def translator_factory():
    return FakeTranslator


@pytest.fixture
def dictionary_factory():
    return FakeDictionary


@pytest.fixture
def morphology_factory():
    return FakeMorphology
