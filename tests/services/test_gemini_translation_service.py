"""Unit tests for GeminiTranslationService with a stubbed async client."""

import asyncio
import json
from types import SimpleNamespace

import pytest

from vocab_cache.services import GeminiTranslationService


class StubModels:
    def __init__(self, replies):
        self.replies = list(replies)
        self.requests = []

    async def generate_content(self, model, contents, config):
        self.requests.append(SimpleNamespace(model=model, contents=contents, config=config))
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return SimpleNamespace(text=reply)


def make_service(*replies):
    models = StubModels(replies)
    client = SimpleNamespace(aio=SimpleNamespace(models=models))
    return GeminiTranslationService(api_key="test-key", client=client), models


def test_translate_returns_trimmed_text():
    service, models = make_service("  I like cats \n")

    result = asyncio.run(service.translate("猫が好きです"))

    assert result.text == "I like cats"
    assert not result.is_error
    assert "猫が好きです" in models.requests[0].contents
    assert models.requests[0].model == GeminiTranslationService.MODEL_NAME


def test_translate_empty_response_is_error():
    service, _ = make_service("")

    result = asyncio.run(service.translate("猫"))

    assert result.is_error
    assert result.error == "Empty response from API"


@pytest.mark.parametrize(
    "message,expected",
    [
        ("429 RESOURCE_EXHAUSTED", "API quota exceeded"),
        ("API_KEY_INVALID", "Invalid API key"),
        ("Deadline exceeded", "timed out"),
        ("socket closed", "Translation failed"),
    ],
)
def test_translate_classifies_api_errors(message, expected):
    service, _ = make_service(RuntimeError(message))

    result = asyncio.run(service.translate("猫"))

    assert result.is_error
    assert expected in result.error


def test_translate_batch_parses_json_array():
    service, models = make_service(json.dumps(["I like cats", "The dog ran"]))

    results = asyncio.run(service.translate_batch(["猫が好きです", "犬が走った"]))

    assert [r.text for r in results] == ["I like cats", "The dog ran"]
    assert models.requests[0].config.response_mime_type == "application/json"
    assert "犬が走った" in models.requests[0].contents


@pytest.mark.parametrize(
    "reply",
    ["not json", json.dumps({"a": "b"}), json.dumps(["only one"]), json.dumps([1, 2]), ""],
)
def test_translate_batch_malformed_reply_fails_every_line(reply):
    service, _ = make_service(reply)

    results = asyncio.run(service.translate_batch(["猫が好きです", "犬が走った"]))

    assert len(results) == 2
    assert all(r.is_error for r in results)


def test_translate_batch_empty_item_is_error_for_that_line_only():
    service, _ = make_service(json.dumps(["I like cats", "  "]))

    results = asyncio.run(service.translate_batch(["猫が好きです", "犬が走った"]))

    assert not results[0].is_error
    assert results[1].is_error


def test_translate_batch_of_nothing_makes_no_request():
    service, models = make_service()

    assert asyncio.run(service.translate_batch([])) == []
    assert models.requests == []
