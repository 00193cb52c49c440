"""Tests for the feedback gateway: fallbacks, retries and request shape."""

from __future__ import annotations

import asyncio

import pytest

from agency_log.config import AIConfig
from agency_log.core.models import EntryType
from agency_log.services import ai_service
from agency_log.services.ai_service import (
    FallbackReason,
    FallbackResponseProvider,
    FeedbackGateway,
    FeedbackKind,
)

from conftest import FakeOpenAI


def _all_operations(gateway: FeedbackGateway):
    async def run():
        return [
            await gateway.feedback_for_sleep("read a book", "7h 30m"),
            await gateway.feedback_for_food("rice bowl"),
            await gateway.praise_for_output("shipped the release"),
            await gateway.weekly_summary(EntryType.DIGITAL, '[{"date": "1/1", "val": 30}]'),
        ]

    return asyncio.run(run())


# ---- no key ----


def test_no_key_never_builds_a_client(monkeypatch):
    def boom(*args, **kwargs):
        raise AssertionError("network client constructed without a key")

    monkeypatch.setattr(ai_service, "AsyncOpenAI", boom)
    gateway = FeedbackGateway(AIConfig(openai_api_key=None))

    assert not gateway.enabled
    assert _all_operations(gateway) == [
        "AI is sleeping... (No API Key)",
        "Bon appétit! (No API Key)",
        "Good job! ⭐ (No API Key)",
        "Keep going! (No API Key)",
    ]


def test_no_key_counts_fallbacks(offline_gateway):
    _all_operations(offline_gateway)
    stats = offline_gateway.get_stats()
    assert stats["total_requests"] == 4
    assert stats["fallback_responses"] == 4
    assert stats["openai_configured"] is False
    assert offline_gateway.get_health_status()["status"] == "fallback"


def test_fallback_wording_differs_per_reason():
    provider = FallbackResponseProvider()
    for kind in FeedbackKind:
        texts = {provider.get_response(kind, reason) for reason in FallbackReason}
        assert len(texts) == len(FallbackReason)
        assert all(t.strip() for t in texts)


# ---- with a client ----


def test_success_returns_model_text(fast_ai_config):
    client = FakeOpenAI("  You slept like a kitten! 🐱  ")
    gateway = FeedbackGateway(fast_ai_config, client=client)

    text = asyncio.run(gateway.feedback_for_sleep("tired", "6h 00m"))

    assert text == "You slept like a kitten! 🐱"
    call = client.completions.calls[0]
    assert call["model"] == fast_ai_config.openai_model
    assert "6h 00m" in call["messages"][0]["content"]
    assert "tired" in call["messages"][0]["content"]
    assert gateway.stats.total_tokens_used == 12


def test_error_returns_error_fallback(fast_ai_config):
    client = FakeOpenAI(RuntimeError("503"))
    gateway = FeedbackGateway(fast_ai_config, client=client)

    texts = _all_operations(gateway)

    assert texts == [
        "Sleep tight! (AI Error)",
        "Looks good! (AI Error)",
        "Great work! (AI Error)",
        "Data looks interesting! (AI Error)",
    ]
    # one retry per operation
    assert len(client.completions.calls) == 8
    assert gateway.stats.failed_requests == 4


def test_retry_recovers(fast_ai_config):
    client = FakeOpenAI(RuntimeError("blip"), "Amazing!!! ⭐⭐")
    gateway = FeedbackGateway(fast_ai_config, client=client)

    assert asyncio.run(gateway.praise_for_output("a blog post")) == "Amazing!!! ⭐⭐"
    assert len(client.completions.calls) == 2


@pytest.mark.parametrize("blank", ["", "   ", None])
def test_empty_reply_uses_empty_fallback(fast_ai_config, blank):
    gateway = FeedbackGateway(fast_ai_config, client=FakeOpenAI(blank))
    assert asyncio.run(gateway.feedback_for_food("toast")) == "Yummy! 🍱"


def test_food_image_prefix_is_stripped_and_vision_model_used():
    config = AIConfig(openai_api_key="sk-test", openai_model="text-m", vision_model="vision-m", retry_delay=0)
    client = FakeOpenAI("Colourful plate!")
    gateway = FeedbackGateway(config, client=client)

    asyncio.run(gateway.feedback_for_food("ramen", "data:image/png;base64,QUJD"))

    call = client.completions.calls[0]
    assert call["model"] == "vision-m"
    text_part, image_part = call["messages"][0]["content"]
    assert "ramen" in text_part["text"]
    assert image_part["image_url"]["url"] == "data:image/png;base64,QUJD"


def test_raw_base64_image_gets_default_mime(fast_ai_config):
    client = FakeOpenAI("ok")
    gateway = FeedbackGateway(fast_ai_config, client=client)

    asyncio.run(gateway.feedback_for_food("soup", "QUJD"))

    image_part = client.completions.calls[0]["messages"][0]["content"][1]
    assert image_part["image_url"]["url"] == "data:image/jpeg;base64,QUJD"


def test_food_without_image_is_text_only(fast_ai_config):
    client = FakeOpenAI("ok")
    gateway = FeedbackGateway(fast_ai_config, client=client)

    asyncio.run(gateway.feedback_for_food("soup", ""))

    call = client.completions.calls[0]
    assert call["model"] == fast_ai_config.openai_model
    assert isinstance(call["messages"][0]["content"], str)


def test_summary_prompt_carries_series(fast_ai_config):
    client = FakeOpenAI("Try a screen-free hour!")
    gateway = FeedbackGateway(fast_ai_config, client=client)

    asyncio.run(gateway.weekly_summary(EntryType.DIGITAL, '[{"date": "1/2", "val": 45}]'))

    prompt = client.completions.calls[0]["messages"][0]["content"]
    assert "DIGITAL" in prompt
    assert '"val": 45' in prompt


def test_stats_track_kinds(fast_ai_config):
    gateway = FeedbackGateway(fast_ai_config, client=FakeOpenAI("yay"))
    asyncio.run(gateway.praise_for_output("x"))
    asyncio.run(gateway.praise_for_output("y"))
    stats = gateway.get_stats()
    assert stats["requests_by_kind"] == {"output": 2}
    assert stats["success_rate"] == 100.0
    assert gateway.get_health_status()["status"] == "healthy"
