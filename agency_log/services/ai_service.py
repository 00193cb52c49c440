#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Agency Log v1.0 - AI Feedback Gateway
Short encouraging text for journal entries and the stats view

Every public call returns a non-empty string and never raises: without an
API key it answers from local fallbacks, and service errors are logged and
answered the same way.

Version: 1.0.0
"""

import asyncio
import time
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field
from enum import Enum
import logging

import openai
from openai import AsyncOpenAI

from agency_log.config import AIConfig
from agency_log.core.models import EntryType
from agency_log.utils.media_utils import strip_data_url_prefix, data_url_mime

logger = logging.getLogger(__name__)

# ===== EXCEPTIONS =====

class AIServiceError(Exception):
    """Base AI gateway error"""
    pass

class AIProviderError(AIServiceError):
    """The provider failed after all retries"""
    pass

# ===== ENUMS =====

class AIProvider(Enum):
    OPENAI = "openai"
    FALLBACK = "fallback"

class FeedbackKind(Enum):
    """The four gateway operations"""
    SLEEP = "sleep"
    FOOD = "food"
    OUTPUT = "output"
    SUMMARY = "summary"

class FallbackReason(Enum):
    NO_API_KEY = "no_api_key"
    ERROR = "error"
    EMPTY = "empty"

# ===== STATS =====

@dataclass
class AIStats:
    """Gateway counters"""
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    fallback_responses: int = 0
    total_tokens_used: int = 0
    average_response_time_ms: float = 0.0
    requests_by_kind: Dict[str, int] = field(default_factory=dict)

    @property
    def success_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return (self.successful_requests / self.total_requests) * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_requests': self.total_requests,
            'successful_requests': self.successful_requests,
            'failed_requests': self.failed_requests,
            'fallback_responses': self.fallback_responses,
            'total_tokens_used': self.total_tokens_used,
            'average_response_time_ms': round(self.average_response_time_ms, 2),
            'success_rate': round(self.success_rate, 2),
            'requests_by_kind': dict(self.requests_by_kind)
        }

# ===== PROMPTS =====

class PromptManager:
    """Persona prompts per operation"""

    def __init__(self):
        self.templates: Dict[FeedbackKind, str] = self._load_templates()

    def _load_templates(self) -> Dict[FeedbackKind, str]:
        return {
            FeedbackKind.SLEEP: (
                "You are a gentle, kawaii sleep coach. User slept: {duration}. "
                "Their bedtime thought: \"{comment}\". "
                "Give a short, encouraging, cute 1-sentence feedback."
            ),
            FeedbackKind.FOOD: (
                "You are a cute nutritionist sticker. Analyze this meal: \"{description}\". "
                "Be kind but helpful. Keep it under 30 words. Cute tone."
            ),
            FeedbackKind.OUTPUT: (
                "You are an overly supportive anime cheerleader. The user accomplished: "
                "\"{description}\". Give them high-energy, excessive praise with emojis! "
                "Max 2 sentences."
            ),
            FeedbackKind.SUMMARY: (
                "Act as a cute pixel-art game guide. Summarize the user's progress for "
                "{entry_type} based on this data: {data}. Provide 1 actionable, gentle tip."
            ),
        }

    def get_prompt(self, kind: FeedbackKind, **kwargs) -> str:
        return self.templates[kind].format(**kwargs)

# ===== FALLBACKS =====

class FallbackResponseProvider:
    """Fixed local answers, one per operation and reason"""

    def __init__(self):
        self.responses = self._load_responses()

    def _load_responses(self) -> Dict[FeedbackKind, Dict[FallbackReason, str]]:
        return {
            FeedbackKind.SLEEP: {
                FallbackReason.NO_API_KEY: "AI is sleeping... (No API Key)",
                FallbackReason.ERROR: "Sleep tight! (AI Error)",
                FallbackReason.EMPTY: "Sweet dreams! ✨",
            },
            FeedbackKind.FOOD: {
                FallbackReason.NO_API_KEY: "Bon appétit! (No API Key)",
                FallbackReason.ERROR: "Looks good! (AI Error)",
                FallbackReason.EMPTY: "Yummy! 🍱",
            },
            FeedbackKind.OUTPUT: {
                FallbackReason.NO_API_KEY: "Good job! ⭐ (No API Key)",
                FallbackReason.ERROR: "Great work! (AI Error)",
                FallbackReason.EMPTY: "You are amazing! ⭐",
            },
            FeedbackKind.SUMMARY: {
                FallbackReason.NO_API_KEY: "Keep going! (No API Key)",
                FallbackReason.ERROR: "Data looks interesting! (AI Error)",
                FallbackReason.EMPTY: "You're doing great!",
            },
        }

    def get_response(self, kind: FeedbackKind, reason: FallbackReason) -> str:
        return self.responses[kind][reason]

# ===== GATEWAY =====

class FeedbackGateway:
    """OpenAI-backed feedback with local fallbacks"""

    def __init__(self, config: Optional[AIConfig] = None, client: Optional[Any] = None):
        self.config = config or AIConfig()
        self.prompt_manager = PromptManager()
        self.fallback_provider = FallbackResponseProvider()
        self.stats = AIStats()

        self.client = client
        if self.client is None:
            self.client = self._initialize_openai()

        logger.info(f"AI gateway initialized - OpenAI: {'✅' if self.enabled else '❌'}")

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def _initialize_openai(self) -> Optional[AsyncOpenAI]:
        if not self.config.openai_api_key:
            logger.warning("OpenAI API key not configured, using fallback feedback")
            return None

        try:
            client = AsyncOpenAI(
                api_key=self.config.openai_api_key,
                timeout=self.config.request_timeout,
                max_retries=0
            )
            logger.info("OpenAI client initialized successfully")
            return client
        except Exception as e:
            logger.error(f"Failed to initialize OpenAI client: {e}")
            return None

    # ===== PUBLIC API =====

    async def feedback_for_sleep(self, comment: str, duration_description: str) -> str:
        prompt = self.prompt_manager.get_prompt(
            FeedbackKind.SLEEP, comment=comment, duration=duration_description
        )
        return await self._generate(FeedbackKind.SLEEP, prompt)

    async def feedback_for_food(self, description: str, image: Optional[str] = None) -> str:
        prompt = self.prompt_manager.get_prompt(FeedbackKind.FOOD, description=description)
        return await self._generate(FeedbackKind.FOOD, prompt, image=image or None)

    async def praise_for_output(self, description: str) -> str:
        prompt = self.prompt_manager.get_prompt(FeedbackKind.OUTPUT, description=description)
        return await self._generate(FeedbackKind.OUTPUT, prompt)

    async def weekly_summary(self, entry_type: EntryType, series_json: str) -> str:
        prompt = self.prompt_manager.get_prompt(
            FeedbackKind.SUMMARY, entry_type=entry_type.value, data=series_json
        )
        return await self._generate(FeedbackKind.SUMMARY, prompt)

    # ===== INTERNALS =====

    async def _generate(self, kind: FeedbackKind, prompt: str, image: Optional[str] = None) -> str:
        self.stats.total_requests += 1
        self.stats.requests_by_kind[kind.value] = self.stats.requests_by_kind.get(kind.value, 0) + 1

        if not self.enabled:
            return self._fallback(kind, FallbackReason.NO_API_KEY)

        start_time = time.time()
        try:
            content = await self._request_openai(prompt, image)
        except Exception as e:
            logger.error(f"❌ AI {kind.value} feedback failed: {e}")
            self.stats.failed_requests += 1
            return self._fallback(kind, FallbackReason.ERROR)

        self.stats.successful_requests += 1
        self._update_average_response_time(int((time.time() - start_time) * 1000))

        if not content:
            return self._fallback(kind, FallbackReason.EMPTY)
        return content

    def _fallback(self, kind: FeedbackKind, reason: FallbackReason) -> str:
        self.stats.fallback_responses += 1
        logger.debug(f"AI {kind.value} fallback: {reason.value}")
        return self.fallback_provider.get_response(kind, reason)

    def _build_messages(self, prompt: str, image: Optional[str]) -> List[Dict[str, Any]]:
        if not image:
            return [{"role": "user", "content": prompt}]

        raw = strip_data_url_prefix(image)
        mime = data_url_mime(image)
        return [{
            "role": "user",
            "content": [
                {"type": "text", "text": prompt},
                {"type": "image_url", "image_url": {"url": f"data:{mime};base64,{raw}"}}
            ]
        }]

    async def _request_openai(self, prompt: str, image: Optional[str] = None) -> str:
        """Chat completion with the retry loop; returns stripped text"""
        model = self.config.vision_model if image else self.config.openai_model
        messages = self._build_messages(prompt, image)
        attempts = self.config.max_retries + 1

        for attempt in range(attempts):
            try:
                response = await self.client.chat.completions.create(
                    model=model,
                    messages=messages,
                    max_tokens=self.config.max_tokens,
                    temperature=self.config.temperature,
                    timeout=self.config.request_timeout
                )

                usage = getattr(response, 'usage', None)
                if usage is not None:
                    self.stats.total_tokens_used += getattr(usage, 'total_tokens', 0) or 0

                content = response.choices[0].message.content
                return (content or "").strip()

            except openai.RateLimitError:
                logger.warning(f"OpenAI rate limit hit, attempt {attempt + 1}")
                if attempt < attempts - 1:
                    await asyncio.sleep(self.config.retry_delay * (2 ** attempt))
                else:
                    raise AIProviderError("OpenAI rate limit exceeded")

            except openai.APITimeoutError:
                logger.warning(f"OpenAI timeout, attempt {attempt + 1}")
                if attempt < attempts - 1:
                    await asyncio.sleep(self.config.retry_delay)
                else:
                    raise AIServiceError("OpenAI request timeout")

            except Exception as e:
                logger.error(f"OpenAI API error on attempt {attempt + 1}: {e}")
                if attempt < attempts - 1:
                    await asyncio.sleep(self.config.retry_delay)
                else:
                    raise AIProviderError(f"OpenAI API failed: {e}")

    def _update_average_response_time(self, response_time_ms: int) -> None:
        total_time = self.stats.average_response_time_ms * (self.stats.successful_requests - 1)
        self.stats.average_response_time_ms = (total_time + response_time_ms) / self.stats.successful_requests

    def get_stats(self) -> Dict[str, Any]:
        stats = self.stats.to_dict()
        stats['openai_configured'] = self.enabled
        stats['model'] = self.config.openai_model
        return stats

    def get_health_status(self) -> Dict[str, Any]:
        if not self.enabled:
            status = "fallback"
        elif self.stats.total_requests > 5 and self.stats.success_rate < 50:
            status = "degraded"
        else:
            status = "healthy"

        return {
            'status': status,
            'provider': (AIProvider.OPENAI if self.enabled else AIProvider.FALLBACK).value,
            'success_rate': round(self.stats.success_rate, 2)
        }


__all__ = [
    'AIServiceError',
    'AIProviderError',
    'AIProvider',
    'FeedbackKind',
    'FallbackReason',
    'AIStats',
    'PromptManager',
    'FallbackResponseProvider',
    'FeedbackGateway'
]
