"""Shared fixtures: frozen clock, in-memory storage, fake OpenAI client."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest
import pytz

from agency_log.config import AIConfig
from agency_log.core.store import JournalStore, MemoryStorage
from agency_log.services.ai_service import FeedbackGateway
from agency_log.utils.datetime_utils import Clock


class FixedClock(Clock):
    def __init__(self, current: datetime, timezone: str = "UTC"):
        super().__init__(timezone)
        self.current = current

    def now(self) -> datetime:
        return self.current.astimezone(self.tz)

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)

    def set_day(self, day: str, hour: int = 9) -> None:
        y, m, d = (int(x) for x in day.split("-"))
        self.current = datetime(y, m, d, hour, 0, tzinfo=pytz.utc)


class FakeCompletions:
    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, BaseException):
            raise reply
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=reply))],
            usage=SimpleNamespace(total_tokens=12),
        )


class FakeOpenAI:
    def __init__(self, *replies):
        self.completions = FakeCompletions(replies or ["Nice one! ✨"])
        self.chat = SimpleNamespace(completions=self.completions)


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 1, 5, 9, 30, tzinfo=pytz.utc))


@pytest.fixture()
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture()
def store(storage, clock) -> JournalStore:
    s = JournalStore(storage, clock)
    s.load()
    return s


@pytest.fixture()
def offline_gateway() -> FeedbackGateway:
    return FeedbackGateway(AIConfig(openai_api_key=None))


@pytest.fixture()
def fast_ai_config() -> AIConfig:
    return AIConfig(openai_api_key="sk-test", max_retries=1, retry_delay=0)


@pytest.fixture()
def restore_root_logging():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    yield root
    for handler in list(root.handlers):
        if handler not in saved_handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in saved_handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(saved_level)
