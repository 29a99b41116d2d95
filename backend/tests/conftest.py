"""
Shared fixtures: in-memory quota store, scripted completion client, settings.

Nothing here touches the network. Run with: pytest -v
"""

from datetime import date
from typing import Optional

import pytest

from app.config import Settings
from app.services.completion import Completion
from app.services.errors import QuotaStoreError
from app.services.quota import QuotaService
from app.services.quota_store import QuotaStore

FIXED_DAY = date(2025, 3, 14)

SAMPLE_REPLY = """RESPONSE: Productivity gains from remote work are far from universal.
SCORES:
Logical Consistency: 3/5
Persuasiveness: 4/5
Factual Accuracy: 2/5
Structural Coherence: 3/5
Rebuttal Resilience: 2/5
FEEDBACK: Back your claim with a concrete study."""


class FakeQuotaStore(QuotaStore):
    """Dict-backed store that remembers every write (key, value, ttl)."""

    backend = "fake"

    def __init__(self, data: Optional[dict] = None, fail: bool = False):
        self.data = dict(data or {})
        self.fail = fail
        self.writes: list[tuple[str, int, int]] = []
        self.closed = False

    async def get(self, key: str) -> Optional[int]:
        if self.fail:
            raise QuotaStoreError("connection refused")
        return self.data.get(key)

    async def set(self, key: str, value: int, ttl_seconds: int) -> None:
        if self.fail:
            raise QuotaStoreError("connection refused")
        self.data[key] = value
        self.writes.append((key, value, ttl_seconds))

    async def close(self) -> None:
        self.closed = True


class FakeCompletionClient:
    """Stands in for CompletionClient; records calls, returns a canned reply."""

    def __init__(self, text: str = SAMPLE_REPLY, token_usage: int = 950, error: Exception = None):
        self.text = text
        self.token_usage = token_usage
        self.error = error
        self.calls: list[dict] = []

    async def complete(self, system_instruction, user_text, max_tokens, temperature):
        self.calls.append({
            "system_instruction": system_instruction,
            "user_text": user_text,
            "max_tokens": max_tokens,
            "temperature": temperature,
        })
        if self.error is not None:
            raise self.error
        return Completion(text=self.text, token_usage=self.token_usage)

    async def close(self):
        pass


@pytest.fixture
def settings() -> Settings:
    # Explicit values so a developer's .env can't change test behaviour
    return Settings(
        _env_file=None,
        openai_api_key="test-key",
        kv_rest_api_url="",
        kv_rest_api_token="",
        redis_url="",
    )


@pytest.fixture
def store() -> FakeQuotaStore:
    return FakeQuotaStore()


@pytest.fixture
def completion_client() -> FakeCompletionClient:
    return FakeCompletionClient()


@pytest.fixture
def quota(store, settings) -> QuotaService:
    return QuotaService(store, settings, today=lambda: FIXED_DAY)
