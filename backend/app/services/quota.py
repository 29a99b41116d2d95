"""
Quota Service — daily topic limit and per-topic token budget.

WHAT THIS DOES:
Two limits keep the OpenAI bill bounded for an anonymous app:
1. Daily topic limit: a session token may start 1 new topic per UTC day
2. Token budget: a (session token, day, topic) may spend 8000 model tokens

Both are checked BEFORE the model call. Usage is added AFTER the call, so a
topic can overshoot its budget by one turn. That slack is accepted.

FAIL-OPEN:
The limits are abuse mitigation, not billing. If the store is missing or
broken, we log and let the request through. Every store call goes through
_read/_write, which turn any store exception (QuotaStoreError or otherwise)
into StoreResult.unavailable() instead of raising.

RACES:
Read-then-write is not atomic. Two simultaneous requests from one session can
both pass a check. Also accepted.

KEYS:
    limit:{token}:{YYYY-MM-DD}
    tokens:{token}:{YYYY-MM-DD}:{topic}
Every write sets a fresh 24h expiry.

USAGE:
    quota = QuotaService(store, settings)
    day = quota.today_key()
    await quota.claim_daily_slot(token, day)          # may raise DailyLimitExceeded
    await quota.ensure_token_budget(token, day, topic)  # may raise TokenLimitExceeded
    ...call the model...
    await quota.record_usage(token, day, topic, usage)
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable, Optional

from app.config import Settings
from app.services.errors import DailyLimitExceeded, TokenLimitExceeded
from app.services.quota_store import QuotaStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreResult:
    """Ok(value) or Unavailable. A missing key is Ok(0)."""
    value: int = 0
    available: bool = True

    @classmethod
    def ok(cls, value: Optional[int]) -> "StoreResult":
        return cls(value=value or 0)

    @classmethod
    def unavailable(cls) -> "StoreResult":
        return cls(available=False)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


class QuotaService:
    """Enforces and records quotas against an optional QuotaStore."""

    def __init__(
        self,
        store: Optional[QuotaStore],
        settings: Settings,
        today: Callable[[], date] = utc_today,
    ):
        self.store = store
        self.daily_limit = settings.daily_topic_limit
        self.token_limit = settings.token_limit_per_topic
        self.ttl_seconds = settings.quota_ttl_seconds
        self._today = today

    @property
    def enabled(self) -> bool:
        return self.store is not None

    def today_key(self) -> str:
        return self._today().isoformat()

    @staticmethod
    def daily_key(token: str, day: str) -> str:
        return f"limit:{token}:{day}"

    @staticmethod
    def token_key(token: str, day: str, topic: str) -> str:
        return f"tokens:{token}:{day}:{topic}"

    # =========================================================================
    # STORE ACCESS (never raises)
    # =========================================================================

    async def _read(self, key: str) -> StoreResult:
        if self.store is None:
            return StoreResult.unavailable()
        try:
            return StoreResult.ok(await self.store.get(key))
        except Exception as e:  # store failures never reach the caller
            logger.warning(f"Quota store read failed for {key!r}, skipping limit: {e!r}")
            return StoreResult.unavailable()

    async def _write(self, key: str, value: int) -> bool:
        if self.store is None:
            return False
        try:
            await self.store.set(key, value, self.ttl_seconds)
            return True
        except Exception as e:
            logger.warning(f"Quota store write failed for {key!r}: {e!r}")
            return False

    # =========================================================================
    # CHECKS (before the model call)
    # =========================================================================

    async def claim_daily_slot(self, token: str, day: str) -> None:
        """
        Count a new topic for today, or raise DailyLimitExceeded.

        The slot is consumed here, before the model is called. If the call
        then fails, the slot stays used for the rest of the day.
        """
        key = self.daily_key(token, day)
        current = await self._read(key)
        if not current.available:
            return

        if current.value >= self.daily_limit:
            logger.info(f"Daily topic limit reached for {token} on {day}")
            raise DailyLimitExceeded()

        await self._write(key, current.value + 1)

    async def ensure_token_budget(self, token: str, day: str, topic: str) -> None:
        """Raise TokenLimitExceeded if this topic has used up today's budget."""
        current = await self._read(self.token_key(token, day, topic))
        if not current.available:
            return

        if current.value >= self.token_limit:
            logger.info(
                f"Token limit reached for {token} on {day} "
                f"({current.value}/{self.token_limit}, topic '{topic}')"
            )
            raise TokenLimitExceeded()

    # =========================================================================
    # RECORDING (after the model call)
    # =========================================================================

    async def record_usage(self, token: str, day: str, topic: str, tokens: int) -> None:
        """Add tokens to the topic's counter. Not re-checked against the limit."""
        key = self.token_key(token, day, topic)
        current = await self._read(key)
        if not current.available:
            return
        await self._write(key, current.value + tokens)
