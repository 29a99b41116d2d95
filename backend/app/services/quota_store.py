"""
Quota Store — key-value backends for the rate-limit counters.

WHAT THIS DOES:
Stores small integer counters with an expiry. That's all the app persists:
- limit:{token}:{day}            → topics started today
- tokens:{token}:{day}:{topic}   → model tokens spent on a topic today

BACKENDS:
1. RestQuotaStore: Vercel KV / Upstash REST API over HTTPS (KV_REST_API_URL
   + KV_REST_API_TOKEN). This is what the hosted deployment uses.
2. RedisQuotaStore: a plain Redis server (REDIS_URL), handy for local runs.
3. Nothing configured → create_quota_store() returns None and the app runs
   without quotas.

ERRORS:
Backends raise QuotaStoreError for anything that goes wrong (network, HTTP
status, bad payload). They don't decide what happens next; the quota
service does (it fails open).

USAGE:
    store = create_quota_store(get_settings())
    if store:
        await store.set("limit:abc:2025-01-01", 1, ttl_seconds=86400)
        count = await store.get("limit:abc:2025-01-01")  # -> 1
        await store.close()
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx
import redis.asyncio as aioredis
from redis.exceptions import RedisError

from app.config import Settings
from app.services.errors import QuotaStoreError

logger = logging.getLogger(__name__)


def _to_int(key: str, raw: Any) -> Optional[int]:
    """Stored values come back as strings (or numbers from REST); None means absent."""
    if raw is None:
        return None
    try:
        return int(raw)
    except (TypeError, ValueError) as e:
        raise QuotaStoreError(f"Non-integer value for {key!r}: {raw!r}") from e


class QuotaStore(ABC):
    """A TTL-capable integer key-value store."""

    backend: str = "unknown"

    @abstractmethod
    async def get(self, key: str) -> Optional[int]:
        """Current value, or None if the key doesn't exist (or has expired)."""

    @abstractmethod
    async def set(self, key: str, value: int, ttl_seconds: int) -> None:
        """Write value and (re)start its expiry."""

    async def close(self) -> None:
        """Release connections. Default: nothing to release."""


# =============================================================================
# REST BACKEND (Vercel KV / Upstash)
# =============================================================================

class RestQuotaStore(QuotaStore):
    """
    Async client for the Upstash-style REST API.

    Commands are POSTed to the base URL as a JSON array, e.g.
    ["SET", "limit:abc:2025-01-01", "1", "EX", "86400"]. The reply is
    {"result": ...} on success or {"error": "..."} on failure.
    Sending the command in the body means topics with spaces or slashes
    need no URL escaping.
    """

    backend = "rest"

    def __init__(
        self,
        url: str,
        token: str,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url.rstrip("/")
        self.token = token
        self.timeout = timeout
        # Tests inject httpx.MockTransport here
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client (lazy initialization)."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"Authorization": f"Bearer {self.token}"},
                transport=self._transport,
            )
        return self._client

    async def _command(self, *args: Any) -> Any:
        client = await self._get_client()
        try:
            response = await client.post(self.url, json=[str(a) for a in args])
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise QuotaStoreError(f"KV {args[0]} failed: {e}") from e
        except ValueError as e:
            raise QuotaStoreError(f"KV {args[0]} returned invalid JSON") from e

        if not isinstance(data, dict):
            raise QuotaStoreError(f"KV {args[0]} returned unexpected payload: {data!r}")
        if data.get("error"):
            raise QuotaStoreError(f"KV {args[0]} error: {data['error']}")
        return data.get("result")

    async def get(self, key: str) -> Optional[int]:
        return _to_int(key, await self._command("GET", key))

    async def set(self, key: str, value: int, ttl_seconds: int) -> None:
        await self._command("SET", key, value, "EX", ttl_seconds)

    async def close(self) -> None:
        """Close the HTTP client (call when done)."""
        if self._client:
            await self._client.aclose()
            self._client = None


# =============================================================================
# REDIS BACKEND
# =============================================================================

class RedisQuotaStore(QuotaStore):
    """Quota counters in a Redis server via redis-py's asyncio client."""

    backend = "redis"

    def __init__(self, url: str, client: Optional[aioredis.Redis] = None):
        self.url = url
        self._redis = client if client is not None else aioredis.from_url(
            url, decode_responses=True
        )

    async def get(self, key: str) -> Optional[int]:
        try:
            raw = await self._redis.get(key)
        except RedisError as e:
            raise QuotaStoreError(f"Redis GET failed: {e}") from e
        return _to_int(key, raw)

    async def set(self, key: str, value: int, ttl_seconds: int) -> None:
        try:
            await self._redis.set(key, int(value), ex=int(ttl_seconds))
        except RedisError as e:
            raise QuotaStoreError(f"Redis SET failed: {e}") from e

    async def close(self) -> None:
        await self._redis.aclose()


# =============================================================================
# FACTORY
# =============================================================================

def create_quota_store(settings: Settings) -> Optional[QuotaStore]:
    """
    Pick a backend from configuration.

    REST settings win over REDIS_URL. Returns None when neither is set, or
    when the configured backend can't be built (e.g. a malformed URL),
    which turns quota enforcement off.
    """
    try:
        if settings.rest_store_configured:
            logger.info("Quota store: REST key-value API")
            return RestQuotaStore(settings.kv_rest_api_url, settings.kv_rest_api_token)

        if settings.redis_url:
            logger.info("Quota store: Redis")
            return RedisQuotaStore(settings.redis_url)
    except Exception as e:
        logger.warning(f"Quota store could not be created, limits are disabled: {e!r}")
        return None

    logger.warning("No quota store configured; daily and token limits are disabled")
    return None
