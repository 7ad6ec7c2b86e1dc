"""
/**
 * @file durable_cache.py
 * @summary Redis-backed persistent cache for the two most expensive
 *          aggregates: member profiles and zip lookups.
 *
 * @details
 * - Payloads are stored as JSON together with their absolute expiry; Redis
 *   also expires the key (`ex=`), and the stored expiry is re-checked on read.
 * - Without a client (REDIS_URL unset) every read misses and every write is a
 *   no-op.
 * - Redis failures raise DurableCacheError; callers log and continue.
 *
 * @dependencies
 * - redis.asyncio (async Redis client)
 */
"""

import json
import time
from typing import Any, Callable, Dict, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from civiclens.utils.errors import DurableCacheError

PROFILE_TTL = 30 * 60
ZIP_LOOKUP_TTL = 24 * 60 * 60


class DurableCache:
    """
    /**
     * Persistent read-through/write-through cache.
     *
     * @param client: A redis.asyncio.Redis (decode_responses=True) or None.
     * @param prefix: Key namespace.
     * @param clock: Wall-clock source used for the stored expiry.
     */
    """

    def __init__(self, client: Optional[redis.Redis] = None, prefix: str = "civiclens",
                 clock: Callable[[], float] = time.time):
        self.client = client
        self.prefix = prefix
        self.clock = clock

        # Key patterns
        self.PROFILE_KEY = "{prefix}:profile:{bioguide_id}"
        self.ZIP_KEY = "{prefix}:zip:{zip_code}"

    @classmethod
    def from_url(cls, url: Optional[str]) -> "DurableCache":
        if not url:
            return cls(client=None)
        return cls(client=redis.Redis.from_url(url, decode_responses=True))

    @property
    def enabled(self) -> bool:
        return self.client is not None

    async def ping(self) -> bool:
        """
        /**
         * True when the store answers; raises DurableCacheError otherwise.
         */
        """
        if not self.client:
            return False
        try:
            return bool(await self.client.ping())
        except RedisError as e:
            raise DurableCacheError(f"Durable cache unreachable: {e}")

    async def close(self):
        if self.client:
            await self.client.aclose()

    async def get(self, key: str) -> Optional[Any]:
        if not self.client:
            return None
        try:
            raw = await self.client.get(key)
        except RedisError as e:
            raise DurableCacheError(f"Failed to read {key}: {e}")
        if not raw:
            return None
        try:
            envelope = json.loads(raw)
        except json.JSONDecodeError:
            return None
        if not isinstance(envelope, dict) or self.clock() >= envelope.get("expires_at", 0):
            return None
        return envelope.get("data")

    async def set(self, key: str, value: Any, ttl: int):
        if not self.client:
            return
        envelope = {"data": value, "expires_at": self.clock() + ttl}
        try:
            await self.client.set(key, json.dumps(envelope), ex=int(ttl))
        except RedisError as e:
            raise DurableCacheError(f"Failed to write {key}: {e}")

    async def get_profile(self, bioguide_id: str) -> Optional[Dict[str, Any]]:
        return await self.get(self.PROFILE_KEY.format(prefix=self.prefix, bioguide_id=bioguide_id))

    async def set_profile(self, bioguide_id: str, payload: Dict[str, Any]):
        await self.set(self.PROFILE_KEY.format(prefix=self.prefix, bioguide_id=bioguide_id),
                       payload, PROFILE_TTL)

    async def get_zip_lookup(self, zip_code: str) -> Optional[Dict[str, Any]]:
        return await self.get(self.ZIP_KEY.format(prefix=self.prefix, zip_code=zip_code))

    async def set_zip_lookup(self, zip_code: str, payload: Dict[str, Any]):
        await self.set(self.ZIP_KEY.format(prefix=self.prefix, zip_code=zip_code),
                       payload, ZIP_LOOKUP_TTL)
