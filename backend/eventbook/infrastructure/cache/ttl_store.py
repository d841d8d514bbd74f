# backend/eventbook/infrastructure/cache/ttl_store.py
"""
Time-boxed key-value stores.

Short-lived values (e-mail verification codes) go through the TTLStore
contract: put(key, value, ttl_seconds) / get(key) / delete(key). Every
write states its lifetime; expiry is the store's job, not a timer's.

Two implementations:
- RedisTTLStore: SET key value EX ttl on a shared Redis
- InMemoryTTLStore: process-local dict, expiry checked on read; writes
  sweep expired keys
"""

import logging
import threading
import time
from typing import Callable, Dict, Optional, Protocol, Tuple

from redis import Redis

from ...core.config import settings

logger = logging.getLogger(__name__)


class TTLStore(Protocol):
    def put(self, key: str, value: str, ttl_seconds: int) -> None: ...

    def get(self, key: str) -> Optional[str]: ...

    def delete(self, key: str) -> None: ...


class InMemoryTTLStore:
    """
    Process-local TTL store.

    Suitable for a single worker and for tests. ``clock`` returns seconds
    and defaults to time.monotonic.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        with self._lock:
            now = self._clock()
            self._sweep(now)
            self._entries[key] = (value, now + ttl_seconds)
        logger.debug(f"Stored {key} with TTL {ttl_seconds}s")

    def _sweep(self, now: float) -> None:
        """Drop every expired entry; caller holds the lock."""
        expired = [key for key, (_, expires_at) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)


class RedisTTLStore:
    """TTL store on Redis; keys are namespaced with ``prefix``."""

    def __init__(self, client: Redis, prefix: str = "eventbook"):
        self.client = client
        self.prefix = prefix

    @classmethod
    def from_url(cls, redis_url: str, prefix: str = "eventbook") -> "RedisTTLStore":
        client = Redis.from_url(redis_url, encoding="utf-8", decode_responses=True)
        logger.info("[REDIS] TTL store client initialized")
        return cls(client, prefix=prefix)

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.client.set(self._key(key), value, ex=ttl_seconds)

    def get(self, key: str) -> Optional[str]:
        value = self.client.get(self._key(key))
        return value if value is None or isinstance(value, str) else str(value)

    def delete(self, key: str) -> None:
        self.client.delete(self._key(key))


_store_instance: Optional[TTLStore] = None
_store_lock = threading.Lock()


def get_ttl_store() -> TTLStore:
    """Process-wide store chosen by ``settings.otp_store_backend``."""
    global _store_instance
    if _store_instance is not None:
        return _store_instance
    with _store_lock:
        if _store_instance is None:
            if settings.otp_store_backend == "redis":
                _store_instance = RedisTTLStore.from_url(settings.redis_url)
            else:
                _store_instance = InMemoryTTLStore()
                logger.info("InMemoryTTLStore initialized (single-process mode)")
    return _store_instance
