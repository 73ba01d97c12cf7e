"""
Paste storage: Redis with an in-memory fallback for development.
Handles paste CRUD, conditional view counting, bulk expiry removal and the
fixed-window counters used for rate limiting.
"""
import functools
import logging
import threading
import time
from dataclasses import replace
from datetime import datetime
from typing import Callable, Dict, Iterator, Optional, Tuple, Union

from redis import Redis
from redis.exceptions import RedisError

from pastebin.config import settings
from pastebin.exceptions import StoreError, UniqueViolation
from pastebin.expiration import ExpirationType
from pastebin.paste import Paste, utcnow

logger = logging.getLogger(__name__)

KEY_PREFIX = "paste:"

PastePredicate = Callable[[Paste], bool]


def _paste_key(paste_id: str) -> str:
    return f"{KEY_PREFIX}{paste_id}"


def _stamped(paste: Paste) -> Paste:
    created = paste.created_at or utcnow()
    return replace(paste, created_at=created, updated_at=paste.updated_at or created)


class InMemoryStore:
    """Process-local paste store for development/testing (when Redis unavailable)."""

    using_fallback = True

    def __init__(self):
        self.pastes: Dict[str, Paste] = {}
        self.counters: Dict[str, Tuple[int, float]] = {}
        self._lock = threading.Lock()

    def get(self, paste_id: str) -> Optional[Paste]:
        with self._lock:
            paste = self.pastes.get(paste_id)
            return replace(paste) if paste else None

    def exists(self, paste_id: str) -> bool:
        with self._lock:
            return paste_id in self.pastes

    def insert(self, paste: Paste) -> Paste:
        with self._lock:
            if paste.id in self.pastes:
                raise UniqueViolation(paste.id)
            stored = _stamped(paste)
            self.pastes[paste.id] = stored
            return replace(stored)

    def increment_view(self, paste_id: str) -> Optional[int]:
        with self._lock:
            paste = self.pastes.get(paste_id)
            if paste is None:
                return None
            if paste.max_views is not None and paste.view_count >= paste.max_views:
                return None
            paste.view_count += 1
            paste.updated_at = utcnow()
            return paste.view_count

    def delete(self, paste_id: str) -> bool:
        with self._lock:
            return self.pastes.pop(paste_id, None) is not None

    def delete_where(self, predicate: PastePredicate) -> int:
        with self._lock:
            doomed = [pid for pid, paste in self.pastes.items() if predicate(paste)]
            for pid in doomed:
                del self.pastes[pid]
            return len(doomed)

    def count(self, predicate: Optional[PastePredicate] = None) -> int:
        with self._lock:
            if predicate is None:
                return len(self.pastes)
            return sum(1 for paste in self.pastes.values() if predicate(paste))

    def hit(self, key: str, window_seconds: int) -> int:
        """Increment a fixed-window counter and return its new value."""
        now = time.monotonic()
        with self._lock:
            # Window index is part of the key, so past windows are never hit again
            stale = [k for k, (_, reset_at) in self.counters.items() if reset_at <= now]
            for k in stale:
                del self.counters[k]

            count, reset_at = self.counters.get(key, (0, now + window_seconds))
            if now >= reset_at:
                count, reset_at = 0, now + window_seconds
            count += 1
            self.counters[key] = (count, reset_at)
            return count

    def is_healthy(self) -> bool:
        return True


def _redis_errors(method):
    """Re-raise redis failures as StoreError."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except RedisError as e:
            logger.error(f"Redis error in {method.__name__}: {type(e).__name__}: {e}")
            raise StoreError(f"Paste store unavailable: {e}") from e

    return wrapper


def _to_hash(paste: Paste) -> Dict[str, str]:
    data = {
        "id": paste.id,
        "content": paste.content,
        "title": paste.title,
        "syntax": paste.syntax,
        "expiration_type": paste.expiration_type.value,
        "view_count": str(paste.view_count),
        "created_at": paste.created_at.isoformat(),
        "updated_at": paste.updated_at.isoformat(),
    }
    # Absent optional fields are left out of the hash
    if paste.expires_at is not None:
        data["expires_at"] = paste.expires_at.isoformat()
    if paste.max_views is not None:
        data["max_views"] = str(paste.max_views)
    return data


def _parse_time(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _from_hash(data: Dict[str, str]) -> Paste:
    return Paste(
        id=data["id"],
        content=data["content"],
        title=data.get("title", ""),
        syntax=data.get("syntax", ""),
        expiration_type=ExpirationType(data.get("expiration_type", "never")),
        expires_at=_parse_time(data.get("expires_at")),
        max_views=int(data["max_views"]) if "max_views" in data else None,
        view_count=int(data.get("view_count", 0)),
        created_at=_parse_time(data.get("created_at")),
        updated_at=_parse_time(data.get("updated_at")),
    )


class RedisStore:
    """Paste store backed by Redis hashes at paste:{id}."""

    using_fallback = False

    def __init__(self, redis: Redis):
        self.redis = redis

    @_redis_errors
    def get(self, paste_id: str) -> Optional[Paste]:
        data = self.redis.hgetall(_paste_key(paste_id))
        if not data:
            return None
        return _from_hash(data)

    @_redis_errors
    def exists(self, paste_id: str) -> bool:
        return bool(self.redis.exists(_paste_key(paste_id)))

    @_redis_errors
    def insert(self, paste: Paste) -> Paste:
        """
        Store a new paste.

        The existence check and the write run under WATCH so a concurrent
        insert of the same ID cannot be overwritten.

        Raises:
            UniqueViolation: If the ID is already taken
        """
        key = _paste_key(paste.id)
        stored = _stamped(paste)

        def _insert(pipe):
            if pipe.exists(key):
                raise UniqueViolation(paste.id)
            pipe.multi()
            pipe.hset(key, mapping=_to_hash(stored))

        self.redis.transaction(_insert, key)
        return stored

    @_redis_errors
    def increment_view(self, paste_id: str) -> Optional[int]:
        """
        Count one view, unless the paste is gone or already at its view cap.

        Optimistic transaction on the paste key: redis-py retries the whole
        read-check-increment when another client touches the key in between,
        so concurrent readers are serialized per paste.

        Returns:
            New view count, or None if nothing was incremented
        """
        key = _paste_key(paste_id)

        def _increment(pipe) -> Optional[int]:
            view_count, max_views = pipe.hmget(key, "view_count", "max_views")
            if view_count is None:
                return None
            if max_views is not None and int(view_count) >= int(max_views):
                return None
            pipe.multi()
            pipe.hincrby(key, "view_count", 1)
            pipe.hset(key, "updated_at", utcnow().isoformat())
            return int(view_count) + 1

        return self.redis.transaction(_increment, key, value_from_callable=True)

    @_redis_errors
    def delete(self, paste_id: str) -> bool:
        return bool(self.redis.delete(_paste_key(paste_id)))

    def _scan(self) -> Iterator[Tuple[str, Paste]]:
        for key in self.redis.scan_iter(match=f"{KEY_PREFIX}*", count=500):
            data = self.redis.hgetall(key)
            # Deleted between SCAN and HGETALL
            if data:
                yield key, _from_hash(data)

    @_redis_errors
    def delete_where(self, predicate: PastePredicate) -> int:
        deleted = 0
        for key, paste in self._scan():
            if predicate(paste):
                deleted += self.redis.delete(key)
        return deleted

    @_redis_errors
    def count(self, predicate: Optional[PastePredicate] = None) -> int:
        return sum(1 for _, paste in self._scan() if predicate is None or predicate(paste))

    @_redis_errors
    def hit(self, key: str, window_seconds: int) -> int:
        """INCR a fixed-window counter, setting its EXPIRE on first hit."""
        current = self.redis.incr(key)
        if current == 1:
            self.redis.expire(key, window_seconds)
        return current

    def is_healthy(self) -> bool:
        """Check if the Redis connection is alive."""
        try:
            return bool(self.redis.ping())
        except RedisError as e:
            logger.error(f"Health check failed: {e}")
        return False


PasteStore = Union[RedisStore, InMemoryStore]


def connect_store(redis_url: str) -> PasteStore:
    """Connect to Redis, falling back to the in-memory store if it does not answer."""
    try:
        logger.info(f"Attempting to connect to Redis: {redis_url[:30]}...")
        redis = Redis.from_url(redis_url, decode_responses=True)
        redis.ping()
        logger.info("✓ Redis connected successfully")
        return RedisStore(redis)
    except (RedisError, ValueError) as e:
        logger.error(f"❌ Error connecting to Redis: {type(e).__name__}: {str(e)}")
        logger.warning("Using in-memory fallback for development. Data will NOT persist across restarts.")
        return InMemoryStore()


@functools.lru_cache()
def get_store() -> PasteStore:
    return connect_store(settings.REDIS_URL)
