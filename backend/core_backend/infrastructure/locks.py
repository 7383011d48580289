from django.core.cache import caches
from django.core.cache.backends.redis import RedisCache
from contextlib import contextmanager
import logging
import time
import uuid

logger = logging.getLogger(__name__)

# Deletes KEYS[1] only while it still holds this owner's token.
RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
end
return 0
"""


class LockNotAcquired(Exception):
    """Raised when a cache lock could not be acquired within the wait budget."""

    def __init__(self, key, waited):
        self.key = key
        self.waited = waited
        super().__init__(f"Lock '{key}' is held by another worker (waited {waited:.2f}s)")


def release_lock(cache, lock_key, token):
    """
    Delete `lock_key` if it still holds `token`. Returns True when released.

    On Redis the compare and the delete run as one server-side script, so a
    lock that expired and was taken by another worker is never deleted here.
    Tokens are ints, which the Redis cache backend stores unpickled, so the
    script compares against the raw value.
    """
    if isinstance(cache, RedisCache):
        full_key = cache.make_and_validate_key(lock_key)
        client = cache._cache.get_client(full_key, write=True)
        return bool(client.eval(RELEASE_SCRIPT, 1, full_key, token))

    # Local-memory cache: single process only
    if cache.get(lock_key) == token:
        cache.delete(lock_key)
        return True
    return False


@contextmanager
def cache_lock(key, ttl=30, wait=0.0, poll_interval=0.05, cache_name="default"):
    """
    Mutual-exclusion lock backed by the shared cache.

    Acquisition is an atomic `cache.add`, so the lock holds across processes
    whenever the cache itself is shared (Redis in production). The TTL bounds
    how long a crashed holder can keep the lock. Acquisition polls for at most
    `wait` seconds and then raises LockNotAcquired instead of blocking.

    Only the holder's token releases the lock.

    Usage:
        with cache_lock("table-close:1:2", ttl=30, wait=2.0):
            ...
    """
    cache = caches[cache_name]
    lock_key = f"lock:{key}"
    token = uuid.uuid4().int
    deadline = time.monotonic() + max(wait, 0.0)
    started = time.monotonic()

    while not cache.add(lock_key, token, ttl):
        if time.monotonic() >= deadline:
            waited = time.monotonic() - started
            logger.warning(f"Could not acquire lock {lock_key} after {waited:.2f}s")
            raise LockNotAcquired(key, waited)
        time.sleep(poll_interval)

    logger.debug(f"Acquired lock {lock_key}")
    try:
        yield token
    finally:
        if release_lock(cache, lock_key, token):
            logger.debug(f"Released lock {lock_key}")
        else:
            logger.warning(f"Lock {lock_key} expired before release; ttl={ttl}s may be too short")


def is_locked(key, cache_name="default"):
    return caches[cache_name].get(f"lock:{key}") is not None
