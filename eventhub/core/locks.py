import logging
from contextlib import contextmanager

import redis

from eventhub.core.config import EVENT_LOCK_BLOCKING_TIMEOUT, EVENT_LOCK_TIMEOUT, get_redis_url
from eventhub.core.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


def get_redis_client():
    """Get Redis client for locking."""
    return redis.from_url(get_redis_url(), decode_responses=True)


@contextmanager
def event_lock(event_id: int):
    """
    Hold the Redis lock for one event's registration counter.

    Only one process can be inside the block for a given event at a time.
    Failing to get the lock (timeout or Redis down) raises
    StoreUnavailableError before anything is written.
    """
    redis_client = get_redis_client()
    lock = redis_client.lock(
        f"event_lock:{event_id}",
        timeout=EVENT_LOCK_TIMEOUT,
        blocking_timeout=EVENT_LOCK_BLOCKING_TIMEOUT,
    )

    try:
        acquired = lock.acquire(blocking=True)
    except redis.exceptions.RedisError as exc:
        logger.error("Could not reach Redis to lock event %s: %s", event_id, exc)
        raise StoreUnavailableError("Could not acquire lock, please try again.") from exc

    if not acquired:
        logger.warning("Timed out waiting for lock on event %s", event_id)
        raise StoreUnavailableError("Could not acquire lock, please try again.")

    try:
        yield
    finally:
        try:
            lock.release()
        except redis.exceptions.LockError:
            # The lock expired while held; the conditional updates still kept the counter consistent.
            logger.warning("Lock on event %s expired before release", event_id)
        except redis.exceptions.RedisError as exc:
            logger.warning("Could not release lock on event %s: %s", event_id, exc)
