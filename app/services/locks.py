import logging
from contextlib import contextmanager

import redis

from app.core.config import Config, get_redis_url
from app.services.errors import StoreUnavailableError

logger = logging.getLogger(__name__)


def get_redis_client():
    """Get Redis client for locking."""
    return redis.from_url(get_redis_url(), decode_responses=True)


@contextmanager
def event_lock(event_id: str):
    """
    Hold the per-event lock for the duration of the block.

    Every write that changes the occupancy of an event runs under this lock,
    so concurrent requests for the same event are serialised while different
    events never contend.
    """
    try:
        lock = get_redis_client().lock(
            f"event_lock:{event_id}",
            timeout=Config.REGISTRATION_LOCK_TIMEOUT,
            blocking_timeout=Config.REGISTRATION_LOCK_WAIT,
        )
        acquired = lock.acquire(blocking=True)
    except redis.exceptions.RedisError as e:
        logger.exception("Lock store error for event %s", event_id)
        raise StoreUnavailableError("Could not acquire lock, please try again.") from e
    if not acquired:
        logger.info("Timed out waiting for lock on event %s", event_id)
        raise StoreUnavailableError("Could not acquire lock, please try again.")

    try:
        yield
    finally:
        try:
            lock.release()
        except redis.exceptions.LockError:
            # lock expired while held; the database transaction is the last guard
            logger.warning("Lock for event %s expired before release", event_id)
