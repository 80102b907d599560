"""
Test the per-event Redis lock.
"""
import pytest
import redis

from app.services.errors import StoreUnavailableError
from app.services.locks import event_lock


class TestEventLock:
    def test_lock_is_held_inside_block(self, redis_client):
        with event_lock("e1"):
            other = redis_client.lock("event_lock:e1", timeout=5)
            assert other.acquire(blocking=False) is False

        assert other.acquire(blocking=False) is True
        other.release()

    def test_different_events_do_not_contend(self, redis_client):
        with event_lock("e1"):
            with event_lock("e2"):
                assert redis_client.get("event_lock:e1") is not None
                assert redis_client.get("event_lock:e2") is not None

    def test_released_on_error(self, redis_client):
        with pytest.raises(RuntimeError):
            with event_lock("e1"):
                raise RuntimeError("boom")

        assert redis_client.get("event_lock:e1") is None

    def test_busy_lock_times_out(self, redis_client, monkeypatch):
        monkeypatch.setattr("app.services.locks.Config.REGISTRATION_LOCK_WAIT", 0.2)
        held = redis_client.lock("event_lock:e1", timeout=10)
        assert held.acquire(blocking=False)

        with pytest.raises(StoreUnavailableError):
            with event_lock("e1"):
                pass
        held.release()

    def test_redis_down(self, monkeypatch):
        class Unreachable:
            def lock(self, *args, **kwargs):
                raise redis.exceptions.ConnectionError("connection refused")

        monkeypatch.setattr("app.services.locks.get_redis_client", lambda: Unreachable())

        with pytest.raises(StoreUnavailableError):
            with event_lock("e1"):
                pass
