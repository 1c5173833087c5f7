"""
Tests for session stores.
"""
from datetime import timedelta

from hemaquiz.models import SessionData, SessionStatus
from hemaquiz.store import MemorySessionStore, RedisSessionStore


class FakeRedis:
    """Records calls the way redis-py's string commands are used."""

    def __init__(self):
        self.data = {}
        self.expiry = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value, ex=None):
        self.data[key] = value
        self.expiry[key] = ex

    def delete(self, key):
        self.data.pop(key, None)


def make_session():
    return SessionData(
        session_id="abc",
        subject_id="hematology",
        questions=[],
        status=SessionStatus.EMPTY,
    )


class TestMemorySessionStore:
    def test_save_get_delete(self):
        store = MemorySessionStore()
        store.save(make_session())

        loaded = store.get("abc")
        assert loaded.subject_id == "hematology"
        assert loaded.status == SessionStatus.EMPTY

        store.delete("abc")
        assert store.get("abc") is None

    def test_returns_copies(self):
        store = MemorySessionStore()
        session = make_session()
        store.save(session)

        session.generation = 5
        assert store.get("abc").generation == 1


class TestRedisSessionStore:
    def test_save_uses_ttl(self):
        client = FakeRedis()
        store = RedisSessionStore(client, ttl_minutes=30)
        store.save(make_session())

        assert client.expiry["abc"] == timedelta(minutes=30)
        assert store.get("abc").session_id == "abc"

    def test_missing_and_delete(self):
        client = FakeRedis()
        store = RedisSessionStore(client, ttl_minutes=30)

        assert store.get("abc") is None
        store.save(make_session())
        store.delete("abc")
        assert store.get("abc") is None
