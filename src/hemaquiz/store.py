from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Dict, Optional

import redis

from .config import settings
from .models import SessionData


class SessionStore(ABC):
    """Keeps live session state by session id. Values are JSON documents."""

    @abstractmethod
    def get(self, session_id: str) -> Optional[SessionData]:
        pass

    @abstractmethod
    def save(self, session: SessionData) -> None:
        pass

    @abstractmethod
    def delete(self, session_id: str) -> None:
        pass


class MemorySessionStore(SessionStore):
    def __init__(self):
        self._sessions: Dict[str, str] = {}

    def get(self, session_id: str) -> Optional[SessionData]:
        raw = self._sessions.get(session_id)
        if raw is None:
            return None
        return SessionData.model_validate_json(raw)

    def save(self, session: SessionData) -> None:
        self._sessions[session.session_id] = session.model_dump_json()

    def delete(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)


class RedisSessionStore(SessionStore):
    def __init__(self, client: redis.Redis, ttl_minutes: int):
        self.client = client
        self.ttl = timedelta(minutes=ttl_minutes)

    def get(self, session_id: str) -> Optional[SessionData]:
        raw = self.client.get(session_id)
        if not raw:
            return None
        return SessionData.model_validate_json(raw)

    def save(self, session: SessionData) -> None:
        self.client.set(session.session_id, session.model_dump_json(), ex=self.ttl)

    def delete(self, session_id: str) -> None:
        self.client.delete(session_id)


def create_store() -> SessionStore:
    if settings.SESSION_BACKEND == "redis":
        client = redis.from_url(settings.REDIS_URL, decode_responses=True)
        return RedisSessionStore(client, settings.SESSION_TIMEOUT_MINUTES)
    return MemorySessionStore()
