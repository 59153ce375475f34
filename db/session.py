from redis.asyncio import Redis
from core.config import settings
from services.session_service import SessionStore, InMemorySessionStore, RedisSessionStore


def create_session_store() -> SessionStore:
    """Build the quiz session store selected by SESSION_BACKEND."""
    backend = settings.SESSION_BACKEND.lower()
    if backend == "redis":
        redis = Redis.from_url(settings.REDIS_URL, decode_responses=True)
        return RedisSessionStore(redis)
    if backend == "memory":
        return InMemorySessionStore()
    raise ValueError(f"Unknown SESSION_BACKEND: {settings.SESSION_BACKEND}")
