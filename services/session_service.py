import asyncio
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional
from redis.asyncio import Redis
from redis.exceptions import LockError
from models.session import QuizSession
from core.config import settings
from core.exceptions import ConcurrentModification
from core.logger import logger


class SessionStore(ABC):
    """
    Quiz sessions keyed by the caller's session id.

    Every read-modify-write of a session must happen inside ``lock(session_id)``
    so that two requests for the same session cannot interleave.
    """

    @abstractmethod
    async def get(self, session_id: str) -> Optional[QuizSession]:
        ...

    @abstractmethod
    async def save(self, session_id: str, session: QuizSession) -> None:
        ...

    @abstractmethod
    async def delete(self, session_id: str) -> bool:
        """Remove the session. Returns False if there was nothing to remove."""

    @abstractmethod
    def lock(self, session_id: str):
        """Async context manager serializing work on one session."""

    async def close(self):
        pass


class InMemorySessionStore(SessionStore):
    """Process-local store. Sessions are lost on restart."""

    def __init__(self, lock_wait: Optional[float] = None):
        self.lock_wait = settings.SESSION_LOCK_WAIT_SECONDS if lock_wait is None else lock_wait
        self._sessions: Dict[str, QuizSession] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}

    async def get(self, session_id: str) -> Optional[QuizSession]:
        return self._sessions.get(session_id)

    async def save(self, session_id: str, session: QuizSession) -> None:
        self._sessions[session_id] = session

    async def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    async def _acquire(self, session_id: str, lock: asyncio.Lock) -> None:
        acquire = asyncio.ensure_future(lock.acquire())
        try:
            await asyncio.wait_for(asyncio.shield(acquire), timeout=self.lock_wait)
        except (asyncio.TimeoutError, asyncio.CancelledError) as e:
            # The acquire can still win against the timeout or cancellation
            acquire.cancel()
            try:
                acquired = await acquire
            except asyncio.CancelledError:
                acquired = False
            if acquired:
                lock.release()
            if isinstance(e, asyncio.TimeoutError):
                logger.warning("Session lock wait timed out", session_id=session_id)
                raise ConcurrentModification(session_id)
            raise

    @asynccontextmanager
    async def lock(self, session_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(session_id, asyncio.Lock())
        self._lock_users[session_id] = self._lock_users.get(session_id, 0) + 1
        try:
            await self._acquire(session_id, lock)
            try:
                yield
            finally:
                lock.release()
        finally:
            # Drop the lock once nobody holds or waits on it
            self._lock_users[session_id] -= 1
            if not self._lock_users[session_id]:
                del self._lock_users[session_id]
                self._locks.pop(session_id, None)


class RedisSessionStore(SessionStore):
    """Shared store for running several instances behind one load balancer."""

    KEY_PREFIX = "kakapo:quiz:"
    LOCK_PREFIX = "kakapo:lock:"

    def __init__(self, redis: Redis, ttl: Optional[int] = None,
                 lock_timeout: Optional[float] = None, lock_wait: Optional[float] = None):
        self.redis = redis
        self.ttl = settings.QUIZ_SESSION_TTL_SECONDS if ttl is None else ttl
        self.lock_timeout = settings.SESSION_LOCK_TIMEOUT_SECONDS if lock_timeout is None else lock_timeout
        self.lock_wait = settings.SESSION_LOCK_WAIT_SECONDS if lock_wait is None else lock_wait

    def _key(self, session_id: str) -> str:
        return f"{self.KEY_PREFIX}{session_id}"

    async def get(self, session_id: str) -> Optional[QuizSession]:
        raw = await self.redis.get(self._key(session_id))
        if not raw:
            return None
        return QuizSession.model_validate_json(raw)

    async def save(self, session_id: str, session: QuizSession) -> None:
        # TTL is refreshed on every write so abandoned quizzes expire
        await self.redis.set(self._key(session_id), session.model_dump_json(), ex=self.ttl)

    async def delete(self, session_id: str) -> bool:
        return bool(await self.redis.delete(self._key(session_id)))

    @asynccontextmanager
    async def lock(self, session_id: str) -> AsyncIterator[None]:
        lock = self.redis.lock(
            f"{self.LOCK_PREFIX}{session_id}",
            timeout=self.lock_timeout,
            blocking_timeout=self.lock_wait,
        )
        if not await lock.acquire():
            logger.warning("Session lock wait timed out", session_id=session_id)
            raise ConcurrentModification(session_id)
        try:
            yield
        finally:
            try:
                await lock.release()
            except LockError as e:
                logger.warning("Session lock expired before release", session_id=session_id, error=str(e))

    async def close(self):
        await self.redis.aclose()
