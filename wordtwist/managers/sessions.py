from __future__ import annotations
import abc
import asyncio
import logging
import secrets
import time
from dataclasses import dataclass, field, replace
from typing import Awaitable, Callable, Dict, List, Mapping, Optional, Sequence, Set, TypeVar

from redis import exceptions as redis_exceptions

from ..constants import BACKEND_RETRY_SECONDS, SESSION_KEY_PREFIX, SESSION_TTL_SECONDS
from ..errors import CorruptSessionError
from ..schemas import SessionSummary

logger = logging.getLogger(__name__)

T = TypeVar('T')

# Anything the shared store raises: unreachable, timed out, or refused the command
# mid-operation (READONLY, OOM, MISCONF). Never game outcomes.
BACKEND_ERRORS = (
    redis_exceptions.RedisError,
    OSError,
)

NOT_FOUND = 'session-not-found'
ALREADY_FOUND = 'already-found'


def new_session_id() -> str:
    return secrets.token_hex(16)


def short_id(session_id: str) -> str:
    return session_id[:8]


@dataclass
class RoundSession:
    session_id: str
    letters: List[str]
    level: int
    mode: str  # 'timed' | 'untimed'
    found_words: Set[str] = field(default_factory=set)
    score: int = 0
    created_at: float = 0.0  # epoch seconds

    def copy(self) -> 'RoundSession':
        return replace(self, letters=list(self.letters), found_words=set(self.found_words))

    def summary(self) -> SessionSummary:
        return SessionSummary(
            letters=list(self.letters),
            level=self.level,
            gameMode=self.mode,  # type: ignore
            wordsFound=len(self.found_words),
            score=self.score,
            foundWords=sorted(self.found_words),
        )


@dataclass(frozen=True)
class AcceptResult:
    accepted: bool
    score: Optional[int] = None
    reason: Optional[str] = None

    @classmethod
    def ok(cls, score: int) -> 'AcceptResult':
        return cls(accepted=True, score=score)

    @classmethod
    def rejected(cls, reason: str) -> 'AcceptResult':
        return cls(accepted=False, reason=reason)


class SessionStore(abc.ABC):
    """Round sessions: create, read, record words atomically, close.

    Game outcomes (missing session, duplicate word) are return values.
    Implementations raise only for backend failures or corrupt records.
    """

    @abc.abstractmethod
    async def create(self, letters: Sequence[str], level: int, mode: str) -> str: ...

    @abc.abstractmethod
    async def get(self, session_id: str) -> Optional[RoundSession]: ...

    @abc.abstractmethod
    async def accept_word(self, session_id: str, word: str, points: int) -> AcceptResult: ...

    @abc.abstractmethod
    async def close(self, session_id: str) -> Optional[SessionSummary]: ...

    @abc.abstractmethod
    async def count(self) -> int: ...

    async def summarize(self, session_id: str) -> Optional[SessionSummary]:
        session = await self.get(session_id)
        return session.summary() if session else None


class MemorySessionStore(SessionStore):
    """In-process store. Only visible to the process that holds it."""

    def __init__(self, ttl: float = SESSION_TTL_SECONDS, clock: Callable[[], float] = time.time):
        self.ttl = ttl
        self._clock = clock
        self._sessions: Dict[str, RoundSession] = {}
        self._lock = asyncio.Lock()

    def _expired(self, session: RoundSession, now: float) -> bool:
        return now - session.created_at > self.ttl

    def _live(self, session_id: str) -> Optional[RoundSession]:
        # caller holds the lock
        session = self._sessions.get(session_id)
        if session is None:
            return None
        if self._expired(session, self._clock()):
            del self._sessions[session_id]
            return None
        return session

    async def create(self, letters: Sequence[str], level: int, mode: str) -> str:
        session_id = new_session_id()
        session = RoundSession(
            session_id=session_id,
            letters=[ch.upper() for ch in letters],
            level=level,
            mode=mode,
            created_at=self._clock(),
        )
        async with self._lock:
            self._sessions[session_id] = session
        return session_id

    async def get(self, session_id: str) -> Optional[RoundSession]:
        async with self._lock:
            session = self._live(session_id)
            return session.copy() if session else None

    async def accept_word(self, session_id: str, word: str, points: int) -> AcceptResult:
        word = word.upper()
        async with self._lock:
            session = self._live(session_id)
            if session is None:
                return AcceptResult.rejected(NOT_FOUND)
            if word in session.found_words:
                return AcceptResult.rejected(ALREADY_FOUND)
            session.found_words.add(word)
            session.score += points
            return AcceptResult.ok(session.score)

    async def close(self, session_id: str) -> Optional[SessionSummary]:
        async with self._lock:
            session = self._live(session_id)
            if session is None:
                return None
            del self._sessions[session_id]
            return session.summary()

    async def count(self) -> int:
        return len(self._sessions)

    async def purge_expired(self) -> int:
        async with self._lock:
            now = self._clock()
            stale = [sid for sid, s in self._sessions.items() if self._expired(s, now)]
            for sid in stale:
                del self._sessions[sid]
        return len(stale)


# KEYS[1] session hash; ARGV[1] word; ARGV[2] points.
# Returns -1 if the session is gone, -2 if the word was already found,
# otherwise the new score. HSETNX/HINCRBY leave the key's TTL untouched.
ACCEPT_WORD_SCRIPT = """
if redis.call('EXISTS', KEYS[1]) == 0 then
  return -1
end
if redis.call('HSETNX', KEYS[1], 'w:' .. ARGV[1], 1) == 0 then
  return -2
end
return redis.call('HINCRBY', KEYS[1], 'score', ARGV[2])
"""

WORD_FIELD_PREFIX = 'w:'


def _text(value) -> str:
    if isinstance(value, bytes):
        return value.decode('utf-8')
    return str(value)


class RedisSessionStore(SessionStore):
    """Shared store: one hash per session, found words kept as ``w:<WORD>`` fields."""

    def __init__(self, client, ttl: int = SESSION_TTL_SECONDS, prefix: str = SESSION_KEY_PREFIX,
                 clock: Callable[[], float] = time.time):
        self.client = client
        self.ttl = int(ttl)
        self.prefix = prefix
        self._clock = clock
        self._accept = client.register_script(ACCEPT_WORD_SCRIPT)

    def key(self, session_id: str) -> str:
        return f'{self.prefix}{session_id}'

    def _decode(self, session_id: str, raw: Mapping) -> RoundSession:
        data = {_text(k): _text(v) for k, v in raw.items()}
        try:
            return RoundSession(
                session_id=session_id,
                letters=list(data['letters']),
                level=int(data['level']),
                mode=data['mode'],
                found_words={k[len(WORD_FIELD_PREFIX):] for k in data if k.startswith(WORD_FIELD_PREFIX)},
                score=int(data['score']),
                created_at=float(data['created_at']),
            )
        except (KeyError, ValueError) as e:
            raise CorruptSessionError(f'Session {short_id(session_id)} record is corrupt: {e}') from e

    async def create(self, letters: Sequence[str], level: int, mode: str) -> str:
        session_id = new_session_id()
        key = self.key(session_id)
        mapping = {
            'letters': ''.join(ch.upper() for ch in letters),
            'level': level,
            'mode': mode,
            'score': 0,
            'created_at': repr(self._clock()),
        }
        async with self.client.pipeline(transaction=True) as pipe:
            pipe.hset(key, mapping=mapping)
            pipe.expire(key, self.ttl)
            await pipe.execute()
        return session_id

    async def get(self, session_id: str) -> Optional[RoundSession]:
        raw = await self.client.hgetall(self.key(session_id))
        if not raw:
            return None
        return self._decode(session_id, raw)

    async def accept_word(self, session_id: str, word: str, points: int) -> AcceptResult:
        result = int(await self._accept(keys=[self.key(session_id)], args=[word.upper(), int(points)]))
        if result == -1:
            return AcceptResult.rejected(NOT_FOUND)
        if result == -2:
            return AcceptResult.rejected(ALREADY_FOUND)
        return AcceptResult.ok(result)

    async def close(self, session_id: str) -> Optional[SessionSummary]:
        key = self.key(session_id)
        async with self.client.pipeline(transaction=True) as pipe:
            pipe.hgetall(key)
            pipe.delete(key)
            raw, _ = await pipe.execute()
        if not raw:
            return None
        return self._decode(session_id, raw).summary()

    async def count(self) -> int:
        total = 0
        async for _ in self.client.scan_iter(match=f'{self.prefix}*', count=500):
            total += 1
        return total


class BackendHealth:
    """Remembers a shared-store failure so calls skip it for ``retry_after`` seconds."""

    def __init__(self, retry_after: float = BACKEND_RETRY_SECONDS, clock: Callable[[], float] = time.time):
        self.retry_after = retry_after
        self._clock = clock
        self._down_until: Optional[float] = None

    @property
    def available(self) -> bool:
        return self._down_until is None or self._clock() >= self._down_until

    def mark_down(self, what: str, error: Exception):
        logger.warning('%s failed (%s); using in-memory fallback for %gs', what, error, self.retry_after)
        self._down_until = self._clock() + self.retry_after

    def mark_up(self):
        if self._down_until is not None:
            logger.info('Shared store reachable again')
            self._down_until = None


class FallbackSessionStore(SessionStore):
    """Uses the shared store, and the in-process store whenever it fails.

    Sessions created during an outage exist only in this process's fallback;
    other instances of the service cannot see them. Lookups that miss in the
    primary also check the fallback so those rounds can still be finished here.
    """

    def __init__(self, primary: Optional[SessionStore], fallback: Optional[MemorySessionStore] = None,
                 health: Optional[BackendHealth] = None):
        self.primary = primary
        self.fallback = fallback or MemorySessionStore()
        self.health = health or BackendHealth()

    async def _call(self, op: str, primary: Callable[[SessionStore], Awaitable[T]],
                    fallback: Callable[[SessionStore], Awaitable[T]]) -> T:
        if self.primary is None or not self.health.available:
            return await fallback(self.fallback)
        try:
            result = await primary(self.primary)
        except BACKEND_ERRORS as e:
            self.health.mark_down(f'Session store {op}', e)
            return await fallback(self.fallback)
        self.health.mark_up()
        return result

    async def create(self, letters: Sequence[str], level: int, mode: str) -> str:
        op = lambda store: store.create(letters, level, mode)
        return await self._call('create', op, op)

    async def get(self, session_id: str) -> Optional[RoundSession]:
        async def primary(store: SessionStore) -> Optional[RoundSession]:
            session = await store.get(session_id)
            if session is None:
                return await self.fallback.get(session_id)
            return session
        return await self._call('get', primary, lambda store: store.get(session_id))

    async def accept_word(self, session_id: str, word: str, points: int) -> AcceptResult:
        async def primary(store: SessionStore) -> AcceptResult:
            result = await store.accept_word(session_id, word, points)
            if result.reason == NOT_FOUND:
                return await self.fallback.accept_word(session_id, word, points)
            return result
        return await self._call('accept_word', primary,
                                lambda store: store.accept_word(session_id, word, points))

    async def close(self, session_id: str) -> Optional[SessionSummary]:
        async def primary(store: SessionStore) -> Optional[SessionSummary]:
            summary = await store.close(session_id)
            if summary is None:
                return await self.fallback.close(session_id)
            return summary
        return await self._call('close', primary, lambda store: store.close(session_id))

    async def count(self) -> int:
        local = await self.fallback.count()
        shared = await self._call('count', lambda store: store.count(), lambda store: _zero())
        return shared + local

    async def purge_expired(self) -> int:
        return await self.fallback.purge_expired()


async def _zero() -> int:
    return 0
