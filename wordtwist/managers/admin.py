from __future__ import annotations
import asyncio
import secrets
import time
from typing import Callable, Dict, Optional

from ..constants import ADMIN_KEY_PREFIX, ADMIN_SESSION_TTL_SECONDS
from .sessions import BACKEND_ERRORS, BackendHealth

# Admin sessions: opaque token -> creation time. No payload, no mutation.

class MemoryAdminStore:
    def __init__(self, ttl: float = ADMIN_SESSION_TTL_SECONDS, clock: Callable[[], float] = time.time):
        self.ttl = ttl
        self._clock = clock
        self._tokens: Dict[str, float] = {}
        self._lock = asyncio.Lock()

    async def create(self) -> str:
        token = secrets.token_hex(32)
        async with self._lock:
            self._tokens[token] = self._clock()
        return token

    async def validate(self, token: str) -> bool:
        async with self._lock:
            created = self._tokens.get(token)
            if created is None:
                return False
            if self._clock() - created > self.ttl:
                del self._tokens[token]
                return False
            return True

    async def delete(self, token: str):
        async with self._lock:
            self._tokens.pop(token, None)

    async def purge_expired(self) -> int:
        async with self._lock:
            now = self._clock()
            stale = [t for t, created in self._tokens.items() if now - created > self.ttl]
            for t in stale:
                del self._tokens[t]
        return len(stale)

class RedisAdminStore:
    def __init__(self, client, ttl: int = ADMIN_SESSION_TTL_SECONDS, prefix: str = ADMIN_KEY_PREFIX,
                 clock: Callable[[], float] = time.time):
        self.client = client
        self.ttl = int(ttl)
        self.prefix = prefix
        self._clock = clock

    async def create(self) -> str:
        token = secrets.token_hex(32)
        await self.client.set(f'{self.prefix}{token}', repr(self._clock()), ex=self.ttl)
        return token

    async def validate(self, token: str) -> bool:
        return bool(await self.client.exists(f'{self.prefix}{token}'))

    async def delete(self, token: str):
        await self.client.delete(f'{self.prefix}{token}')

class AdminSessionStore:
    """Redis-backed admin sessions with the same in-memory fallback policy as rounds."""

    def __init__(self, primary: Optional[RedisAdminStore] = None, fallback: Optional[MemoryAdminStore] = None,
                 health: Optional[BackendHealth] = None):
        self.primary = primary
        self.fallback = fallback or MemoryAdminStore()
        self.health = health or BackendHealth()

    def _use_primary(self) -> bool:
        return self.primary is not None and self.health.available

    async def create(self) -> str:
        if self._use_primary():
            try:
                token = await self.primary.create()
            except BACKEND_ERRORS as e:
                self.health.mark_down('Admin session create', e)
            else:
                self.health.mark_up()
                return token
        return await self.fallback.create()

    async def validate(self, token: Optional[str]) -> bool:
        if not token:
            return False
        if self._use_primary():
            try:
                found = await self.primary.validate(token)
            except BACKEND_ERRORS as e:
                self.health.mark_down('Admin session lookup', e)
            else:
                self.health.mark_up()
                if found:
                    return True
        return await self.fallback.validate(token)

    async def delete(self, token: Optional[str]):
        if not token:
            return
        if self._use_primary():
            try:
                await self.primary.delete(token)
            except BACKEND_ERRORS as e:
                self.health.mark_down('Admin session delete', e)
            else:
                self.health.mark_up()
        await self.fallback.delete(token)

    async def purge_expired(self) -> int:
        return await self.fallback.purge_expired()
