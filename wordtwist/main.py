from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import Optional, Sequence

import redis.asyncio as aioredis
from redis.asyncio.retry import Retry
from redis.backoff import NoBackoff
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import config
from .dictionary import DictionaryService, load_default_dictionary
from .managers.admin import AdminSessionStore, RedisAdminStore
from .managers.game import GameManager
from .managers.puzzles import PuzzleCache, PuzzleGenerator, Tier, default_tiers
from .managers.sessions import BACKEND_ERRORS, BackendHealth, FallbackSessionStore, RedisSessionStore
from .managers.timer import SessionReaper
from .routers import admin as admin_router
from .routers import game as game_router

logger = logging.getLogger(__name__)

def configure_logging(level: str = config.LOG_LEVEL):
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

async def connect_redis(url: Optional[str]):
    """Return a Redis client, or None when no shared store is configured."""
    if not url:
        logger.info('REDIS_URL not set - sessions use the in-memory store')
        return None
    client = aioredis.from_url(
        url,
        decode_responses=True,
        socket_connect_timeout=2,
        socket_timeout=2,
        # fail fast; the fallback store covers the outage
        retry=Retry(NoBackoff(), 0),
    )
    try:
        await client.ping()
        logger.info('Connected to Redis for sessions')
    except BACKEND_ERRORS as e:
        # keep the client; each call falls back until Redis comes back
        logger.error('Failed to connect to Redis: %s. Sessions will use the in-memory store', e)
    return client

def build_games(dictionary: DictionaryService, tiers: Sequence[Tier], redis_client=None,
                health: Optional[BackendHealth] = None) -> GameManager:
    cache = PuzzleCache(dictionary.words, tiers).build()
    primary = RedisSessionStore(redis_client) if redis_client is not None else None
    sessions = FallbackSessionStore(primary, health=health)
    return GameManager(PuzzleGenerator(cache, tiers), sessions, dictionary)

def create_app(dictionary: Optional[DictionaryService] = None,
               tiers: Optional[Sequence[Tier]] = None,
               redis_client=None,
               redis_url: Optional[str] = config.REDIS_URL) -> FastAPI:

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging()
        # Corpus and cache failures abort startup: there is no puzzle-less mode
        words = dictionary if dictionary is not None else load_default_dictionary()
        client = redis_client if redis_client is not None else await connect_redis(redis_url)
        # one Redis client, so rounds and admin logins share its health
        health = BackendHealth()
        games = build_games(words, tiers or default_tiers(), client, health)
        admin_sessions = AdminSessionStore(RedisAdminStore(client) if client is not None else None, health=health)
        reaper = SessionReaper(games.sessions, admin_sessions)
        app.state.games = games
        app.state.admin_sessions = admin_sessions
        reaper.start()
        try:
            yield
        finally:
            await reaper.stop()
            if client is not None and redis_client is None:
                await client.aclose()

    app = FastAPI(title="Word Twist Server", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )
    app.include_router(game_router.router)
    app.include_router(admin_router.router)
    return app

# For local running: uvicorn wordtwist.main:application --reload --host 0.0.0.0 --port 3001
application = create_app()
