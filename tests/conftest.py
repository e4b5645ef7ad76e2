"""Shared fixtures: a small fixed corpus, small tiers and session stores."""

from __future__ import annotations

import random

import fakeredis
import fakeredis.aioredis
import pytest

from wordtwist.dictionary import DictionaryService, load_corpus
from wordtwist.managers.game import GameManager
from wordtwist.managers.puzzles import PuzzleCache, PuzzleGenerator, Tier
from wordtwist.managers.sessions import FallbackSessionStore, MemorySessionStore, RedisSessionStore

SMALL_WORDS = [
    # from CASTLE
    "cat", "act", "ace", "sat", "set", "sea", "tea", "eat", "ale", "let",
    "late", "tale", "seal", "east", "salt", "last", "cast", "case", "lace",
    "cats", "acts", "scale", "steal", "least", "slate", "stale", "cleat",
    "castle", "cleats",
    # from TABLES
    "able", "bale", "beat", "bets", "stab", "table", "tables", "stable", "blast",
    # from PLANETS
    "plan", "plane", "planet", "planets", "plant", "plants", "pants", "slept",
    "spent", "paste", "pastel",
    # from ELEPHANT
    "elephant", "help", "heap", "leap", "tape", "heel",
    # never formable from any tier
    "lull", "zebra", "quiz",
    # filtered out by length
    "at", "platelets",
]


class FakeClock:
    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def corpus() -> frozenset[str]:
    return load_corpus(SMALL_WORDS)


@pytest.fixture
def dictionary(corpus: frozenset[str]) -> DictionaryService:
    return DictionaryService(corpus)


@pytest.fixture
def tiers() -> list[Tier]:
    return [
        Tier(name="six", max_level=5, letter_count=6, words=("CASTLE", "TABLES")),
        Tier(name="seven", max_level=10, letter_count=7, words=("PLANETS",)),
        Tier(name="eight", max_level=None, letter_count=8, words=("ELEPHANT",)),
    ]


@pytest.fixture
def cache(corpus: frozenset[str], tiers: list[Tier]) -> PuzzleCache:
    return PuzzleCache(corpus, tiers).build()


@pytest.fixture
def generator(cache: PuzzleCache, tiers: list[Tier]) -> PuzzleGenerator:
    return PuzzleGenerator(cache, tiers, max_per_length=3, rng=random.Random(7))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_store(clock: FakeClock) -> MemorySessionStore:
    return MemorySessionStore(ttl=7200, clock=clock)


@pytest.fixture
def fake_server() -> fakeredis.FakeServer:
    return fakeredis.FakeServer()


@pytest.fixture
async def redis_client(fake_server: fakeredis.FakeServer):
    client = fakeredis.aioredis.FakeRedis(server=fake_server, decode_responses=True)
    yield client
    await client.aclose()


@pytest.fixture
def redis_store(redis_client, clock: FakeClock) -> RedisSessionStore:
    return RedisSessionStore(redis_client, ttl=7200, clock=clock)


@pytest.fixture(params=["memory", "redis"])
async def store(request, clock: FakeClock):
    """Each contract test runs against both backends."""
    if request.param == "memory":
        yield MemorySessionStore(ttl=7200, clock=clock)
        return
    client = fakeredis.aioredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)
    yield RedisSessionStore(client, ttl=7200, clock=clock)
    await client.aclose()


@pytest.fixture
def games(generator: PuzzleGenerator, memory_store: MemorySessionStore,
          dictionary: DictionaryService, clock: FakeClock) -> GameManager:
    return GameManager(generator, FallbackSessionStore(None, memory_store), dictionary, clock=clock)
