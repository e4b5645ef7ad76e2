from __future__ import annotations
import logging
import random
import time
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from ..constants import LEVEL_THRESHOLDS, MAX_WORDS_PER_LENGTH, MIN_WORD_LENGTH, PUZZLE_WORDS
from ..errors import PuzzleCacheError
from ..game_logic import can_form, shuffle_letters, signature_of
from ..schemas import Puzzle, Solutions

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class Tier:
    name: str
    max_level: Optional[int]  # inclusive; None means no upper bound
    letter_count: int
    words: Tuple[str, ...]

    def covers(self, level: int) -> bool:
        return self.max_level is None or level <= self.max_level

def default_tiers() -> List[Tier]:
    return [
        Tier(name=name, max_level=max_level, letter_count=count, words=tuple(PUZZLE_WORDS[count]))
        for name, max_level, count in LEVEL_THRESHOLDS
    ]

@dataclass(frozen=True)
class SolutionSet:
    signature: str
    words: Tuple[str, ...]  # sorted by length, then alphabetically

    @property
    def letter_count(self) -> int:
        return len(self.signature)

    @property
    def total(self) -> int:
        return len(self.words)

    @property
    def has_full_length(self) -> bool:
        return any(len(w) == self.letter_count for w in self.words)

    def by_length(self) -> Dict[int, List[str]]:
        groups: Dict[int, List[str]] = {}
        for w in self.words:
            groups.setdefault(len(w), []).append(w)
        return {length: sorted(ws) for length, ws in sorted(groups.items())}

    def capped_view(self, max_per_length: int = MAX_WORDS_PER_LENGTH) -> Dict[int, List[str]]:
        return {length: ws[:max_per_length] for length, ws in self.by_length().items()}

    def to_solutions(self) -> Solutions:
        return Solutions(words=list(self.words), wordsByLength=self.by_length())

def _sort_key(word: str) -> Tuple[int, str]:
    return (len(word), word)

class PuzzleCache:
    """Signature -> SolutionSet map, built once at startup and read-only afterwards."""

    def __init__(self, corpus: Iterable[str], tiers: Sequence[Tier], min_len: int = MIN_WORD_LENGTH):
        self._corpus: FrozenSet[str] = frozenset(corpus)
        self._tiers: Tuple[Tier, ...] = tuple(tiers)
        self._min_len = min_len
        self._entries: Dict[str, SolutionSet] = {}
        self._built = False

    @property
    def built(self) -> bool:
        return self._built

    def __len__(self) -> int:
        return len(self._entries)

    def build(self) -> 'PuzzleCache':
        if not self._corpus:
            raise PuzzleCacheError('Cannot build puzzle cache from an empty dictionary')
        if not self._tiers:
            raise PuzzleCacheError('No puzzle tiers configured')
        for tier in self._tiers:
            if not tier.words:
                raise PuzzleCacheError(f'Puzzle tier {tier.name!r} has no base words')

        started = time.perf_counter()
        entries: Dict[str, SolutionSet] = {}
        for tier in self._tiers:
            for base in tier.words:
                sig = signature_of(base)
                if sig in entries:
                    logger.warning('Duplicate puzzle base word %s (signature %s) skipped', base, sig)
                    continue
                entries[sig] = self.compute(sig)
        self._entries = entries
        self._built = True
        logger.info(
            'Puzzle cache built: %d letter sets in %.2fs',
            len(entries), time.perf_counter() - started,
        )
        return self

    def compute(self, letters: Iterable[str]) -> SolutionSet:
        """Scan the whole corpus for words formable from ``letters``."""
        sig = signature_of(letters)
        max_len = len(sig)
        pool = set(sig)
        found = [
            w for w in self._corpus
            if self._min_len <= len(w) <= max_len and set(w) <= pool and can_form(w, sig)
        ]
        return SolutionSet(signature=sig, words=tuple(sorted(found, key=_sort_key)))

    def lookup(self, signature: str) -> Optional[SolutionSet]:
        if not self._built:
            raise PuzzleCacheError('Puzzle cache used before build()')
        return self._entries.get(signature)

    def resolve(self, letters: Iterable[str]) -> SolutionSet:
        sig = signature_of(letters)
        hit = self.lookup(sig)
        if hit is not None:
            return hit
        logger.warning('Puzzle cache miss for %s; computing on demand', sig)
        return self.compute(sig)

class PuzzleGenerator:
    def __init__(
        self,
        cache: PuzzleCache,
        tiers: Sequence[Tier],
        max_per_length: int = MAX_WORDS_PER_LENGTH,
        rng: Optional[random.Random] = None,
    ):
        self.cache = cache
        self.tiers: Tuple[Tier, ...] = tuple(tiers)
        self.max_per_length = max_per_length
        self._rng = rng or random.SystemRandom()

    def tier_for_level(self, level: int) -> Tier:
        level = max(1, level)
        for tier in self.tiers:
            if tier.covers(level):
                return tier
        # levels beyond every bounded tier use the hardest one
        return self.tiers[-1]

    def generate(self, level: int) -> Puzzle:
        tier = self.tier_for_level(level)
        base = self._rng.choice(tier.words)
        letters = shuffle_letters(base, self._rng)
        solutions = self.cache.resolve(letters)
        view = solutions.capped_view(self.max_per_length)
        return Puzzle(
            letters=letters,
            level=max(1, level),
            letterCount=tier.letter_count,
            wordsByLength=view,
            totalWords=sum(len(ws) for ws in view.values()),
            # win condition comes from the uncapped set
            hasFullWord=any(len(w) == tier.letter_count for w in solutions.words),
        )

    def valid_words_for(self, letters: Iterable[str]) -> SolutionSet:
        return self.cache.resolve(letters)
