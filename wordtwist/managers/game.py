from __future__ import annotations
import logging
import time
from typing import Callable, Iterable, Optional, Sequence

from ..dictionary import DictionaryService
from ..game_logic import calculate_points, validate_word
from ..schemas import REASON_MESSAGES, Puzzle, RoundResult, SessionSummary, Solutions, WordResult
from .puzzles import PuzzleGenerator
from .sessions import AcceptResult, RoundSession, SessionStore, short_id
from .timer import is_expired_for_timer

logger = logging.getLogger(__name__)

class GameManager:
    """Everything the HTTP layer may ask of the game core.

    Word checks always use the letters stored in the session, never
    letters supplied by the client.
    """

    def __init__(self, generator: PuzzleGenerator, sessions: SessionStore, dictionary: DictionaryService,
                 clock: Callable[[], float] = time.time):
        self.generator = generator
        self.sessions = sessions
        self.dictionary = dictionary
        self._clock = clock

    def generate(self, level: int) -> Puzzle:
        return self.generator.generate(level)

    async def new_puzzle(self, level: int, mode: str = 'timed') -> Puzzle:
        puzzle = self.generate(level)
        session_id = await self.create_session(puzzle.letters, puzzle.level, mode)
        return puzzle.model_copy(update={'sessionId': session_id})

    async def create_session(self, letters: Sequence[str], level: int, mode: str) -> str:
        return await self.sessions.create(letters, level, mode)

    async def get_session(self, session_id: str) -> Optional[RoundSession]:
        return await self.sessions.get(session_id)

    def is_expired_for_timer(self, session: RoundSession) -> bool:
        return is_expired_for_timer(session, now=self._clock())

    async def accept_word(self, session_id: str, word: str) -> AcceptResult:
        return await self.sessions.accept_word(session_id, word.upper(), calculate_points(len(word)))

    async def close_session(self, session_id: str) -> Optional[SessionSummary]:
        return await self.sessions.close(session_id)

    async def session_count(self) -> int:
        return await self.sessions.count()

    def solutions_for(self, letters: Iterable[str]) -> Solutions:
        return self.generator.valid_words_for(letters).to_solutions()

    async def _open_round(self, session_id: str):
        """Return (session, reason); reason is set when the round can no longer be played."""
        session = await self.get_session(session_id)
        if session is None:
            return None, 'session-not-found'
        if self.is_expired_for_timer(session):
            # stale timed round: clean it up so it cannot be scored later
            await self.close_session(session_id)
            logger.debug('Round %s timed out', short_id(session_id))
            return None, 'time-expired'
        return session, None

    async def submit_word(self, session_id: str, word: str) -> WordResult:
        word = word.upper()
        session, reason = await self._open_round(session_id)
        if session is None:
            return WordResult(valid=False, word=word, reason=reason, error=REASON_MESSAGES[reason])

        if not validate_word(word, session.letters, self.dictionary):
            return WordResult(valid=False, word=word, points=0, reason='invalid-word')

        result = await self.accept_word(session_id, word)
        if not result.accepted:
            return WordResult(valid=False, word=word, reason=result.reason, error=REASON_MESSAGES[result.reason])
        return WordResult(valid=True, word=word, points=calculate_points(len(word)), sessionScore=result.score)

    async def solutions_for_session(self, session_id: str):
        """Return (solutions, reason) for the end-of-round reveal."""
        session, reason = await self._open_round(session_id)
        if session is None:
            return None, reason
        return self.solutions_for(session.letters), None

    async def end_round(self, session_id: str) -> Optional[RoundResult]:
        session = await self.get_session(session_id)
        if session is None:
            return None
        expired = self.is_expired_for_timer(session)
        summary = await self.close_session(session_id)
        if summary is None:
            # closed concurrently by another request
            return None
        if expired:
            return RoundResult(summary=summary, verified=False, reason='time-expired')
        full_word = any(len(w) == len(summary.letters) for w in summary.foundWords)
        return RoundResult(summary=summary, verified=True, fullWordFound=full_word)
