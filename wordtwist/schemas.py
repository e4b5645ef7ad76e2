from __future__ import annotations
from pydantic import BaseModel, Field
from typing import Dict, List, Literal, Optional

from .constants import MAX_WORD_LENGTH, MIN_WORD_LENGTH

GameMode = Literal['timed', 'untimed']

RejectReason = Literal['session-not-found', 'time-expired', 'already-found', 'invalid-word']

# Human-readable messages for rejected words
REASON_MESSAGES: Dict[str, str] = {
    'session-not-found': 'Invalid or expired session',
    'time-expired': 'Time expired',
    'already-found': 'Word already found',
    'invalid-word': 'Not a valid word',
}

class Puzzle(BaseModel):
    letters: List[str]
    level: int
    letterCount: int
    wordsByLength: Dict[int, List[str]]
    # size of the capped view, not of the full solution set
    totalWords: int
    hasFullWord: bool
    sessionId: Optional[str] = None

class Solutions(BaseModel):
    words: List[str]
    wordsByLength: Dict[int, List[str]]

class SessionSummary(BaseModel):
    letters: List[str]
    level: int
    gameMode: GameMode
    wordsFound: int
    score: int
    foundWords: List[str]

class WordResult(BaseModel):
    valid: bool
    word: str
    points: int = 0
    sessionScore: Optional[int] = None
    reason: Optional[RejectReason] = None
    error: Optional[str] = None

class RoundResult(BaseModel):
    summary: SessionSummary
    verified: bool
    fullWordFound: bool = False
    reason: Optional[RejectReason] = None

# Request bodies

class ValidateRequest(BaseModel):
    word: str = Field(..., min_length=MIN_WORD_LENGTH, max_length=MAX_WORD_LENGTH, pattern=r'^[a-zA-Z]+$')
    sessionId: str = Field(..., min_length=1, max_length=64)

class SessionRequest(BaseModel):
    sessionId: str = Field(..., min_length=1, max_length=64)

class AdminLogin(BaseModel):
    username: str
    password: str

class AdminStats(BaseModel):
    dictionarySize: int
    activeSessions: int
    cachedPuzzles: int
