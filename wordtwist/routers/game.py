from __future__ import annotations
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from ..constants import GAME_MODES
from ..managers.game import GameManager
from ..schemas import REASON_MESSAGES, SessionRequest, ValidateRequest

router = APIRouter(prefix='/api')

def get_games(request: Request) -> GameManager:
    return request.app.state.games

def _bad_request(reason: str, **extra):
    return JSONResponse(status_code=400, content={**extra, 'error': REASON_MESSAGES[reason]})

@router.get('/puzzle')
async def new_puzzle(level: int = Query(1, ge=1, le=1000), mode: str = 'timed',
                     games: GameManager = Depends(get_games)):
    mode = mode if mode in GAME_MODES else 'timed'
    puzzle = await games.new_puzzle(level, mode)
    return puzzle.model_dump()

@router.post('/validate')
async def validate(body: ValidateRequest, games: GameManager = Depends(get_games)):
    result = await games.submit_word(body.sessionId, body.word)
    if result.reason in ('session-not-found', 'time-expired'):
        return _bad_request(result.reason, valid=False, word=result.word)
    return result.model_dump(exclude_none=True)

@router.post('/solutions')
async def solutions(body: SessionRequest, games: GameManager = Depends(get_games)):
    found, reason = await games.solutions_for_session(body.sessionId)
    if found is None:
        return _bad_request(reason)
    return found.model_dump()

@router.post('/session/end')
async def end_session(body: SessionRequest, games: GameManager = Depends(get_games)):
    result = await games.end_round(body.sessionId)
    if result is None:
        return _bad_request('session-not-found')
    return result.model_dump(exclude_none=True)

@router.get('/health')
async def health(games: GameManager = Depends(get_games)):
    return {'status': 'ok', 'activeSessions': await games.session_count()}
