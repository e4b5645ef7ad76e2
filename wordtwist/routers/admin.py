from __future__ import annotations
import secrets
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Request, Response
from fastapi.responses import JSONResponse

from .. import config
from ..constants import ADMIN_SESSION_TTL_SECONDS
from ..managers.admin import AdminSessionStore
from ..schemas import AdminLogin, AdminStats

router = APIRouter(prefix='/api/admin')

ADMIN_COOKIE_NAME = 'wordtwist_admin_session'

def get_admin_sessions(request: Request) -> AdminSessionStore:
    return request.app.state.admin_sessions

def _configured() -> bool:
    return bool(config.ADMIN_USERNAME and config.ADMIN_PASSWORD)

def _not_configured():
    return JSONResponse(status_code=503, content={'error': 'Admin endpoint not configured'})

@router.post('/login')
async def login(body: AdminLogin, response: Response,
                admin: AdminSessionStore = Depends(get_admin_sessions)):
    if not _configured():
        return _not_configured()
    user_ok = secrets.compare_digest(body.username.encode(), config.ADMIN_USERNAME.encode())
    pass_ok = secrets.compare_digest(body.password.encode(), config.ADMIN_PASSWORD.encode())
    if not (user_ok and pass_ok):
        return JSONResponse(status_code=401, content={'error': 'Invalid admin credentials'})
    token = await admin.create()
    response.set_cookie(
        ADMIN_COOKIE_NAME, token,
        max_age=ADMIN_SESSION_TTL_SECONDS,
        httponly=True,
        secure=config.COOKIE_SECURE,
        samesite='strict' if config.COOKIE_SECURE else 'lax',
        path='/api/admin',
    )
    return {'success': True}

@router.post('/logout')
async def logout(response: Response,
                 wordtwist_admin_session: Optional[str] = Cookie(None),
                 admin: AdminSessionStore = Depends(get_admin_sessions)):
    await admin.delete(wordtwist_admin_session)
    response.delete_cookie(ADMIN_COOKIE_NAME, path='/api/admin')
    return {'success': True}

@router.get('/stats')
async def stats(request: Request,
                wordtwist_admin_session: Optional[str] = Cookie(None),
                admin: AdminSessionStore = Depends(get_admin_sessions)):
    if not _configured():
        return _not_configured()
    if not wordtwist_admin_session:
        return JSONResponse(status_code=401, content={'error': 'Admin authentication required'})
    if not await admin.validate(wordtwist_admin_session):
        resp = JSONResponse(status_code=401, content={'error': 'Session expired'})
        resp.delete_cookie(ADMIN_COOKIE_NAME, path='/api/admin')
        return resp
    games = request.app.state.games
    return AdminStats(
        dictionarySize=games.dictionary.size,
        activeSessions=await games.session_count(),
        cachedPuzzles=len(games.generator.cache),
    ).model_dump()
