from __future__ import annotations
import os
from pathlib import Path
from typing import List, Optional

# Runtime settings read from the environment once at import.

DEFAULT_WORDS_PATH = Path(__file__).resolve().parent / 'data' / 'words.txt'

DEFAULT_CORS_ORIGINS = [
    'http://localhost:3000',
    'http://localhost:3001',
]


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ('1', 'true', 'yes', 'on')


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if not raw:
        return list(default)
    return [item.strip() for item in raw.split(',') if item.strip()]


REDIS_URL: Optional[str] = os.getenv('REDIS_URL') or None
WORDS_PATH = Path(os.getenv('WORDTWIST_WORDS_PATH', str(DEFAULT_WORDS_PATH)))
CORS_ORIGINS = _env_list('CORS_ORIGINS', DEFAULT_CORS_ORIGINS)

ADMIN_USERNAME: Optional[str] = os.getenv('ADMIN_USERNAME') or None
ADMIN_PASSWORD: Optional[str] = os.getenv('ADMIN_PASSWORD') or None
IS_PRODUCTION = os.getenv('ENV', '').lower() == 'production'
COOKIE_SECURE = _env_flag('COOKIE_SECURE', IS_PRODUCTION)

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
