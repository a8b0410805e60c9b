"""
DualAuth - Authentication Cookies

Cookie helpers for both strategies:

- Session cookie: the session id signed with SESSION_SECRET (itsdangerous),
  http-only, 24 hours.
- Refresh cookie: the raw refresh token, http-only, SameSite=strict,
  scoped to the token-mode routes, 7 days.

Both are marked secure in production.
"""

import logging
from typing import Optional

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from starlette.responses import Response

from dualauth.config import settings


logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "session_id"
SESSION_COOKIE_SALT = "dualauth.session-cookie"

REFRESH_COOKIE_NAME = "refreshToken"
REFRESH_COOKIE_PATH = "/api/auth/jwt"


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(
        secret_key=settings.SESSION_SECRET,
        salt=SESSION_COOKIE_SALT,
    )


def sign_session_id(session_id: str) -> str:
    return _serializer().dumps(session_id)


def unsign_session_id(value: str) -> Optional[str]:
    """
    Recover the session id from a cookie value.
    
    Returns None for tampered, foreign or expired cookies.
    """
    try:
        data = _serializer().loads(
            value, max_age=settings.SESSION_EXPIRE_HOURS * 3600
        )
    except SignatureExpired:
        logger.info("Session cookie signature expired")
        return None
    except BadSignature:
        logger.info("Session cookie signature invalid")
        return None
    if not isinstance(data, str):
        return None
    return data


def set_session_cookie(response: Response, session_id: str) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=sign_session_id(session_id),
        max_age=settings.SESSION_EXPIRE_HOURS * 3600,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


def set_refresh_cookie(response: Response, refresh_token: str) -> None:
    response.set_cookie(
        key=REFRESH_COOKIE_NAME,
        value=refresh_token,
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 3600,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
        path=REFRESH_COOKIE_PATH,
    )


def clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(
        key=REFRESH_COOKIE_NAME,
        path=REFRESH_COOKIE_PATH,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )
