"""
DualAuth - Access-Control Gate

FastAPI dependencies that resolve the caller's identity and enforce role
membership. Two independent families, never mixed on one route:

Usage:
    @router.get("/profile")
    async def profile(principal: Principal = Depends(require_session)):
        ...
    
    @router.get("/admin")
    async def admin(principal: Principal = Depends(require_token_role(Role.ADMIN))):
        ...

Failures:
- 401 Unauthenticated: no/unknown/expired session, missing or malformed
  bearer header, bad or expired access token, no role
- 403 Forbidden: role present but not allowed
"""

from typing import Generator, Iterable, Optional, Set
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session as DBSession

from dualauth.auth import sessions
from dualauth.auth.cookies import SESSION_COOKIE_NAME, unsign_session_id
from dualauth.auth.database import session_scope
from dualauth.auth.errors import Forbidden, InvalidToken, Unauthenticated
from dualauth.auth.models import Role
from dualauth.auth.service import AuthService, AuthStrategy, Principal
from dualauth.auth.tokens import verify_access_token


# HTTP Bearer scheme for JWT extraction
bearer_scheme = HTTPBearer(auto_error=False)

BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


def get_db(request: Request) -> Generator[DBSession, None, None]:
    """Database session for the request, from app state."""
    yield from session_scope(request.app.state.db_session_factory)


def get_session_service(db: DBSession = Depends(get_db)) -> AuthService:
    return AuthService(db, AuthStrategy.SESSION)


def get_token_service(db: DBSession = Depends(get_db)) -> AuthService:
    return AuthService(db, AuthStrategy.TOKEN)


def current_session_id(request: Request) -> Optional[str]:
    """Session id from the signed cookie, or None if absent/invalid."""
    cookie = request.cookies.get(SESSION_COOKIE_NAME)
    if not cookie:
        return None
    return unsign_session_id(cookie)


async def require_session(
    request: Request,
    db: DBSession = Depends(get_db),
) -> Principal:
    """
    Session guard: the signed cookie must name a live server-side session.
    
    Raises:
        Unauthenticated: cookie missing, tampered, or session unknown/expired
    """
    session_id = current_session_id(request)
    if not session_id:
        raise Unauthenticated("Session required. Please log in")
    
    session = await sessions.get_session(db, session_id)
    if session is None or not session.user_id:
        raise Unauthenticated("Session required. Please log in")
    
    return Principal(
        user_id=session.user_id,
        role=session.role,
        strategy=AuthStrategy.SESSION,
        session_id=session.session_id,
    )


async def require_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Principal:
    """
    Token guard: `Authorization: Bearer <access token>` must verify.
    
    Raises:
        Unauthenticated: header missing or malformed, token invalid or expired
    """
    if not credentials:
        raise Unauthenticated(
            "Missing or malformed Authorization header",
            headers=BEARER_CHALLENGE,
        )
    
    try:
        payload = verify_access_token(credentials.credentials)
        user_id = UUID(payload.sub)
        role = Role(payload.role)
    except (InvalidToken, ValueError):
        raise Unauthenticated("Invalid or expired token", headers=BEARER_CHALLENGE)
    
    return Principal(
        user_id=user_id,
        role=role,
        strategy=AuthStrategy.TOKEN,
        token_id=payload.jti,
    )


def _check_role(principal: Principal, allowed: Set[Role]) -> Principal:
    if principal.role is None:
        raise Unauthenticated("Authentication required")
    if principal.role not in allowed:
        raise Forbidden()
    return principal


def require_session_role(*roles: Role):
    """
    Session role guard factory.
    
    Usage:
        Depends(require_session_role(Role.ADMIN))
    """
    allowed = _role_set(roles)
    
    async def dependency(principal: Principal = Depends(require_session)) -> Principal:
        return _check_role(principal, allowed)
    
    return dependency


def require_token_role(*roles: Role):
    """Token role guard factory; see require_session_role."""
    allowed = _role_set(roles)
    
    async def dependency(principal: Principal = Depends(require_token)) -> Principal:
        return _check_role(principal, allowed)
    
    return dependency


def _role_set(roles: Iterable[Role]) -> Set[Role]:
    allowed = {Role(role) for role in roles}
    if not allowed:
        raise ValueError("At least one role must be allowed")
    return allowed
