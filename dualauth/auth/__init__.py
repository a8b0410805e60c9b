"""
DualAuth - Authentication Package

Two parallel authentication strategies over one user base:
- Server-side sessions behind a signed cookie
- Stateless JWT access tokens with revocable refresh tokens
- bcrypt password hashing
- Role-membership guards for both strategies
"""

from dualauth.auth.models import User, Session, Role
from dualauth.auth.service import AuthService, AuthStrategy, Principal
from dualauth.auth.dependencies import (
    require_session,
    require_session_role,
    require_token,
    require_token_role,
)
from dualauth.auth.tokens import create_access_token, verify_access_token

__all__ = [
    "User",
    "Session",
    "Role",
    "AuthService",
    "AuthStrategy",
    "Principal",
    "require_session",
    "require_session_role",
    "require_token",
    "require_token_role",
    "create_access_token",
    "verify_access_token",
]
