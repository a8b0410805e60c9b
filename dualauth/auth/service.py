"""
DualAuth - Authentication Core

One service for both strategies. Registration, credential checks and
profile lookup are shared; the strategies only diverge when an identity
is established (session row vs. token pair) and when it is torn down.

    service = AuthService(db, AuthStrategy.TOKEN)
    result = await service.login("a@x.com", "secret1")
    result.access_token, result.refresh_token

bcrypt work runs in the thread pool so the event loop keeps serving.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
from uuid import UUID
import logging

from pydantic import BaseModel
from sqlmodel import Session as DBSession
from starlette.concurrency import run_in_threadpool

from dualauth.auth import sessions
from dualauth.auth.errors import (
    DuplicateIdentity,
    Internal,
    InvalidCredentials,
    InvalidToken,
    MissingToken,
    NotFound,
    StoreFailure,
)
from dualauth.auth.models import Role, User
from dualauth.auth.password import hash_password, needs_rehash, verify_password
from dualauth.auth.store import DuplicateKeyError, UserStore, new_user
from dualauth.auth.tokens import (
    create_access_token,
    create_refresh_token,
    verify_refresh_token,
)


logger = logging.getLogger(__name__)


class AuthStrategy(str, Enum):
    """How a principal's identity is carried between requests."""
    SESSION = "session"
    TOKEN = "token"


class Principal(BaseModel):
    """
    Identity resolved by the access-control gate for one request.
    
    Built from a server-side session (session mode) or from verified
    access-token claims (token mode) and passed explicitly to handlers.
    """
    user_id: UUID
    role: Optional[Role] = None
    strategy: AuthStrategy
    session_id: Optional[str] = None
    token_id: Optional[str] = None


@dataclass
class AuthResult:
    """Outcome of a successful register/login."""
    user: User
    session_id: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None


class AuthService:
    """Authentication core parameterized by strategy."""
    
    def __init__(self, db: DBSession, strategy: AuthStrategy):
        self.db = db
        self.strategy = strategy
        self.store = UserStore(db)
    
    async def register(
        self,
        username: str,
        email: str,
        password: str,
        previous_session_id: Optional[str] = None,
    ) -> AuthResult:
        """
        Create a user and establish its identity.
        
        Raises:
            DuplicateIdentity: email or username already in use
        """
        if self.store.find_conflict(email=email, username=username):
            logger.info("Registration rejected: identity already in use")
            raise DuplicateIdentity()
        
        user = await run_in_threadpool(new_user, username, email, password)
        
        try:
            result = await self._establish_identity(user, previous_session_id)
        except DuplicateKeyError:
            # Lost a race with a concurrent registration
            logger.info("Registration rejected: unique constraint")
            raise DuplicateIdentity()
        
        logger.info(
            "User registered: user_id=%s strategy=%s",
            user.id, self.strategy.value,
        )
        return result
    
    async def login(
        self,
        email: str,
        password: str,
        previous_session_id: Optional[str] = None,
    ) -> AuthResult:
        """
        Check credentials and establish identity.
        
        Raises:
            InvalidCredentials: unknown email or wrong password (same error)
        """
        user = self.store.get_by_email(email)
        
        if user is None:
            logger.info("Login failed: reason=user_not_found")
            raise InvalidCredentials()
        
        if not await run_in_threadpool(verify_password, password, user.password_hash):
            logger.info("Login failed: user_id=%s reason=invalid_password", user.id)
            raise InvalidCredentials()
        
        # Upgrade hashes created under a lower work factor
        if needs_rehash(user.password_hash):
            user.password_hash = await run_in_threadpool(hash_password, password)
        
        result = await self._establish_identity(user, previous_session_id)
        logger.info(
            "Login succeeded: user_id=%s strategy=%s",
            user.id, self.strategy.value,
        )
        return result
    
    async def _establish_identity(
        self, user: User, previous_session_id: Optional[str]
    ) -> AuthResult:
        if self.strategy is AuthStrategy.TOKEN:
            access_token = create_access_token(user.id, user.role.value)
            refresh_token = create_refresh_token(user.id)
            # Overwrites (and so revokes) any earlier refresh token.
            # Committed before the response exists.
            user.refresh_token = refresh_token
            self.store.save(user)
            return AuthResult(
                user=user,
                access_token=access_token,
                refresh_token=refresh_token,
            )
        
        # User write, old session delete and new session insert share one commit
        try:
            if previous_session_id:
                await sessions.destroy_session(
                    self.db, previous_session_id, commit=False
                )
            session = await sessions.create_session(
                self.db, user.id, user.role, commit=False
            )
        except StoreFailure:
            self.db.rollback()
            raise
        session_id = session.session_id
        self.store.save(user)
        return AuthResult(user=user, session_id=session_id)
    
    async def logout(
        self,
        session_id: Optional[str] = None,
        refresh_token: Optional[str] = None,
    ) -> None:
        """
        Tear down the caller's identity. Idempotent.
        
        Session mode deletes the session row (StoreFailure if it cannot).
        Token mode forgets the stored refresh token matching the cookie.
        """
        if self.strategy is AuthStrategy.SESSION:
            if session_id and await sessions.destroy_session(self.db, session_id):
                logger.info("Session logout completed")
            return
        
        if refresh_token and self.store.clear_refresh_token(refresh_token):
            logger.info("Token logout: refresh token revoked")
    
    async def refresh(self, refresh_token: Optional[str]) -> str:
        """
        Exchange a refresh token for a new access token.
        
        The refresh token must verify AND equal the value stored on its
        user. It is not rotated.
        
        Raises:
            MissingToken: no refresh token presented
            InvalidToken: bad, expired (ExpiredToken) or revoked token
        """
        if self.strategy is not AuthStrategy.TOKEN:
            raise Internal("Token refresh is only available in token mode")
        
        if not refresh_token:
            raise MissingToken()
        
        payload = verify_refresh_token(refresh_token)
        
        user = self.store.get_by_id_and_refresh_token(payload.sub, refresh_token)
        if user is None:
            logger.warning("Refresh rejected: token revoked for user_id=%s", payload.sub)
            raise InvalidToken()
        
        logger.info("Access token refreshed: user_id=%s", user.id)
        return create_access_token(user.id, user.role.value)
    
    async def get_profile(self, principal: Principal) -> User:
        """
        Load the user behind a principal.
        
        Raises:
            NotFound: user was deleted after the session/token was issued
        """
        user = self.store.get_by_id(principal.user_id)
        if user is None:
            raise NotFound()
        return user
