"""
DualAuth - Credential Store

Persistence of User records over a SQLModel session.

Every write commits in a single transaction and rolls back on failure, so
a half-built user is never visible. Unique-constraint violations surface
as DuplicateKeyError; any other database error as StoreFailure.
"""

import logging
from typing import Optional, Union
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session as DBSession, select

from dualauth.auth.errors import StoreFailure
from dualauth.auth.models import Role, User
from dualauth.auth.password import hash_password


logger = logging.getLogger(__name__)


class DuplicateKeyError(Exception):
    """Raised when a write violates the email or username unique index."""
    pass


def normalize_email(email: str) -> str:
    return email.strip().lower()


def new_user(
    username: str,
    email: str,
    password: str,
    role: Role = Role.USER,
) -> User:
    """
    Build an unsaved User, hashing the password first.
    
    This is the only way the service creates users: the plaintext password
    never reaches a User instance.
    """
    return User(
        username=username.strip(),
        email=normalize_email(email),
        password_hash=hash_password(password),
        role=role,
    )


def _as_uuid(value: Union[str, UUID]) -> Optional[UUID]:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


class UserStore:
    """CRUD over users for one database session."""
    
    def __init__(self, db: DBSession):
        self.db = db
    
    def _first(self, statement) -> Optional[User]:
        try:
            return self.db.exec(statement).first()
        except SQLAlchemyError as e:
            logger.exception("User lookup failed")
            raise StoreFailure() from e
    
    def get_by_id(self, user_id: Union[str, UUID]) -> Optional[User]:
        uid = _as_uuid(user_id)
        if uid is None:
            return None
        return self._first(select(User).where(User.id == uid))
    
    def get_by_email(self, email: str) -> Optional[User]:
        return self._first(select(User).where(User.email == normalize_email(email)))
    
    def find_conflict(self, email: str, username: str) -> Optional[User]:
        """Return any user already holding this email OR this username."""
        statement = select(User).where(
            or_(
                User.email == normalize_email(email),
                User.username == username.strip(),
            )
        )
        return self._first(statement)
    
    def get_by_refresh_token(self, token: str) -> Optional[User]:
        return self._first(select(User).where(User.refresh_token == token))
    
    def get_by_id_and_refresh_token(
        self, user_id: Union[str, UUID], token: str
    ) -> Optional[User]:
        uid = _as_uuid(user_id)
        if uid is None:
            return None
        statement = select(User).where(
            User.id == uid,
            User.refresh_token == token,
        )
        return self._first(statement)
    
    def save(self, user: User) -> User:
        """
        Insert or update a user in one transaction.
        
        Raises:
            DuplicateKeyError: email or username already taken
            StoreFailure: any other database error
        """
        try:
            self.db.add(user)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateKeyError("email or username already exists") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("User write failed")
            raise StoreFailure() from e
        self.db.refresh(user)
        return user
    
    def clear_refresh_token(self, token: str) -> bool:
        """
        Forget a refresh token on whichever user currently holds it.
        
        Returns:
            True if a user held the token, False otherwise
        """
        user = self.get_by_refresh_token(token)
        if user is None:
            return False
        user.refresh_token = None
        self.save(user)
        return True
