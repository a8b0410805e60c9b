"""
DualAuth - Session Management

Server-side session store for session-mode authentication.
The client only ever holds the opaque session id (inside a signed cookie).

Security:
- Session ids are 256-bit URL-safe random strings
- An id unknown to the store is simply unauthenticated
- Logout deletes the row before the response is produced
- Sessions expire SESSION_EXPIRE_HOURS after creation
"""

from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID
import logging
import secrets

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session as DBSession, select

from dualauth.auth.errors import StoreFailure
from dualauth.auth.models import Role, Session
from dualauth.config import settings


logger = logging.getLogger(__name__)

SESSION_ID_BYTES = 32


def new_session_id() -> str:
    return secrets.token_urlsafe(SESSION_ID_BYTES)


def _commit(db: DBSession, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Session %s failed", action)
        raise StoreFailure(f"Could not {action} session") from e


async def create_session(
    db: DBSession, user_id: UUID, role: Role, commit: bool = True
) -> Session:
    """
    Create a new server-side session.
    
    Args:
        db: Database session
        user_id: User's unique identifier
        role: User's role, copied onto the session
        commit: False to leave the row pending in the caller's transaction
        
    Returns:
        Created Session object
    """
    now = datetime.utcnow()
    
    session = Session(
        session_id=new_session_id(),
        user_id=user_id,
        role=role,
        issued_at=now,
        expires_at=now + timedelta(hours=settings.SESSION_EXPIRE_HOURS),
    )
    
    db.add(session)
    if commit:
        _commit(db, "create")
        db.refresh(session)
    
    logger.debug("Session created for user_id=%s", user_id)
    return session


async def get_session(db: DBSession, session_id: str) -> Optional[Session]:
    """
    Read a session by id.
    
    Returns:
        Session if it exists and has not expired, None otherwise.
        An expired session is deleted as a side effect.
    """
    try:
        session = db.exec(
            select(Session).where(Session.session_id == session_id)
        ).first()
    except SQLAlchemyError as e:
        logger.exception("Session lookup failed")
        raise StoreFailure() from e
    
    if not session:
        return None
    
    if datetime.utcnow() >= session.expires_at:
        db.delete(session)
        _commit(db, "expire")
        return None
    
    return session


async def destroy_session(
    db: DBSession, session_id: str, commit: bool = True
) -> bool:
    """
    Delete a session (logout).
    
    With commit=False the delete joins the caller's transaction.
    
    Returns:
        True if a session was deleted, False if it did not exist
        
    Raises:
        StoreFailure: if the delete could not be committed
    """
    try:
        session = db.exec(
            select(Session).where(Session.session_id == session_id)
        ).first()
    except SQLAlchemyError as e:
        logger.exception("Session lookup failed")
        raise StoreFailure() from e
    
    if not session:
        return False
    
    db.delete(session)
    if commit:
        _commit(db, "destroy")
    return True


async def cleanup_expired_sessions(db: DBSession) -> int:
    """
    Delete all expired sessions.
    
    Should be run periodically (e.g., daily cron job).
    
    Returns:
        Number of sessions removed
    """
    now = datetime.utcnow()
    
    expired = db.exec(
        select(Session).where(Session.expires_at <= now)
    ).all()
    
    for session in expired:
        db.delete(session)
    
    _commit(db, "clean up")
    
    if expired:
        logger.info("Removed %d expired sessions", len(expired))
    return len(expired)
