"""
DualAuth - Authentication Database Models

SQLModel-based models for user credentials and server-side sessions.
Uses PostgreSQL for production, SQLite for local development.

Security:
- Passwords stored as bcrypt hashes only
- Sessions are server-controlled for immediate revocation
- All timestamps in UTC
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, String, DateTime, Enum as SQLEnum


class Role(str, Enum):
    """User roles for role-membership checks."""
    USER = "user"
    ADMIN = "admin"


class User(SQLModel, table=True):
    """
    User account for both authentication strategies.
    
    Attributes:
        id: Unique identifier (UUIDv4)
        username: Public handle (unique)
        email: Login identifier (unique, stored lower-case)
        password_hash: bcrypt hash (never store plaintext, never serialize)
        role: Role checked by the access-control gate
        refresh_token: Currently valid refresh token (token mode only)
        created_at: Account creation timestamp (UTC)
    """
    __tablename__ = "users"
    
    id: UUID = Field(
        default_factory=uuid4,
        primary_key=True,
        description="Unique user identifier"
    )
    username: str = Field(
        sa_column=Column(String(64), unique=True, index=True, nullable=False),
        description="Unique user handle"
    )
    email: str = Field(
        sa_column=Column(String(255), unique=True, index=True, nullable=False),
        description="User email address (login identifier)"
    )
    password_hash: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="bcrypt password hash"
    )
    role: Role = Field(
        default=Role.USER,
        sa_column=Column(SQLEnum(Role), nullable=False, default=Role.USER),
        description="User role"
    )
    refresh_token: Optional[str] = Field(
        default=None,
        sa_column=Column(String(1024), nullable=True, index=True),
        description="Refresh token currently accepted for this user"
    )
    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime, nullable=False, default=datetime.utcnow),
        description="Account creation timestamp"
    )


class Session(SQLModel, table=True):
    """
    Server-side session keyed by an opaque identifier.
    
    The identifier travels to the client inside a signed cookie; the
    user id and role never leave the server. Not linked to users by a
    foreign key: a session that outlives its user is a stale session,
    resolved as "user not found" at read time.
    
    Attributes:
        session_id: Opaque random identifier
        user_id: Authenticated user
        role: Role of the user at session creation
        issued_at: Session creation timestamp
        expires_at: Session expiration timestamp
    """
    __tablename__ = "sessions"
    
    session_id: str = Field(
        primary_key=True,
        max_length=64,
        description="Opaque session identifier"
    )
    user_id: UUID = Field(
        nullable=False,
        index=True,
        description="Reference to user"
    )
    role: Role = Field(
        sa_column=Column(SQLEnum(Role), nullable=False),
        description="User role at login"
    )
    issued_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime, nullable=False, default=datetime.utcnow),
        description="Session creation timestamp"
    )
    expires_at: datetime = Field(
        sa_column=Column(DateTime, nullable=False, index=True),
        description="Session expiration timestamp"
    )
