"""
DualAuth - Database Configuration

SQLModel database setup with connection pooling.
Supports PostgreSQL (production) and SQLite (development and tests).

Usage:
    from dualauth.auth.database import get_engine, init_db
    
    engine = get_engine()
    init_db(engine)  # Creates tables
"""

from typing import Generator
from sqlmodel import SQLModel, Session, create_engine
from sqlalchemy.pool import StaticPool

from dualauth.config import settings


def get_engine(database_url: str = None, echo: bool = False):
    """
    Create SQLAlchemy engine with appropriate configuration.
    
    Args:
        database_url: Override database URL
        echo: Log SQL statements
        
    Returns:
        SQLAlchemy Engine
    """
    url = database_url or settings.DATABASE_URL
    
    if url.startswith("sqlite"):
        # Single shared connection so in-memory databases survive across sessions
        engine = create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(
            url,
            echo=echo,
            pool_size=5,
            max_overflow=10,
            pool_pre_ping=True,
        )
    
    return engine


def init_db(engine) -> None:
    """
    Initialize database tables.
    
    Safe to call multiple times (uses CREATE IF NOT EXISTS).
    """
    # Import models to register them with SQLModel
    from dualauth.auth.models import User, Session as AuthSession  # noqa: F401
    
    SQLModel.metadata.create_all(engine)


def get_session_factory(engine):
    """
    Create a session factory bound to engine.
    
    Returns:
        Callable that creates new database sessions
    """
    def session_factory() -> Session:
        return Session(engine)
    
    return session_factory


def session_scope(session_factory) -> Generator[Session, None, None]:
    """Yield a database session from factory and always close it."""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()
