"""
DualAuth - FastAPI Application Entrypoint

This module initializes the FastAPI application with:
- CORS and security middleware
- Session and token authentication routes
- Database lifecycle management
- Error envelope handlers

Startup fails if any signing secret is missing.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dualauth import __version__
from dualauth.config import settings
from dualauth.logging_config import configure_logging
from dualauth.gateway.error_handlers import register_exception_handlers
from dualauth.gateway.middleware import SecurityMiddleware
from dualauth.auth.database import get_engine, init_db, get_session_factory
from dualauth.auth.routes import session_router, token_router


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    
    Startup:
        - Configure logging
        - Refuse to start without signing secrets
        - Initialize SQLModel database (users, sessions)
    
    Shutdown:
        - Dispose the engine
    """
    configure_logging(settings.LOG_LEVEL)
    settings.check_secrets()
    
    engine = get_engine(settings.DATABASE_URL)
    init_db(engine)
    app.state.db_engine = engine
    app.state.db_session_factory = get_session_factory(engine)
    logger.info("DualAuth %s started (env=%s)", __version__, settings.APP_ENV)
    
    yield
    
    engine.dispose()


app = FastAPI(
    title="DualAuth",
    description="Session and JWT authentication for one user base",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Authorization", "Content-Type"],
)

app.add_middleware(SecurityMiddleware)

register_exception_handlers(app)

app.include_router(session_router, prefix="/api")
app.include_router(token_router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint for local dev tooling."""
    return {"status": "healthy", "version": __version__}


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "DualAuth",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }
