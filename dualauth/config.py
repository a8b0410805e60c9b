"""
DualAuth - Configuration Management

Centralized configuration using Pydantic Settings.
All secrets are loaded from environment variables (or .env for local development).

Security: No secrets are hardcoded. Missing secrets abort startup.
"""

from pydantic_settings import BaseSettings
from typing import List


class ConfigurationError(RuntimeError):
    """Raised at startup when required configuration is missing."""
    pass


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    
    Attributes:
        APP_ENV: "development" or "production"; production hides error details
            and marks cookies as secure
        DATABASE_URL: SQLAlchemy URL of the credential/session store
        ACCESS_TOKEN_SECRET: Signing key for access tokens
        REFRESH_TOKEN_SECRET: Signing key for refresh tokens (must differ)
        SESSION_SECRET: Signing key for the session cookie
        BCRYPT_WORK_FACTOR: bcrypt cost; lower it only in tests
    """
    
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"
    
    # Database (PostgreSQL for production, SQLite for development)
    DATABASE_URL: str = "sqlite:///./dualauth.db"
    
    # Token authentication
    ACCESS_TOKEN_SECRET: str = ""  # Must be set via environment
    REFRESH_TOKEN_SECRET: str = ""  # Must be set via environment
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15  # Short-lived tokens
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    
    # Session authentication
    SESSION_SECRET: str = ""  # Must be set via environment
    SESSION_EXPIRE_HOURS: int = 24  # Server-side session duration
    
    # Password hashing
    BCRYPT_WORK_FACTOR: int = 12
    
    # CORS
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000"]
    
    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
    
    @property
    def is_production(self) -> bool:
        return self.APP_ENV.strip().lower() == "production"
    
    def check_secrets(self) -> None:
        """
        Ensure every signing secret is configured.
        
        Raises:
            ConfigurationError: Naming each missing secret
        """
        required = ("ACCESS_TOKEN_SECRET", "REFRESH_TOKEN_SECRET", "SESSION_SECRET")
        missing = [name for name in required if not getattr(self, name).strip()]
        if missing:
            raise ConfigurationError(
                f"Missing required secrets: {', '.join(missing)}"
            )
        if self.ACCESS_TOKEN_SECRET == self.REFRESH_TOKEN_SECRET:
            raise ConfigurationError(
                "ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must differ"
            )


settings = Settings()
