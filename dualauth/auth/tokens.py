"""
DualAuth - JWT Token Management

Creates and validates the two token classes used in token mode:

- Access token: sub (user id), role, type="access", jti, iat, exp
- Refresh token: sub (user id), type="refresh", jti, iat, exp

Each class has its own secret and expiry. A token of one class never
verifies as the other.

Security:
- Access tokens are short-lived (15 minutes default) and never stored
- Refresh tokens are only honoured when they also match the value stored
  on the user (see AuthService.refresh)
- jti makes every issued token unique, even within the same second
"""

from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Union
from uuid import UUID
import logging
import secrets

from jose import jwt, JWTError, ExpiredSignatureError
from pydantic import BaseModel, Field, ValidationError

from dualauth.auth.errors import ExpiredToken, InvalidToken
from dualauth.config import settings


logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


class TokenConfig(BaseModel):
    """Signing parameters for one token class."""
    token_type: str
    secret: str
    expires_delta: timedelta
    algorithm: str = "HS256"


class AccessTokenPayload(BaseModel):
    """Decoded access token claims."""
    sub: str = Field(..., description="User ID")
    role: str = Field(..., description="User role")
    type: str = Field(..., description="Token class")
    jti: str = Field(..., description="Unique token ID")
    exp: datetime = Field(..., description="Expiration time")
    iat: datetime = Field(..., description="Issued at time")


class RefreshTokenPayload(BaseModel):
    """Decoded refresh token claims."""
    sub: str = Field(..., description="User ID")
    type: str = Field(..., description="Token class")
    jti: str = Field(..., description="Unique token ID")
    exp: datetime = Field(..., description="Expiration time")
    iat: datetime = Field(..., description="Issued at time")


def access_token_config() -> TokenConfig:
    return TokenConfig(
        token_type=ACCESS_TOKEN_TYPE,
        secret=settings.ACCESS_TOKEN_SECRET,
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        algorithm=settings.JWT_ALGORITHM,
    )


def refresh_token_config() -> TokenConfig:
    return TokenConfig(
        token_type=REFRESH_TOKEN_TYPE,
        secret=settings.REFRESH_TOKEN_SECRET,
        expires_delta=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        algorithm=settings.JWT_ALGORITHM,
    )


def encode_token(
    claims: Dict[str, Any],
    config: TokenConfig,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Sign claims as a JWT of the given class.
    
    Adds type, jti, iat and exp to the supplied claims.
    """
    now = datetime.utcnow()
    expire = now + (expires_delta if expires_delta is not None else config.expires_delta)
    
    payload = {
        **claims,
        "type": config.token_type,
        "jti": secrets.token_hex(16),
        "iat": now,
        "exp": expire,
    }
    
    return jwt.encode(payload, config.secret, algorithm=config.algorithm)


def decode_token(token: str, config: TokenConfig) -> Dict[str, Any]:
    """
    Verify signature, expiry and class of a JWT.
    
    Raises:
        ExpiredToken: signature valid but exp has passed
        InvalidToken: bad signature, malformed token or wrong class
    """
    try:
        payload = jwt.decode(token, config.secret, algorithms=[config.algorithm])
    except ExpiredSignatureError:
        logger.info("Rejected %s token: expired", config.token_type)
        raise ExpiredToken()
    except JWTError as e:
        logger.info("Rejected %s token: %s", config.token_type, e)
        raise InvalidToken()
    
    if payload.get("type") != config.token_type:
        logger.info("Rejected %s token: wrong token class", config.token_type)
        raise InvalidToken()
    
    return payload


def create_access_token(
    user_id: Union[str, UUID],
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a new access token.
    
    Args:
        user_id: User's unique identifier
        role: User's role
        expires_delta: Optional custom expiration time
        
    Returns:
        Encoded JWT string
    """
    return encode_token(
        {"sub": str(user_id), "role": role},
        access_token_config(),
        expires_delta,
    )


def create_refresh_token(
    user_id: Union[str, UUID],
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a new refresh token carrying only the user id."""
    return encode_token({"sub": str(user_id)}, refresh_token_config(), expires_delta)


def verify_access_token(token: str) -> AccessTokenPayload:
    """
    Verify and decode an access token.
    
    Raises:
        ExpiredToken / InvalidToken
    """
    payload = decode_token(token, access_token_config())
    try:
        return AccessTokenPayload(**payload)
    except ValidationError:
        raise InvalidToken()


def verify_refresh_token(token: str) -> RefreshTokenPayload:
    """
    Verify and decode a refresh token (signature and expiry only; the
    stored-value check happens in the service).
    
    Raises:
        ExpiredToken / InvalidToken
    """
    payload = decode_token(token, refresh_token_config())
    try:
        return RefreshTokenPayload(**payload)
    except ValidationError:
        raise InvalidToken()


def get_token_expiry_seconds() -> int:
    """Get access token expiry time in seconds for responses."""
    return settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
