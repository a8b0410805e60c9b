"""
DualAuth - Authentication Request/Response Schemas

Pydantic models for API request validation and response serialization.
Separates API contracts from database models: no response schema has a
password or refresh-token field.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, validator
import re


EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+$")
EMAIL_MAX_LENGTH = 254
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 64
PASSWORD_MIN_LENGTH = 6


class RegisterRequest(BaseModel):
    """Request body for POST /auth/{session,jwt}/register."""
    username: str = Field(..., description="Unique user handle")
    email: str = Field(..., description="User email address")
    password: str = Field(..., description="User password")
    
    @validator("username")
    def username_length(cls, v):
        v = v.strip()
        if len(v) < USERNAME_MIN_LENGTH:
            raise ValueError(
                f"Username must be at least {USERNAME_MIN_LENGTH} characters"
            )
        if len(v) > USERNAME_MAX_LENGTH:
            raise ValueError(
                f"Username must be at most {USERNAME_MAX_LENGTH} characters"
            )
        return v
    
    @validator("email")
    def email_format(cls, v):
        v = v.strip().lower()
        if len(v) > EMAIL_MAX_LENGTH or not EMAIL_PATTERN.match(v):
            raise ValueError("Invalid email format")
        return v
    
    @validator("password")
    def password_length(cls, v):
        if len(v) < PASSWORD_MIN_LENGTH:
            raise ValueError(
                f"Password must be at least {PASSWORD_MIN_LENGTH} characters"
            )
        return v


class LoginRequest(BaseModel):
    """Request body for POST /auth/{session,jwt}/login."""
    email: str = Field(..., min_length=1, description="User email address")
    password: str = Field(..., min_length=1, description="User password")
    
    @validator("email")
    def normalize_email(cls, v):
        return v.strip().lower()


class UserResponse(BaseModel):
    """Sanitized user."""
    id: UUID
    username: str
    email: str
    role: str
    created_at: datetime


class AuthResponse(BaseModel):
    """Success envelope for auth endpoints."""
    success: bool = True
    message: str
    data: Optional[UserResponse] = None
    access_token: Optional[str] = Field(default=None, alias="accessToken")
    expires_in: Optional[int] = Field(default=None, alias="expiresIn")
    
    class Config:
        populate_by_name = True


class MessageResponse(BaseModel):
    """Success envelope without payload."""
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """Standard error envelope."""
    success: bool = False
    message: str
    code: str
