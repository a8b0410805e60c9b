"""
DualAuth - Authentication Error Taxonomy

Every failure the authentication core can report, each carrying a stable
HTTP status and error code. Handlers in dualauth.gateway.error_handlers turn
these into the JSON error envelope.
"""

from typing import Dict, Optional


class AuthError(Exception):
    """Base class for failures mapped to HTTP responses."""

    status_code: int = 400
    error_code: str = "validation_error"
    default_message: str = "Request failed"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self.message = message or self.default_message
        self.headers = headers
        super().__init__(self.message)


class ValidationFailure(AuthError):
    """Malformed input shape or length (400)."""
    status_code = 400
    error_code = "validation_error"
    default_message = "Invalid request"


class DuplicateIdentity(AuthError):
    """Email or username already registered (400). Never says which."""
    status_code = 400
    error_code = "duplicate_identity"
    default_message = "Email or username is already in use"


class InvalidCredentials(AuthError):
    """Unknown email or wrong password; both look identical (401)."""
    status_code = 401
    error_code = "invalid_credentials"
    default_message = "Invalid email or password"


class Unauthenticated(AuthError):
    """Missing or invalid session / bearer token (401)."""
    status_code = 401
    error_code = "unauthenticated"
    default_message = "Authentication required"


class Forbidden(AuthError):
    """Authenticated, but role not permitted (403)."""
    status_code = 403
    error_code = "forbidden"
    default_message = "Insufficient permissions for this resource"


class MissingToken(AuthError):
    """Refresh cookie absent (401)."""
    status_code = 401
    error_code = "missing_token"
    default_message = "Refresh token missing"


class InvalidToken(AuthError):
    """Bad signature, malformed, wrong class or revoked token (401)."""
    status_code = 401
    error_code = "invalid_token"
    default_message = "Invalid token"


class ExpiredToken(InvalidToken):
    """Structurally valid token past its expiry (401)."""
    error_code = "token_expired"
    default_message = "Token expired"


class NotFound(AuthError):
    """Referenced identity no longer exists (404)."""
    status_code = 404
    error_code = "not_found"
    default_message = "User not found"


class StoreFailure(AuthError):
    """Persistence layer error (500)."""
    status_code = 500
    error_code = "store_failure"
    default_message = "Storage operation failed"


class Internal(AuthError):
    """Uncategorized server error (500)."""
    status_code = 500
    error_code = "server_error"
    default_message = "Internal server error"
