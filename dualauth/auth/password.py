"""
DualAuth - Password Hashing Utilities

Password hashing using bcrypt.
Work factor comes from settings (BCRYPT_WORK_FACTOR, default 12).

Security:
- Never log or expose plaintext passwords
- bcrypt includes salt automatically
- Hashes below the configured work factor are upgraded on login
"""

from typing import Optional

import bcrypt

from dualauth.config import settings


# bcrypt only reads the first 72 bytes of input
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str, work_factor: Optional[int] = None) -> str:
    """
    Hash a password using bcrypt.
    
    Args:
        password: Plaintext password
        work_factor: Override the configured cost
        
    Returns:
        bcrypt hash string (includes salt)
        
    Example:
        >>> hashed = hash_password("secret1")
        >>> hashed.startswith("$2b$")
        True
    """
    rounds = work_factor or settings.BCRYPT_WORK_FACTOR
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(_password_bytes(password), salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against a bcrypt hash.
    
    Uses constant-time comparison to prevent timing attacks.
    
    Returns:
        True if password matches, False otherwise (including malformed hashes)
    """
    try:
        return bcrypt.checkpw(
            _password_bytes(plain_password),
            hashed_password.encode("utf-8"),
        )
    except (ValueError, TypeError):
        # Invalid hash format
        return False


def needs_rehash(hashed_password: str, target_work_factor: Optional[int] = None) -> bool:
    """
    Check if a password hash was produced with a lower work factor than
    the one currently configured.
    
    Example:
        # After raising BCRYPT_WORK_FACTOR from 10 to 12:
        >>> needs_rehash(old_hash)  # Generated with factor 10
        True
    """
    target = target_work_factor or settings.BCRYPT_WORK_FACTOR
    try:
        # bcrypt hash format: $2b$XX$...
        _, work_factor_str, _ = hashed_password.split("$")[1:4]
        return int(work_factor_str) < target
    except (ValueError, IndexError):
        # Not a valid bcrypt hash, definitely needs rehash
        return True
