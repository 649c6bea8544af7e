from datetime import datetime, timedelta
from typing import Any, Optional, Tuple
import hashlib
import secrets
import string
import bcrypt
from jose import jwt, JWTError
from app.core.config import settings

_ALPHANUMERIC = string.ascii_uppercase + string.ascii_lowercase + string.digits


def create_access_token(
    subject: str | Any,
    expires_delta: Optional[timedelta] = None,
    claims: Optional[dict[str, Any]] = None,
) -> str:
    """
    Create a JWT access token.

    Args:
        subject: The subject of the token (employee or customer UUID)
        expires_delta: Optional expiration time delta
        claims: Extra claims such as role, email and subject type

    Returns:
        Encoded JWT token
    """
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )

    to_encode = dict(claims or {})
    to_encode.update({"exp": expire, "sub": str(subject)})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Optional[dict[str, Any]]:
    """Decode and verify an access token. Returns None when invalid or expired."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None


def _prepare_password(password: str) -> bytes:
    """Encode and truncate to bcrypt's 72 byte limit."""
    return password.encode('utf-8')[:72]


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(
        _prepare_password(plain_password),
        hashed_password.encode('utf-8')
    )


def compare_passwords(plain_password: Optional[str], hashed_password: Optional[str]) -> bool:
    """
    Check a plain password against a bcrypt hash without ever raising.

    Returns False for empty input, non-bcrypt hashes and malformed hashes.
    """
    if not plain_password or not hashed_password:
        return False
    if not hashed_password.startswith("$2"):
        return False
    try:
        return verify_password(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False


def get_password_hash(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    hashed = bcrypt.hashpw(_prepare_password(password), salt)
    return hashed.decode('utf-8')


def create_refresh_token() -> Tuple[str, str]:
    """
    Create a secure refresh token.

    Returns:
        Tuple of (raw_token, token_hash):
        - raw_token: The token sent to the client in the refresh cookie
        - token_hash: SHA256 hex digest stored on the session row
    """
    raw_token = secrets.token_urlsafe(32)
    return raw_token, hash_refresh_token(raw_token)


def hash_refresh_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode()).hexdigest()


def get_refresh_token_expire_time() -> datetime:
    return datetime.utcnow() + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)


def generate_random_string(length: int = 32) -> str:
    """Random string drawn from A-Z, a-z and 0-9."""
    return "".join(secrets.choice(_ALPHANUMERIC) for _ in range(length))


def generate_random_numeric(length: int = 6) -> str:
    """Random digit string, e.g. request numbers."""
    return "".join(secrets.choice(string.digits) for _ in range(length))
