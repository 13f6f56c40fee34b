"""Password hashing and bearer-token adapter.

The RBAC core treats tokens as an opaque primitive: it only needs a
``Principal`` (subject + role code) out of an already-validated token.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from backoffice.core.config import get_settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


@dataclass(frozen=True)
class Principal:
    """The authenticated caller: who they are and which role they hold."""
    subject: str
    role_code: str


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Generate password hash."""
    return pwd_context.hash(password)


def create_access_token(
    subject: str,
    role_code: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Issue a signed access token carrying the subject and role code."""
    settings = get_settings()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.access_token_expire_minutes)

    to_encode = {
        "sub": subject,
        "role": role_code,
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> Optional[Principal]:
    """Return the principal for a valid access token, ``None`` if invalid or expired."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None

    if payload.get("type") != "access":
        return None

    subject = payload.get("sub")
    role_code = payload.get("role")
    if not subject or not role_code:
        return None
    return Principal(subject=subject, role_code=role_code)
