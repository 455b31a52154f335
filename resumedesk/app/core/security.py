"""
Password hashing and JWT helpers
"""
from datetime import datetime, timedelta, timezone

from jose import jwt
from passlib.context import CryptContext

from resumedesk.app.core.config import settings

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

TOKEN_PURPOSE_ACCESS = "access"
TOKEN_PURPOSE_MAGIC_LINK = "magic_link"


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    data: dict,
    expires_delta: timedelta | None = None,
    purpose: str = TOKEN_PURPOSE_ACCESS,
) -> str:
    """Sign a JWT carrying `data` plus exp and purpose claims."""
    to_encode = dict(data)
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"exp": expire, "purpose": purpose})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_token(token: str, verify_exp: bool = True) -> dict:
    """Decode and verify a JWT. Raises jose.JWTError on bad signature or expiry."""
    return jwt.decode(
        token,
        settings.secret_key,
        algorithms=[settings.algorithm],
        options={"verify_exp": verify_exp},
    )
