"""
Dependency injection utilities
"""
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from resumedesk.app.core.errors import unauthorized
from resumedesk.app.core.security import TOKEN_PURPOSE_ACCESS, decode_token
from resumedesk.app.db.session import SessionLocal
from resumedesk.app.models.user import User

security = HTTPBearer(auto_error=False)


def get_db() -> Session:
    """Get database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Get current authenticated user from JWT"""
    if not credentials:
        raise unauthorized("Not authenticated")
    try:
        payload = decode_token(credentials.credentials)
    except JWTError:
        raise unauthorized("Invalid or expired token")
    user_id = payload.get("sub")
    if not user_id or payload.get("purpose", TOKEN_PURPOSE_ACCESS) != TOKEN_PURPOSE_ACCESS:
        raise unauthorized("Invalid token")
    user = db.query(User).filter(User.id == int(user_id)).first()
    if not user or not user.is_active:
        raise unauthorized("User not found")
    return user
