"""
Authentication service business logic
"""
from datetime import timedelta

from jose import JWTError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from resumedesk.app.core.config import settings
from resumedesk.app.core.logging_config import get_logger
from resumedesk.app.core.security import (
    TOKEN_PURPOSE_MAGIC_LINK,
    create_access_token,
    decode_token,
    get_password_hash,
    verify_password,
)
from resumedesk.app.models.user import User
from resumedesk.app.schemas.user import UserLogin, UserRegister
from resumedesk.app.services.profile_service import ProfileService

logger = get_logger("services.auth")


def _issue_access_token(user: User) -> str:
    return create_access_token(
        data={"sub": str(user.id), "email": user.email},
        expires_delta=timedelta(minutes=settings.access_token_expire_minutes),
    )


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class AuthService:
    """Service for authentication operations"""

    @staticmethod
    def register_user(db: Session, user_data: UserRegister):
        """Register a new user and create their profile"""
        email = _normalize_email(user_data.email)
        if "@" not in email:
            return {"success": False, "message": "A valid email is required"}
        if len(user_data.password or "") < 6:
            return {"success": False, "message": "Password must be at least 6 characters"}
        try:
            if db.query(User).filter(User.email == email).first():
                return {"success": False, "message": "Email already registered"}

            new_user = User(
                email=email,
                hashed_password=get_password_hash(user_data.password),
                name=(user_data.name or "").strip(),
            )
            db.add(new_user)
            db.commit()
            db.refresh(new_user)
        except IntegrityError:
            db.rollback()
            return {"success": False, "message": "Email already registered"}

        ProfileService.get_or_create_profile(db, new_user)
        return {
            "success": True,
            "user": new_user,
            "message": "User registered successfully",
            "access_token": _issue_access_token(new_user),
            "token_type": "bearer",
        }

    @staticmethod
    def login_user(db: Session, login_data: UserLogin):
        """Authenticate user and return access token"""
        user = db.query(User).filter(User.email == _normalize_email(login_data.email)).first()
        if not user or not verify_password(login_data.password, user.hashed_password):
            return {"success": False, "message": "Invalid email or password"}
        if not user.is_active:
            return {"success": False, "message": "User account is inactive"}
        return {
            "success": True,
            "access_token": _issue_access_token(user),
            "token_type": "bearer",
            "user": user,
            "message": "Login successful",
        }

    @staticmethod
    def create_magic_link(db: Session, email: str) -> str | None:
        """
        Build a one-purpose sign-in link for an existing active user.
        Returns None for unknown emails; callers must not reveal which case happened.
        """
        user = db.query(User).filter(User.email == _normalize_email(email)).first()
        if not user or not user.is_active:
            return None
        token = create_access_token(
            data={"sub": str(user.id), "email": user.email},
            expires_delta=timedelta(minutes=settings.magic_link_expire_minutes),
            purpose=TOKEN_PURPOSE_MAGIC_LINK,
        )
        return f"{settings.frontend_url.rstrip('/')}/auth/callback?token={token}"

    @staticmethod
    def verify_magic_link(db: Session, token: str):
        """Exchange a magic-link token for an access token."""
        try:
            payload = decode_token(token)
        except JWTError:
            return {"success": False, "message": "Invalid or expired link"}
        if payload.get("purpose") != TOKEN_PURPOSE_MAGIC_LINK or not payload.get("sub"):
            return {"success": False, "message": "Invalid or expired link"}
        user = db.query(User).filter(User.id == int(payload["sub"])).first()
        if not user or not user.is_active:
            return {"success": False, "message": "Invalid or expired link"}
        ProfileService.get_or_create_profile(db, user)
        return {
            "success": True,
            "access_token": _issue_access_token(user),
            "token_type": "bearer",
            "user": user,
            "message": "Login successful",
        }

    @staticmethod
    def refresh_token(db: Session, token: str):
        """Accept a current (even expired) access token and issue a fresh one."""
        try:
            payload = decode_token(token, verify_exp=False)
        except JWTError:
            return {"success": False, "message": "Invalid token"}
        if payload.get("purpose") == TOKEN_PURPOSE_MAGIC_LINK or not payload.get("sub"):
            return {"success": False, "message": "Invalid token"}
        user = db.query(User).filter(User.id == int(payload["sub"])).first()
        if not user or not user.is_active:
            return {"success": False, "message": "User not found"}
        return {
            "success": True,
            "access_token": _issue_access_token(user),
            "token_type": "bearer",
            "user": user,
            "message": None,
        }
