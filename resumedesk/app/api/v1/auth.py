"""
Authentication endpoints - register, login, magic link, refresh, current user
"""
from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from resumedesk.app.core.dependencies import get_current_user, get_db, security
from resumedesk.app.core.errors import unauthorized, validation_error
from resumedesk.app.core.logging_config import get_logger
from resumedesk.app.models.user import User
from resumedesk.app.schemas.user import (
    MagicLinkRequest,
    MagicLinkVerify,
    TokenResponse,
    UserLogin,
    UserRegister,
    UserResponse,
)
from resumedesk.app.services.auth_service import AuthService
from resumedesk.app.services.profile_service import ProfileService

logger = get_logger("api.auth")
router = APIRouter()

MAGIC_LINK_SENT_MESSAGE = "If an account exists for this email, a sign-in link has been sent."


def _user_response(db: Session, user: User) -> UserResponse:
    profile = ProfileService.get_or_create_profile(db, user)
    return UserResponse(id=user.id, email=user.email, name=profile.name or "")


def _token_response(db: Session, result: dict) -> TokenResponse:
    return TokenResponse(
        access_token=result["access_token"],
        token_type=result["token_type"],
        user=_user_response(db, result["user"]),
        message=result.get("message"),
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(user_data: UserRegister, db: Session = Depends(get_db)):
    """
    Register a new user account. Returns an access token (user is logged in after register).

    - **email**: must be unique
    - **password**: at least 6 characters
    - **name**: optional display name
    """
    logger.info("Registration attempt for email=%s", user_data.email)
    result = AuthService.register_user(db, user_data)
    if not result["success"]:
        logger.warning("Registration failed email=%s reason=%s", user_data.email, result["message"])
        raise validation_error(result["message"])
    logger.info("User registered successfully user_id=%s", result["user"].id)
    return _token_response(db, result)


@router.post("/login", response_model=TokenResponse)
def login(login_data: UserLogin, db: Session = Depends(get_db)):
    """Login with email and password"""
    logger.info("Login attempt for email=%s", login_data.email)
    result = AuthService.login_user(db, login_data)
    if not result["success"]:
        logger.warning("Login failed email=%s reason=%s", login_data.email, result["message"])
        raise unauthorized(result["message"])
    logger.info("User logged in successfully user_id=%s", result["user"].id)
    return _token_response(db, result)


@router.post("/magic-link")
def request_magic_link(payload: MagicLinkRequest, db: Session = Depends(get_db)):
    """
    Send a passwordless sign-in link. The answer is the same whether or not
    the email is registered.
    """
    link = AuthService.create_magic_link(db, payload.email)
    if link:
        # No mail transport is configured; the link is only logged.
        logger.info("Magic link issued email=%s link=%s", payload.email, link)
    else:
        logger.info("Magic link requested for unknown email=%s", payload.email)
    return {"message": MAGIC_LINK_SENT_MESSAGE}


@router.post("/magic-link/verify", response_model=TokenResponse)
def verify_magic_link(payload: MagicLinkVerify, db: Session = Depends(get_db)):
    """Exchange a magic-link token for an access token"""
    result = AuthService.verify_magic_link(db, payload.token)
    if not result["success"]:
        raise unauthorized(result["message"])
    return _token_response(db, result)


@router.get("/me", response_model=UserResponse)
def get_me(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Current identity. Used to restore auth state on app load."""
    return _user_response(db, current_user)


@router.post("/refresh", response_model=TokenResponse)
def refresh_access_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
):
    """
    Refresh access token. Accepts current token (even if expired) and returns a new token.
    """
    if not credentials:
        raise unauthorized("Token required")
    result = AuthService.refresh_token(db, credentials.credentials)
    if not result["success"]:
        raise unauthorized(result["message"])
    return _token_response(db, result)


@router.post("/logout")
def logout(current_user: User = Depends(get_current_user)):
    """Tokens are stateless; the client discards its token."""
    logger.info("User logged out user_id=%s", current_user.id)
    return {"ok": True}
