"""
User Pydantic schemas for request/response validation
"""
from pydantic import BaseModel
from typing import Optional


class UserRegister(BaseModel):
    """Schema for user registration"""
    email: str
    password: str
    name: Optional[str] = None


class UserLogin(BaseModel):
    """Schema for user login"""
    email: str
    password: str


class MagicLinkRequest(BaseModel):
    email: str


class MagicLinkVerify(BaseModel):
    token: str


class UserResponse(BaseModel):
    """Schema for user response"""
    id: int
    email: str
    name: str = ""

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    """Schema for token response"""
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
    message: Optional[str] = None
