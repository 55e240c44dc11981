"""
User Model - Defines the user profile and auth payloads.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    """Registration / sign-in payload."""
    email: EmailStr
    password: str = Field(..., min_length=6)


class User(BaseModel):
    """User profile without credentials."""
    user_id: str
    email: EmailStr
    created_at: datetime
    last_login: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserInDB(User):
    """User profile as stored, with hashed password."""
    hashed_password: str


class SessionMarker(BaseModel):
    """Durable "a user is logged in" record read at launch."""
    uid: str
    email: EmailStr
    last_login: datetime


class Token(BaseModel):
    """JWT token response model."""
    access_token: str
    token_type: str = "bearer"


class TokenData(BaseModel):
    """Token payload data."""
    user_id: Optional[str] = None
    email: Optional[str] = None
