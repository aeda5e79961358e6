"""Pydantic models for dashboard users and their tokens."""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserCreate(BaseModel):
    """Schema for user registration input."""

    username: str = Field(min_length=3, max_length=100)
    password: str = Field(min_length=8, max_length=128)
    email: Optional[EmailStr] = None


class UserLogin(BaseModel):
    username: str
    password: str


class UserRead(BaseModel):
    """Schema returned after registration."""

    id: uuid.UUID
    username: str
    email: Optional[str] = None
    created_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class Token(BaseModel):
    """Bearer token issued on login."""

    access_token: str
    token_type: str = "bearer"


class TokenPayload(BaseModel):
    """Claims read back from an access token."""

    sub: uuid.UUID
    exp: datetime
    type: str
