"""Authentication service layer."""
from __future__ import annotations

from fastapi import HTTPException, status
from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.security import create_access_token, get_password_hash, verify_password
from app.db.models.user import User
from app.schemas import Token, UserCreate


class UsernameAlreadyExistsError(ValueError):
    """Raised when attempting to register a username that is taken."""


class InvalidCredentialsError(ValueError):
    """Raised when authentication credentials are invalid."""


class AuthService:
    """Registers dashboard users and issues their access tokens."""

    def __init__(self, db: Session):
        self.db = db

    def register_user(self, payload: UserCreate) -> User:
        existing_user = self.db.scalar(select(User).where(User.username == payload.username))
        if existing_user:
            raise UsernameAlreadyExistsError("A user with this username already exists.")

        user = User(
            username=payload.username,
            password_hash=get_password_hash(payload.password),
            email=payload.email,
        )

        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise UsernameAlreadyExistsError("A user with this username already exists.") from exc
        self.db.refresh(user)
        logger.info("User registered", username=user.username)
        return user

    def authenticate_user(self, username: str, password: str) -> User:
        """Validate credentials, stamp the login time and return the user."""

        user = self.db.scalar(select(User).where(User.username == username))
        if not user or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError("Incorrect username or password")

        user.mark_login()
        self.db.commit()
        return user

    def create_token(self, user: User) -> Token:
        return Token(access_token=create_access_token(str(user.id)))


def handle_username_exists(error: UsernameAlreadyExistsError) -> None:
    """Raise an HTTP 400 error for duplicate usernames."""

    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=str(error),
    ) from error


def handle_invalid_credentials(error: InvalidCredentialsError) -> None:
    """Raise an HTTP 401 error for invalid login attempts."""

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=str(error),
        headers={"WWW-Authenticate": "Bearer"},
    ) from error
