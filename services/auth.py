"""User registration and password login."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional
from uuid import uuid4

import jwt
from passlib.context import CryptContext

from app.schemas import UserRecord
from datastore.errors import DuplicateKeyError
from datastore.user_store import UserStore, build_default_user_store
from settings import get_settings

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


class AuthError(Exception):
    """Base class for failures reported back to the client as-is."""

    message = "Authentication failed"

    def __str__(self) -> str:
        return self.message


class UserAlreadyExistsError(AuthError):
    message = "User already exists"


class UserNotFoundError(AuthError):
    message = "User not found"


class InvalidCredentialsError(AuthError):
    message = "Invalid credentials"


class AuthService:
    def __init__(
        self,
        users: UserStore,
        secret: str,
        token_ttl: timedelta = timedelta(days=1),
        bcrypt_rounds: int = 10,
    ) -> None:
        self.users = users
        self._secret = secret
        self._token_ttl = token_ttl
        self._pwd_context = CryptContext(
            schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=bcrypt_rounds
        )

    def register(
        self,
        email: str,
        password: str,
        full_name: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> UserRecord:
        """Create a user with a bcrypt-hashed password.

        Raises ``UserAlreadyExistsError`` when the email is taken.
        """
        if self.users.get_item(email) is not None:
            raise UserAlreadyExistsError()

        user = UserRecord(
            id=str(uuid4()),
            full_name=full_name,
            email=email,
            phone=phone,
            hashed_password=self._pwd_context.hash(password),
        )
        try:
            self.users.insert(user)
        except DuplicateKeyError as exc:
            # Lost a race with a concurrent registration of the same email.
            raise UserAlreadyExistsError() from exc

        logger.info("Registered user", extra={"email": email})
        return user

    def login(self, email: str, password: str) -> tuple[str, UserRecord]:
        """Verify credentials and return a signed access token with the user."""
        user = self.users.get_item(email)
        if user is None:
            raise UserNotFoundError()
        if not self._pwd_context.verify(password, user.hashed_password):
            logger.info("Rejected login", extra={"email": email, "reason": "bad password"})
            raise InvalidCredentialsError()
        return self.create_access_token(user.id), user

    def create_access_token(self, user_id: str) -> str:
        expires_at = datetime.now(timezone.utc) + self._token_ttl
        return jwt.encode({"sub": user_id, "exp": expires_at}, self._secret, algorithm=ALGORITHM)


@lru_cache
def build_default_auth_service() -> AuthService:
    settings = get_settings()
    return AuthService(
        users=build_default_user_store(),
        secret=settings.jwt_secret,
        token_ttl=timedelta(minutes=settings.jwt_expire_minutes),
        bcrypt_rounds=settings.bcrypt_rounds,
    )
