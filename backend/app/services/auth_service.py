"""
Chirp Backend — Authentication Service
=======================================

What:  The signup and login workflows.
Why:   Both end in the same place (a token plus the user it belongs to) and
       share password hashing, so they live together.
How:   bcrypt for passwords, TokenCodec for tokens, UserService for rows.

Flow (signup):
    hash password ──▶ insert user ──▶ issue token ──▶ AuthResult

Flow (login):
    find user by email ──▶ compare hash ──▶ issue token ──▶ AuthResult

bcrypt is CPU-bound (~50ms at cost 10), so it runs in a worker thread
instead of on the event loop.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import bcrypt
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import InvalidCredentialsError, NotFoundError, ValidationError
from app.models.user import User
from app.services.token_service import TokenCodec
from app.services.user_service import user_service

logger = logging.getLogger(__name__)


@dataclass
class AuthResult:
    """A freshly issued token and the user it asserts."""
    token: str
    user: User


class AuthService:
    """
    Signup/login orchestration.

    Args:
        rounds: bcrypt cost factor used for new hashes. Existing hashes carry
                their own cost and verify regardless of this value.
    """

    def __init__(self, rounds: int = 10):
        self.rounds = rounds

    async def hash_password(self, password: str) -> str:
        hashed = await asyncio.to_thread(
            bcrypt.hashpw, password.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds)
        )
        return hashed.decode("utf-8")

    async def verify_password(self, password: str, password_hash: str) -> bool:
        try:
            return await asyncio.to_thread(
                bcrypt.checkpw, password.encode("utf-8"), password_hash.encode("utf-8")
            )
        except ValueError:
            # Stored value is not a bcrypt hash
            logger.warning("Stored password hash could not be parsed")
            return False

    async def signup(
        self,
        db: AsyncSession,
        tokens: TokenCodec,
        email: str,
        password: str,
        name: Optional[str] = None,
    ) -> AuthResult:
        """
        Register a user and log them in.

        Raises:
            ValidationError: empty password
            ConflictError:   email already registered (no row is created)
        """
        if not password:
            raise ValidationError("Password must not be empty", field="password")

        password_hash = await self.hash_password(password)
        user = await user_service.create_user(
            db, email=email, password_hash=password_hash, name=name
        )
        return AuthResult(token=tokens.issue(user.id), user=user)

    async def login(
        self,
        db: AsyncSession,
        tokens: TokenCodec,
        email: str,
        password: str,
    ) -> AuthResult:
        """
        Exchange an email and password for a token.

        Raises:
            NotFoundError:           no user has that email
            InvalidCredentialsError: the password does not match
        """
        user = await user_service.get_user_by_email(db, email)
        if user is None:
            raise NotFoundError(
                resource="user",
                message=f"No user found for email: {email}",
            )

        if not await self.verify_password(password, user.password):
            logger.info("Failed login for user %s", user.id)
            raise InvalidCredentialsError()

        logger.info("User %s logged in", user.id)
        return AuthResult(token=tokens.issue(user.id), user=user)


auth_service = AuthService(rounds=settings.bcrypt_rounds)
