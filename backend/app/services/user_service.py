"""
Chirp Backend — User Service
=============================

What:  Data access for users, including the lookups behind the
       `Profile.user` and `Tweet.author` relationship fields.
How:   One SQLAlchemy statement per call, executed on the request session
       passed in by the caller. The service itself is stateless.

Relationship lookups are keyed by the *child's* id and join back to users,
so each traversal is an independent query (no batching).
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import ConflictError, DatabaseError
from app.models.profile import Profile
from app.models.tweet import Tweet
from app.models.user import User

logger = logging.getLogger(__name__)


class UserService:
    """Reads and creates User rows."""

    async def list_users(self, db: AsyncSession) -> List[User]:
        result = await db.execute(select(User).order_by(User.id))
        return list(result.scalars().all())

    async def get_user(self, db: AsyncSession, user_id: int) -> Optional[User]:
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_user_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_profile_owner(self, db: AsyncSession, profile_id: int) -> Optional[User]:
        """Owner of the profile with `profile_id` (Profile.user)."""
        result = await db.execute(
            select(User).join(Profile, Profile.user_id == User.id).where(Profile.id == profile_id)
        )
        return result.scalar_one_or_none()

    async def get_tweet_author(self, db: AsyncSession, tweet_id: int) -> Optional[User]:
        """Author of the tweet with `tweet_id` (Tweet.author)."""
        result = await db.execute(
            select(User).join(Tweet, Tweet.author_id == User.id).where(Tweet.id == tweet_id)
        )
        return result.scalar_one_or_none()

    async def create_user(
        self,
        db: AsyncSession,
        email: str,
        password_hash: str,
        name: Optional[str] = None,
    ) -> User:
        """
        Insert a new user row.

        The unique index on `email` is the only duplicate check. The insert
        runs in a savepoint, so a violation undoes only this row; writes made
        earlier in the same request stay in the transaction.

        Raises:
            ConflictError: the email is already registered
            DatabaseError: any other store failure
        """
        user = User(name=name, email=email, password=password_hash)
        try:
            async with db.begin_nested():
                db.add(user)
                await db.flush()
        except IntegrityError as e:
            logger.info("Signup rejected: email already registered")
            raise ConflictError(
                resource="user",
                field="email",
                context={"original_error": type(e.orig).__name__ if e.orig else None},
            )
        except SQLAlchemyError as e:
            logger.error("Database error creating user: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the user. Please try again.",
                context={"original_error": type(e).__name__},
            )

        logger.info("User created: %s", user.id)
        return user


user_service = UserService()
