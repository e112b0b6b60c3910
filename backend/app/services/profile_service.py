"""
Chirp Backend — Profile Service
================================

What:  Creates, updates and looks up profiles.
Who:   Called by the `createProfile` / `updateProfile` mutations and the
       `User.profile` relationship field.

Update semantics:
    `update_profile` locates the row by the id the client sent. It does NOT
    check that the profile belongs to the caller; ownership is a permission
    rule (`is_profile_owner`) that deployments opt into. Only keys present in
    `changes` are written, so an omitted field keeps its value and an
    explicit null clears it.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import ConflictError, DatabaseError, NotFoundError, ValidationError
from app.models.profile import Profile

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({"bio", "location", "website", "avatar"})


class ProfileService:

    async def get_profile(self, db: AsyncSession, profile_id: int) -> Optional[Profile]:
        result = await db.execute(select(Profile).where(Profile.id == profile_id))
        return result.scalar_one_or_none()

    async def get_profile_for_user(self, db: AsyncSession, user_id: int) -> Optional[Profile]:
        """The profile owned by `user_id` (User.profile)."""
        result = await db.execute(select(Profile).where(Profile.user_id == user_id))
        return result.scalar_one_or_none()

    async def create_profile(
        self,
        db: AsyncSession,
        user_id: int,
        bio: Optional[str] = None,
        location: Optional[str] = None,
        website: Optional[str] = None,
        avatar: Optional[str] = None,
    ) -> Profile:
        """
        Create the caller's profile.

        Raises:
            ConflictError: the user already has a profile (or does not exist)
            DatabaseError: any other store failure
        """
        profile = Profile(
            user_id=user_id,
            bio=bio,
            location=location,
            website=website,
            avatar=avatar,
        )
        try:
            async with db.begin_nested():
                db.add(profile)
                await db.flush()
        except IntegrityError:
            logger.info("Profile creation rejected for user %s", user_id)
            raise ConflictError(resource="profile", context={"user_id": user_id})
        except SQLAlchemyError as e:
            logger.error("Database error creating profile: %s", str(e), exc_info=True)
            raise DatabaseError(context={"original_error": type(e).__name__})

        logger.info("Profile %s created for user %s", profile.id, user_id)
        return profile

    async def update_profile(
        self,
        db: AsyncSession,
        profile_id: Optional[int],
        changes: Dict[str, Any],
    ) -> Profile:
        """
        Apply `changes` to the profile with `profile_id`.

        Raises:
            ValidationError: no profile id, or a key that is not updatable
            NotFoundError:   no profile with that id
        """
        if profile_id is None:
            raise ValidationError("Profile id is required", field="id")

        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(
                f"Cannot update profile field(s): {', '.join(sorted(unknown))}",
                context={"fields": sorted(unknown)},
            )

        profile = await self.get_profile(db, profile_id)
        if profile is None:
            raise NotFoundError(resource="Profile", resource_id=str(profile_id))

        try:
            async with db.begin_nested():
                for field, value in changes.items():
                    setattr(profile, field, value)
                await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating profile %s: %s", profile_id, str(e))
            raise DatabaseError(context={"original_error": type(e).__name__})

        logger.info("Profile %s updated: %s", profile_id, ", ".join(sorted(changes)) or "no changes")
        return profile


profile_service = ProfileService()
