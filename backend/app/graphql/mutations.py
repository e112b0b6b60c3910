"""
Chirp Backend — Mutation Root
==============================

Each mutation resolves the caller's identity (where it needs one) and hands
off to a single service call. Service exceptions are ChirpErrors and reach
the client as GraphQL errors with their message intact.
"""

from typing import Optional

import strawberry
from strawberry.types import Info

from app.graphql.context import require_user_id
from app.graphql.inputs import ProfileCreateInput, ProfileUpdateInput, TweetCreateInput
from app.graphql.types import AuthPayload, Profile, Tweet
from app.services.auth_service import auth_service
from app.services.profile_service import profile_service
from app.services.tweet_service import tweet_service


@strawberry.type
class Mutation:

    @strawberry.mutation
    async def signup(
        self,
        info: Info,
        email: str,
        password: str,
        name: Optional[str] = None,
    ) -> Optional[AuthPayload]:
        result = await auth_service.signup(
            info.context.db, info.context.tokens, email=email, password=password, name=name
        )
        return AuthPayload(token=result.token, user=result.user)

    @strawberry.mutation
    async def login(self, info: Info, email: str, password: str) -> Optional[AuthPayload]:
        result = await auth_service.login(
            info.context.db, info.context.tokens, email=email, password=password
        )
        return AuthPayload(token=result.token, user=result.user)

    @strawberry.mutation
    async def create_profile(self, info: Info, data: ProfileCreateInput) -> Optional[Profile]:
        user_id = require_user_id(info.context)
        return await profile_service.create_profile(
            info.context.db,
            user_id=user_id,
            bio=data.bio,
            location=data.location,
            website=data.website,
            avatar=data.avatar,
        )

    @strawberry.mutation
    async def update_profile(self, info: Info, data: ProfileUpdateInput) -> Optional[Profile]:
        require_user_id(info.context)
        # TODO: decide whether callers may only edit their own profile and
        # make ENFORCE_PROFILE_OWNERSHIP the default if so
        profile_id = None if data.id is strawberry.UNSET else data.id
        return await profile_service.update_profile(
            info.context.db, profile_id=profile_id, changes=data.changes()
        )

    @strawberry.mutation
    async def create_tweet(self, info: Info, data: TweetCreateInput) -> Optional[Tweet]:
        user_id = require_user_id(info.context)
        return await tweet_service.create_tweet(
            info.context.db, author_id=user_id, content=data.content
        )
