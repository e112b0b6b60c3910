"""
Chirp Backend — GraphQL Object Types
=====================================

What:  The output types of the schema: User, Profile, Tweet, AuthPayload.
How:   Resolvers hand back ORM rows; Strawberry reads scalar fields straight
       off them by attribute. Relationship fields are methods that re-query
       by the parent's id, one query per traversal.

`User.password` is deliberately absent, so it can never be selected.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

import strawberry
from strawberry.types import Info

from app.services.profile_service import profile_service
from app.services.tweet_service import tweet_service
from app.services.user_service import user_service


@strawberry.enum
class SortOrder(Enum):
    asc = "asc"
    desc = "desc"


@strawberry.type
class User:
    id: int
    name: Optional[str]
    email: str

    @strawberry.field
    async def profile(self, info: Info) -> Optional["Profile"]:
        return await profile_service.get_profile_for_user(info.context.db, self.id)

    @strawberry.field
    async def tweets(self, info: Info) -> List[Optional["Tweet"]]:
        return await tweet_service.list_tweets_by_author(info.context.db, self.id)


@strawberry.type
class Profile:
    id: int
    created_at: datetime
    bio: Optional[str]
    location: Optional[str]
    website: Optional[str]
    avatar: Optional[str]

    @strawberry.field
    async def user(self, info: Info) -> Optional[User]:
        return await user_service.get_profile_owner(info.context.db, self.id)


@strawberry.type
class Tweet:
    id: int
    created_at: datetime
    content: str

    @strawberry.field
    async def author(self, info: Info) -> Optional[User]:
        return await user_service.get_tweet_author(info.context.db, self.id)


@strawberry.type
class AuthPayload:
    token: Optional[str]
    user: Optional[User]
