"""
Chirp Backend — Query Root
===========================

Thin resolvers: pull arguments, call one service method, return rows.
Access control lives in app.graphql.permissions, not here.
"""

import logging
from typing import List, Optional

import strawberry
from strawberry.types import Info

from app.graphql.context import require_user_id
from app.graphql.types import Tweet, User
from app.services.tweet_service import tweet_service
from app.services.user_service import user_service

logger = logging.getLogger(__name__)


@strawberry.type
class Query:

    @strawberry.field(description="Every registered user.")
    async def all_users(self, info: Info) -> List[User]:
        return await user_service.list_users(info.context.db)

    @strawberry.field(description="The authenticated caller.")
    async def me(self, info: Info) -> Optional[User]:
        user_id = require_user_id(info.context)
        user = await user_service.get_user(info.context.db, user_id)
        if user is None:
            # Token outlived its user row
            logger.warning("Token for unknown user %s", user_id)
        return user

    @strawberry.field
    async def tweets(self, info: Info) -> Optional[List[Optional[Tweet]]]:
        return await tweet_service.list_tweets(info.context.db)

    @strawberry.field(description="A single tweet; null when no tweet has this id.")
    async def tweet(self, info: Info, id: Optional[int] = None) -> Optional[Tweet]:
        return await tweet_service.get_tweet(info.context.db, id)
