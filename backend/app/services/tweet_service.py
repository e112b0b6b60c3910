"""
Chirp Backend — Tweet Service
==============================

What:  Lists, fetches and creates tweets.
Who:   Called by the `tweets`, `tweet` and `createTweet` root fields and by
       the `User.tweets` relationship field.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError, ValidationError
from app.models.tweet import Tweet

logger = logging.getLogger(__name__)


class TweetService:

    async def list_tweets(self, db: AsyncSession) -> List[Tweet]:
        result = await db.execute(select(Tweet).order_by(Tweet.id))
        return list(result.scalars().all())

    async def get_tweet(self, db: AsyncSession, tweet_id: Optional[int]) -> Optional[Tweet]:
        """The tweet with `tweet_id`, or None on a miss or when no id is given."""
        if tweet_id is None:
            return None
        result = await db.execute(select(Tweet).where(Tweet.id == tweet_id))
        return result.scalar_one_or_none()

    async def list_tweets_by_author(self, db: AsyncSession, user_id: int) -> List[Tweet]:
        """Tweets written by `user_id`, oldest first (User.tweets)."""
        result = await db.execute(
            select(Tweet).where(Tweet.author_id == user_id).order_by(Tweet.id)
        )
        return list(result.scalars().all())

    async def create_tweet(
        self,
        db: AsyncSession,
        author_id: int,
        content: Optional[str],
    ) -> Tweet:
        """
        Create a tweet authored by `author_id`.

        Raises:
            ValidationError: `content` is missing or empty
            DatabaseError:   the insert failed
        """
        if not content:
            raise ValidationError("Content is empty", field="content")

        tweet = Tweet(content=content, author_id=author_id)
        try:
            async with db.begin_nested():
                db.add(tweet)
                await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating tweet: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the tweet. Please try again.",
                context={"original_error": type(e).__name__},
            )

        logger.info("Tweet %s created by user %s", tweet.id, author_id)
        return tweet


tweet_service = TweetService()
