"""
Chirp Backend — Tweet SQLAlchemy Model
=======================================

What:  ORM model representing the `tweets` table (many:1 with users).
Who:   Written by TweetService; exposed through the GraphQL `Tweet` type.
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

if TYPE_CHECKING:
    from app.models.user import User


class Tweet(Base):
    """A short post. Immutable once created."""

    __tablename__ = "tweets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    # Non-empty content is checked by TweetService, not by the store
    content: Mapped[str] = mapped_column(Text, nullable=False)

    author_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)

    author: Mapped["User"] = relationship(back_populates="tweets", lazy="raise")

    # User.tweets filters on author_id for every user it resolves
    __table_args__ = (
        Index("idx_tweets_author_id", "author_id"),
    )

    def __repr__(self) -> str:
        return f"<Tweet(id={self.id}, author_id={self.author_id})>"
