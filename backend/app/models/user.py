"""
Chirp Backend — User SQLAlchemy Model
======================================

What:  ORM model representing the `users` table.
Who:   Read and written by UserService and AuthService; exposed through the
       GraphQL `User` type (without the password column).

Table Design Rationale:
    - Integer primary key: ids are part of the public API (`tweet(id: Int)`)
    - email: unique at the store level; duplicate signups fail on insert
    - password: bcrypt hash, never selected into an API response
"""

from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

if TYPE_CHECKING:
    from app.models.profile import Profile
    from app.models.tweet import Tweet


class User(Base):
    """
    A registered account.

    Lifecycle:
        Created by the `signup` mutation. Never updated or deleted through
        the API.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Login identifier; uniqueness enforced by the store",
    )

    # bcrypt output is 60 chars
    password: Mapped[str] = mapped_column(String(255), nullable=False)

    # Resolvers re-query related rows explicitly; lazy="raise" keeps an
    # accidental attribute access from issuing implicit IO under asyncio.
    profile: Mapped[Optional["Profile"]] = relationship(
        back_populates="user", uselist=False, lazy="raise"
    )
    tweets: Mapped[List["Tweet"]] = relationship(
        back_populates="author", lazy="raise"
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
