"""GraphQL input types."""

from typing import Any, Dict, List, Optional

import strawberry

from app.graphql.types import SortOrder


@strawberry.input
class UserUniqueInput:
    id: Optional[int] = None
    email: Optional[str] = None


@strawberry.input
class TweetCreateInput:
    content: Optional[str] = None


@strawberry.input
class UserCreateInput:
    email: str
    name: Optional[str] = None
    tweets: Optional[List[TweetCreateInput]] = None


@strawberry.input
class ProfileCreateInput:
    bio: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    avatar: Optional[str] = None


@strawberry.input
class ProfileUpdateInput:
    # UNSET distinguishes "not sent" (keep) from an explicit null (clear)
    id: Optional[int] = strawberry.UNSET
    bio: Optional[str] = strawberry.UNSET
    location: Optional[str] = strawberry.UNSET
    website: Optional[str] = strawberry.UNSET
    avatar: Optional[str] = strawberry.UNSET

    def changes(self) -> Dict[str, Any]:
        """The profile columns the client actually sent."""
        values = {
            "bio": self.bio,
            "location": self.location,
            "website": self.website,
            "avatar": self.avatar,
        }
        return {k: v for k, v in values.items() if v is not strawberry.UNSET}


@strawberry.input
class TweetOrderByUpdatedAtInput:
    updated_at: SortOrder
