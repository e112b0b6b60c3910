"""
ORM models.

Importing this package registers every mapped class with `Base.metadata`,
which relationship() string targets and Alembic autogenerate both rely on.
"""

from app.models.profile import Profile
from app.models.tweet import Tweet
from app.models.user import User

__all__ = ["Profile", "Tweet", "User"]
