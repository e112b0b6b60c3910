"""
Chirp Backend — Service Unit Tests
===================================

What:  Tests for the user, profile, tweet and auth services.
How:   Mock DB sessions (no real database); collaborators patched where
       a service delegates to another.

What we test:
    ✅ Duplicate email → ConflictError, only the savepoint undone
    ✅ Empty tweet content rejected before anything is added
    ✅ Profile updates touch only the fields sent
    ✅ Login failure modes (unknown email, wrong password)
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from app.exceptions import (
    ConflictError,
    DatabaseError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from app.models.profile import Profile
from app.models.user import User
from app.services.auth_service import AuthService
from app.services.profile_service import ProfileService
from app.services.tweet_service import TweetService
from app.services.user_service import UserService


def integrity_error() -> IntegrityError:
    return IntegrityError("INSERT ...", {}, Exception("UNIQUE constraint failed"))


class TestUserService:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_create_user_adds_and_flushes(self, mock_db_session):
        user = await self.service.create_user(
            mock_db_session, email="a@b.co", password_hash="hash", name="Ada"
        )

        assert user.email == "a@b.co"
        assert user.name == "Ada"
        mock_db_session.add.assert_called_once_with(user)
        mock_db_session.flush.assert_awaited_once()
        mock_db_session.begin_nested.assert_called_once()

    @pytest.mark.asyncio
    async def test_duplicate_email_raises_conflict(self, mock_db_session):
        mock_db_session.flush = AsyncMock(side_effect=integrity_error())

        with pytest.raises(ConflictError) as exc_info:
            await self.service.create_user(mock_db_session, email="a@b.co", password_hash="h")

        assert "email" in exc_info.value.message
        # Only the savepoint is undone; the request transaction is left alone
        mock_db_session.begin_nested.assert_called_once()
        mock_db_session.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_other_store_failure_raises_database_error(self, mock_db_session):
        mock_db_session.flush = AsyncMock(
            side_effect=OperationalError("INSERT ...", {}, Exception("disk full"))
        )

        with pytest.raises(DatabaseError) as exc_info:
            await self.service.create_user(mock_db_session, email="a@b.co", password_hash="h")

        # Driver detail stays in the log
        assert "disk full" not in exc_info.value.message
        mock_db_session.begin_nested.assert_called_once()
        mock_db_session.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_get_user_miss_returns_none(self, mock_db_session):
        mock_db_session.execute.return_value = MagicMock(
            scalar_one_or_none=MagicMock(return_value=None)
        )
        assert await self.service.get_user(mock_db_session, 99) is None


class TestTweetService:

    def setup_method(self):
        self.service = TweetService()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", [None, ""])
    async def test_empty_content_rejected(self, mock_db_session, content):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.create_tweet(mock_db_session, author_id=1, content=content)

        assert exc_info.value.message == "Content is empty"
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_tweet_sets_author(self, mock_db_session):
        tweet = await self.service.create_tweet(mock_db_session, author_id=3, content="hello")

        assert tweet.author_id == 3
        assert tweet.content == "hello"
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_get_tweet_without_id_skips_query(self, mock_db_session):
        assert await self.service.get_tweet(mock_db_session, None) is None
        mock_db_session.execute.assert_not_awaited()


class TestProfileService:

    def setup_method(self):
        self.service = ProfileService()

    @pytest.mark.asyncio
    async def test_second_profile_for_user_conflicts(self, mock_db_session):
        mock_db_session.flush = AsyncMock(side_effect=integrity_error())

        with pytest.raises(ConflictError):
            await self.service.create_profile(mock_db_session, user_id=1, bio="hi")
        mock_db_session.begin_nested.assert_called_once()
        mock_db_session.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_requires_id(self, mock_db_session):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.update_profile(mock_db_session, None, {"bio": "x"})
        assert exc_info.value.field == "id"

    @pytest.mark.asyncio
    async def test_update_rejects_unknown_fields(self, mock_db_session):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.update_profile(mock_db_session, 1, {"user_id": 2})
        assert "user_id" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_update_missing_profile(self, mock_db_session):
        with patch.object(self.service, "get_profile", AsyncMock(return_value=None)):
            with pytest.raises(NotFoundError):
                await self.service.update_profile(mock_db_session, 5, {"bio": "x"})

    @pytest.mark.asyncio
    async def test_update_only_touches_sent_fields(self, mock_db_session):
        profile = Profile(id=5, user_id=1, bio="old", location="Paris", website=None)
        with patch.object(self.service, "get_profile", AsyncMock(return_value=profile)):
            result = await self.service.update_profile(
                mock_db_session, 5, {"bio": "new", "website": None}
            )

        assert result.bio == "new"
        assert result.website is None
        assert result.location == "Paris"
        mock_db_session.flush.assert_awaited_once()


class TestAuthService:

    def setup_method(self):
        self.service = AuthService(rounds=4)

    @pytest.mark.asyncio
    async def test_hash_and_verify(self):
        hashed = await self.service.hash_password("s3cret")

        assert hashed != "s3cret"
        assert await self.service.verify_password("s3cret", hashed)
        assert not await self.service.verify_password("wrong", hashed)

    @pytest.mark.asyncio
    async def test_verify_against_non_bcrypt_value(self):
        assert not await self.service.verify_password("s3cret", "plaintext")

    @pytest.mark.asyncio
    async def test_signup_rejects_empty_password(self, mock_db_session, token_codec):
        with pytest.raises(ValidationError):
            await self.service.signup(mock_db_session, token_codec, email="a@b.co", password="")
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_signup_issues_token_for_new_user(self, mock_db_session, token_codec):
        user = User(id=11, email="a@b.co", name=None, password="x")
        with patch("app.services.auth_service.user_service") as mock_users:
            mock_users.create_user = AsyncMock(return_value=user)
            result = await self.service.signup(
                mock_db_session, token_codec, email="a@b.co", password="pw"
            )

        assert result.user is user
        assert token_codec.verify(result.token) == 11
        stored_hash = mock_users.create_user.await_args.kwargs["password_hash"]
        assert stored_hash != "pw"

    @pytest.mark.asyncio
    async def test_login_unknown_email(self, mock_db_session, token_codec):
        with patch("app.services.auth_service.user_service") as mock_users:
            mock_users.get_user_by_email = AsyncMock(return_value=None)
            with pytest.raises(NotFoundError) as exc_info:
                await self.service.login(
                    mock_db_session, token_codec, email="nobody@b.co", password="pw"
                )

        assert exc_info.value.message == "No user found for email: nobody@b.co"

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, mock_db_session, token_codec):
        hashed = await self.service.hash_password("right")
        user = User(id=2, email="a@b.co", password=hashed)
        with patch("app.services.auth_service.user_service") as mock_users:
            mock_users.get_user_by_email = AsyncMock(return_value=user)
            with pytest.raises(InvalidCredentialsError) as exc_info:
                await self.service.login(mock_db_session, token_codec, email="a@b.co", password="wrong")

        assert exc_info.value.message == "Invalid password"
