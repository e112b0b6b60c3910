"""Tests for the deployed permission table and its configuration switches."""

import pytest
import pytest_asyncio

from app.config import Settings, settings
from app.graphql.permissions import build_ruleset, is_authenticated
from app.graphql.rules import allow, apply_permissions, deny
from app.graphql.schema import GUARDED_TYPES, create_schema
from app.models.user import User

CREATE_PROFILE = "mutation { createProfile(data: { bio: \"mine\" }) { id } }"
UPDATE_PROFILE = """
mutation($id: Int) {
    updateProfile(data: { id: $id, bio: "changed" }) { id bio }
}
"""


class TestRuleTable:

    def test_every_root_field_has_an_explicit_rule(self):
        ruleset = build_ruleset(settings)
        for type_name, fields in {
            "Query": ["allUsers", "me", "tweets", "tweet"],
            "Mutation": ["signup", "login", "createProfile", "updateProfile", "createTweet"],
        }.items():
            for field in fields:
                assert field in ruleset.table[type_name]

    def test_identity_required_fields(self):
        ruleset = build_ruleset(settings)
        assert ruleset.rule_for("Query", "me") is is_authenticated
        assert ruleset.rule_for("Mutation", "createTweet") is is_authenticated
        assert ruleset.rule_for("Mutation", "updateProfile") is is_authenticated
        assert ruleset.rule_for("Query", "tweets") is allow

    def test_fallback_follows_settings(self):
        assert build_ruleset(Settings()).fallback is deny
        assert build_ruleset(Settings(permissions_fallback="allow")).fallback is allow

    def test_ownership_switch_combines_rules(self):
        ruleset = build_ruleset(Settings(enforce_profile_ownership=True))
        rule = ruleset.rule_for("Mutation", "updateProfile")
        assert rule.name == "all_of(is_authenticated, is_profile_owner)"
        assert rule.is_async


@pytest_asyncio.fixture
async def owner_only(session_factory, token_codec, make_context):
    """Executor over a schema built with ENFORCE_PROFILE_OWNERSHIP on."""
    schema = create_schema(Settings(enforce_profile_ownership=True))

    async def _execute(query, variables=None, token=None):
        async with session_factory() as session:
            context = make_context(db=session, token=token)
            result = await schema.execute(query, variable_values=variables, context_value=context)
            await session.commit()
            return result

    yield _execute
    # Field rules are shared by every schema in the process
    apply_permissions(build_ruleset(settings), GUARDED_TYPES)


async def seed_users(session_factory):
    async with session_factory() as session:
        session.add_all([
            User(id=7, email="seven@example.com", password="x"),
            User(id=8, email="eight@example.com", password="x"),
        ])
        await session.commit()


class TestProfileOwnership:

    @pytest.mark.asyncio
    async def test_owner_may_update(self, owner_only, session_factory, token_codec):
        await seed_users(session_factory)
        token = token_codec.issue(7)
        created = await owner_only(CREATE_PROFILE, token=token)
        profile_id = created.data["createProfile"]["id"]

        result = await owner_only(UPDATE_PROFILE, {"id": profile_id}, token=token)

        assert result.errors is None
        assert result.data["updateProfile"]["bio"] == "changed"

    @pytest.mark.asyncio
    async def test_other_user_is_refused(self, owner_only, session_factory, token_codec):
        await seed_users(session_factory)
        created = await owner_only(CREATE_PROFILE, token=token_codec.issue(7))
        profile_id = created.data["createProfile"]["id"]

        result = await owner_only(UPDATE_PROFILE, {"id": profile_id}, token=token_codec.issue(8))

        assert result.data == {"updateProfile": None}
        assert result.errors[0].message == "Not Authorised!"

    @pytest.mark.asyncio
    async def test_anonymous_still_gets_authentication_error(self, owner_only):
        result = await owner_only(UPDATE_PROFILE, {"id": 1})
        assert result.errors[0].message == "Could not authenticate user."
