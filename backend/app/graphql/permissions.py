"""
Chirp Backend — Deployed Permission Table
==========================================

Every exposed field is listed explicitly. Anything added to the schema later
without a rule falls through to the configured fallback, which is `deny`
unless PERMISSIONS_FALLBACK says otherwise.

    Query.me                   is_authenticated
    Mutation.createProfile     is_authenticated
    Mutation.updateProfile     is_authenticated (+ is_profile_owner when
                               ENFORCE_PROFILE_OWNERSHIP is on)
    Mutation.createTweet       is_authenticated
    everything else            allow
"""

import strawberry

from app.exceptions import AuthenticationError, InvalidTokenError
from app.graphql.context import resolve_user_id
from app.graphql.rules import RuleSet, all_of, allow, deny, rule
from app.services.profile_service import profile_service


@rule
def is_authenticated(parent, args, context, info):
    """A valid bearer token; otherwise deny with the authentication error."""
    try:
        user_id = resolve_user_id(context)
    except InvalidTokenError as e:
        return e
    if user_id is None:
        return AuthenticationError()
    return True


@rule
async def is_profile_owner(parent, args, context, info) -> bool:
    """The profile named by `data.id` belongs to the caller."""
    user_id = resolve_user_id(context)
    data = args.get("data")
    profile_id = getattr(data, "id", None)
    if user_id is None or profile_id is None or profile_id is strawberry.UNSET:
        return False
    profile = await profile_service.get_profile(context.db, profile_id)
    # A missing profile is left to the resolver to report as not found
    return profile is None or profile.user_id == user_id


def build_ruleset(settings) -> RuleSet:
    update_profile_rule = is_authenticated
    if settings.enforce_profile_ownership:
        update_profile_rule = all_of(is_authenticated, is_profile_owner)

    return RuleSet(
        {
            "Query": {
                "allUsers": allow,
                "me": is_authenticated,
                "tweets": allow,
                "tweet": allow,
            },
            "Mutation": {
                "signup": allow,
                "login": allow,
                "createProfile": is_authenticated,
                "updateProfile": update_profile_rule,
                "createTweet": is_authenticated,
            },
            "User": {"*": allow},
            "Profile": {"*": allow},
            "Tweet": {"*": allow},
            "AuthPayload": {"*": allow},
        },
        fallback=allow if settings.permissions_fallback == "allow" else deny,
    )
