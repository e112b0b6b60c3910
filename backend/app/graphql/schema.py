"""
Chirp Backend — Schema Assembly
================================

What:  Builds the Strawberry schema: root types, object/input types, the
       permission table and the schema extensions.
When:  Once per application (create_app) and once per test module.

Build order matters: permissions are attached to the field definitions
first, then strawberry.Schema converts the types and picks them up.
"""

import logging
from functools import partial
from typing import List, Optional

import strawberry
from graphql import GraphQLError
from strawberry.extensions import MaskErrors, QueryDepthLimiter
from strawberry.types import ExecutionContext

from app.config import Settings, settings as default_settings
from app.exceptions import ChirpError
from app.graphql.extensions import OperationLoggingExtension, should_mask_error
from app.graphql.inputs import (
    ProfileCreateInput,
    ProfileUpdateInput,
    TweetCreateInput,
    TweetOrderByUpdatedAtInput,
    UserCreateInput,
    UserUniqueInput,
)
from app.graphql.mutations import Mutation
from app.graphql.permissions import build_ruleset
from app.graphql.queries import Query
from app.graphql.rules import apply_permissions
from app.graphql.types import AuthPayload, Profile, Tweet, User

logger = logging.getLogger(__name__)

GUARDED_TYPES = (Query, Mutation, User, Profile, Tweet, AuthPayload)

# Registered although no field references them yet, so clients can see them.
# SortOrder comes in through TweetOrderByUpdatedAtInput.
EXTRA_TYPES = (
    UserUniqueInput,
    UserCreateInput,
    ProfileCreateInput,
    ProfileUpdateInput,
    TweetCreateInput,
    TweetOrderByUpdatedAtInput,
)


class ChirpSchema(strawberry.Schema):
    """Schema that logs expected application errors without a traceback."""

    def process_errors(
        self,
        errors: List[GraphQLError],
        execution_context: Optional[ExecutionContext] = None,
    ) -> None:
        for error in errors:
            original = error.original_error
            if original is None or isinstance(original, ChirpError):
                logger.warning("GraphQL error at %s: %s", error.path, error.message)
            else:
                logger.error(
                    "Unexpected error at %s: %s",
                    error.path,
                    str(original),
                    exc_info=original,
                )


def create_schema(settings: Settings = default_settings) -> ChirpSchema:
    apply_permissions(build_ruleset(settings), GUARDED_TYPES)
    return ChirpSchema(
        query=Query,
        mutation=Mutation,
        types=list(EXTRA_TYPES),
        extensions=[
            # Factories: Strawberry builds fresh extension instances per operation
            partial(QueryDepthLimiter, max_depth=settings.max_query_depth),
            partial(MaskErrors, should_mask_error=should_mask_error),
            OperationLoggingExtension,
        ],
    )
