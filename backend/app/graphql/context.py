"""GraphQL context and identity resolution."""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from strawberry.fastapi import BaseContext

from app.exceptions import AuthenticationError
from app.services.token_service import TokenCodec

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


class GraphQLContext(BaseContext):
    """
    Context passed to every resolver and permission rule.

    `request` is filled in by the GraphQL router after the context getter
    returns.
    """

    def __init__(self, db: AsyncSession, tokens: TokenCodec) -> None:
        super().__init__()
        self.db = db
        self.tokens = tokens


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Token part of an `Authorization: Bearer <token>` header, else None."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


def resolve_user_id(context: GraphQLContext) -> Optional[int]:
    """
    Identity of the caller, or None for an anonymous request.

    A missing or non-Bearer header is anonymous. A Bearer token that fails
    verification raises (InvalidTokenError and subclasses); read paths that
    do not need identity never call this.
    """
    request = context.request
    if request is None:
        return None
    token = extract_bearer_token(request.headers.get("Authorization"))
    if token is None:
        return None
    return context.tokens.verify(token)


def require_user_id(context: GraphQLContext) -> int:
    """Like resolve_user_id, but an anonymous caller is an error."""
    user_id = resolve_user_id(context)
    if user_id is None:
        raise AuthenticationError()
    return user_id
