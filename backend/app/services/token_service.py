"""
Chirp Backend — Token Codec
============================

What:  Issues and verifies the signed bearer tokens that carry a user id.
Why:   The API is stateless; a token is the only proof of identity a request
       carries.
How:   PyJWT with a shared HMAC secret. Claims are `userId` and `iat`, plus
       `exp` when a lifetime is configured.

The codec is built from explicit arguments (see `from_settings`) and
stored on `app.state` by the application factory. It holds no mutable state,
so one instance serves every request.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from app.exceptions import (
    InvalidSignatureError,
    MalformedTokenError,
    TokenExpiredError,
)

logger = logging.getLogger(__name__)

USER_ID_CLAIM = "userId"


class TokenCodec:
    """
    Encodes a user id into a signed JWT and decodes it back.

    Args:
        secret:    HMAC key; every token signed with another key is rejected
        algorithm: JWT signing algorithm (HS256 by default)
        lifetime:  Optional token lifetime; None issues non-expiring tokens
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        lifetime: Optional[timedelta] = None,
    ):
        if not secret:
            raise ValueError("TokenCodec requires a non-empty secret")
        self._secret = secret
        self.algorithm = algorithm
        self.lifetime = lifetime

    @classmethod
    def from_settings(cls, settings) -> "TokenCodec":
        lifetime = None
        if settings.token_lifetime_minutes:
            lifetime = timedelta(minutes=settings.token_lifetime_minutes)
        return cls(
            secret=settings.app_secret,
            algorithm=settings.jwt_algorithm,
            lifetime=lifetime,
        )

    def issue(self, user_id: int) -> str:
        """Return a signed token asserting `user_id`."""
        now = datetime.now(timezone.utc)
        payload: Dict[str, Any] = {USER_ID_CLAIM: user_id, "iat": now}
        if self.lifetime is not None:
            payload["exp"] = now + self.lifetime
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> int:
        """
        Verify `token` and return the user id it carries.

        Raises:
            InvalidSignatureError: signed with another key or tampered with
            TokenExpiredError:     `exp` is in the past
            MalformedTokenError:   not a JWT, or no usable `userId` claim
        """
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self.algorithm])
        except jwt.InvalidSignatureError:
            logger.info("Rejected token with invalid signature")
            raise InvalidSignatureError()
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError()
        except jwt.InvalidTokenError as e:
            # DecodeError and the remaining claim errors all mean the token
            # is unusable as sent
            raise MalformedTokenError(context={"reason": type(e).__name__})

        user_id = claims.get(USER_ID_CLAIM)
        # bool is an int subclass; a boolean claim is not a user id
        if isinstance(user_id, bool):
            raise MalformedTokenError(message="Token does not carry a user id")
        try:
            return int(user_id)
        except (TypeError, ValueError):
            raise MalformedTokenError(message="Token does not carry a user id")
