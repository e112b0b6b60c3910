"""
Chirp Backend — Custom Exception Hierarchy
===========================================

What:  Application-specific exceptions for the failure kinds the API reports.
Why:   Resolvers raise these and Strawberry surfaces `message` verbatim in the
       GraphQL `errors` list. Anything that is NOT a ChirpError is masked
       before it reaches the client (see app.graphql.schema).
How:   Each exception carries a human-readable message and an optional
       context dict that is logged but never returned.

Exception Hierarchy:
    ChirpError (base)
    ├── AuthenticationError          no/invalid identity where required
    │   └── InvalidTokenError
    │       ├── InvalidSignatureError
    │       ├── MalformedTokenError
    │       └── TokenExpiredError
    ├── AuthorizationDeniedError     permission rule rejected the field
    ├── InvalidCredentialsError      login password mismatch
    ├── ValidationError              empty/missing business field
    ├── NotFoundError                lookup miss
    ├── ConflictError                unique-constraint violation
    └── DatabaseError                unexpected store failure

No error codes are attached; callers distinguish kinds by message text only.
"""

from typing import Any, Dict, Optional


class ChirpError(Exception):
    """
    Base exception for all Chirp application errors.

    Attributes:
        message:  User-facing error description (safe to return to the client)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class AuthenticationError(ChirpError):
    """Raised when an operation needs an identity and none can be resolved."""

    def __init__(
        self,
        message: str = "Could not authenticate user.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidTokenError(AuthenticationError):
    """A bearer token was supplied but could not be verified."""

    def __init__(
        self,
        message: str = "Invalid token",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidSignatureError(InvalidTokenError):
    """The token was signed with a different secret or has been tampered with."""

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Invalid token signature", context=context)


class MalformedTokenError(InvalidTokenError):
    """The token is not a structurally valid JWT or lacks the user claim."""

    def __init__(
        self,
        message: str = "Malformed token",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class TokenExpiredError(InvalidTokenError):
    """The token carries an `exp` claim that has passed."""

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Token has expired", context=context)


class AuthorizationDeniedError(ChirpError):
    """
    Raised when a permission rule denies access to a field.

    The message is deliberately generic: the client learns that it was
    refused, not which rule refused it.
    """

    def __init__(
        self,
        message: str = "Not Authorised!",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidCredentialsError(ChirpError):
    """Raised when a login password does not match the stored hash."""

    def __init__(
        self,
        message: str = "Invalid password",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ValidationError(ChirpError):
    """
    Raised when client input fails a business rule the schema cannot express.

    Example: TweetCreateInput.content is nullable in the schema but a tweet
    must have content.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(ChirpError):
    """
    Raised when a requested resource does not exist.

    Read resolvers return null for misses instead; this is for lookups a
    mutation depends on (login by email, updateProfile by id).
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(ChirpError):
    """Raised when the store rejects a write on a unique constraint."""

    def __init__(
        self,
        resource: str = "resource",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"Operation failed: {resource} already exists"
        if field:
            message = f"Operation failed: a {resource} with this {field} already exists"
        ctx = context or {}
        ctx["resource"] = resource
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)


class DatabaseError(ChirpError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; the original
    exception type travels in `context` for the server log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
