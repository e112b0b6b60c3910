"""
Chirp Backend — Field Permission Rules
=======================================

What:  A small declarative permission layer for Strawberry schemas.
Why:   Authorization is declared as a table of (type, field) → rule instead of
       being sprinkled through resolvers.
How:   `apply_permissions` walks every field of the given Strawberry types
       at schema-build time and wraps its resolver in a PermissionExtension
       carrying the rule that applies to it.

Rule contract:
    A rule wraps a predicate `(parent, args, context, info)`, sync or async.
    True allows the field. False denies it with AuthorizationDeniedError,
    whose message is the same for every rule. A returned ChirpError denies
    it with that error instead (is_authenticated uses this to report
    "Could not authenticate user."). A raised exception is logged and
    treated like False.

Lookup order for a field:
    1. table[TypeName][fieldName]
    2. table[TypeName]["*"]
    3. the ruleset's fallback

    ruleset = RuleSet(
        {
            "Query": {"me": is_authenticated, "*": allow},
            "User": {"*": allow},
        },
        fallback=deny,
    )
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, Mapping, Optional, Union

from strawberry.extensions import FieldExtension
from strawberry.types import Info
from strawberry.utils.str_converters import to_camel_case

from app.exceptions import AuthorizationDeniedError, ChirpError

logger = logging.getLogger(__name__)

TYPE_WILDCARD = "*"

Verdict = Union[bool, ChirpError]
Predicate = Callable[[Any, Dict[str, Any], Any, Info], Union[Verdict, Awaitable[Verdict]]]


class Rule:
    """A named permission predicate."""

    def __init__(self, predicate: Predicate, name: Optional[str] = None):
        self.predicate = predicate
        self.name = name or getattr(predicate, "__name__", "rule")
        self.is_async = inspect.iscoroutinefunction(predicate)

    def __repr__(self) -> str:
        return f"<Rule {self.name}>"

    @staticmethod
    def _verdict(result: Any) -> Verdict:
        if isinstance(result, ChirpError):
            return result
        return bool(result)

    def _denied(self, exc: Exception) -> bool:
        if isinstance(exc, ChirpError):
            logger.info("Rule %s denied access: %s", self.name, exc.message)
        else:
            logger.error("Rule %s raised unexpectedly", self.name, exc_info=exc)
        return False

    def check(self, parent: Any, args: Dict[str, Any], context: Any, info: Info) -> Verdict:
        """Evaluate a sync rule."""
        if self.is_async:
            raise TypeError(f"{self!r} is async and cannot guard a sync field")
        try:
            return self._verdict(self.predicate(parent, args, context, info))
        except Exception as e:
            return self._denied(e)

    async def check_async(
        self, parent: Any, args: Dict[str, Any], context: Any, info: Info
    ) -> Verdict:
        try:
            result = self.predicate(parent, args, context, info)
            if inspect.isawaitable(result):
                result = await result
            return self._verdict(result)
        except Exception as e:
            return self._denied(e)


def rule(predicate: Predicate) -> Rule:
    """Decorator form: `@rule def is_admin(parent, args, context, info): ...`"""
    return Rule(predicate)


allow = Rule(lambda parent, args, context, info: True, name="allow")
deny = Rule(lambda parent, args, context, info: False, name="deny")


def all_of(*rules: Rule) -> Rule:
    """Allow only when every rule allows. The first denial is the verdict."""
    name = "all_of(" + ", ".join(r.name for r in rules) + ")"
    if any(r.is_async for r in rules):
        async def predicate(parent, args, context, info):
            for r in rules:
                verdict = await r.check_async(parent, args, context, info)
                if verdict is not True:
                    return verdict
            return True
    else:
        def predicate(parent, args, context, info):
            for r in rules:
                verdict = r.check(parent, args, context, info)
                if verdict is not True:
                    return verdict
            return True
    return Rule(predicate, name=name)


def any_of(*rules: Rule) -> Rule:
    """Allow when at least one rule allows, else return the last denial."""
    name = "any_of(" + ", ".join(r.name for r in rules) + ")"
    if any(r.is_async for r in rules):
        async def predicate(parent, args, context, info):
            verdict: Verdict = False
            for r in rules:
                verdict = await r.check_async(parent, args, context, info)
                if verdict is True:
                    return True
            return verdict
    else:
        def predicate(parent, args, context, info):
            verdict: Verdict = False
            for r in rules:
                verdict = r.check(parent, args, context, info)
                if verdict is True:
                    return True
            return verdict
    return Rule(predicate, name=name)


class RuleSet:
    """Rule table plus the fallback for fields the table does not mention."""

    def __init__(self, table: Mapping[str, Mapping[str, Rule]], fallback: Rule = deny):
        self.table = {type_name: dict(fields) for type_name, fields in table.items()}
        self.fallback = fallback

    def rule_for(self, type_name: str, field_name: str) -> Rule:
        fields = self.table.get(type_name, {})
        if field_name in fields:
            return fields[field_name]
        if TYPE_WILDCARD in fields:
            return fields[TYPE_WILDCARD]
        return self.fallback


class PermissionExtension(FieldExtension):
    """Runs a rule before the field's resolver."""

    def __init__(self, rule: Rule, type_name: str, field_name: str):
        self.rule = rule
        self.type_name = type_name
        self.field_name = field_name

    def _deny(self, verdict: Verdict) -> ChirpError:
        logger.info("Denied %s.%s by %s", self.type_name, self.field_name, self.rule.name)
        if isinstance(verdict, ChirpError):
            return verdict
        return AuthorizationDeniedError(
            context={"field": f"{self.type_name}.{self.field_name}", "rule": self.rule.name}
        )

    def resolve(self, next_: Callable[..., Any], source: Any, info: Info, **kwargs: Any) -> Any:
        verdict = self.rule.check(source, kwargs, info.context, info)
        if verdict is not True:
            raise self._deny(verdict)
        return next_(source, info, **kwargs)

    async def resolve_async(
        self, next_: Callable[..., Awaitable[Any]], source: Any, info: Info, **kwargs: Any
    ) -> Any:
        verdict = await self.rule.check_async(source, kwargs, info.context, info)
        if verdict is not True:
            raise self._deny(verdict)
        result = next_(source, info, **kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result


def with_permission(field, rule: Rule, type_name: str, field_name: str):
    """Attach `rule` to one Strawberry field, replacing any earlier rule."""
    if rule.is_async and not field.is_async:
        raise TypeError(
            f"{type_name}.{field_name} has a sync resolver but {rule!r} is async"
        )
    field.extensions = [
        ext for ext in field.extensions if not isinstance(ext, PermissionExtension)
    ]
    field.extensions.insert(0, PermissionExtension(rule, type_name, field_name))
    return field


def apply_permissions(ruleset: RuleSet, types: Iterable[type]) -> None:
    """
    Guard every field of `types` with the rule `ruleset` assigns to it.

    Must run before `strawberry.Schema(...)` is constructed, since Strawberry
    reads field extensions when it converts the types. Calling it again
    replaces the rules, so building several schemas in one process is safe.
    """
    for cls in types:
        definition = cls.__strawberry_definition__
        for field in definition.fields:
            field_name = field.graphql_name or to_camel_case(field.python_name)
            with_permission(field, ruleset.rule_for(definition.name, field_name),
                            definition.name, field_name)
