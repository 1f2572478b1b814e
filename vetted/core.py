"""
Core schema classes for vetted.

Every schema is an immutable node. Leaves (V) wrap a single check;
modifiers (RequiredV, NullableV, CustomV) wrap another node; composites
(DictV, ListV, UnionV, AllV) own their children.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from functools import partial
from types import MappingProxyType
from typing import Any

from .context import resolve_options
from .lib.outcome_helpers import collect, resolve, settle
from .options import DEFAULT_MESSAGES, ValidationOptions
from .types import (
    MISSING,
    Err,
    ErrorKind,
    Ok,
    Outcome,
    Pending,
    ValidationError,
    ValidationResult,
    fail,
)

logger = logging.getLogger(__name__)

CheckFn = Callable[[Any, ValidationOptions], ValidationResult]
CustomFn = Callable[[Any], bool | Awaitable[bool]]


class Schema:
    """
    Base for all schema nodes.

    ``validate`` never raises for bad input: it returns Ok, Err, or a
    Pending when an asynchronous custom predicate is involved.
    """

    __slots__ = ()

    def validate(
        self,
        value: Any,
        options: ValidationOptions | Mapping[str, Any] | None = None,
    ) -> Outcome:
        """
        Validate a value.

        Args:
            value: The input. Use MISSING for an absent value.
            options: Message overrides; defaults to the active
                validation_context.

        Returns:
            Ok(value) if validation passes
            Err(errors) if validation fails
            Pending if an async predicate must settle first
        """
        return self._validate(value, resolve_options(options))

    async def validate_async(
        self,
        value: Any,
        options: ValidationOptions | Mapping[str, Any] | None = None,
    ) -> ValidationResult:
        """Validate a value, awaiting any pending predicate."""
        return await resolve(self.validate(value, options))

    def required(self, message: str | None = None) -> RequiredV:
        """Return a schema that rejects MISSING before running this one."""
        return RequiredV(inner=self, message=message)

    def nullable(self, message: str | None = None) -> NullableV:
        """Return a schema that accepts None before running this one."""
        return NullableV(inner=self, message=message)

    def custom(self, predicate: CustomFn, message: str | None = None) -> CustomV:
        """
        Return a schema that runs ``predicate`` on this schema's output.

        The predicate may be sync or async. An async predicate makes
        validate() return a Pending.
        """
        return CustomV(inner=self, predicate=predicate, message=message)

    @property
    def is_required(self) -> bool:
        return False

    @property
    def is_nullable(self) -> bool:
        return False

    def __or__(self, other: Any) -> UnionV:
        """
        Combine as alternatives: the first passing schema wins.

        Usage:
            String() | Number()
        """
        if not isinstance(other, Schema):
            return NotImplemented
        return UnionV(branches=(*_union_parts(self), *_union_parts(other)))

    def __and__(self, other: Any) -> AllV:
        """
        Combine in sequence: each schema receives the previous one's output.

        Usage:
            String() & MinLength(3)
        """
        if not isinstance(other, Schema):
            return NotImplemented
        return AllV(steps=(*_all_parts(self), *_all_parts(other)))

    def _validate(self, value: Any, options: ValidationOptions) -> Outcome:
        if value is None:
            message = options.message("nullable", None, DEFAULT_MESSAGES["nullable"])
            return fail(ErrorKind.NULLABLE, message)
        return self._check(value, options)

    def _check(self, value: Any, options: ValidationOptions) -> Outcome:
        raise NotImplementedError


def _union_parts(schema: Schema) -> tuple[Schema, ...]:
    if isinstance(schema, UnionV) and schema.message is None:
        return schema.branches
    return (schema,)


def _all_parts(schema: Schema) -> tuple[Schema, ...]:
    if isinstance(schema, AllV):
        return schema.steps
    return (schema,)


def _raised(exc: Exception) -> Err:
    logger.debug("Predicate raised %r; reporting as a validation error", exc)
    return fail(ErrorKind.CUSTOM, f"Validation error: {exc}")


# Leaf and modifiers


@dataclass(frozen=True, slots=True)
class V(Schema):
    """
    Leaf validator node.

    Wraps one check function ``check(value, options) -> Ok | Err``. A check
    that raises is reported as a single error instead of propagating.
    """

    check: CheckFn
    type_hint: Any = None
    name: str | None = None

    def _check(self, value: Any, options: ValidationOptions) -> Outcome:
        try:
            return self.check(value, options)
        except Exception as e:
            return _raised(e)


@dataclass(frozen=True, slots=True)
class RequiredV(Schema):
    """Rejects MISSING; everything else goes to the inner schema."""

    inner: Schema
    message: str | None = None

    @property
    def is_required(self) -> bool:
        return True

    @property
    def is_nullable(self) -> bool:
        return self.inner.is_nullable

    def _validate(self, value: Any, options: ValidationOptions) -> Outcome:
        # None is not MISSING: it falls through to the inner null gate
        if value is MISSING:
            message = options.message("required", self.message, DEFAULT_MESSAGES["required"])
            return fail(ErrorKind.REQUIRED, message)
        return self.inner._validate(value, options)


@dataclass(frozen=True, slots=True)
class NullableV(Schema):
    """
    Accepts None outright; everything else goes to the inner schema.

    ``message`` is kept for introspection only: a nullable schema never
    reports a null error.
    """

    inner: Schema
    message: str | None = None

    @property
    def is_required(self) -> bool:
        return self.inner.is_required

    @property
    def is_nullable(self) -> bool:
        return True

    def _validate(self, value: Any, options: ValidationOptions) -> Outcome:
        if value is None:
            return Ok(None)
        return self.inner._validate(value, options)


@dataclass(frozen=True, slots=True)
class CustomV(Schema):
    """Runs a user predicate on the inner schema's successful output."""

    inner: Schema
    predicate: CustomFn
    message: str | None = None

    @property
    def is_required(self) -> bool:
        return self.inner.is_required

    @property
    def is_nullable(self) -> bool:
        return self.inner.is_nullable

    def _validate(self, value: Any, options: ValidationOptions) -> Outcome:
        outcome = self.inner._validate(value, options)
        # predicates never see None, even when nullable() accepted it
        if value is None:
            return outcome
        if isinstance(outcome, Pending):
            return Pending(partial(self._after_inner, outcome, options))
        return self._apply(outcome, options)

    def _apply(self, result: ValidationResult, options: ValidationOptions) -> Outcome:
        if isinstance(result, Err):
            return result
        value = result.value

        # coroutine functions are not called until the Pending is awaited
        if inspect.iscoroutinefunction(self.predicate):
            logger.debug("Custom predicate is async; result is pending")
            return Pending(partial(self._settle, partial(self.predicate, value), value, options))

        try:
            verdict = self.predicate(value)
        except Exception as e:
            return _raised(e)

        if inspect.isawaitable(verdict):
            logger.debug("Custom predicate returned an awaitable; result is pending")
            return Pending(partial(self._settle, lambda: verdict, value, options))
        return self._judge(verdict, value, options)

    async def _after_inner(self, pending: Pending, options: ValidationOptions) -> ValidationResult:
        return await resolve(self._apply(await pending, options))

    async def _settle(
        self,
        start: Callable[[], Awaitable[Any]],
        value: Any,
        options: ValidationOptions,
    ) -> ValidationResult:
        try:
            passed = await start()
        except Exception as e:
            return _raised(e)
        return self._judge(passed, value, options)

    def _judge(self, passed: Any, value: Any, options: ValidationOptions) -> ValidationResult:
        if passed:
            return Ok(value)
        message = options.message("custom", self.message, DEFAULT_MESSAGES["custom"])
        return fail(ErrorKind.CUSTOM, message)


# Composites


@dataclass(frozen=True, slots=True)
class DictV(Schema):
    """Validator for mappings with a fixed set of named fields."""

    fields: Mapping[str, Schema]
    message: str | None = None

    def __post_init__(self) -> None:
        for key, schema in self.fields.items():
            if not isinstance(key, str):
                raise TypeError(f"Field names must be str, got {type(key).__name__}")
            if not isinstance(schema, Schema):
                raise TypeError(
                    f"Field {key!r} must be a Schema, got {type(schema).__name__}"
                )
        object.__setattr__(self, "fields", dict(self.fields))

    @property
    def shape(self) -> Mapping[str, Schema]:
        return MappingProxyType(self.fields)

    def _check(self, value: Any, options: ValidationOptions) -> Outcome:
        if not isinstance(value, Mapping):
            message = options.message("type", self.message, DEFAULT_MESSAGES["object"])
            return fail(ErrorKind.TYPE_MISMATCH, message)

        keyed = [
            (key, schema._validate(value.get(key, MISSING), options))
            for key, schema in self.fields.items()
        ]
        return settle(keyed, self._assemble)

    @staticmethod
    def _assemble(keyed: Sequence[tuple[str, ValidationResult]]) -> ValidationResult:
        values, errors = collect(keyed)
        return Err(errors) if errors else Ok(dict(values))


@dataclass(frozen=True, slots=True)
class ListV(Schema):
    """Validator for lists (or tuples) whose items share one schema."""

    item: Schema
    message: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.item, Schema):
            raise TypeError(f"Item must be a Schema, got {type(self.item).__name__}")

    def _check(self, value: Any, options: ValidationOptions) -> Outcome:
        if not isinstance(value, (list, tuple)):
            message = options.message("type", self.message, DEFAULT_MESSAGES["array"])
            return fail(ErrorKind.TYPE_MISMATCH, message)

        keyed = [
            (str(index), self.item._validate(item, options))
            for index, item in enumerate(value)
        ]
        return settle(keyed, self._assemble)

    @staticmethod
    def _assemble(keyed: Sequence[tuple[str, ValidationResult]]) -> ValidationResult:
        values, errors = collect(keyed)
        return Err(errors) if errors else Ok([v for _, v in values])


@dataclass(frozen=True, slots=True)
class UnionV(Schema):
    """
    Validator that tries alternatives in order.

    The first passing branch is returned and later branches are never run.
    If none pass, the union's own error comes first, followed by every
    branch's errors in branch order, paths untouched.
    """

    branches: tuple[Schema, ...]
    message: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "branches", tuple(self.branches))
        if not self.branches:
            raise ValueError("Union requires at least one schema")
        for branch in self.branches:
            if not isinstance(branch, Schema):
                raise TypeError(
                    f"Union branches must be Schemas, got {type(branch).__name__}"
                )

    def _check(self, value: Any, options: ValidationOptions) -> Outcome:
        return self._try_from(0, value, options, [])

    def _try_from(
        self,
        start: int,
        value: Any,
        options: ValidationOptions,
        errors: list[ValidationError],
    ) -> Outcome:
        for index in range(start, len(self.branches)):
            outcome = self.branches[index]._validate(value, options)
            if isinstance(outcome, Pending):
                return Pending(partial(self._resume, outcome, index + 1, value, options, errors))
            if isinstance(outcome, Ok):
                return outcome
            errors.extend(outcome.errors)

        logger.debug("No branch of %d matched", len(self.branches))
        message = options.message("union", self.message, DEFAULT_MESSAGES["union"])
        head = ValidationError(path=(), message=message, kind=ErrorKind.UNION_NO_MATCH)
        return Err([head, *errors])

    async def _resume(
        self,
        pending: Pending,
        start: int,
        value: Any,
        options: ValidationOptions,
        errors: list[ValidationError],
    ) -> ValidationResult:
        result = await pending
        if isinstance(result, Ok):
            return result
        errors.extend(result.errors)
        return await resolve(self._try_from(start, value, options, errors))


@dataclass(frozen=True, slots=True)
class AllV(Schema):
    """
    Validator that chains schemas, feeding each output into the next.

    Stops at the first failure. A None accepted by a nullable step ends the
    chain successfully.
    """

    steps: tuple[Schema, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "steps", tuple(self.steps))
        if not self.steps:
            raise ValueError("AllV requires at least one schema")

    @property
    def is_required(self) -> bool:
        return self.steps[0].is_required

    @property
    def is_nullable(self) -> bool:
        return self.steps[0].is_nullable

    def _validate(self, value: Any, options: ValidationOptions) -> Outcome:
        return self._run_from(0, value, options)

    def _run_from(self, start: int, value: Any, options: ValidationOptions) -> Outcome:
        for index in range(start, len(self.steps)):
            outcome = self.steps[index]._validate(value, options)
            if isinstance(outcome, Pending):
                return Pending(partial(self._resume, outcome, index + 1, options))
            if isinstance(outcome, Err) or outcome.value is None:
                return outcome
            value = outcome.value
        return Ok(value)

    async def _resume(
        self, pending: Pending, start: int, options: ValidationOptions
    ) -> ValidationResult:
        result = await pending
        if isinstance(result, Err) or result.value is None:
            return result
        return await resolve(self._run_from(start, result.value, options))
