"""
Built-in schema builders for vetted.

Provides factory functions that return schema nodes.
"""

from __future__ import annotations

import datetime as dt
import re
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from pydantic import AnyUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .core import CustomV, DictV, ListV, Schema, UnionV, V
from .options import DEFAULT_MESSAGES, ValidationOptions
from .types import ErrorKind, Ok, ValidationResult, fail

_DATETIME = TypeAdapter(dt.datetime)
_URL = TypeAdapter(AnyUrl)
_EMAIL = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


def _type_error(options: ValidationOptions, message: str | None, name: str) -> ValidationResult:
    return fail(
        ErrorKind.TYPE_MISMATCH, options.message("type", message, DEFAULT_MESSAGES[name])
    )


# Primitive leaves


def String(message: str | None = None) -> V:
    """
    Validate that value is a str. The value is returned unchanged.

    Usage:
        String()
        String("Name must be text")
    """

    def check(x: Any, options: ValidationOptions) -> ValidationResult:
        if not isinstance(x, str):
            return _type_error(options, message, "string")
        return Ok(x)

    return V(check=check, type_hint=str, name="string")


def Number(message: str | None = None) -> V:
    """Validate that value is an int or float (bool is rejected)."""

    def check(x: Any, options: ValidationOptions) -> ValidationResult:
        if isinstance(x, bool) or not isinstance(x, (int, float)):
            return _type_error(options, message, "number")
        return Ok(x)

    return V(check=check, type_hint=int | float, name="number")


def Boolean(message: str | None = None) -> V:
    """Validate that value is a bool."""

    def check(x: Any, options: ValidationOptions) -> ValidationResult:
        if not isinstance(x, bool):
            return _type_error(options, message, "boolean")
        return Ok(x)

    return V(check=check, type_hint=bool, name="boolean")


def Date(message: str | None = None, invalid_message: str | None = None) -> V:
    """
    Validate a datetime, date, or date string, always producing a datetime.

    Strings are parsed with pydantic's datetime parser (ISO 8601 and
    unix timestamps). A plain date becomes midnight of that day.

    Usage:
        Date()
        Date(invalid_message="Not a real day")
    """

    def check(x: Any, options: ValidationOptions) -> ValidationResult:
        if isinstance(x, dt.datetime):
            return Ok(x)
        if isinstance(x, dt.date):
            return Ok(dt.datetime.combine(x, dt.time()))
        if not isinstance(x, str):
            return _type_error(options, message, "date")

        try:
            parsed = _DATETIME.validate_python(x)
        except PydanticValidationError:
            text = options.message("invalid_date", invalid_message, DEFAULT_MESSAGES["invalid_date"])
            return fail(ErrorKind.INVALID_DATE, text)
        return Ok(parsed)

    return V(check=check, type_hint=dt.datetime, name="date")


def Email(message: str | None = None) -> V:
    """Validate that value is a string shaped like an email address."""

    def check(x: Any, options: ValidationOptions) -> ValidationResult:
        if not isinstance(x, str):
            return _type_error(options, None, "string")
        if _EMAIL.fullmatch(x) is None:
            return fail(ErrorKind.FORMAT, options.message("email", message, DEFAULT_MESSAGES["email"]))
        return Ok(x)

    return V(check=check, type_hint=str, name="email")


def Url(message: str | None = None) -> V:
    """
    Validate that value is an absolute URL.

    Parsing is delegated to pydantic's AnyUrl; the original string is
    returned, not the parsed URL.
    """

    def check(x: Any, options: ValidationOptions) -> ValidationResult:
        if not isinstance(x, str):
            return _type_error(options, None, "string")
        try:
            _URL.validate_python(x)
        except PydanticValidationError:
            return fail(ErrorKind.FORMAT, options.message("url", message, DEFAULT_MESSAGES["url"]))
        return Ok(x)

    return V(check=check, type_hint=str, name="url")


def _length_of(x: Any) -> int | None:
    if isinstance(x, (str, list, tuple)):
        return len(x)
    return None


def MinLength(n: int, message: str | None = None) -> V:
    """
    Validate minimum length of a str, list, or tuple.

    Usage:
        MinLength(3)
        MinLength(3, "Too short, need {min}")
    """
    if n < 0:
        raise ValueError(f"MinLength bound must be >= 0, got {n}")

    def check(x: Any, options: ValidationOptions) -> ValidationResult:
        length = _length_of(x)
        if length is None:
            return fail(ErrorKind.TYPE_MISMATCH, options.message("type", None, DEFAULT_MESSAGES["sized"]))
        if length < n:
            text = options.message("min_length", message, DEFAULT_MESSAGES["min_length"])
            return fail(ErrorKind.FORMAT, text.replace("{min}", str(n)))
        return Ok(x)

    return V(check=check, name="min_length")


def MaxLength(n: int, message: str | None = None) -> V:
    """Validate maximum length of a str, list, or tuple."""
    if n < 0:
        raise ValueError(f"MaxLength bound must be >= 0, got {n}")

    def check(x: Any, options: ValidationOptions) -> ValidationResult:
        length = _length_of(x)
        if length is None:
            return fail(ErrorKind.TYPE_MISMATCH, options.message("type", None, DEFAULT_MESSAGES["sized"]))
        if length > n:
            text = options.message("max_length", message, DEFAULT_MESSAGES["max_length"])
            return fail(ErrorKind.FORMAT, text.replace("{max}", str(n)))
        return Ok(x)

    return V(check=check, name="max_length")


def Pattern(regex: str | re.Pattern[str], message: str | None = None) -> V:
    """
    Validate that a string contains a match for ``regex``.

    Anchor the pattern (^...$) to require a full match.

    Usage:
        Pattern(r"^[a-z]+$")
        Pattern(re.compile(r"\\d{3}-\\d{4}"))
    """
    compiled = re.compile(regex)

    def check(x: Any, options: ValidationOptions) -> ValidationResult:
        if not isinstance(x, str):
            return _type_error(options, None, "string")
        if compiled.search(x) is None:
            return fail(ErrorKind.FORMAT, options.message("pattern", message, DEFAULT_MESSAGES["pattern"]))
        return Ok(x)

    return V(check=check, type_hint=str, name="pattern")


def Predicate(fn: Callable[[Any], Any], message: str | None = None) -> CustomV:
    """
    Create a schema from an arbitrary predicate, sync or async.

    Any non-None value is handed to ``fn``. An async ``fn`` makes
    validate() return a Pending.

    Usage:
        Predicate(lambda x: x > 0, "Must be positive")
        Predicate(str.isalpha, "Must be alphabetic")
        Predicate(user_exists, "Unknown user")  # async def user_exists(x)
    """
    return V(check=_accept, name="predicate").custom(fn, message)


def _accept(x: Any, options: ValidationOptions) -> ValidationResult:
    return Ok(x)


# Comparison leaves


def _compare(test: Callable[[Any], bool], default: str, message: str | None, name: str) -> V:
    def check(x: Any, options: ValidationOptions) -> ValidationResult:
        if test(x):
            return Ok(x)
        return fail(ErrorKind.FORMAT, options.message("custom", message, default))

    return V(check=check, name=name)


def Eq(value: Any, message: str | None = None) -> V:
    """Validate exact equality."""
    return _compare(lambda x: x == value, f"Must equal {value!r}", message, "eq")


def Gt(value: Any, message: str | None = None) -> V:
    """Validate greater than."""
    return _compare(lambda x: x > value, f"Must be > {value}", message, "gt")


def Gte(value: Any, message: str | None = None) -> V:
    """Validate greater than or equal."""
    return _compare(lambda x: x >= value, f"Must be >= {value}", message, "gte")


def Lt(value: Any, message: str | None = None) -> V:
    """Validate less than."""
    return _compare(lambda x: x < value, f"Must be < {value}", message, "lt")


def Lte(value: Any, message: str | None = None) -> V:
    """Validate less than or equal."""
    return _compare(lambda x: x <= value, f"Must be <= {value}", message, "lte")


def Between(lower: Any, upper: Any, inclusive: bool = True, message: str | None = None) -> V:
    """Validate value is between bounds."""
    if inclusive:
        return _compare(
            lambda x: lower <= x <= upper,
            f"Must be between {lower} and {upper}",
            message,
            "between",
        )
    return _compare(
        lambda x: lower < x < upper,
        f"Must be between {lower} and {upper} (exclusive)",
        message,
        "between",
    )


def InSet(values: set | frozenset | list | tuple, message: str | None = None) -> V:
    """
    Validate value is in a set of allowed values.

    Usage:
        InSet({"active", "inactive", "pending"})
    """
    allowed = tuple(values)
    shown = ", ".join(repr(v) for v in allowed)
    return _compare(lambda x: x in allowed, f"Must be one of: {shown}", message, "in_set")


# Composites


def Object(shape: Mapping[str, Any], message: str | None = None) -> DictV:
    """
    Validate a mapping field by field.

    Every field is checked; errors carry the field name as the first path
    segment. Keys not in ``shape`` are ignored and left out of the result.

    Usage:
        Object({"name": String().required(), "age": Number()})
    """
    if not isinstance(shape, Mapping):
        raise TypeError(f"Object shape must be a mapping, got {type(shape).__name__}")
    return DictV(fields={k: to_schema(v) for k, v in shape.items()}, message=message)


def Array(item: Any, message: str | None = None) -> ListV:
    """
    Validate a list or tuple whose items all match ``item``.

    Usage:
        Array(Number())
    """
    return ListV(item=to_schema(item), message=message)


def Union(branches: Sequence[Any], message: str | None = None) -> UnionV:
    """
    Validate against alternatives, in order; the first match wins.

    Usage:
        Union([String(), Number()])
    """
    if isinstance(branches, (str, bytes)) or not isinstance(branches, Sequence):
        raise TypeError("Union branches must be a sequence of schemas")
    return UnionV(branches=tuple(to_schema(b) for b in branches), message=message)


_TYPE_BUILDERS: dict[type, Callable[[], V]] = {
    str: String,
    bool: Boolean,
    int: Number,
    float: Number,
    dt.datetime: Date,
}


def to_schema(v: Any) -> Schema:
    """
    Coerce shorthand to a schema.

    Conversion rules:
        Schema -> pass through
        str, int, float, bool, datetime -> the matching leaf
        dict -> Object with recursive conversion
        list -> Array of list[0], or of a Union of all items
        Callable -> Predicate(callable)
    """
    if isinstance(v, Schema):
        return v

    if isinstance(v, type):
        builder = _TYPE_BUILDERS.get(v)
        if builder is None:
            raise TypeError(f"No schema for type {v.__name__}")
        return builder()

    if isinstance(v, dict):
        return Object(v)

    if isinstance(v, list):
        if len(v) == 0:
            raise ValueError("Empty list cannot be converted to a schema")
        if len(v) == 1:
            return Array(v[0])
        return Array(Union(v))

    if callable(v):
        return Predicate(v)

    raise TypeError(f"Cannot convert {type(v).__name__} to schema")
