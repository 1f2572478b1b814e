"""
Schema operations for vetted.

Provides validate() and to_pydantic() functions.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Annotated, Any
from typing import Optional as TypingOptional
from typing import Union as TypingUnion

from pydantic import BeforeValidator, create_model

from .core import AllV, CustomV, DictV, ListV, NullableV, RequiredV, Schema, UnionV, V
from .options import ValidationOptions
from .types import MISSING, Err, Ok, Outcome, Pending, ValidationError
from .validators import to_schema


def validate(
    data: Any,
    schema: Any,
    options: ValidationOptions | Mapping[str, Any] | None = None,
) -> Outcome:
    """
    Validate data against a schema or schema shorthand.

    Args:
        data: The value to validate
        schema: A Schema, or shorthand accepted by to_schema()
        options: Optional message overrides

    Returns:
        Ok(value) if validation passes
        Err(errors) if validation fails
        Pending if an async custom predicate is involved

    Usage:
        schema = {
            "name": String().required(),
            "email": Email(),
            "age": Number() & Gte(0),
        }
        result = validate({"name": "Alice", "email": "a@b.co", "age": 30}, schema)
    """
    return to_schema(schema).validate(data, options)


def to_pydantic(name: str, schema: Any) -> type:
    """
    Compile an object schema to a Pydantic model.

    Each field runs its vetted schema as a before-validator, so the model
    accepts exactly what the schema accepts: formats, lengths and custom
    predicates included. A field is required in the model unless its schema
    accepts a missing value; only nullable fields admit None.

    Args:
        name: Name of the generated model class
        schema: An Object schema, or dict shorthand

    Returns:
        A Pydantic BaseModel subclass

    Raises:
        TypeError: If the schema is not an object schema

    Usage:
        User = to_pydantic("User", {
            "name": String().required(),
            "email": Email().nullable(),
        })
        user = User(name="Alice", email=None)

    Async predicates cannot run inside pydantic validation; a field whose
    schema returns a Pending fails with a ValueError.
    """
    base = _strip_modifiers(to_schema(schema))
    if not isinstance(base, DictV):
        raise TypeError("Schema must be an object schema")

    fields: dict[str, Any] = {}

    for key, v in base.fields.items():
        annotation = Annotated[_annotation(v), BeforeValidator(_run_schema(v))]
        if _accepts_missing(v):
            fields[key] = (annotation, None)
        else:
            fields[key] = (annotation, ...)

    return create_model(name, **fields)


def _accepts_missing(v: Schema) -> bool:
    return isinstance(v.validate(MISSING), Ok)


def _run_schema(v: Schema) -> Callable[[Any], Any]:
    def check(value: Any) -> Any:
        outcome = v.validate(value)
        if isinstance(outcome, Pending):
            raise ValueError("Async checks cannot run inside a pydantic model")
        if isinstance(outcome, Err):
            raise ValueError("; ".join(_describe(error) for error in outcome.errors))
        return outcome.value

    return check


def _describe(error: ValidationError) -> str:
    if error.path:
        return f"{'.'.join(error.path)}: {error.message}"
    return error.message


def _strip_modifiers(v: Schema) -> Schema:
    while isinstance(v, (RequiredV, NullableV, CustomV)):
        v = v.inner
    return v


def _annotation(v: Schema) -> Any:
    """Extract the Python type a schema accepts."""
    match v:
        case NullableV(inner=inner):
            return TypingOptional[_annotation(inner)]
        case RequiredV(inner=inner) | CustomV(inner=inner):
            return _annotation(inner)
        case V(type_hint=t):
            return t or Any
        case DictV():
            return dict[str, Any]
        case ListV(item=item):
            return list[_annotation(item)]  # type: ignore[misc]
        case UnionV(branches=branches):
            return TypingUnion[tuple(_annotation(b) for b in branches)]
        case AllV(steps=steps):
            return _annotation(steps[0])

    return Any
