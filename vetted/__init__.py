"""
vetted - composable runtime validation with structured, path-aware errors.

Usage:
    from vetted import Object, Array, String, Number, Email

    schema = Object({
        "name": String().required(),
        "email": Email().nullable(),
        "tags": Array(String()),
    })

    result = schema.validate(payload)
    if not result.success:
        for error in result.errors:
            print(".".join(error.path), error.message)
"""

import logging

from .context import current_options, validation_context
from .core import AllV, CustomV, DictV, ListV, NullableV, RequiredV, Schema, UnionV, V
from .options import DEFAULT_MESSAGES, Messages, ValidationOptions
from .schema import to_pydantic, validate
from .types import (
    MISSING,
    Err,
    ErrorKind,
    Ok,
    Outcome,
    Pending,
    ValidationError,
    ValidationResult,
)
from .validators import (
    Array,
    Between,
    Boolean,
    Date,
    Email,
    Eq,
    Gt,
    Gte,
    InSet,
    Lt,
    Lte,
    MaxLength,
    MinLength,
    Number,
    Object,
    Pattern,
    Predicate,
    String,
    Union,
    Url,
    to_schema,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Result types
    "Ok",
    "Err",
    "Pending",
    "Outcome",
    "ValidationResult",
    "ValidationError",
    "ErrorKind",
    "MISSING",
    # Options
    "ValidationOptions",
    "Messages",
    "DEFAULT_MESSAGES",
    "validation_context",
    "current_options",
    # Core
    "Schema",
    "V",
    "RequiredV",
    "NullableV",
    "CustomV",
    "DictV",
    "ListV",
    "UnionV",
    "AllV",
    "to_schema",
    # Builders
    "String",
    "Number",
    "Boolean",
    "Date",
    "Email",
    "Url",
    "MinLength",
    "MaxLength",
    "Pattern",
    "Predicate",
    "Eq",
    "Gt",
    "Gte",
    "Lt",
    "Lte",
    "Between",
    "InSet",
    "Array",
    "Object",
    "Union",
    # Schema
    "validate",
    "to_pydantic",
]
