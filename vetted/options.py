"""
Message overrides threaded through every validate call.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_MESSAGES: Mapping[str, str] = {
    "string": "Value must be a string",
    "number": "Value must be a number",
    "boolean": "Value must be a boolean",
    "date": "Value must be a date or date string",
    "invalid_date": "Invalid date",
    "array": "Value must be an array",
    "object": "Value must be an object",
    "required": "Value is required",
    "nullable": "Value cannot be null",
    "union": "Value does not match any schema in the union",
    "custom": "Invalid value",
    "email": "Value must be a valid email address",
    "url": "Value must be a valid URL",
    "min_length": "Value must have at least {min} characters",
    "max_length": "Value must have at most {max} characters",
    "pattern": "Value does not match the required pattern",
    "sized": "Value must have a length",
}


class Messages(BaseModel):
    """
    Per-call overrides for error text.

    Keys are accepted in camelCase (``minLength``) or snake_case
    (``min_length``). Unknown keys are rejected.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    required: Optional[str] = None
    type: Optional[str] = None
    nullable: Optional[str] = None
    custom: Optional[str] = None
    email: Optional[str] = None
    url: Optional[str] = None
    min_length: Optional[str] = None
    max_length: Optional[str] = None
    pattern: Optional[str] = None
    union: Optional[str] = None
    invalid_date: Optional[str] = None


class ValidationOptions(BaseModel):
    """Read-only options passed unchanged to every schema in a tree."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    messages: Messages = Field(default_factory=Messages)

    @classmethod
    def coerce(cls, options: ValidationOptions | Mapping[str, Any] | None) -> ValidationOptions:
        """
        Normalize user-supplied options.

        Accepts None, a ValidationOptions instance, or a mapping such as
        ``{"messages": {"required": "Fill this in"}}``.

        Raises:
            pydantic.ValidationError: If the mapping holds unknown keys or
                non-string messages.
        """
        if isinstance(options, cls):
            return options
        if options is None:
            return cls()
        return cls.model_validate(options)

    def message(self, key: str, fallback: str | None, default: str) -> str:
        """
        Pick the error text for ``key``.

        Priority: the call-site override, then the message given when the
        schema was built, then the hardcoded default.
        """
        override = getattr(self.messages, key)
        if override is not None:
            return override
        if fallback is not None:
            return fallback
        return default
