"""
Context manager for ambient validation configuration (default messages).
"""

from collections.abc import Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

from .options import ValidationOptions

# Context variable for the options used when validate() is called without any
_default_options: ContextVar[ValidationOptions] = ContextVar(
    "default_options", default=ValidationOptions()
)


def current_options() -> ValidationOptions:
    """Return the options installed by the innermost validation_context."""
    return _default_options.get()


def resolve_options(
    options: ValidationOptions | Mapping[str, Any] | None,
) -> ValidationOptions:
    """Explicit options win; otherwise fall back to the ambient default."""
    if options is None:
        return current_options()
    return ValidationOptions.coerce(options)


@contextmanager
def validation_context(
    *,
    messages: Mapping[str, str] | None = None,
    options: ValidationOptions | Mapping[str, Any] | None = None,
):
    """
    Context manager for default validation options.

    Args:
        messages: Message overrides, e.g. {"required": "Please fill this in"}.
        options: A complete ValidationOptions (or mapping) instead of messages.

    Example:
        from vetted import Object, String, validation_context

        schema = Object({"name": String().required()})

        with validation_context(messages={"required": "Missing!"}):
            schema.validate({})  # errors carry "Missing!"

        # Explicit options passed to validate() still take precedence.
    """
    if messages is not None and options is not None:
        raise ValueError("Pass either messages or options, not both")

    if options is None:
        resolved = ValidationOptions.coerce({"messages": dict(messages or {})})
    else:
        resolved = ValidationOptions.coerce(options)

    token = _default_options.set(resolved)
    try:
        yield resolved
    finally:
        _default_options.reset(token)
