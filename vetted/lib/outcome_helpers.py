"""
Helper functions for settling and merging child outcomes in composites.
"""

from collections.abc import Callable, Sequence
from typing import Any

from ..types import Err, Outcome, Pending, ValidationError, ValidationResult

Keyed = Sequence[tuple[str, Outcome]]


async def resolve(outcome: Outcome) -> ValidationResult:
    """Await a Pending outcome; pass a ready result through."""
    if isinstance(outcome, Pending):
        return await outcome
    return outcome


def has_pending(keyed: Keyed) -> bool:
    return any(isinstance(outcome, Pending) for _, outcome in keyed)


def collect(
    keyed: Sequence[tuple[str, ValidationResult]],
) -> tuple[list[tuple[str, Any]], list[ValidationError]]:
    """
    Split ready child results into values and path-prefixed errors.

    Every child is inspected; a failure never hides the ones after it.
    """
    values: list[tuple[str, Any]] = []
    errors: list[ValidationError] = []

    for segment, result in keyed:
        if isinstance(result, Err):
            errors.extend(error.prefixed(segment) for error in result.errors)
        else:
            values.append((segment, result.value))

    return values, errors


def settle(
    keyed: Keyed,
    finish: Callable[[Sequence[tuple[str, ValidationResult]]], ValidationResult],
) -> Outcome:
    """
    Hand child results to ``finish`` once all of them are ready.

    Stays synchronous when no child is pending. Otherwise returns a Pending
    that awaits the pending children in order before calling ``finish``.
    """
    if not has_pending(keyed):
        return finish(keyed)  # type: ignore[arg-type]

    async def _await_children() -> ValidationResult:
        ready = [(segment, await resolve(outcome)) for segment, outcome in keyed]
        return finish(ready)

    return Pending(_await_children)
