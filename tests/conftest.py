import asyncio
from typing import Any

import pytest

from vetted import Array, Number, Object, String


@pytest.fixture(scope="function")
def user_schema():
    return Object(
        {
            "name": String().required(),
            "age": Number(),
            "tags": Array(String()),
        }
    )


@pytest.fixture(scope="function")
def valid_user() -> dict[str, Any]:
    return {"name": "Alice", "age": 30, "tags": ["admin", "ops"]}


async def _async_verdict(passed: bool) -> bool:
    await asyncio.sleep(0)
    return passed


@pytest.fixture
def async_is_positive():
    """Async predicate that yields to the loop before answering."""

    def predicate(x: Any):
        return _async_verdict(x > 0)

    return predicate
