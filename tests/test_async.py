"""
Tests for asynchronous custom predicates and how composites settle them.
"""

import asyncio
import gc
import warnings

import pytest

from vetted import (
    Array,
    Err,
    ErrorKind,
    Number,
    Object,
    Ok,
    Pending,
    Predicate,
    String,
    Union,
    to_schema,
)


async def _slow_fail(x):
    raise RuntimeError("lookup failed")


class TestAsyncLeaf:
    @pytest.mark.asyncio
    async def test_returns_pending(self, async_is_positive):
        outcome = Number().custom(async_is_positive).validate(5)
        assert isinstance(outcome, Pending)
        assert await outcome == Ok(5)

    @pytest.mark.asyncio
    async def test_failing_async_predicate(self, async_is_positive):
        outcome = Number().custom(async_is_positive, "Must be positive").validate(-5)
        result = await outcome
        assert isinstance(result, Err)
        assert result.errors[0].message == "Must be positive"
        assert result.errors[0].kind is ErrorKind.CUSTOM

    def test_inner_failure_is_ready(self, async_is_positive):
        outcome = Number().custom(async_is_positive).validate("x")
        assert isinstance(outcome, Err)

    @pytest.mark.asyncio
    async def test_raising_async_predicate(self):
        result = await Number().custom(_slow_fail).validate(1)
        assert result.errors[0].message == "Validation error: lookup failed"

    @pytest.mark.asyncio
    async def test_chained_async_predicates(self, async_is_positive):
        schema = Number().custom(async_is_positive).custom(lambda x: x < 10)
        assert await schema.validate_async(5) == Ok(5)
        assert (await schema.validate_async(50)).errors[0].kind is ErrorKind.CUSTOM
        assert isinstance(await schema.validate_async(-1), Err)

    @pytest.mark.asyncio
    async def test_validate_async_on_sync_schema(self):
        assert await String().validate_async("x") == Ok("x")


class TestSyncStaysSync:
    def test_composites_without_async_return_ready(self):
        schema = Object({"a": Array(Union([String(), Number()]))})
        assert schema.validate({"a": ["x", 1]}) == Ok({"a": ["x", 1]})


class TestAsyncInObject:
    @pytest.mark.asyncio
    async def test_object_awaits_nested_failure(self, async_is_positive):
        schema = Object({"name": String(), "age": Number().custom(async_is_positive)})
        outcome = schema.validate({"name": 1, "age": -3})
        assert isinstance(outcome, Pending)
        result = await outcome
        assert [e.path for e in result.errors] == [("name",), ("age",)]
        assert result.errors[1].kind is ErrorKind.CUSTOM

    @pytest.mark.asyncio
    async def test_object_awaits_nested_success(self, async_is_positive):
        schema = Object({"age": Number().custom(async_is_positive)})
        assert await schema.validate({"age": 3}) == Ok({"age": 3})

    def test_type_mismatch_before_children_is_ready(self, async_is_positive):
        schema = Object({"age": Number().custom(async_is_positive)})
        assert isinstance(schema.validate("nope"), Err)


class TestAsyncInArray:
    @pytest.mark.asyncio
    async def test_array_preserves_order_and_paths(self, async_is_positive):
        schema = Array(Number().custom(async_is_positive))
        result = await schema.validate([1, -2, 3, -4])
        assert [e.path for e in result.errors] == [("1",), ("3",)]
        assert await schema.validate([1, 2]) == Ok([1, 2])


class TestAsyncInUnion:
    @pytest.mark.asyncio
    async def test_pending_branch_failure_falls_through(self, async_is_positive):
        schema = Union([Number().custom(async_is_positive), String()])
        result = await schema.validate_async(-1)
        assert [e.kind for e in result.errors] == [
            ErrorKind.UNION_NO_MATCH,
            ErrorKind.CUSTOM,
            ErrorKind.TYPE_MISMATCH,
        ]

    @pytest.mark.asyncio
    async def test_pending_branch_success_short_circuits(self, async_is_positive):
        calls = []
        later = Number().custom(lambda x: calls.append(x) or True)
        schema = Union([Number().custom(async_is_positive), later])
        assert await schema.validate_async(2) == Ok(2)
        assert calls == []

    @pytest.mark.asyncio
    async def test_later_branch_runs_after_pending_failure(self, async_is_positive):
        schema = Union([Number().custom(async_is_positive), Number()])
        assert await schema.validate_async(-1) == Ok(-1)

    @pytest.mark.asyncio
    async def test_deep_nesting(self, async_is_positive):
        schema = Object(
            {"groups": Array(Object({"score": Union([Number().custom(async_is_positive)])}))}
        )
        result = await schema.validate_async({"groups": [{"score": 1}, {"score": -1}]})
        assert [e.path for e in result.errors] == [
            ("groups", "1", "score"),
            ("groups", "1", "score"),
        ]


class TestConcurrentUse:
    @pytest.mark.asyncio
    async def test_one_schema_many_calls(self, async_is_positive):
        schema = Array(Number().custom(async_is_positive))
        results = await asyncio.gather(
            schema.validate_async([1]), schema.validate_async([-1]), schema.validate_async([])
        )
        assert [r.success for r in results] == [True, False, True]


class TestAsyncPredicate:
    @pytest.mark.asyncio
    async def test_async_predicate_failure_is_reported(self):
        async def never(x):
            return False

        outcome = Predicate(never, "Rejected").validate(5)
        assert isinstance(outcome, Pending)
        result = await outcome
        assert isinstance(result, Err)
        assert result.errors[0].message == "Rejected"

    @pytest.mark.asyncio
    async def test_async_callable_shorthand(self):
        async def is_even(x):
            return x % 2 == 0

        schema = to_schema({"n": is_even})
        assert await schema.validate_async({"n": 4}) == Ok({"n": 4})
        result = await schema.validate_async({"n": 3})
        assert result.errors[0].path == ("n",)
        assert result.errors[0].kind is ErrorKind.CUSTOM

    @pytest.mark.asyncio
    async def test_predicate_returning_awaitable(self, async_is_positive):
        result = await Predicate(async_is_positive).validate_async(-1)
        assert isinstance(result, Err)


class TestPendingReuse:
    @pytest.mark.asyncio
    async def test_same_outcome_awaited_twice(self, async_is_positive):
        outcome = Object({"n": Number().custom(async_is_positive)}).validate({"n": 5})
        assert await outcome == Ok({"n": 5})
        assert await outcome == Ok({"n": 5})

    def test_unawaited_outcome_leaves_no_coroutines(self):
        async def record(x):
            return True

        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            outcome = Array(Number().custom(record)).validate([1, 2])
            assert isinstance(outcome, Pending)
            del outcome
            gc.collect()

        assert not [w for w in caught if "never awaited" in str(w.message)]
