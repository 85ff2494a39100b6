import asyncio

import pytest

from registration_console.models.enums import MutationStatus
from registration_console.query.mutation import Mutation


class TestMutation:
    @pytest.mark.asyncio
    async def test_success_handlers_run_in_registration_order(self):
        calls = []

        async def write(value):
            return value * 2

        async def first(result, variables):
            calls.append(("first", result, variables))

        def second(result, variables):
            calls.append(("second", result, variables))

        mutation = Mutation(write, name="double", on_success=first)
        mutation.add_success_handler(second)

        await mutation.mutate(
            3, on_success=lambda r, v: calls.append(("call_site", r, v))
        )

        assert calls == [
            ("first", 6, 3),
            ("second", 6, 3),
            ("call_site", 6, 3),
        ]
        assert mutation.status == MutationStatus.SUCCESS
        assert mutation.data == 6

    @pytest.mark.asyncio
    async def test_call_site_handler_applies_to_one_dispatch(self):
        calls = []
        mutation = Mutation(lambda v: v, name="echo")

        await mutation.mutate(1, on_success=lambda r, v: calls.append(r))
        await mutation.mutate(2)

        assert calls == [1]

    @pytest.mark.asyncio
    async def test_pending_while_in_flight(self):
        gate = asyncio.Event()

        async def write(_):
            await gate.wait()
            return "ok"

        mutation = Mutation(write, name="slow")
        assert mutation.status == MutationStatus.IDLE

        task = mutation.mutate(None)
        assert mutation.is_pending

        gate.set()
        await task
        assert not mutation.is_pending

    @pytest.mark.asyncio
    async def test_failure_resets_pending_and_skips_success(self):
        success = []
        errors = []
        settled = []

        async def write(_):
            raise ValueError("rejected")

        mutation = Mutation(
            write,
            name="fails",
            on_success=lambda r, v: success.append(r),
            on_error=lambda e, v: errors.append(str(e)),
            on_settled=lambda r, e, v: settled.append((r, str(e))),
        )

        await mutation.mutate("x")

        assert success == []
        assert errors == ["rejected"]
        assert settled == [(None, "rejected")]
        assert mutation.is_error
        assert not mutation.is_pending
        assert isinstance(mutation.error, ValueError)

    @pytest.mark.asyncio
    async def test_no_retry(self):
        attempts = []

        def write(_):
            attempts.append(1)
            raise RuntimeError("down")

        mutation = Mutation(write, name="once")
        await mutation.mutate(None)
        assert len(attempts) == 1

    @pytest.mark.asyncio
    async def test_mutate_async_returns_result(self):
        mutation = Mutation(lambda v: v + 1, name="inc")
        assert await mutation.mutate_async(1) == 2

        failing = Mutation(lambda v: 1 / 0, name="div")
        assert await failing.mutate_async(1) is None

    @pytest.mark.asyncio
    async def test_new_dispatch_clears_previous_error(self):
        results = iter([RuntimeError("first"), "ok"])

        def write(_):
            value = next(results)
            if isinstance(value, Exception):
                raise value
            return value

        mutation = Mutation(write, name="flaky")
        await mutation.mutate(None)
        assert mutation.error is not None

        await mutation.mutate(None)
        assert mutation.error is None
        assert mutation.data == "ok"

    def test_reset(self):
        mutation = Mutation(lambda v: v, name="echo")
        mutation.status = MutationStatus.ERROR
        mutation.error = RuntimeError("x")
        mutation.reset()
        assert mutation.status == MutationStatus.IDLE
        assert mutation.error is None
