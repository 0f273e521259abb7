"""Unit tests for compensation bookkeeping."""

import pytest

from src.onboarding.core.models.saga import SagaState
from src.onboarding.core.services.signup.compensation import CompensationStack, SagaRun


class TestCompensationStack:
    @pytest.mark.asyncio
    async def test_unwind_runs_newest_first(self):
        order = []
        stack = CompensationStack()

        for name in ("first", "second", "third"):

            async def action(name=name):
                order.append(name)

            stack.push(name, action)

        failures = await stack.unwind()

        assert order == ["third", "second", "first"]
        assert failures == []
        assert len(stack) == 0

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_remaining_actions(self):
        ran = []
        stack = CompensationStack()

        async def ok():
            ran.append("ok")

        async def broken():
            raise RuntimeError("boom")

        stack.push("ok", ok)
        stack.push("broken", broken)

        failures = await stack.unwind()

        assert ran == ["ok"]
        assert [name for name, _ in failures] == ["broken"]
        assert isinstance(failures[0][1], RuntimeError)

    @pytest.mark.asyncio
    async def test_unwind_runs_each_action_once(self):
        calls = []
        stack = CompensationStack()

        async def action():
            calls.append(1)

        stack.push("only", action)
        await stack.unwind()
        await stack.unwind()

        assert calls == [1]

    def test_pending_lists_names_in_push_order(self):
        stack = CompensationStack()

        async def noop():
            return None

        stack.push("a", noop)
        stack.push("b", noop)

        assert stack.pending == ["a", "b"]


class TestSagaRun:
    def test_advance_appends_history(self):
        run = SagaRun("12345678900")
        run.advance(SagaState.IDENTITY_CREATED)

        assert run.state is SagaState.IDENTITY_CREATED
        assert run.history == [SagaState.STARTED, SagaState.IDENTITY_CREATED]
