"""Tests for AbortRouter scope selection and delivery."""

from __future__ import annotations

import asyncio
import os
import signal

import pytest

from scriptshell import AbortRouter, AbortScope, ScriptContext


@pytest.fixture
def context() -> ScriptContext:
    return ScriptContext()


@pytest.fixture
def router(context: ScriptContext) -> AbortRouter:
    return AbortRouter(context)


async def _idle_task() -> asyncio.Task:
    task = asyncio.create_task(asyncio.sleep(10))
    await asyncio.sleep(0)
    return task


class TestScopeSelection:
    """Tests for what an interrupt would abort."""

    def test_idle_outside_sections_is_noop(self, router: AbortRouter) -> None:
        """Should target nothing when idle outside sections."""
        assert router.scope_for_interrupt() is None

    def test_command_outside_sections(self, context: ScriptContext, router: AbortRouter) -> None:
        """Should target the running command outside sections."""
        with context.running_command():
            assert router.scope_for_interrupt() is AbortScope.COMMAND
        assert router.scope_for_interrupt() is None

    def test_inside_section(self, context: ScriptContext, router: AbortRouter) -> None:
        """Should target the section whenever one is open."""
        with context.nested():
            assert router.scope_for_interrupt() is AbortScope.SECTION
            with context.running_command():
                assert router.scope_for_interrupt() is AbortScope.SECTION

    def test_severity_order(self) -> None:
        """Should order scopes command < section < script."""
        assert AbortScope.COMMAND.severity < AbortScope.SECTION.severity < AbortScope.SCRIPT.severity


class TestDelivery:
    """Tests for cancelling the body task."""

    async def test_interrupt_without_target_does_nothing(
        self, context: ScriptContext, router: AbortRouter
    ) -> None:
        """Should not cancel when there is nothing to abort."""
        task = await _idle_task()
        context.task = task
        router.interrupt()
        assert router.pending is None
        assert task.cancelling() == 0
        task.cancel()

    async def test_no_task_is_noop(self, router: AbortRouter) -> None:
        """Should ignore requests with no body task."""
        router.quit()
        assert router.pending is None

    async def test_finished_task_is_noop(self, context: ScriptContext, router: AbortRouter) -> None:
        """Should ignore requests once the body task is done."""
        task = asyncio.create_task(asyncio.sleep(0))
        await task
        context.task = task
        router.quit()
        assert router.pending is None

    async def test_request_cancels_once(self, context: ScriptContext, router: AbortRouter) -> None:
        """Should cancel the body task once per pending request."""
        task = await _idle_task()
        context.task = task
        with context.nested():
            router.interrupt()
            router.interrupt()
        assert router.pending is AbortScope.SECTION
        assert task.cancelling() == 1
        with pytest.raises(asyncio.CancelledError):
            await task

    async def test_escalation_keeps_single_cancel(
        self, context: ScriptContext, router: AbortRouter
    ) -> None:
        """Should raise a pending request's scope without cancelling again."""
        task = await _idle_task()
        context.task = task
        router.request(AbortScope.COMMAND)
        router.quit()
        assert router.pending is AbortScope.SCRIPT
        assert task.cancelling() == 1

        # A weaker request never lowers a pending one
        router.request(AbortScope.SECTION)
        assert router.pending is AbortScope.SCRIPT
        with pytest.raises(asyncio.CancelledError):
            await task

    async def test_claim_matches_scope_only(self, context: ScriptContext, router: AbortRouter) -> None:
        """Should let only the matching scope claim and uncancel."""
        context.task = asyncio.current_task()
        router.quit()
        with pytest.raises(asyncio.CancelledError):
            await asyncio.sleep(1)
        assert not router.claim(AbortScope.COMMAND)
        assert not router.claim(AbortScope.SECTION)
        assert router.claim(AbortScope.SCRIPT)
        assert router.pending is None
        assert context.task.cancelling() == 0
        # The task keeps running normally after the claim
        await asyncio.sleep(0.01)


class TestSignals:
    """Tests for routing real signals through the event loop."""

    async def test_sigint_routed_while_installed(
        self, context: ScriptContext, router: AbortRouter
    ) -> None:
        """Should route a real SIGINT to the router."""
        loop = asyncio.get_running_loop()
        task = await _idle_task()
        context.task = task
        router.install(loop)
        try:
            with context.nested():
                os.kill(os.getpid(), signal.SIGINT)
                for _ in range(100):
                    if router.pending is not None:
                        break
                    await asyncio.sleep(0.01)
            assert router.pending is AbortScope.SECTION
        finally:
            router.uninstall(loop)
        with pytest.raises(asyncio.CancelledError):
            await task

    async def test_uninstall_restores_default_handler(self, router: AbortRouter) -> None:
        """Should give SIGINT back to Python's default handler."""
        loop = asyncio.get_running_loop()
        router.install(loop)
        router.uninstall(loop)
        assert signal.getsignal(signal.SIGINT) is signal.default_int_handler
