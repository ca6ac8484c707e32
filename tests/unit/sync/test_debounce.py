"""
Tests for the debounced task primitive.

Timing tests use quiet periods of tens of milliseconds with generous margins.
"""

from __future__ import annotations

import asyncio

import pytest

from locale_sync.sync.debounce import DebouncedTask


class TestDebouncedTask:
    """Test scheduling, coalescing and cancellation of DebouncedTask."""

    @pytest.mark.asyncio
    async def test_many_schedules_run_once_with_latest_args(self) -> None:
        """Test that a burst of schedules collapses into one run."""
        calls: list[tuple[object, ...]] = []
        task = DebouncedTask(lambda *args: calls.append(args), 0.05, name="test")

        for i in range(5):
            task.schedule(i)
            await asyncio.sleep(0.005)
        assert task.pending

        await task.join()

        assert calls == [(4,)]
        assert task.run_count == 1
        assert not task.pending

    @pytest.mark.asyncio
    async def test_quiet_period_restarts_on_schedule(self) -> None:
        """Test that a schedule before the timer elapses restarts the delay."""
        calls: list[float] = []
        loop = asyncio.get_running_loop()
        task = DebouncedTask(lambda: calls.append(loop.time()), 0.2)

        start = loop.time()
        task.schedule()
        await asyncio.sleep(0.12)
        task.schedule()
        await asyncio.sleep(0.12)

        # The first timer would have fired by now
        assert calls == []

        await task.join()
        assert len(calls) == 1
        assert calls[0] - start >= 0.2 + 0.12 - 0.01

    @pytest.mark.asyncio
    async def test_async_action_awaited(self) -> None:
        """Test that coroutine actions are awaited to completion."""
        done = asyncio.Event()

        async def action() -> None:
            await asyncio.sleep(0.01)
            done.set()

        task = DebouncedTask(action, 0.01)
        task.schedule()
        await task.join()

        assert done.is_set()

    @pytest.mark.asyncio
    async def test_cancel_drops_pending_run(self) -> None:
        """Test that cancel prevents the pending run without closing the task."""
        calls: list[int] = []
        task = DebouncedTask(lambda: calls.append(1), 0.03)

        task.schedule()
        task.cancel()
        await asyncio.sleep(0.08)
        assert calls == []

        task.schedule()
        await task.join()
        assert calls == [1]

    @pytest.mark.asyncio
    async def test_close_prevents_future_runs(self) -> None:
        """Test that a closed task ignores pending and future schedules."""
        calls: list[int] = []
        task = DebouncedTask(lambda: calls.append(1), 0.03)

        task.schedule()
        task.close()
        task.schedule()
        await asyncio.sleep(0.08)

        assert calls == []
        assert task.closed
        assert not task.pending

    @pytest.mark.asyncio
    async def test_close_does_not_interrupt_running_action(self) -> None:
        """Test that an action already in progress completes after close."""
        finished = asyncio.Event()
        started = asyncio.Event()

        async def action() -> None:
            started.set()
            await asyncio.sleep(0.05)
            finished.set()

        task = DebouncedTask(action, 0.01)
        task.schedule()
        await started.wait()

        task.close()
        assert task.running
        await task.wait_running()

        assert finished.is_set()

    @pytest.mark.asyncio
    async def test_runs_never_overlap(self) -> None:
        """Test that a run started during a slow run waits for it."""
        active = 0
        max_active = 0

        async def slow_action() -> None:
            nonlocal active, max_active
            active += 1
            max_active = max(max_active, active)
            await asyncio.sleep(0.08)
            active -= 1

        task = DebouncedTask(slow_action, 0.01)
        task.schedule()
        await asyncio.sleep(0.03)
        task.schedule()
        await asyncio.sleep(0.03)

        await task.join()

        assert task.run_count == 2
        assert max_active == 1

    @pytest.mark.asyncio
    async def test_flush_runs_immediately(self) -> None:
        """Test that flush runs a pending action without waiting."""
        calls: list[str] = []
        task = DebouncedTask(lambda value: calls.append(value), 10.0)

        task.schedule("now")
        await task.flush()

        assert calls == ["now"]
        assert not task.pending

    @pytest.mark.asyncio
    async def test_action_error_is_logged_not_raised(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test that a failing action does not break the task."""
        calls: list[int] = []

        def action() -> None:
            calls.append(1)
            raise ValueError("broken action")

        task = DebouncedTask(action, 0.01, name="failing")
        task.schedule()
        await task.join()
        task.schedule()
        await task.join()

        assert calls == [1, 1]
        assert "Debounced task failing failed" in caplog.text

    def test_negative_delay_rejected(self) -> None:
        """Test delay validation."""
        with pytest.raises(ValueError):
            _ = DebouncedTask(lambda: None, -1.0)

    @pytest.mark.asyncio
    async def test_stale_firing_ignored(self) -> None:
        """Test that a timer callback from an older generation does nothing."""
        calls: list[int] = []
        task = DebouncedTask(lambda: calls.append(1), 10.0)

        task.schedule()
        task._fire(0)  # pyright: ignore[reportPrivateUsage] # simulate a stale timer
        await asyncio.sleep(0)

        assert calls == []
        assert task.pending
        task.close()
