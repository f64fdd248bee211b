"""Tests for RunDriver."""

from unittest.mock import AsyncMock

import pytest

from threadline.orchestration import RunDriver, RunState, degraded_reply, sanitize_reason
from threadline.providers.assistant import (
    MockThreadClient,
    ProviderError,
    RunError,
    RunSnapshot,
    RunStatus,
)


async def _start(client: MockThreadClient) -> tuple[str, RunSnapshot]:
    thread = await client.create_thread()
    run = await client.start_run(thread.id, assistant_id="asst")
    return thread.id, run


class TestDrive:
    """Tests for RunDriver.drive."""

    @pytest.mark.asyncio
    async def test_polls_until_completed(self, fake_clock, fake_sleep) -> None:
        """queued, in_progress, in_progress, completed takes three polls."""
        client = MockThreadClient(run_statuses=["queued", "in_progress", "in_progress", "completed"])
        thread_id, run = await _start(client)
        driver = RunDriver(max_attempts=30, poll_interval=1.5, sleep=fake_sleep, clock=fake_clock)

        state = await driver.drive(client, thread_id, run)

        assert state.status == RunStatus.COMPLETED
        assert state.attempts == 3
        assert len(client.calls("get_run")) == 3
        assert fake_sleep.calls == [1.5, 1.5, 1.5]

    @pytest.mark.asyncio
    async def test_terminal_on_creation_skips_polling(self, fake_clock, fake_sleep) -> None:
        client = MockThreadClient(run_statuses=["completed"])
        thread_id, run = await _start(client)
        driver = RunDriver(sleep=fake_sleep, clock=fake_clock)

        state = await driver.drive(client, thread_id, run)

        assert state.status == RunStatus.COMPLETED
        assert state.attempts == 0
        assert fake_sleep.calls == []

    @pytest.mark.asyncio
    async def test_times_out_within_max_attempts(self, fake_clock, fake_sleep) -> None:
        client = MockThreadClient(run_statuses=["in_progress"])
        thread_id, run = await _start(client)
        driver = RunDriver(max_attempts=5, poll_interval=1.5, sleep=fake_sleep, clock=fake_clock)

        state = await driver.drive(client, thread_id, run)

        assert state.status == RunStatus.TIMED_OUT
        assert state.attempts == 5
        assert len(client.calls("get_run")) == 5
        assert len(client.calls("cancel_run")) == 1

    @pytest.mark.asyncio
    async def test_deadline_bounds_polling(self, fake_clock, fake_sleep) -> None:
        client = MockThreadClient(run_statuses=["in_progress"])
        thread_id, run = await _start(client)
        driver = RunDriver(max_attempts=30, poll_interval=1.5, sleep=fake_sleep, clock=fake_clock)

        state = await driver.drive(client, thread_id, run, deadline=driver.deadline_in(4.0))

        assert state.status == RunStatus.TIMED_OUT
        assert state.attempts == 2
        assert fake_sleep.calls == [1.5, 1.5, 1.0]

    @pytest.mark.asyncio
    async def test_poll_failure_consumes_attempt(self, fake_clock, fake_sleep) -> None:
        client = MockThreadClient(run_statuses=["queued", "completed"])
        thread_id, run = await _start(client)
        client.fail_next("get_run", ProviderError("get_run failed (500): oops", operation="get_run"))
        driver = RunDriver(sleep=fake_sleep, clock=fake_clock)

        state = await driver.drive(client, thread_id, run)

        assert state.status == RunStatus.COMPLETED
        assert state.attempts == 2
        assert state.last_error is None

    @pytest.mark.asyncio
    async def test_poll_timeout_consumes_attempt(self, fake_clock, fake_sleep) -> None:
        client = AsyncMock()
        client.get_run.side_effect = [
            TimeoutError(),
            RunSnapshot(id="run_1", status=RunStatus.COMPLETED),
        ]
        run = RunSnapshot(id="run_1", status=RunStatus.QUEUED)
        driver = RunDriver(sleep=fake_sleep, clock=fake_clock)

        state = await driver.drive(client, "thread_1", run, deadline=driver.deadline_in(60))

        assert state.status == RunStatus.COMPLETED
        assert state.attempts == 2

    @pytest.mark.asyncio
    async def test_failed_run_keeps_reason(self, fake_clock, fake_sleep) -> None:
        client = MockThreadClient(
            run_statuses=["queued", "failed"],
            run_error=RunError(code="server_error", message="model overloaded"),
        )
        thread_id, run = await _start(client)
        driver = RunDriver(sleep=fake_sleep, clock=fake_clock)

        state = await driver.drive(client, thread_id, run)

        assert state.status == RunStatus.FAILED
        assert state.last_error == "model overloaded"
        assert client.calls("cancel_run") == []

    @pytest.mark.asyncio
    async def test_unknown_status_is_terminal(self, fake_clock, fake_sleep) -> None:
        client = AsyncMock()
        client.get_run.return_value = RunSnapshot(id="run_1", status=RunStatus.UNKNOWN)
        run = RunSnapshot(id="run_1", status=RunStatus.IN_PROGRESS)
        driver = RunDriver(sleep=fake_sleep, clock=fake_clock)

        state = await driver.drive(client, "thread_1", run)

        assert state.status == RunStatus.UNKNOWN
        assert state.attempts == 1

    @pytest.mark.asyncio
    async def test_cancel_failure_is_ignored(self, fake_clock, fake_sleep) -> None:
        client = MockThreadClient(run_statuses=["in_progress"])
        thread_id, run = await _start(client)
        client.fail_next("cancel_run", ProviderError("cancel failed", operation="cancel_run"))
        driver = RunDriver(max_attempts=2, sleep=fake_sleep, clock=fake_clock)

        state = await driver.drive(client, thread_id, run)

        assert state.status == RunStatus.TIMED_OUT

    def test_rejects_zero_attempts(self) -> None:
        with pytest.raises(ValueError):
            RunDriver(max_attempts=0)


class TestDegradedReply:
    """Tests for degraded_reply and sanitize_reason."""

    def test_failed_includes_reason(self) -> None:
        state = RunState(run_id="run_1", status=RunStatus.FAILED, last_error="model  overloaded\n")

        text = degraded_reply(state, degraded_message="generic", failed_message="Problem")

        assert text == "Problem: model overloaded"

    def test_failed_without_reason_is_generic(self) -> None:
        state = RunState(run_id="run_1", status=RunStatus.FAILED)

        assert degraded_reply(state, degraded_message="generic", failed_message="Problem") == "generic"

    @pytest.mark.parametrize(
        "status",
        [RunStatus.TIMED_OUT, RunStatus.CANCELLED, RunStatus.EXPIRED, RunStatus.UNKNOWN],
    )
    def test_other_statuses_are_generic(self, status: RunStatus) -> None:
        state = RunState(run_id="run_1", status=status, last_error="status poll timed out")

        assert degraded_reply(state, degraded_message="generic", failed_message="Problem") == "generic"

    def test_reason_is_truncated(self) -> None:
        reason = sanitize_reason("x" * 500)

        assert len(reason) == 200
        assert reason.endswith("...")
