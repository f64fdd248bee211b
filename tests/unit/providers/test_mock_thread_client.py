"""Tests for MockThreadClient."""

import pytest

from threadline.providers.assistant import (
    MessageRole,
    MockThreadClient,
    ProviderError,
    RunError,
    RunStatus,
    ThreadNotFoundError,
)


class TestMockThreadClient:
    """Tests for MockThreadClient."""

    @pytest.mark.asyncio
    async def test_completed_run_adds_reply_once(self) -> None:
        client = MockThreadClient(reply="hi there")
        thread = await client.create_thread()
        await client.append_message(thread.id, MessageRole.USER, "hello")

        run = await client.start_run(thread.id, assistant_id="asst")
        await client.get_run(thread.id, run.id)

        messages = await client.list_messages(thread.id)
        assert run.status == RunStatus.COMPLETED
        assert [m.content for m in messages] == ["hi there", "hello"]

    @pytest.mark.asyncio
    async def test_status_script(self) -> None:
        client = MockThreadClient(run_statuses=["queued", "in_progress", "completed"])
        thread = await client.create_thread()

        run = await client.start_run(thread.id, assistant_id="asst")
        second = await client.get_run(thread.id, run.id)
        third = await client.get_run(thread.id, run.id)
        fourth = await client.get_run(thread.id, run.id)

        assert [run.status, second.status, third.status, fourth.status] == [
            RunStatus.QUEUED,
            RunStatus.IN_PROGRESS,
            RunStatus.COMPLETED,
            RunStatus.COMPLETED,
        ]

    @pytest.mark.asyncio
    async def test_failed_run_reports_error(self) -> None:
        client = MockThreadClient(
            run_statuses=[RunStatus.FAILED],
            run_error=RunError(code="server_error", message="boom"),
        )
        thread = await client.create_thread()

        run = await client.start_run(thread.id, assistant_id="asst")

        assert run.status == RunStatus.FAILED
        assert run.last_error is not None
        assert run.last_error.message == "boom"

    @pytest.mark.asyncio
    async def test_fail_next(self) -> None:
        client = MockThreadClient()
        client.fail_next("create_thread", ProviderError("down", operation="create_thread"))

        with pytest.raises(ProviderError):
            await client.create_thread()
        thread = await client.create_thread()

        assert thread.id.startswith("thread_")
        assert len(client.calls("create_thread")) == 2

    @pytest.mark.asyncio
    async def test_expired_thread(self) -> None:
        client = MockThreadClient()
        thread = await client.create_thread()
        client.expire_thread(thread.id)

        with pytest.raises(ThreadNotFoundError):
            await client.append_message(thread.id, MessageRole.USER, "hello")

    @pytest.mark.asyncio
    async def test_cancel_run(self) -> None:
        client = MockThreadClient(run_statuses=["in_progress"])
        thread = await client.create_thread()
        run = await client.start_run(thread.id, assistant_id="asst")

        await client.cancel_run(thread.id, run.id)

        assert (await client.get_run(thread.id, run.id)).status == RunStatus.CANCELLED
