"""Tests for HistoryReplayer."""

from datetime import UTC, datetime, timedelta

import pytest

from threadline.conversation import ConversationEntry, HistoryReplayer
from threadline.providers.assistant import MessageRole, MockThreadClient, ProviderError

START = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def _entries() -> list[ConversationEntry]:
    return [
        ConversationEntry(
            identity="a@x.com",
            thread_id="thread_old",
            user_message="u1",
            assistant_message="a1",
            timestamp=START,
        ),
        ConversationEntry(
            identity="a@x.com",
            thread_id="thread_old",
            user_message="u2",
            assistant_message="a2",
            timestamp=START + timedelta(days=1),
        ),
    ]


class TestPlan:
    """Tests for HistoryReplayer.plan."""

    def test_order_user_then_assistant(self) -> None:
        assert HistoryReplayer.plan(_entries()) == [
            (MessageRole.USER, "u1"),
            (MessageRole.ASSISTANT, "a1"),
            (MessageRole.USER, "u2"),
            (MessageRole.ASSISTANT, "a2"),
        ]

    def test_skips_missing_and_blank(self) -> None:
        entries = [
            ConversationEntry(
                identity="a@x.com", thread_id="t", user_message="u1", assistant_message=None
            ),
            ConversationEntry(
                identity="a@x.com", thread_id="t", user_message="  ", assistant_message="a2"
            ),
        ]

        assert HistoryReplayer.plan(entries) == [
            (MessageRole.USER, "u1"),
            (MessageRole.ASSISTANT, "a2"),
        ]

    def test_deterministic(self) -> None:
        """Equal entry lists produce equal plans."""
        assert HistoryReplayer.plan(_entries()) == HistoryReplayer.plan(_entries())


class TestReplay:
    """Tests for HistoryReplayer.replay."""

    @pytest.mark.asyncio
    async def test_appends_in_order(self) -> None:
        client = MockThreadClient()
        thread = await client.create_thread()

        report = await HistoryReplayer().replay(client, thread.id, _entries())

        assert report.appended == 4
        assert report.failed == 0
        assert [(m.role, m.content) for m in client.messages(thread.id)] == [
            (MessageRole.USER, "u1"),
            (MessageRole.ASSISTANT, "a1"),
            (MessageRole.USER, "u2"),
            (MessageRole.ASSISTANT, "a2"),
        ]

    @pytest.mark.asyncio
    async def test_failure_is_counted_and_skipped(self) -> None:
        client = MockThreadClient()
        thread = await client.create_thread()
        client.fail_next("append_message", ProviderError("rejected", operation="append_message"))

        report = await HistoryReplayer().replay(client, thread.id, _entries())

        assert report.appended == 3
        assert report.failed == 1
        assert report.total == 4
        assert [m.content for m in client.messages(thread.id)] == ["a1", "u2", "a2"]

    @pytest.mark.asyncio
    async def test_empty_history(self) -> None:
        client = MockThreadClient()
        thread = await client.create_thread()

        report = await HistoryReplayer().replay(client, thread.id, [])

        assert report.total == 0
        assert client.calls("append_message") == []

    @pytest.mark.asyncio
    async def test_same_entries_give_same_threads(self) -> None:
        """Replaying one history twice yields identical thread contents."""
        first_client = MockThreadClient()
        second_client = MockThreadClient()
        first = await first_client.create_thread()
        second = await second_client.create_thread()

        await HistoryReplayer().replay(first_client, first.id, _entries())
        await HistoryReplayer().replay(second_client, second.id, _entries())

        first_messages = [(m.role, m.content) for m in first_client.messages(first.id)]
        second_messages = [(m.role, m.content) for m in second_client.messages(second.id)]
        assert first_messages == second_messages
        assert first_messages == HistoryReplayer.plan(_entries())
