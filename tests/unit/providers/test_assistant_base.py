"""Tests for thread client models and helpers."""

import pytest

from threadline.providers.assistant import (
    MessageRole,
    RunStatus,
    ThreadMessage,
    latest_assistant_text,
)


class TestRunStatus:
    """Tests for RunStatus parsing."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("queued", RunStatus.QUEUED),
            ("in_progress", RunStatus.IN_PROGRESS),
            ("completed", RunStatus.COMPLETED),
            ("failed", RunStatus.FAILED),
            ("requires_action", RunStatus.UNKNOWN),
            ("timed_out", RunStatus.UNKNOWN),
            (None, RunStatus.UNKNOWN),
        ],
    )
    def test_parse(self, raw: str | None, expected: RunStatus) -> None:
        assert RunStatus.parse(raw) == expected

    def test_active_statuses(self) -> None:
        assert RunStatus.QUEUED.is_active
        assert RunStatus.IN_PROGRESS.is_active
        assert RunStatus.CANCELLING.is_active
        assert not RunStatus.COMPLETED.is_active
        assert not RunStatus.UNKNOWN.is_active
        assert not RunStatus.TIMED_OUT.is_active


class TestLatestAssistantText:
    """Tests for latest_assistant_text."""

    def _message(self, role: MessageRole, content: str) -> ThreadMessage:
        return ThreadMessage(id=f"msg_{content}", role=role, content=content)

    def test_first_assistant_message_wins(self) -> None:
        messages = [
            self._message(MessageRole.ASSISTANT, "newest"),
            self._message(MessageRole.USER, "question"),
            self._message(MessageRole.ASSISTANT, "older"),
        ]
        assert latest_assistant_text(messages) == "newest"

    def test_stops_at_newest_user_message(self) -> None:
        """An answer to an earlier question is not a reply to this one."""
        messages = [
            self._message(MessageRole.USER, "question"),
            self._message(MessageRole.ASSISTANT, "earlier answer"),
        ]
        assert latest_assistant_text(messages) is None

    def test_blank_reply_is_missing(self) -> None:
        """A blank newest reply never falls back to an older one."""
        messages = [
            self._message(MessageRole.ASSISTANT, "  "),
            self._message(MessageRole.ASSISTANT, "older"),
        ]
        assert latest_assistant_text(messages) is None

    def test_no_messages(self) -> None:
        assert latest_assistant_text([]) is None
