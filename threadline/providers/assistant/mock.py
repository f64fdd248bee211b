"""Mock thread client for testing and local development."""

from collections import deque
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from threadline.providers.assistant.base import (
    AssistantThread,
    MessageRole,
    RunError,
    RunSnapshot,
    RunStatus,
    ThreadClient,
    ThreadMessage,
    ThreadNotFoundError,
)


class MockThreadClient(ThreadClient):
    """In-process stand-in for the remote thread service.

    Threads and their messages live in memory. Runs follow a scripted
    status sequence: start_run reports the first status, each get_run
    reports the next one, and the last status repeats forever. When a
    run reaches COMPLETED the configured reply is added to the thread.
    """

    def __init__(
        self,
        reply: str | None = "Mock assistant reply",
        run_statuses: list[RunStatus | str] | None = None,
        run_error: RunError | None = None,
    ):
        """Initialize mock client.

        Args:
            reply: Assistant text added to the thread when a run completes;
                None completes runs without adding a message
            run_statuses: Status script for every run (defaults to immediate completion)
            run_error: Error reported by runs that end in FAILED
        """
        self._reply = reply
        self._script = [
            RunStatus(s) if isinstance(s, str) else s
            for s in (run_statuses or [RunStatus.COMPLETED])
        ]
        self._run_error = run_error
        self._threads: dict[str, list[ThreadMessage]] = {}
        self._runs: dict[str, deque[RunStatus]] = {}
        self._completed: set[str] = set()
        self._failures: dict[str, deque[Exception]] = {}
        self._call_history: list[dict[str, Any]] = []

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "mock"

    @property
    def call_history(self) -> list[dict[str, Any]]:
        """Return history of calls for testing assertions."""
        return self._call_history

    def calls(self, operation: str) -> list[dict[str, Any]]:
        """Return recorded calls of one operation."""
        return [c for c in self._call_history if c["operation"] == operation]

    def clear_history(self) -> None:
        """Clear call history."""
        self._call_history.clear()

    def set_reply(self, reply: str | None) -> None:
        """Change the reply used by subsequent runs."""
        self._reply = reply

    def set_run_statuses(self, statuses: list[RunStatus | str]) -> None:
        """Change the status script used by subsequent runs."""
        self._script = [RunStatus(s) if isinstance(s, str) else s for s in statuses]

    def fail_next(self, operation: str, error: Exception) -> None:
        """Make the next call of an operation raise the given error."""
        self._failures.setdefault(operation, deque()).append(error)

    def expire_thread(self, thread_id: str) -> None:
        """Forget a thread so that later calls report it as missing."""
        self._threads.pop(thread_id, None)

    def messages(self, thread_id: str) -> list[ThreadMessage]:
        """Return a thread's messages in insertion order."""
        return list(self._threads.get(thread_id, []))

    def _record(self, operation: str, **kwargs: Any) -> None:
        self._call_history.append({"operation": operation, **kwargs})
        pending = self._failures.get(operation)
        if pending:
            raise pending.popleft()

    def _thread(self, operation: str, thread_id: str) -> list[ThreadMessage]:
        if thread_id not in self._threads:
            raise ThreadNotFoundError(
                f"{operation} failed (404): no thread {thread_id}",
                operation=operation,
                status_code=404,
            )
        return self._threads[thread_id]

    async def create_thread(self) -> AssistantThread:
        """Create an empty thread."""
        self._record("create_thread")
        thread_id = f"thread_{uuid4().hex[:24]}"
        self._threads[thread_id] = []
        return AssistantThread(id=thread_id)

    async def append_message(
        self, thread_id: str, role: MessageRole, content: str
    ) -> None:
        """Append one message to a thread."""
        self._record("append_message", thread_id=thread_id, role=role, content=content)
        self._thread("append_message", thread_id).append(
            ThreadMessage(
                id=f"msg_{uuid4().hex[:24]}",
                role=role,
                content=content,
                created_at=datetime.now(UTC),
            )
        )

    async def start_run(
        self,
        thread_id: str,
        *,
        assistant_id: str,
        model: str | None = None,
        instructions: str | None = None,
    ) -> RunSnapshot:
        """Start a scripted run."""
        self._record(
            "start_run",
            thread_id=thread_id,
            assistant_id=assistant_id,
            model=model,
            instructions=instructions,
        )
        self._thread("start_run", thread_id)
        run_id = f"run_{uuid4().hex[:24]}"
        self._runs[run_id] = deque(self._script)
        return self._advance(thread_id, run_id)

    async def get_run(self, thread_id: str, run_id: str) -> RunSnapshot:
        """Report the next scripted status."""
        self._record("get_run", thread_id=thread_id, run_id=run_id)
        self._thread("get_run", thread_id)
        return self._advance(thread_id, run_id)

    async def list_messages(
        self, thread_id: str, *, limit: int = 20
    ) -> list[ThreadMessage]:
        """List thread messages, most recent first."""
        self._record("list_messages", thread_id=thread_id, limit=limit)
        return list(reversed(self._thread("list_messages", thread_id)))[:limit]

    async def cancel_run(self, thread_id: str, run_id: str) -> None:
        """Cancel a scripted run."""
        self._record("cancel_run", thread_id=thread_id, run_id=run_id)
        self._runs[run_id] = deque([RunStatus.CANCELLED])

    def _advance(self, thread_id: str, run_id: str) -> RunSnapshot:
        script = self._runs[run_id]
        status = script.popleft() if len(script) > 1 else script[0]

        first_completion = status == RunStatus.COMPLETED and run_id not in self._completed
        if first_completion:
            self._completed.add(run_id)
        if first_completion and self._reply is not None:
            self._threads[thread_id].append(
                ThreadMessage(
                    id=f"msg_{uuid4().hex[:24]}",
                    role=MessageRole.ASSISTANT,
                    content=self._reply,
                    created_at=datetime.now(UTC),
                )
            )

        last_error = self._run_error if status == RunStatus.FAILED else None
        return RunSnapshot(id=run_id, status=status, last_error=last_error)
