"""History replay into freshly created threads."""

from pydantic import BaseModel, Field

from threadline.conversation.models import ConversationEntry
from threadline.observability.logging import get_logger
from threadline.observability.metrics import PROVIDER_ERRORS, REPLAY_MESSAGES
from threadline.providers.assistant import MessageRole, ProviderError, ThreadClient

logger = get_logger(__name__)


class ReplayReport(BaseModel):
    """Counts of a replay run."""

    appended: int = Field(default=0, ge=0, description="Messages written to the thread")
    failed: int = Field(default=0, ge=0, description="Messages the provider rejected")

    @property
    def total(self) -> int:
        return self.appended + self.failed


class HistoryReplayer:
    """Rebuilds a new thread's context from the persisted log.

    Each entry contributes its user message, then its assistant message,
    in the order the entries are given. Replay is best-effort: a rejected
    message is counted and skipped, never fatal to the turn.
    """

    @staticmethod
    def plan(entries: list[ConversationEntry]) -> list[tuple[MessageRole, str]]:
        """Return the (role, content) pairs a replay would append.

        Args:
            entries: Conversation entries, oldest first

        Returns:
            Messages in the order they are appended
        """
        messages: list[tuple[MessageRole, str]] = []
        for entry in entries:
            if entry.user_message and entry.user_message.strip():
                messages.append((MessageRole.USER, entry.user_message))
            if entry.assistant_message and entry.assistant_message.strip():
                messages.append((MessageRole.ASSISTANT, entry.assistant_message))
        return messages

    async def replay(
        self,
        thread_client: ThreadClient,
        thread_id: str,
        entries: list[ConversationEntry],
    ) -> ReplayReport:
        """Append the planned messages to a thread.

        Args:
            thread_client: Remote thread client
            thread_id: The newly created thread
            entries: Conversation entries, oldest first

        Returns:
            ReplayReport with appended and failed counts
        """
        report = ReplayReport()

        for position, (role, content) in enumerate(self.plan(entries)):
            try:
                await thread_client.append_message(thread_id, role, content)
            except ProviderError as e:
                report.failed += 1
                PROVIDER_ERRORS.labels(
                    operation="replay_append", error_type=type(e).__name__
                ).inc()
                logger.warning(
                    "replay_message_failed",
                    thread_id=thread_id,
                    position=position,
                    role=role.value,
                    error=e.message,
                )
                continue
            report.appended += 1

        REPLAY_MESSAGES.labels(result="appended").inc(report.appended)
        REPLAY_MESSAGES.labels(result="failed").inc(report.failed)

        logger.info(
            "history_replayed",
            thread_id=thread_id,
            entries=len(entries),
            appended=report.appended,
            failed=report.failed,
        )
        return report
