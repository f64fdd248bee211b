"""In-memory implementation of ConversationStore."""

from threadline.conversation.models import ConversationEntry, UserSession
from threadline.conversation.store import ConversationStore


class InMemoryConversationStore(ConversationStore):
    """In-memory implementation of ConversationStore for testing and development.

    Uses simple dict storage keyed by identity.
    Not suitable for production use.
    """

    def __init__(self) -> None:
        """Initialize empty storage."""
        self._sessions: dict[str, UserSession] = {}
        self._entries: dict[str, list[ConversationEntry]] = {}

    async def get_session(self, identity: str) -> UserSession | None:
        """Get the session record of an identity."""
        session = self._sessions.get(identity)
        return session.model_copy() if session is not None else None

    async def upsert_session(self, session: UserSession) -> None:
        """Insert or replace the session record, keyed by identity."""
        self._sessions[session.identity] = session.model_copy()

    async def append_entry(self, entry: ConversationEntry) -> None:
        """Append one entry to the conversation log."""
        self._entries.setdefault(entry.identity, []).append(entry)

    async def list_entries(self, identity: str) -> list[ConversationEntry]:
        """List an identity's entries by timestamp ascending."""
        # sorted() is stable, so equal timestamps keep insertion order
        return sorted(self._entries.get(identity, []), key=lambda e: e.timestamp)
