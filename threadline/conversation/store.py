"""ConversationStore abstract interface."""

from abc import ABC, abstractmethod

from threadline.conversation.models import ConversationEntry, UserSession


class ConversationStore(ABC):
    """Abstract interface for session and conversation log storage.

    Implementations raise threadline.db.errors.StoreError subclasses
    for backend failures.
    """

    @abstractmethod
    async def get_session(self, identity: str) -> UserSession | None:
        """Get the session record of an identity."""
        pass

    @abstractmethod
    async def upsert_session(self, session: UserSession) -> None:
        """Insert or replace the session record, keyed by identity."""
        pass

    @abstractmethod
    async def append_entry(self, entry: ConversationEntry) -> None:
        """Append one entry to the conversation log."""
        pass

    @abstractmethod
    async def list_entries(self, identity: str) -> list[ConversationEntry]:
        """List an identity's entries by timestamp ascending."""
        pass

    async def health_check(self) -> bool:
        """Return True if the backend is reachable."""
        return True

    async def close(self) -> None:
        """Release backend resources."""
        return None
