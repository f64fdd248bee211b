"""Conversation stores."""

from threadline.conversation.store import ConversationStore
from threadline.conversation.stores.inmemory import InMemoryConversationStore
from threadline.conversation.stores.postgres import PostgresConversationStore

__all__ = [
    "ConversationStore",
    "InMemoryConversationStore",
    "PostgresConversationStore",
]
