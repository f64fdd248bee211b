"""Conversation domain models.

- UserSession: identity -> current thread pointer
- ConversationEntry: append-only turn log
"""

from threadline.conversation.models.entry import ConversationEntry
from threadline.conversation.models.session import UserSession, utc_now

__all__ = [
    "ConversationEntry",
    "UserSession",
    "utc_now",
]
