"""Conversation state: sessions, the turn log, policy, replay and locking."""

from threadline.conversation.locks import (
    IdentityLock,
    InMemoryIdentityLock,
    RedisIdentityLock,
)
from threadline.conversation.models import ConversationEntry, UserSession
from threadline.conversation.policy import SessionDecision, SessionPolicy
from threadline.conversation.replay import HistoryReplayer, ReplayReport
from threadline.conversation.store import ConversationStore

__all__ = [
    "ConversationEntry",
    "ConversationStore",
    "HistoryReplayer",
    "IdentityLock",
    "InMemoryIdentityLock",
    "RedisIdentityLock",
    "ReplayReport",
    "SessionDecision",
    "SessionPolicy",
    "UserSession",
]
