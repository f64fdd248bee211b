"""PostgreSQL implementation of ConversationStore.

Expects two tables, managed outside this package:

    users(email text primary key, thread_id text, last_chat_time timestamptz)
    conversations(id bigserial primary key, email text, thread_id text,
                  user_message text, assistant_message text,
                  timestamp timestamptz)
"""

from datetime import UTC, datetime
from typing import Any

import asyncpg

from threadline.conversation.models import ConversationEntry, UserSession
from threadline.conversation.store import ConversationStore
from threadline.db.errors import ConnectionError, ValidationError
from threadline.db.pool import PostgresPool
from threadline.observability.logging import get_logger

logger = get_logger(__name__)


def _as_utc(value: Any) -> Any:
    """Read `timestamp without time zone` values as UTC."""
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class PostgresConversationStore(ConversationStore):
    """PostgreSQL implementation of ConversationStore.

    Session writes use INSERT ... ON CONFLICT on the e-mail key, so two
    concurrent first turns of one identity can never create two rows.
    """

    def __init__(self, pool: PostgresPool) -> None:
        """Initialize PostgreSQL conversation store.

        Args:
            pool: Shared connection pool
        """
        self._pool = pool

    def _row_to_session(self, row: dict[str, Any]) -> UserSession:
        try:
            return UserSession(
                identity=row["email"],
                thread_id=row["thread_id"],
                last_interaction_at=_as_utc(row["last_chat_time"]),
            )
        except (KeyError, ValueError) as e:
            raise ValidationError(f"Invalid session row: {e}", cause=e) from e

    def _row_to_entry(self, row: dict[str, Any]) -> ConversationEntry:
        try:
            return ConversationEntry(
                identity=row["email"],
                thread_id=row["thread_id"],
                user_message=row["user_message"],
                assistant_message=row["assistant_message"],
                timestamp=_as_utc(row["timestamp"]),
            )
        except (KeyError, ValueError) as e:
            raise ValidationError(f"Invalid conversation row: {e}", cause=e) from e

    async def get_session(self, identity: str) -> UserSession | None:
        """Get the session record of an identity."""
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    """
                    SELECT email, thread_id, last_chat_time FROM users
                    WHERE email = $1
                    """,
                    identity,
                )
        except (OSError, asyncpg.PostgresError) as e:
            logger.error("postgres_get_session_error", error=str(e))
            raise ConnectionError(f"Failed to get session: {e}", cause=e) from e

        if not row:
            return None
        return self._row_to_session(dict(row))

    async def upsert_session(self, session: UserSession) -> None:
        """Insert or replace the session record, keyed by identity."""
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(
                    """
                    INSERT INTO users (email, thread_id, last_chat_time)
                    VALUES ($1, $2, $3)
                    ON CONFLICT (email) DO UPDATE SET
                        thread_id = EXCLUDED.thread_id,
                        last_chat_time = EXCLUDED.last_chat_time
                    """,
                    session.identity,
                    session.thread_id,
                    session.last_interaction_at,
                )
        except (OSError, asyncpg.PostgresError) as e:
            logger.error("postgres_upsert_session_error", error=str(e))
            raise ConnectionError(f"Failed to save session: {e}", cause=e) from e

        logger.debug("session_upserted", thread_id=session.thread_id)

    async def append_entry(self, entry: ConversationEntry) -> None:
        """Append one entry to the conversation log."""
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(
                    """
                    INSERT INTO conversations (
                        email, thread_id, user_message, assistant_message, timestamp
                    ) VALUES ($1, $2, $3, $4, $5)
                    """,
                    entry.identity,
                    entry.thread_id,
                    entry.user_message,
                    entry.assistant_message,
                    entry.timestamp,
                )
        except (OSError, asyncpg.PostgresError) as e:
            logger.error("postgres_append_entry_error", error=str(e))
            raise ConnectionError(f"Failed to append entry: {e}", cause=e) from e

        logger.debug("entry_appended", thread_id=entry.thread_id)

    async def list_entries(self, identity: str) -> list[ConversationEntry]:
        """List an identity's entries by timestamp ascending."""
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(
                    """
                    SELECT email, thread_id, user_message, assistant_message, timestamp
                    FROM conversations
                    WHERE email = $1
                    ORDER BY timestamp ASC, id ASC
                    """,
                    identity,
                )
        except (OSError, asyncpg.PostgresError) as e:
            logger.error("postgres_list_entries_error", error=str(e))
            raise ConnectionError(f"Failed to list entries: {e}", cause=e) from e

        return [self._row_to_entry(dict(row)) for row in rows]

    async def health_check(self) -> bool:
        """Return True if the database answers."""
        return await self._pool.health_check()

    async def close(self) -> None:
        """Close the underlying pool."""
        await self._pool.close()
