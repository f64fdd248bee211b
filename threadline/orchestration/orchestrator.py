"""Conversation orchestrator: one chat turn from request to reply.

A turn is a flat sequence of steps under the identity's lock:

1. validate the request
2. load the session and apply the session policy
3. ensure a usable thread, replaying history into a new one
4. append the user message and start a run
5. drive the run to a terminal status and derive the reply
6. persist the session and the conversation entry

Everything up to and including run creation shares one error boundary
that turns collaborator failures into TurnFailedError. Once a run exists
the turn always produces a reply.
"""

import time
from collections.abc import Callable
from datetime import datetime

from threadline.config.models.conversation import ConversationConfig
from threadline.conversation.locks import IdentityLock
from threadline.conversation.models import ConversationEntry, UserSession, utc_now
from threadline.conversation.policy import SessionDecision, SessionPolicy
from threadline.conversation.replay import HistoryReplayer, ReplayReport
from threadline.conversation.store import ConversationStore
from threadline.db.errors import StoreError
from threadline.observability.logging import get_logger
from threadline.observability.metrics import (
    PROVIDER_ERRORS,
    STORE_ERRORS,
    TURN_COUNT,
    TURN_LATENCY,
)
from threadline.orchestration.errors import InvalidTurnRequestError, TurnFailedError
from threadline.orchestration.models import (
    RunState,
    TurnOutcome,
    TurnRequest,
    TurnResult,
)
from threadline.orchestration.run_driver import RunDriver, degraded_reply, sanitize_reason
from threadline.providers.assistant import (
    MessageRole,
    ProviderError,
    RunStatus,
    ThreadClient,
    ThreadNotFoundError,
    latest_assistant_text,
)

logger = get_logger(__name__)


class ConversationOrchestrator:
    """Handles chat turns against a remote assistant and a conversation store."""

    def __init__(
        self,
        thread_client: ThreadClient,
        store: ConversationStore,
        lock: IdentityLock,
        *,
        assistant_id: str,
        policy: SessionPolicy | None = None,
        replayer: HistoryReplayer | None = None,
        driver: RunDriver | None = None,
        conversation_config: ConversationConfig | None = None,
        model: str | None = None,
        instructions: str | None = None,
        deadline_seconds: float | None = None,
        clock: Callable[[], datetime] = utc_now,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            thread_client: Remote thread/run service
            store: Session and conversation log persistence
            lock: Per-identity mutual exclusion
            assistant_id: Remote assistant to run
            policy: Session policy; defaults to a 24 hour blocking cooldown
            replayer: History replayer
            driver: Run driver
            conversation_config: Fallback texts and history options
            model: Optional model override for each run
            instructions: Optional instructions override for each run
            deadline_seconds: Wall-clock bound on a turn, counted from its start
            clock: UTC clock used for session and entry timestamps
            monotonic: Clock used for turn latency
        """
        config = conversation_config or ConversationConfig()
        self._thread_client = thread_client
        self._store = store
        self._lock = lock
        self._assistant_id = assistant_id
        self._policy = policy or SessionPolicy(
            cooldown_hours=config.cooldown_hours,
            cooldown_mode=config.cooldown_mode,
        )
        self._replayer = replayer or HistoryReplayer()
        self._driver = driver or RunDriver()
        self._config = config
        self._model = model
        self._instructions = instructions
        self._deadline_seconds = deadline_seconds
        self._clock = clock
        self._monotonic = monotonic

    async def handle(self, request: TurnRequest) -> TurnResult:
        """Process one chat turn.

        Args:
            request: Inbound identity and message

        Returns:
            TurnResult with the reply text

        Raises:
            InvalidTurnRequestError: Identity or message missing or blank
            TurnFailedError: A collaborator failed before a run existed
        """
        email = (request.email or "").strip()
        message = (request.message or "").strip()
        if not email or not message:
            raise InvalidTurnRequestError("Missing email or message")

        started = self._monotonic()
        try:
            result = await self._locked_turn(email, message)
        except TurnFailedError:
            TURN_COUNT.labels(outcome="failed").inc()
            raise

        TURN_COUNT.labels(outcome=result.outcome.value).inc()
        TURN_LATENCY.labels(outcome=result.outcome.value).observe(
            self._monotonic() - started
        )
        return result

    async def _locked_turn(self, email: str, message: str) -> TurnResult:
        try:
            async with self._lock.acquire(email) as acquired:
                if not acquired:
                    raise TurnFailedError(
                        "Another message from this user is being processed"
                    )
                return await self._turn(email, message)
        except StoreError as e:
            # Lock backend unreachable
            logger.error("identity_lock_failed", error=str(e))
            raise TurnFailedError("Could not acquire the conversation lock", cause=e) from e

    async def _turn(self, email: str, message: str) -> TurnResult:
        now = self._clock()
        deadline = None
        if self._deadline_seconds is not None:
            deadline = self._driver.deadline_in(self._deadline_seconds)

        try:
            session = await self._store.get_session(email)
        except StoreError as e:
            STORE_ERRORS.labels(operation="get_session", error_type=type(e).__name__).inc()
            logger.error("session_load_failed", error=str(e))
            raise TurnFailedError("Could not load the conversation session", cause=e) from e

        decision = self._policy.decide(session, now)
        logger.info(
            "session_policy_decided",
            must_reset=decision.must_reset,
            within_cooldown=decision.within_cooldown,
            elapsed_hours=decision.elapsed_hours,
        )
        if decision.within_cooldown:
            return TurnResult(
                message=self._config.cooldown_message,
                outcome=TurnOutcome.COOLDOWN,
                thread_id=decision.thread_id,
            )

        thread_id, replay = await self._prepare_thread(email, message, session, decision, now)

        try:
            run = await self._thread_client.start_run(
                thread_id,
                assistant_id=self._assistant_id,
                model=self._model,
                instructions=self._instructions,
            )
        except ProviderError as e:
            PROVIDER_ERRORS.labels(operation="start_run", error_type=type(e).__name__).inc()
            logger.error("run_start_failed", thread_id=thread_id, error=str(e))
            raise TurnFailedError(
                f"Could not start the assistant run: {sanitize_reason(e.message)}", cause=e
            ) from e

        state = await self._driver.drive(self._thread_client, thread_id, run, deadline=deadline)

        reply, outcome = await self._final_message(thread_id, state)

        persisted = await self._persist(email, thread_id, message, reply, now)
        history = await self._history(email) if self._config.include_history else None

        return TurnResult(
            message=reply,
            outcome=outcome,
            thread_id=thread_id,
            run=state,
            replay=replay,
            persisted=persisted,
            history=history,
        )

    async def _prepare_thread(
        self,
        email: str,
        message: str,
        session: UserSession | None,
        decision: SessionDecision,
        now: datetime,
    ) -> tuple[str, ReplayReport | None]:
        """Ensure a thread exists and holds the live user message."""
        replay: ReplayReport | None = None
        thread_id = decision.thread_id
        if decision.must_reset or thread_id is None:
            thread_id, replay = await self._new_thread(email)

        try:
            await self._thread_client.append_message(thread_id, MessageRole.USER, message)
            return thread_id, replay
        except ThreadNotFoundError as e:
            if replay is not None:
                # Freshly created thread is already gone
                raise self._pre_run_failure("append_message", e) from e
            decision = self._policy.decide(session, now, thread_invalidated=True)
            logger.warning(
                "thread_invalidated", thread_id=thread_id, must_reset=decision.must_reset
            )
            if not decision.must_reset:
                raise self._pre_run_failure("append_message", e) from e
        except ProviderError as e:
            raise self._pre_run_failure("append_message", e) from e

        thread_id, replay = await self._new_thread(email)
        try:
            await self._thread_client.append_message(thread_id, MessageRole.USER, message)
        except ProviderError as e:
            raise self._pre_run_failure("append_message", e) from e
        return thread_id, replay

    async def _new_thread(self, email: str) -> tuple[str, ReplayReport]:
        """Create a thread and replay the identity's prior entries into it."""
        try:
            thread = await self._thread_client.create_thread()
        except ProviderError as e:
            raise self._pre_run_failure("create_thread", e) from e

        try:
            entries = await self._store.list_entries(email)
        except StoreError as e:
            STORE_ERRORS.labels(operation="list_entries", error_type=type(e).__name__).inc()
            logger.error("history_load_failed", error=str(e))
            raise TurnFailedError("Could not load the conversation history", cause=e) from e

        logger.info("thread_created", thread_id=thread.id, prior_entries=len(entries))
        if not entries:
            return thread.id, ReplayReport()
        report = await self._replayer.replay(self._thread_client, thread.id, entries)
        return thread.id, report

    def _pre_run_failure(self, operation: str, error: ProviderError) -> TurnFailedError:
        PROVIDER_ERRORS.labels(operation=operation, error_type=type(error).__name__).inc()
        logger.error("assistant_call_failed", operation=operation, error=error.message)
        return TurnFailedError(
            f"Assistant service call failed: {sanitize_reason(error.message)}", cause=error
        )

    async def _final_message(self, thread_id: str, state: RunState) -> tuple[str, TurnOutcome]:
        """Derive the reply text from a finished run."""
        fallback = degraded_reply(
            state,
            degraded_message=self._config.degraded_message,
            failed_message=self._config.failed_message,
        )
        if state.status != RunStatus.COMPLETED:
            return fallback, TurnOutcome.DEGRADED

        try:
            messages = await self._thread_client.list_messages(thread_id)
        except ProviderError as e:
            PROVIDER_ERRORS.labels(operation="list_messages", error_type=type(e).__name__).inc()
            logger.warning("reply_fetch_failed", thread_id=thread_id, error=str(e))
            return fallback, TurnOutcome.DEGRADED

        text = latest_assistant_text(messages)
        if text is None:
            logger.warning("reply_missing", thread_id=thread_id, run_id=state.run_id)
            return fallback, TurnOutcome.DEGRADED
        return text, TurnOutcome.COMPLETED

    async def _persist(
        self,
        email: str,
        thread_id: str,
        message: str,
        reply: str,
        now: datetime,
    ) -> bool:
        """Write the session, then the entry. Returns True if both were written."""
        try:
            await self._store.upsert_session(
                UserSession(identity=email, thread_id=thread_id, last_interaction_at=now)
            )
        except StoreError as e:
            STORE_ERRORS.labels(operation="upsert_session", error_type=type(e).__name__).inc()
            logger.error("session_save_failed", thread_id=thread_id, error=str(e))
            return False

        try:
            await self._store.append_entry(
                ConversationEntry(
                    identity=email,
                    thread_id=thread_id,
                    user_message=message,
                    assistant_message=reply,
                    timestamp=now,
                )
            )
        except StoreError as e:
            STORE_ERRORS.labels(operation="append_entry", error_type=type(e).__name__).inc()
            logger.error("entry_save_failed", thread_id=thread_id, error=str(e))
            return False
        return True

    async def _history(self, email: str) -> list[ConversationEntry] | None:
        try:
            return await self._store.list_entries(email)
        except StoreError as e:
            STORE_ERRORS.labels(operation="list_entries", error_type=type(e).__name__).inc()
            logger.warning("history_read_failed", error=str(e))
            return None
