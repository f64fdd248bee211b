"""Run driver: polls a remote run to a terminal status.

The loop is an explicit state machine over RunStatus with an attempt
counter. It stops on the first terminal status reported by the provider,
or assigns TIMED_OUT when the attempt budget or the request deadline is
exhausted. Sleep and clock are injected so the loop runs without real
timers in tests.
"""

import asyncio
import re
import time
from collections.abc import Awaitable, Callable

from threadline.observability.logging import get_logger
from threadline.observability.metrics import PROVIDER_ERRORS, RUN_OUTCOMES, RUN_POLLS
from threadline.orchestration.models import RunState
from threadline.providers.assistant import (
    ProviderError,
    RunSnapshot,
    RunStatus,
    ThreadClient,
)

logger = get_logger(__name__)

MAX_REASON_LENGTH = 200

Sleep = Callable[[float], Awaitable[None]]
Clock = Callable[[], float]


class RunDriver:
    """Drives one run from creation to a terminal classification."""

    def __init__(
        self,
        max_attempts: int = 30,
        poll_interval: float = 1.5,
        sleep: Sleep = asyncio.sleep,
        clock: Clock = time.monotonic,
    ) -> None:
        """Initialize the driver.

        Args:
            max_attempts: Maximum number of status polls
            poll_interval: Fixed seconds between polls
            sleep: Awaitable sleep, replaced in tests
            clock: Monotonic clock in seconds, replaced in tests
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._max_attempts = max_attempts
        self._poll_interval = poll_interval
        self._sleep = sleep
        self._clock = clock

    @property
    def clock(self) -> Clock:
        return self._clock

    def deadline_in(self, seconds: float) -> float:
        """Return a deadline `seconds` from now on the driver's clock."""
        return self._clock() + seconds

    async def drive(
        self,
        thread_client: ThreadClient,
        thread_id: str,
        run: RunSnapshot,
        *,
        deadline: float | None = None,
    ) -> RunState:
        """Poll a run until it stops being active.

        Args:
            thread_client: Remote thread client
            thread_id: Thread the run belongs to
            run: Snapshot returned by run creation
            deadline: Optional absolute deadline on the driver's clock

        Returns:
            Final RunState; never raises for provider failures
        """
        state = RunState(
            run_id=run.id,
            status=run.status,
            last_error=run.last_error.message if run.last_error else None,
        )

        while state.status.is_active:
            if state.attempts >= self._max_attempts:
                await self._time_out(thread_client, thread_id, state, "attempts_exhausted")
                break

            remaining = self._remaining(deadline)
            if remaining is not None and remaining <= 0:
                await self._time_out(thread_client, thread_id, state, "deadline_exceeded")
                break

            interval = self._poll_interval if remaining is None else min(self._poll_interval, remaining)
            await self._sleep(interval)

            remaining = self._remaining(deadline)
            if remaining is not None and remaining <= 0:
                await self._time_out(thread_client, thread_id, state, "deadline_exceeded")
                break

            state.attempts += 1
            try:
                snapshot = await self._fetch(thread_client, thread_id, state.run_id, remaining)
            except ProviderError as e:
                PROVIDER_ERRORS.labels(operation="get_run", error_type=type(e).__name__).inc()
                state.last_error = e.message
                logger.warning(
                    "run_poll_failed",
                    run_id=state.run_id,
                    attempt=state.attempts,
                    error=e.message,
                )
                continue
            except TimeoutError:
                PROVIDER_ERRORS.labels(operation="get_run", error_type="TimeoutError").inc()
                state.last_error = "status poll timed out"
                logger.warning(
                    "run_poll_timed_out",
                    run_id=state.run_id,
                    attempt=state.attempts,
                )
                continue

            state.status = snapshot.status
            state.last_error = snapshot.last_error.message if snapshot.last_error else None
            logger.debug(
                "run_polled",
                run_id=state.run_id,
                attempt=state.attempts,
                status=state.status.value,
            )

        RUN_POLLS.observe(state.attempts)
        RUN_OUTCOMES.labels(status=state.status.value).inc()
        logger.info(
            "run_finished",
            run_id=state.run_id,
            status=state.status.value,
            attempts=state.attempts,
        )
        return state

    def _remaining(self, deadline: float | None) -> float | None:
        if deadline is None:
            return None
        return deadline - self._clock()

    async def _fetch(
        self,
        thread_client: ThreadClient,
        thread_id: str,
        run_id: str,
        remaining: float | None,
    ) -> RunSnapshot:
        if remaining is None:
            return await thread_client.get_run(thread_id, run_id)
        return await asyncio.wait_for(thread_client.get_run(thread_id, run_id), timeout=remaining)

    async def _time_out(
        self,
        thread_client: ThreadClient,
        thread_id: str,
        state: RunState,
        reason: str,
    ) -> None:
        """Mark the run timed out and ask the provider to cancel it."""
        logger.warning(
            "run_timed_out",
            run_id=state.run_id,
            reason=reason,
            attempts=state.attempts,
            last_status=state.status.value,
        )
        state.status = RunStatus.TIMED_OUT
        try:
            await thread_client.cancel_run(thread_id, state.run_id)
        except ProviderError as e:
            logger.warning("run_cancel_failed", run_id=state.run_id, error=e.message)


def sanitize_reason(reason: str) -> str:
    """Collapse whitespace and bound the length of a provider reason."""
    cleaned = re.sub(r"\s+", " ", reason).strip()
    if len(cleaned) > MAX_REASON_LENGTH:
        cleaned = cleaned[: MAX_REASON_LENGTH - 3].rstrip() + "..."
    return cleaned


def degraded_reply(state: RunState, *, degraded_message: str, failed_message: str) -> str:
    """Return the user-facing text for a run that produced no reply.

    FAILED runs carry the provider's reason; every other status gets the
    generic degraded text.
    """
    if state.status == RunStatus.FAILED and state.last_error:
        reason = sanitize_reason(state.last_error)
        if reason:
            return f"{failed_message}: {reason}"
    return degraded_message
