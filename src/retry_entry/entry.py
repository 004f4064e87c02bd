"""Retry entry: run a task until it succeeds, is accepted, or gives up.

Each failed attempt is classified in a fixed order:
  - acceptable matchers first: a match ends the run as a success that still
    reports the error;
  - retry matchers next: a match schedules another attempt if budget remains;
  - anything else is fatal and ends the run immediately.

There is no delay between attempts. Callers wanting backoff should wrap their
task.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import cast

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_none,
)

from retry_entry.logging import (
    StructuredLogger,
    get_logger,
    log_debug,
    log_error,
    log_info,
    log_warning,
)
from retry_entry.matchers import ErrorMatcher
from retry_entry.settings import RetrySettings
from retry_entry.task import Task, as_task


class RetryOutcome(StrEnum):
    """Terminal state reached by ``RetryEntry.run``."""

    SUCCESS = "success"
    ACCEPTED = "accepted"
    FATAL = "fatal"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class RetryResult:
    """Outcome of one ``RetryEntry.run`` call.

    Branch on ``success``; ``last_error`` is context, not a success flag. An
    accepted failure is ``success=True`` with the triggering error attached.

    Attributes:
        success: Whether the run counts as successful.
        last_error: Last error observed, ``None`` after a clean execution.
        outcome: Terminal state that ended the run.
        attempts: Number of times the task was executed.
    """

    success: bool
    last_error: BaseException | None = None
    outcome: RetryOutcome | None = None
    attempts: int = 0

    def __post_init__(self) -> None:
        if not self.success and self.last_error is None:
            raise ValueError("a failed result must carry its last error")

    def last_error_matches(self, matcher: ErrorMatcher) -> bool:
        """Return whether ``last_error`` matches ``matcher``."""
        if self.last_error is None:
            return False
        return matcher.match(self.last_error)


def _matches_any(
    matchers: Sequence[ErrorMatcher],
    error: BaseException,
) -> bool:
    return any(matcher.match(error) for matcher in matchers)


@dataclass(slots=True)
class _RunState:
    """Mutable bookkeeping for one ``run`` call."""

    attempts: int = 0
    error: Exception | None = None
    outcome: RetryOutcome | None = None


def _no_sleep(seconds: float) -> None:
    del seconds


@dataclass(frozen=True)
class RetryEntry:
    """Retry configuration bound to one task.

    Entries are immutable: ``with_acceptable_errors`` and ``with_retry_errors``
    return a reconfigured copy, so they chain like a builder.
    """

    task: Task | Callable[[], object]
    max_attempts: int
    acceptable_errors: tuple[ErrorMatcher, ...] = ()
    retry_errors: tuple[ErrorMatcher, ...] = ()
    logger: StructuredLogger | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        object.__setattr__(self, "task", as_task(self.task))
        object.__setattr__(self, "acceptable_errors", tuple(self.acceptable_errors))
        object.__setattr__(self, "retry_errors", tuple(self.retry_errors))

    @classmethod
    def from_settings(
        cls,
        task: Task | Callable[[], object],
        settings: RetrySettings,
        *,
        logger: StructuredLogger | None = None,
    ) -> RetryEntry:
        """Build an entry whose attempt budget comes from ``settings``."""
        return cls(task, settings.max_attempts, logger=logger)

    def with_acceptable_errors(self, *matchers: ErrorMatcher) -> RetryEntry:
        """Return a copy whose acceptable matchers are exactly ``matchers``."""
        return replace(self, acceptable_errors=tuple(matchers))

    def with_retry_errors(self, *matchers: ErrorMatcher) -> RetryEntry:
        """Return a copy whose retry matchers are exactly ``matchers``."""
        return replace(self, retry_errors=tuple(matchers))

    def _classify(self, error: Exception) -> RetryOutcome | None:
        """Classify one task failure; ``None`` means retryable."""
        if _matches_any(self.acceptable_errors, error):
            return RetryOutcome.ACCEPTED
        if _matches_any(self.retry_errors, error):
            return None
        return RetryOutcome.FATAL

    def _build_retrying(self, state: _RunState, logger: StructuredLogger) -> Retrying:
        def _should_retry(error: BaseException) -> bool:
            return error is state.error and state.outcome is None

        def _before_retry(retry_state: RetryCallState) -> None:
            log_warning(
                logger,
                "retry.attempt_failed",
                attempt=retry_state.attempt_number,
                max_attempts=self.max_attempts,
                error_type=type(state.error).__name__,
                error=str(state.error),
            )

        return Retrying(
            retry=retry_if_exception(_should_retry),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_none(),
            sleep=_no_sleep,
            before_sleep=_before_retry,
            reraise=True,
        )

    def run(self) -> RetryResult:
        """Execute the task until a terminal state is reached.

        Only exceptions raised by the task are classified. Anything else
        raised while running (a failing logger or matcher, ``KeyboardInterrupt``)
        propagates to the caller.
        """
        logger = get_logger() if self.logger is None else self.logger
        task = cast(Task, self.task)
        state = _RunState()
        try:
            for attempt in self._build_retrying(state, logger):
                with attempt:
                    state.attempts += 1
                    try:
                        task.execute()
                    except Exception as error:
                        outcome = self._classify(error)
                        state.error, state.outcome = error, outcome
                        raise
        except Exception as error:
            if error is not state.error:
                raise
            outcome = RetryOutcome.EXHAUSTED if state.outcome is None else state.outcome
            result = RetryResult(
                success=outcome is RetryOutcome.ACCEPTED,
                last_error=error,
                outcome=outcome,
                attempts=state.attempts,
            )
        else:
            result = RetryResult(
                success=True,
                last_error=None,
                outcome=RetryOutcome.SUCCESS,
                attempts=state.attempts,
            )

        self._log_finished(logger, result)
        return result

    def _log_finished(self, logger: StructuredLogger, result: RetryResult) -> None:
        fields: dict[str, object] = {
            "outcome": str(result.outcome),
            "attempts": result.attempts,
        }
        if result.last_error is not None:
            fields["error_type"] = type(result.last_error).__name__
            fields["error"] = str(result.last_error)

        if result.outcome is RetryOutcome.SUCCESS:
            log_debug(logger, "retry.finished", **fields)
        elif result.outcome is RetryOutcome.ACCEPTED:
            log_info(logger, "retry.finished", **fields)
        elif result.outcome is RetryOutcome.EXHAUSTED:
            log_warning(logger, "retry.finished", **fields)
        else:
            log_error(logger, "retry.finished", **fields)
