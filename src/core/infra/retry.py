"""Retry policy for booking attempts."""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, TypeVar

from loguru import logger
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_fixed,
)

from src.constants import LogEmoji, Retries

R = TypeVar("R")

SleepFn = Callable[[float], Awaitable[Any]]


def _is_unsuccessful(result: Any) -> bool:
    """Results expose ``success``; anything falsy there is retried."""
    return not getattr(result, "success", False)


def _return_last_outcome(retry_state: RetryCallState) -> Any:
    """Hand back the final attempt's outcome instead of raising RetryError."""
    outcome = retry_state.outcome
    if outcome is None:
        return None
    return outcome.result()


def _log_before_sleep(retry_state: RetryCallState) -> None:
    outcome = retry_state.outcome
    if outcome is not None and outcome.failed:
        reason = f"raised {outcome.exception()!r}"
    else:
        reason = "was unsuccessful"
    wait = retry_state.next_action.sleep if retry_state.next_action else 0
    logger.warning(
        f"{LogEmoji.RETRY} Attempt {retry_state.attempt_number} {reason}, "
        f"retrying in {wait:.1f}s"
    )


@dataclass(frozen=True)
class RetryPolicy:
    """
    Fixed-delay retry policy for operations returning a result with ``success``.

    An attempt counts as failed when it raises or when ``retry_on_result``
    accepts its result (by default: a falsy ``success`` attribute). The last
    outcome is returned (or re-raised) once attempts are exhausted.

    Attributes:
        max_attempts: Total number of calls, including the first
        delay_seconds: Wait between a failed attempt and the next one
        sleep: Awaitable clock used for the wait (``asyncio.sleep`` by default)
        retry_on_result: Predicate selecting results worth another attempt
    """

    max_attempts: int = Retries.MAX_ATTEMPTS
    delay_seconds: float = Retries.DELAY_SECONDS
    sleep: SleepFn = field(default=asyncio.sleep, compare=False)
    retry_on_result: Callable[[Any], bool] = field(default=_is_unsuccessful, compare=False)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.delay_seconds < 0:
            raise ValueError(f"delay_seconds must be >= 0, got {self.delay_seconds}")

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_fixed(self.delay_seconds),
            retry=retry_if_exception_type(Exception) | retry_if_result(self.retry_on_result),
            sleep=self.sleep,
            before_sleep=_log_before_sleep,
            retry_error_callback=_return_last_outcome,
        )

    async def run(self, fn: Callable[..., Awaitable[R]], *args: Any, **kwargs: Any) -> R:
        """
        Call ``fn`` until it succeeds or attempts run out.

        Args:
            fn: Async callable returning an object with a ``success`` attribute
            *args: Positional arguments for ``fn``
            **kwargs: Keyword arguments for ``fn``

        Returns:
            The first successful result, or the last result

        Raises:
            Exception: The last attempt's exception if the final attempt raised
        """
        return await self._retrying()(fn, *args, **kwargs)

    @classmethod
    def from_settings(cls, settings: Optional[Any] = None) -> "RetryPolicy":
        """
        Build a policy from application settings.

        Args:
            settings: Settings instance (defaults to get_settings())

        Returns:
            Configured RetryPolicy
        """
        if settings is None:
            from src.core.config.settings import get_settings

            settings = get_settings()
        return cls(
            max_attempts=settings.retry_max_attempts,
            delay_seconds=settings.retry_delay_seconds,
        )
