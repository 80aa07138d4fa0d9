# ================================================================================
# Wait Helpers Module
# ================================================================================
#
# This module provides the single synchronization primitive for UI tests:
# a bounded polling wait over a condition evaluated against a browser session.
#
# Key Features:
#   - Fixed polling interval with a hard deadline
#   - Transient "not found yet" errors treated as "not satisfied"
#   - Timeout errors carrying the last observed state
#   - Defaults taken from configuration, overridable per call
#
# Usage:
#   waiter = Waiter(session, timeout=15, poll_interval=0.5)
#   element = waiter.until(visibility_of("#welcome"))
#   waiter.until_not(visibility_of(".spinner"))
#
# ================================================================================

import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple, Type, TypeVar

from loguru import logger
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from .config_store import Configuration


T = TypeVar('T')


class WaitTimeoutError(Exception):
    """Raised when a wait operation times out."""

    def __init__(self, message: str, last_state: Any = None, attempts: int = 0):
        super().__init__(message)
        self.last_state = last_state
        self.attempts = attempts


class ElementNotFoundError(Exception):
    """Raised by conditions when no element matches yet."""
    pass


# Exceptions that mean "not yet" rather than "broken"
DEFAULT_IGNORED_EXCEPTIONS: Tuple[Type[BaseException], ...] = (
    ElementNotFoundError,
    PlaywrightTimeoutError,
)


@dataclass(frozen=True)
class WaitCondition:
    """
    A named predicate with its own timeout and polling interval.

    Attributes:
        description: Human-readable name used in logs and timeout messages
        predicate: Callable evaluated against the session
        timeout: Total timeout in seconds
        poll_interval: Delay between evaluations in seconds
    """
    description: str
    predicate: Callable[[Any], Any]
    timeout: float
    poll_interval: float

    def __post_init__(self) -> None:
        _validate(self.timeout, self.poll_interval)


def _validate(timeout: float, poll_interval: float) -> None:
    if timeout is None or timeout <= 0:
        raise ValueError(f"timeout must be positive, got {timeout!r}")
    if poll_interval is None or poll_interval <= 0:
        raise ValueError(f"poll_interval must be positive, got {poll_interval!r}")


def describe(condition: Callable[..., Any]) -> str:
    """Best-effort readable name of a condition."""
    return getattr(condition, "description", None) or getattr(
        condition, "__name__", repr(condition)
    )


class Waiter:
    """
    Polls a condition until it returns a truthy value or the deadline passes.

    A condition is any callable taking the session. Truthy results satisfy
    the wait and are returned to the caller. Exceptions listed in
    `ignored_exceptions` count as "not yet"; anything else propagates.

    Example:
        waiter = Waiter(session, timeout=10, poll_interval=0.25)
        title = waiter.until(lambda s: s.page.title() or None, message="page title")
    """

    def __init__(
        self,
        session: Any,
        timeout: float = 15.0,
        poll_interval: float = 0.5,
        ignored_exceptions: Tuple[Type[BaseException], ...] = DEFAULT_IGNORED_EXCEPTIONS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize waiter.

        Args:
            session: Object handed to every condition (usually a BrowserSession)
            timeout: Default timeout in seconds
            poll_interval: Default polling interval in seconds
            ignored_exceptions: Exceptions treated as "not yet satisfied"
            clock: Monotonic clock, seconds
            sleep: Sleep function, seconds
        """
        _validate(timeout, poll_interval)
        self.session = session
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.ignored_exceptions = tuple(ignored_exceptions)
        self._clock = clock
        self._sleep = sleep

    @classmethod
    def from_config(cls, session: Any, config: Configuration, **kwargs: Any) -> "Waiter":
        """Waiter using explicit.wait.timeout / explicit.wait.polling."""
        return cls(
            session,
            timeout=config.explicit_wait_timeout,
            poll_interval=config.polling_interval,
            **kwargs,
        )

    def until(
        self,
        condition: Callable[[Any], T],
        timeout: Optional[float] = None,
        poll_interval: Optional[float] = None,
        message: str = "",
    ) -> T:
        """
        Wait until the condition returns a truthy value.

        Args:
            condition: Callable evaluated against the session
            timeout: Override default timeout (seconds)
            poll_interval: Override default polling interval (seconds)
            message: Extra context for the timeout message

        Returns:
            The condition's truthy result

        Raises:
            WaitTimeoutError: Deadline passed without the condition holding
        """
        return self._poll(condition, timeout, poll_interval, message, expect=True)

    def until_not(
        self,
        condition: Callable[[Any], Any],
        timeout: Optional[float] = None,
        poll_interval: Optional[float] = None,
        message: str = "",
    ) -> bool:
        """
        Wait until the condition returns a falsy value.

        Ignored exceptions count as satisfied here: an element that cannot
        be found is, for this purpose, gone.
        """
        return self._poll(condition, timeout, poll_interval, message, expect=False)

    def wait(self, condition: WaitCondition) -> Any:
        """Wait on a fully specified WaitCondition."""
        return self.until(
            condition.predicate,
            timeout=condition.timeout,
            poll_interval=condition.poll_interval,
            message=condition.description,
        )

    def _poll(
        self,
        condition: Callable[[Any], Any],
        timeout: Optional[float],
        poll_interval: Optional[float],
        message: str,
        expect: bool,
    ) -> Any:
        timeout = self.timeout if timeout is None else timeout
        poll_interval = self.poll_interval if poll_interval is None else poll_interval
        _validate(timeout, poll_interval)

        description = message or describe(condition)
        start = self._clock()
        deadline = start + timeout
        attempt = 0
        last_state: Any = None

        while True:
            attempt += 1
            try:
                value = condition(self.session)
                last_state = value
                if bool(value) is expect:
                    logger.debug(
                        f"Wait satisfied after {attempt} attempt(s) "
                        f"({self._clock() - start:.2f}s): {description}"
                    )
                    return value if expect else True
            except self.ignored_exceptions as e:
                last_state = f"{type(e).__name__}: {e}"
                if not expect:
                    logger.debug(f"Wait satisfied (target gone) after {attempt} attempt(s): {description}")
                    return True

            now = self._clock()
            if now >= deadline:
                verb = "satisfied" if expect else "cleared"
                error_msg = (
                    f"Timed out after {now - start:.2f}s ({attempt} attempts) waiting for "
                    f"condition to be {verb}: {description}. Last state: {last_state}"
                )
                logger.error(error_msg)
                raise WaitTimeoutError(error_msg, last_state=last_state, attempts=attempt)

            self._sleep(min(poll_interval, deadline - now))


__all__ = [
    "DEFAULT_IGNORED_EXCEPTIONS",
    "ElementNotFoundError",
    "WaitCondition",
    "WaitTimeoutError",
    "Waiter",
    "describe",
]
