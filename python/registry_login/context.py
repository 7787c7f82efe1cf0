"""
Cancellation and deadline handling for login calls.

A LoginContext is created by the caller and passed explicitly through
Manager.login into whichever credential client runs. Clients use
remaining() as the timeout of their network calls and call check() before
starting blocking work.

cancel() does not interrupt a network call that is already in flight. The
client notices it at its next check(), so an in-flight SDK or HTTP request
still runs until it returns or hits its timeout. Pass a timeout when the
login has to finish within a bound.
"""

import threading
import time
from typing import Optional

from registry_login.utils.error_utils import ErrorCategory, LoginCancelledError


class LoginContext:
    """Deadline and cancellation signal for a single login"""

    def __init__(self, timeout: Optional[float] = None):
        """Initialize a context

        Args:
            timeout: Seconds from now until the deadline (None = no deadline)
        """
        self._deadline = time.monotonic() + timeout if timeout is not None else None
        self._cancelled = threading.Event()

    @classmethod
    def background(cls) -> "LoginContext":
        """Return a context with no deadline that is never cancelled by itself."""
        return cls()

    def cancel(self) -> None:
        """Cancel the login. Safe to call from another thread.

        Takes effect at the next check(); an in-flight request is not aborted.
        """
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None when there is no deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def check(self) -> None:
        """Raise LoginCancelledError if the context is cancelled or past its deadline."""
        if self.cancelled:
            raise LoginCancelledError("Login cancelled", category=ErrorCategory.UNKNOWN)
        if self.expired():
            raise LoginCancelledError(
                "Login deadline exceeded",
                category=ErrorCategory.TIMEOUT,
                suggestions=["Increase login.timeout in config.yaml or pass --timeout"],
            )
