"""Cooperative cancellation tokens.

A token is polled by the converter between phases; it never interrupts work
that is already running.
"""

import threading
import time
from typing import Optional

from strict_xhtml.shared.errors import ErrorKind


class CancellationToken:
    """Thread-safe, poll-based cancellation signal with an optional deadline.

    Examples:
        Explicit cancellation from another thread:
        >>> token = CancellationToken()
        >>> token.cancel()
        >>> token.poll()
        <ErrorKind.CANCELED: 'canceled'>

        Time-based cancellation:
        >>> token = CancellationToken.with_timeout(0.5)
        >>> token.poll() is None
        True
    """

    def __init__(self, deadline: Optional[float] = None) -> None:
        """Initialize token.

        Args:
            deadline: Absolute ``time.monotonic()`` value after which the
                token reports a timeout
        """
        self._event = threading.Event()
        self._deadline = deadline

    @classmethod
    def with_timeout(cls, seconds: float) -> "CancellationToken":
        """Create a token that expires ``seconds`` from now."""
        if seconds < 0:
            raise ValueError("timeout seconds must be >= 0")
        return cls(deadline=time.monotonic() + seconds)

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    def cancel(self) -> None:
        """Trigger the token explicitly."""
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        """Check whether the token has been triggered or has expired."""
        return self.poll() is not None

    def poll(self) -> Optional[ErrorKind]:
        """Return the reason the token fired, or None if work may continue.

        Explicit cancellation takes precedence over an expired deadline.
        """
        if self._event.is_set():
            return ErrorKind.CANCELED
        if self._deadline is not None and time.monotonic() >= self._deadline:
            return ErrorKind.TIMEOUT
        return None
