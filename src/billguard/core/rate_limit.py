"""
Sliding-window rate limiting.
"""

import time
from typing import Callable, Dict, List, Optional

import structlog

from .audit import SecurityEventLogger
from .exceptions import RateLimitError

logger = structlog.get_logger(__name__)

Clock = Callable[[], float]


def monotonic_ms() -> float:
    """Monotonic clock in milliseconds."""
    return time.monotonic() * 1000


def _mask(identifier: str) -> str:
    return identifier[:8] + "..." if len(identifier) > 8 else identifier


class SlidingWindowRateLimiter:
    """
    Per-identifier sliding-window limiter.

    Only attempts within the trailing window count. A rejected attempt is not
    recorded, and nothing refills between calls beyond dropping expired
    timestamps. Windows belong to this instance: two limiters never share
    state, even for the same identifier string.
    """

    def __init__(
        self,
        max_attempts: int,
        window_ms: float,
        audit: Optional[SecurityEventLogger] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if window_ms <= 0:
            raise ValueError("window_ms must be positive")

        self.max_attempts = max_attempts
        self.window_ms = window_ms
        self.audit = audit
        self.clock = clock or monotonic_ms
        self.windows: Dict[str, List[float]] = {}

    def __call__(self, identifier: str) -> bool:
        """
        Record an attempt for identifier.

        Returns True if the attempt is allowed, False if the limit is reached.
        """
        now = self.clock()
        recent = self._prune(identifier, now)

        if len(recent) >= self.max_attempts:
            logger.warning(
                "Rate limit exceeded",
                identifier=_mask(identifier),
                attempts=len(recent),
                max_attempts=self.max_attempts,
                window_ms=self.window_ms,
            )
            if self.audit is not None:
                self.audit.log_suspicious_input(
                    "rate_limit",
                    f"Too many attempts for {identifier}",
                    reason="Rate limit exceeded",
                )
                if self.audit.metrics is not None:
                    self.audit.metrics.record_rate_limit_rejection()
            return False

        recent.append(now)
        self.windows[identifier] = recent
        logger.debug(
            "Rate limit check passed",
            identifier=_mask(identifier),
            remaining=self.max_attempts - len(recent),
        )
        return True

    def check(self, identifier: str) -> None:
        """
        Record an attempt for identifier.

        Raises RateLimitError if limit exceeded.
        """
        if not self(identifier):
            raise RateLimitError(
                message="Rate limit exceeded",
                retry_after_ms=self.retry_after_ms(identifier),
            )

    def remaining(self, identifier: str) -> int:
        """Attempts left in the current window, without recording one."""
        recent = self._recent(identifier, self.clock())
        return max(0, self.max_attempts - len(recent))

    def retry_after_ms(self, identifier: str) -> int:
        """Milliseconds until the oldest counted attempt leaves the window."""
        now = self.clock()
        recent = self._recent(identifier, now)
        if len(recent) < self.max_attempts:
            return 0
        return max(1, int(recent[0] + self.window_ms - now))

    def reset(self, identifier: Optional[str] = None) -> None:
        """Forget one identifier's attempts, or all of them."""
        if identifier is None:
            self.windows.clear()
        else:
            self.windows.pop(identifier, None)

    def _recent(self, identifier: str, now: float) -> List[float]:
        return [t for t in self.windows.get(identifier, []) if now - t < self.window_ms]

    def _prune(self, identifier: str, now: float) -> List[float]:
        recent = self._recent(identifier, now)
        if recent:
            self.windows[identifier] = recent
        else:
            self.windows.pop(identifier, None)
        return recent


def create_rate_limiter(
    max_attempts: int,
    window_ms: float,
    audit: Optional[SecurityEventLogger] = None,
    clock: Optional[Clock] = None,
) -> SlidingWindowRateLimiter:
    """Create an independent limiter; call it with an identifier to gate an attempt."""
    return SlidingWindowRateLimiter(max_attempts, window_ms, audit=audit, clock=clock)
