"""Login session with sliding inactivity expiry."""

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from univ_erp.domain.models import Actor

DEFAULT_SESSION_TIMEOUT = timedelta(minutes=30)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class Session:
    """Holds the logged-in actor and the time of its last recorded activity.

    Expiry is lazy: there is no background timer. Once ``timeout`` has
    elapsed since the last activity, the next read of the actor clears it.
    All state changes happen under one lock, including that clearing.
    """

    timeout: timedelta = DEFAULT_SESSION_TIMEOUT
    clock: Callable[[], datetime] = _utcnow
    _actor: Actor | None = field(default=None, init=False, repr=False)
    _last_activity: datetime | None = field(default=None, init=False, repr=False)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False
    )

    def login(self, actor: Actor) -> None:
        """Store the actor, replacing any previous one, and stamp activity."""
        with self._lock:
            self._actor = actor
            self._last_activity = self.clock()

    def logout(self) -> None:
        """Clear the actor unconditionally."""
        with self._lock:
            self._clear()

    def current_actor(self) -> Actor | None:
        """Return the logged-in actor, or None when absent or expired."""
        with self._lock:
            self._expire_locked()
            return self._actor

    def is_logged_in(self) -> bool:
        """Return whether an unexpired actor is present."""
        return self.current_actor() is not None

    def expire_if_needed(self) -> bool:
        """Clear an expired login and report whether it was cleared."""
        with self._lock:
            return self._expire_locked()

    def touch(self) -> None:
        """Reset the inactivity window if an unexpired actor is present."""
        with self._lock:
            if self._expire_locked() or self._actor is None:
                return
            self._last_activity = self.clock()

    def time_remaining(self) -> timedelta:
        """Return how long until the login expires, without side effects."""
        with self._lock:
            if self._actor is None or self._last_activity is None:
                return timedelta(0)
            remaining = self.timeout - (self.clock() - self._last_activity)
            return max(timedelta(0), remaining)

    def _expire_locked(self) -> bool:
        if self._actor is None or self._last_activity is None:
            return False
        if self.clock() - self._last_activity < self.timeout:
            return False
        self._clear()
        return True

    def _clear(self) -> None:
        self._actor = None
        self._last_activity = None
