# passwatch/app/services/throttle.py
"""
In-process deduplication of security alert emails.

A burst of logins from the same origin (app retries, two tabs, PIN right
after password) should produce one alert, not several. Each (user, IP) pair
that was just notified is remembered until an expiry timestamp; while it is
remembered, further alerts for that pair are skipped.

Limitations:
- state lives in this process only; a restart forgets it and several
  instances behind a load balancer each send their own alert
- the window only guards against bursts, it is not a rate limit
"""
import threading
import time
from typing import Callable, Dict


class NotificationThrottle:
    """
    Remembers recently notified (user, IP) pairs for `window_seconds`.

    Expired pairs are dropped lazily when their user is touched. Users that
    are never touched again are dropped by a full sweep, which `try_acquire`
    and `mark_notified` run at most once per window. A user whose last pair
    expires is removed entirely, so memory stays bounded by recent activity.
    """

    def __init__(self, window_seconds: float = 10.0, clock: Callable[[], float] = time.monotonic):
        self.window_seconds = window_seconds
        self._clock = clock
        self._recent: Dict[str, Dict[str, float]] = {}
        self._lock = threading.Lock()
        self._next_sweep = clock() + window_seconds

    def _prune_user(self, user_id: str, now: float) -> Dict[str, float]:
        pairs = self._recent.get(user_id)
        if pairs is None:
            return {}
        for ip_address in [ip for ip, expiry in pairs.items() if expiry <= now]:
            del pairs[ip_address]
        if not pairs:
            del self._recent[user_id]
            return {}
        return pairs

    def _sweep_locked(self, now: float) -> int:
        removed = 0
        for user_id in list(self._recent):
            before = len(self._recent[user_id])
            removed += before - len(self._prune_user(user_id, now))
        self._next_sweep = now + self.window_seconds
        return removed

    def _maybe_sweep(self, now: float) -> None:
        if now >= self._next_sweep:
            self._sweep_locked(now)

    def should_notify(self, user_id: str, ip_address: str) -> bool:
        """False while an alert for this pair was sent inside the window."""
        with self._lock:
            return ip_address not in self._prune_user(user_id, self._clock())

    def mark_notified(self, user_id: str, ip_address: str) -> None:
        with self._lock:
            now = self._clock()
            self._maybe_sweep(now)
            self._prune_user(user_id, now)
            self._recent.setdefault(user_id, {})[ip_address] = now + self.window_seconds

    def try_acquire(self, user_id: str, ip_address: str) -> bool:
        """
        Check and mark in one step.

        Returns True (and marks the pair) only for the first caller inside
        the window; concurrent callers for the same pair get False.
        """
        with self._lock:
            now = self._clock()
            self._maybe_sweep(now)
            if ip_address in self._prune_user(user_id, now):
                return False
            self._recent.setdefault(user_id, {})[ip_address] = now + self.window_seconds
            return True

    def sweep(self) -> int:
        """Drop every expired pair. Returns how many were removed."""
        with self._lock:
            return self._sweep_locked(self._clock())

    def tracked_users(self) -> int:
        with self._lock:
            return len(self._recent)

    def clear(self) -> None:
        with self._lock:
            self._recent.clear()
