"""Fixed-window admission control for quota-limited endpoints."""
from __future__ import annotations

import logging
import math
import threading
import time
import zlib
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Protocol

logger = logging.getLogger("carenote.admission")


def format_timestamp(epoch_seconds: float) -> str:
    """Render an epoch timestamp as ISO-8601 UTC with a ``Z`` suffix."""

    moment = datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True, slots=True)
class AdmissionWindow:
    """Admissions counted for one identity until ``reset_at``."""

    count: int
    reset_at: float

    def expired(self, now: float) -> bool:
        return now >= self.reset_at


@dataclass(frozen=True, slots=True)
class QuotaStatus:
    """Quota usage of one identity at a point in time."""

    used: int
    limit: int
    reset_at: float
    checked_at: float

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.used)

    @property
    def reset_time(self) -> str:
        return format_timestamp(self.reset_at)

    @property
    def retry_after_seconds(self) -> int:
        return max(0, math.ceil(self.reset_at - self.checked_at))

    def as_dict(self) -> dict:
        return {
            "remaining": self.remaining,
            "used": self.used,
            "limit": self.limit,
            "resetTime": self.reset_time,
        }


@dataclass(frozen=True, slots=True)
class AdmissionDecision:
    """Outcome of an admission check; ``status`` reflects the state after the check."""

    admitted: bool
    status: QuotaStatus


class WindowStore(Protocol):
    """Storage for admission windows keyed by identity."""

    def get(self, identity: str) -> Optional[AdmissionWindow]:
        ...

    def put(self, identity: str, window: AdmissionWindow) -> None:
        ...

    def sweep(self, now: float) -> int:
        """Drop every window that has expired at ``now`` and return how many were removed."""
        ...


class InMemoryWindowStore:
    """Process-local window store; contents are lost on restart."""

    def __init__(self) -> None:
        self._windows: Dict[str, AdmissionWindow] = {}
        self._lock = threading.Lock()

    def get(self, identity: str) -> Optional[AdmissionWindow]:
        with self._lock:
            return self._windows.get(identity)

    def put(self, identity: str, window: AdmissionWindow) -> None:
        with self._lock:
            self._windows[identity] = window

    def sweep(self, now: float) -> int:
        with self._lock:
            expired = [identity for identity, window in self._windows.items() if window.expired(now)]
            for identity in expired:
                del self._windows[identity]
            return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)


class AdmissionController:
    """Admit at most ``max_requests`` calls per identity within each fixed window."""

    def __init__(
        self,
        store: WindowStore,
        *,
        max_requests: int = 3,
        window_seconds: float = 24 * 60 * 60,
        clock: Callable[[], float] = time.time,
        lock_stripes: int = 64,
    ) -> None:
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._store = store
        self._clock = clock
        self._locks: List[threading.Lock] = [threading.Lock() for _ in range(lock_stripes)]

    def _lock_for(self, identity: str) -> threading.Lock:
        return self._locks[zlib.crc32(identity.encode("utf-8")) % len(self._locks)]

    def _fresh_window(self, now: float) -> AdmissionWindow:
        return AdmissionWindow(count=0, reset_at=now + self.window_seconds)

    def check_and_admit(self, identity: str) -> AdmissionDecision:
        with self._lock_for(identity):
            now = self._clock()
            self._store.sweep(now)
            window = self._store.get(identity)
            if window is None or window.expired(now):
                window = self._fresh_window(now)
            if window.count >= self.max_requests:
                logger.info(
                    "Denied %s: %s/%s used until %s",
                    identity,
                    window.count,
                    self.max_requests,
                    format_timestamp(window.reset_at),
                )
                return AdmissionDecision(
                    admitted=False,
                    status=QuotaStatus(
                        used=window.count, limit=self.max_requests, reset_at=window.reset_at, checked_at=now
                    ),
                )
            window = AdmissionWindow(count=window.count + 1, reset_at=window.reset_at)
            self._store.put(identity, window)
        logger.debug("Admitted %s: %s/%s", identity, window.count, self.max_requests)
        return AdmissionDecision(
            admitted=True,
            status=QuotaStatus(
                used=window.count, limit=self.max_requests, reset_at=window.reset_at, checked_at=now
            ),
        )

    def peek_status(self, identity: str) -> QuotaStatus:
        now = self._clock()
        window = self._store.get(identity)
        if window is None or window.expired(now):
            window = self._fresh_window(now)
        return QuotaStatus(used=window.count, limit=self.max_requests, reset_at=window.reset_at, checked_at=now)
