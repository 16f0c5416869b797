"""
時刻アダプター
"""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone

from ..domain.ports.clock_port import IClock


class SystemClock(IClock):
    """実時間"""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class ManualClock(IClock):
    """
    手動で進める時計

    期限切れの検証を実時間待ちなしで行うために使う。
    """

    def __init__(self, start: datetime | None = None):
        self._now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            return self._now

    def advance(self, seconds: float = 0, **kwargs) -> datetime:
        """時計を進める（timedelta と同じキーワードも可）"""
        with self._lock:
            self._now = self._now + timedelta(seconds=seconds, **kwargs)
            return self._now

    def set(self, value: datetime) -> None:
        with self._lock:
            self._now = value
