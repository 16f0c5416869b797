"""
インメモリ共有ストレージアダプター
プロセスの生存期間中だけ保持する
"""

from __future__ import annotations

import threading
from datetime import datetime

from ...core.logging import get_logger
from ...domain.models.share import ShareRecord
from ...domain.ports.share_storage_port import IShareStorage

logger = get_logger(__name__)


class InMemoryShareStorage(IShareStorage):
    """
    インメモリ共有ストレージ

    レコード表は threading.Lock で保護する。
    ロック内では await しないため、イベントループ・スレッドのどちらから呼んでもよい。
    """

    def __init__(self):
        self._records: dict[str, ShareRecord] = {}
        self._lock = threading.Lock()

    async def save(self, record: ShareRecord) -> None:
        with self._lock:
            self._records[record.identifier] = record

    async def load(self, identifier: str) -> ShareRecord | None:
        with self._lock:
            return self._records.get(identifier)

    async def delete(self, identifier: str) -> bool:
        with self._lock:
            return self._records.pop(identifier, None) is not None

    async def exists(self, identifier: str) -> bool:
        with self._lock:
            return identifier in self._records

    async def list_identifiers(self) -> list[str]:
        with self._lock:
            return sorted(self._records)

    async def count(self) -> int:
        with self._lock:
            return len(self._records)

    async def delete_expired(self, now: datetime) -> int:
        with self._lock:
            expired = [i for i, r in self._records.items() if r.is_expired(now)]
            for identifier in expired:
                del self._records[identifier]

        for identifier in expired:
            logger.debug(f"Deleted expired share: {identifier}")

        return len(expired)
