"""
共有ファイルストレージアダプター
Zero-Knowledge アーキテクチャ用

クライアントから受け取った暗号化Blobをそのままファイルに保存する。
サーバーは内容を復号せず、暗号文として保存するのみ。
プロセスを再起動しても共有は残る。
"""

from __future__ import annotations

import json
import os
import threading
from datetime import datetime
from pathlib import Path

from ...core.logging import get_logger
from ...domain.models.share import ShareRecord
from ...domain.ports.share_storage_port import IShareStorage

logger = get_logger(__name__)

_SUFFIX = ".share.json"


class FileShareStorageAdapter(IShareStorage):
    """
    共有ファイルストレージ

    1レコード = 1 JSONファイル。
    書き込みは一時ファイル経由の置き換えで行い、途中状態のファイルを残さない。
    """

    def __init__(self, data_dir: str = "data/shares"):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        logger.info(f"FileShareStorageAdapter initialized: {self.data_dir}")

    def _get_path(self, identifier: str) -> Path:
        """レコードのファイルパスを取得"""
        # ID はサービス層で16進に検証済みだが、念のためパス区切りを除去
        safe_id = identifier.replace("/", "_").replace("\\", "_")
        return self.data_dir / f"{safe_id}{_SUFFIX}"

    def _read(self, path: Path) -> ShareRecord | None:
        """ファイルを読み込む。壊れたファイルは記録して None"""
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise TypeError(f"expected a JSON object, got {type(data).__name__}")
            record = ShareRecord.from_dict(data)
            if not isinstance(record.encrypted_data, str):
                raise TypeError("encrypted_data must be a string")
            # naive な時刻は期限判定で比較できない
            if record.created_at.tzinfo is None or record.expires_at.tzinfo is None:
                raise ValueError("timestamps must be timezone-aware")
        except FileNotFoundError:
            return None
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Failed to load share file {path.name}: {e}")
            return None
        return record

    async def save(self, record: ShareRecord) -> None:
        path = self._get_path(record.identifier)
        tmp_path = path.with_suffix(".tmp")

        with self._lock:
            tmp_path.write_text(json.dumps(record.to_dict(), ensure_ascii=False), encoding="utf-8")
            os.replace(tmp_path, path)

        logger.debug(f"Saved share: {record.identifier}")

    async def load(self, identifier: str) -> ShareRecord | None:
        with self._lock:
            return self._read(self._get_path(identifier))

    async def delete(self, identifier: str) -> bool:
        path = self._get_path(identifier)

        with self._lock:
            try:
                path.unlink()
            except FileNotFoundError:
                return False

        logger.debug(f"Deleted share: {identifier}")
        return True

    async def exists(self, identifier: str) -> bool:
        with self._lock:
            return self._get_path(identifier).exists()

    async def list_identifiers(self) -> list[str]:
        with self._lock:
            return sorted(p.name[:-len(_SUFFIX)] for p in self.data_dir.glob(f"*{_SUFFIX}"))

    async def count(self) -> int:
        with self._lock:
            return sum(1 for _ in self.data_dir.glob(f"*{_SUFFIX}"))

    async def delete_expired(self, now: datetime) -> int:
        deleted = 0

        with self._lock:
            for path in self.data_dir.glob(f"*{_SUFFIX}"):
                record = self._read(path)
                # 壊れたファイルは掃除対象にしない（調査用に残す）
                if record is None or not record.is_expired(now):
                    continue
                path.unlink(missing_ok=True)
                deleted += 1
                logger.debug(f"Deleted expired share: {record.identifier}")

        return deleted
