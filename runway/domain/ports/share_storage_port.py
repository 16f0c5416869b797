"""
共有ストレージポート
Zero-Knowledge アーキテクチャ用

サーバーはクライアントから受け取った暗号化Blobをそのまま保存する。
復号はクライアント側でのみ行われ、サーバーは内容を知ることができない。
"""

from abc import ABC, abstractmethod
from datetime import datetime

from ..models.share import ShareRecord


class IShareStorage(ABC):
    """
    共有レコードストレージインターフェース

    実装はレコード表へのアクセスを排他制御すること
    （作成・取得・掃除が並行して呼ばれうる）。
    期限判定はサービス層が行い、ストレージは delete_expired 以外で期限を見ない。
    """

    @abstractmethod
    async def save(self, record: ShareRecord) -> None:
        """
        レコードを保存

        Args:
            record: 共有レコード
        """

    @abstractmethod
    async def load(self, identifier: str) -> ShareRecord | None:
        """
        レコードを読み込み

        Returns:
            ShareRecord | None: 存在しない場合None
        """

    @abstractmethod
    async def delete(self, identifier: str) -> bool:
        """
        レコードを削除

        Returns:
            bool: 削除したか
        """

    @abstractmethod
    async def exists(self, identifier: str) -> bool:
        """レコードが存在するかチェック"""

    @abstractmethod
    async def list_identifiers(self) -> list[str]:
        """
        保持している共有IDの一覧（期限切れで未掃除のものを含む）

        Returns:
            list[str]: ソート済みの共有ID
        """

    @abstractmethod
    async def count(self) -> int:
        """保持しているレコード数"""

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """
        expires_at <= now のレコードを削除

        Returns:
            int: 削除件数
        """
