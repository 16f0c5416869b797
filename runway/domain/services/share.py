"""
共有サービス
暗号化Blobの作成・取得・期限切れ管理

サーバーは暗号文を解釈しない（Zero-Knowledge）。
期限切れの判定は読み取りごとに行い、定期掃除のタイミングには依存しない。
"""

from __future__ import annotations

import re
import secrets
from collections.abc import Callable
from datetime import timedelta

from ...core.config import DEFAULT_TTL_SECONDS, MAX_BLOB_BYTES, MAX_TTL_SECONDS
from ...core.exceptions import (
    ConfigurationError,
    InvalidIdentifierError,
    RunwayException,
    ShareNotFoundError,
    ValidationError,
)
from ...core.logging import get_logger, log_business_event
from ..models.share import ShareRecord
from ..ports.clock_port import IClock
from ..ports.share_storage_port import IShareStorage

logger = get_logger(__name__)

IDENTIFIER_PATTERN = re.compile(r"^[0-9a-f]{32}$")

# ID衝突時の再生成回数の上限
_MAX_ID_ATTEMPTS = 8


def generate_identifier() -> str:
    """共有IDを生成（128ビット乱数の16進表記）"""
    return secrets.token_hex(16)


def is_valid_identifier(identifier: object) -> bool:
    """共有IDの形式を検証"""
    return isinstance(identifier, str) and IDENTIFIER_PATTERN.match(identifier) is not None


class ShareService:
    """
    共有サービス

    Args:
        storage: 共有レコードストレージ
        clock: 現在時刻の提供者
        default_ttl_seconds: expires_in 省略時の有効期限
        max_ttl_seconds: expires_in の上限
        max_blob_bytes: 暗号化Blobの最大サイズ（UTF-8バイト数）
        id_generator: 共有ID生成関数（テスト用に差し替え可能）
    """

    def __init__(
        self,
        storage: IShareStorage,
        clock: IClock,
        default_ttl_seconds: int = DEFAULT_TTL_SECONDS,
        max_ttl_seconds: int = MAX_TTL_SECONDS,
        max_blob_bytes: int = MAX_BLOB_BYTES,
        id_generator: Callable[[], str] = generate_identifier,
    ):
        if default_ttl_seconds > max_ttl_seconds:
            raise ConfigurationError("default_ttl_seconds must not exceed max_ttl_seconds")

        self.storage = storage
        self.clock = clock
        self.default_ttl_seconds = default_ttl_seconds
        self.max_ttl_seconds = max_ttl_seconds
        self.max_blob_bytes = max_blob_bytes
        self._id_generator = id_generator

    # === 検証 ===

    def _validate_encrypted_data(self, encrypted_data: object) -> str:
        if not isinstance(encrypted_data, str) or not encrypted_data:
            raise ValidationError(
                "encryptedData must be a non-empty string",
                field="encryptedData",
            )

        size = len(encrypted_data.encode("utf-8"))
        if size > self.max_blob_bytes:
            raise ValidationError(
                f"encryptedData exceeds maximum size of {self.max_blob_bytes} bytes",
                field="encryptedData",
                details={"size": size, "max_size": self.max_blob_bytes},
            )

        return encrypted_data

    def _resolve_ttl(self, expires_in: object) -> int:
        if expires_in is None:
            return self.default_ttl_seconds

        # bool は int のサブクラスなので明示的に除外
        if isinstance(expires_in, bool) or not isinstance(expires_in, int):
            raise ValidationError("expiresIn must be an integer number of seconds",
                                  field="expiresIn", value=expires_in)

        if expires_in <= 0 or expires_in > self.max_ttl_seconds:
            raise ValidationError(
                f"expiresIn must be between 1 and {self.max_ttl_seconds} seconds",
                field="expiresIn",
                value=expires_in,
            )

        return expires_in

    def _validate_identifier(self, identifier: object) -> str:
        if not is_valid_identifier(identifier):
            raise InvalidIdentifierError("Invalid share ID", field="id")
        return identifier  # type: ignore[return-value]

    async def _new_identifier(self) -> str:
        for _ in range(_MAX_ID_ATTEMPTS):
            identifier = self._id_generator()
            if not await self.storage.exists(identifier):
                return identifier
            logger.warning("Share ID collision, regenerating")

        raise RunwayException("Could not allocate a unique share ID",
                              error_code="id_allocation_failed")

    # === 操作 ===

    async def create_share(self, encrypted_data: str, expires_in: int | None = None) -> ShareRecord:
        """
        暗号化Blobを保存して共有を作成

        Args:
            encrypted_data: Base64エンコードされた暗号文（サーバーは解釈しない）
            expires_in: 有効期限（秒）。省略時は既定値

        Returns:
            ShareRecord: 作成されたレコード

        Raises:
            ValidationError: Blobが空・文字列でない・大きすぎる、または expires_in が不正
        """
        encrypted_data = self._validate_encrypted_data(encrypted_data)
        ttl = self._resolve_ttl(expires_in)

        identifier = await self._new_identifier()
        created_at = self.clock.now()
        record = ShareRecord(
            identifier=identifier,
            encrypted_data=encrypted_data,
            created_at=created_at,
            expires_at=created_at + timedelta(seconds=ttl),
        )

        await self.storage.save(record)

        log_business_event(
            logger,
            "share_created",
            share_id=identifier,
            size=len(encrypted_data),
            expires_at=record.expires_at.isoformat(),
        )

        return record

    async def get_share(self, identifier: str) -> str:
        """
        共有の暗号化Blobを取得

        Raises:
            InvalidIdentifierError: ID形式が不正（ストレージは参照しない）
            ShareNotFoundError: 存在しない、または期限切れ
        """
        identifier = self._validate_identifier(identifier)

        record = await self.storage.load(identifier)
        if record is None:
            raise ShareNotFoundError(identifier)

        if record.is_expired(self.clock.now()):
            await self.storage.delete(identifier)
            logger.info(f"Share has expired: {identifier}")
            raise ShareNotFoundError(identifier)

        logger.info(f"Retrieved share: {identifier}")
        return record.encrypted_data

    async def sweep_expired(self) -> int:
        """期限切れレコードを削除し、削除件数を返す"""
        deleted = await self.storage.delete_expired(self.clock.now())
        if deleted:
            log_business_event(logger, "shares_swept", deleted=deleted)
        return deleted

    async def count(self) -> int:
        """保持しているレコード数"""
        return await self.storage.count()
