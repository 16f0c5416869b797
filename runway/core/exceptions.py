"""
カスタム例外クラス
階層的な例外処理によるエラーハンドリングの統一
"""

from typing import Any


class RunwayException(Exception):
    """Runwayアプリケーションのベース例外クラス"""

    def __init__(self, message: str, error_code: str | None = None,
                 details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}


class ConfigurationError(RunwayException):
    """設定関連のエラー"""


class ValidationError(RunwayException):
    """バリデーションエラー"""

    def __init__(self, message: str, field: str | None = None,
                 value: Any | None = None, **kwargs):
        super().__init__(message, **kwargs)
        if field:
            self.details['field'] = field
        if value is not None:
            self.details['value'] = value


class InvalidKeyError(ValidationError):
    """暗号化キーの形式エラー（キーの値は details に含めない）"""


class InvalidIdentifierError(ValidationError):
    """共有IDの形式エラー"""


class InvalidShareURLError(ValidationError):
    """共有URLの形式エラー"""


class NotFoundError(RunwayException):
    """リソースが存在しない"""


class ShareNotFoundError(NotFoundError):
    """共有が存在しない、または期限切れ

    存在しなかったのか期限切れなのかは呼び出し側に区別させない。
    """

    def __init__(self, identifier: str, **kwargs):
        super().__init__("Share not found or has expired", **kwargs)
        self.details['identifier'] = identifier


class CryptoError(RunwayException):
    """暗号処理関連のエラー"""


class DecryptionError(CryptoError):
    """復号エラー（認証タグ不一致・キー違い・データ破損）"""


class ExternalServiceError(RunwayException):
    """外部サービス関連のエラー"""

    def __init__(self, message: str, service_name: str = "unknown",
                 status_code: int | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.details['service_name'] = service_name
        if status_code:
            self.details['status_code'] = status_code


class ShareServiceError(ExternalServiceError):
    """共有APIとの通信エラー"""

    def __init__(self, message: str, status_code: int | None = None, **kwargs):
        super().__init__(message, service_name="share-api",
                         status_code=status_code, **kwargs)
