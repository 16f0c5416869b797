"""
統一ログシステム
構造化ログによる一貫したログ出力

暗号化キーと平文はログに出力しない。共有IDは出力してよい。
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .exceptions import RunwayException

# LogRecord の標準属性（extra として扱わない）
_RESERVED_ATTRS = frozenset({
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname',
    'filename', 'module', 'lineno', 'funcName', 'created',
    'msecs', 'relativeCreated', 'thread', 'threadName', 'taskName',
    'processName', 'process', 'getMessage', 'exc_info',
    'exc_text', 'stack_info', 'message',
})


class StructuredFormatter(logging.Formatter):
    """構造化ログフォーマッター"""

    def format(self, record: logging.LogRecord) -> str:
        # ベース情報
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName,
        }

        # カスタム属性の追加
        extra_fields = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS
        }
        if extra_fields:
            log_entry["extra"] = extra_fields

        # 例外情報
        if record.exc_info:
            exc_type, exc_value = record.exc_info[0], record.exc_info[1]
            log_entry["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
            }

            # RunwayExceptionの場合は追加情報を含める
            if isinstance(exc_value, RunwayException):
                log_entry["exception"]["error_code"] = exc_value.error_code
                log_entry["exception"]["details"] = exc_value.details

        return json.dumps(log_entry, ensure_ascii=False, separators=(',', ':'), default=str)


class RunwayLogger:
    """統一ログシステム"""

    _loggers: Dict[str, logging.Logger] = {}
    _configured = False

    @classmethod
    def configure(cls, log_level: str = "INFO", stream=None):
        """ログシステムを設定"""
        if cls._configured:
            return

        root_logger = logging.getLogger("runway")
        root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

        # コンソールハンドラーのみ（コンテナ環境ではファイルログを使わない）
        console_handler = logging.StreamHandler(stream or sys.stdout)
        console_handler.setFormatter(StructuredFormatter())
        root_logger.addHandler(console_handler)

        cls._configured = True

    @classmethod
    def reset(cls):
        """設定を破棄（テスト用）"""
        root_logger = logging.getLogger("runway")
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
        cls._loggers.clear()
        cls._configured = False

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """ログインスタンスを取得"""
        if not cls._configured:
            cls.configure()

        if name not in cls._loggers:
            logger_name = name if name.startswith("runway") else f"runway.{name}"
            cls._loggers[name] = logging.getLogger(logger_name)

        return cls._loggers[name]


def get_logger(name: str) -> logging.Logger:
    """ロガーを取得"""
    return RunwayLogger.get_logger(name)


def log_error(logger: logging.Logger, error: Exception, context: Optional[Dict[str, Any]] = None):
    """エラーログ"""
    extra_info = {"event_type": "error"}
    if context:
        extra_info.update(context)

    logger.error(f"Error occurred: {error}", exc_info=error, extra=extra_info)


def log_business_event(logger: logging.Logger, event: str, **kwargs):
    """ビジネスイベントログ"""
    extra_info = {
        "event_type": "business_event",
        "business_event": event,
    }
    extra_info.update(kwargs)

    logger.info(f"Business event: {event}", extra=extra_info)
