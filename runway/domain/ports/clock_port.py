"""
時刻ポート
現在時刻を注入可能にし、期限切れのテストを実時間待ちなしで行う
"""

from abc import ABC, abstractmethod
from datetime import datetime


class IClock(ABC):
    """現在時刻の提供者"""

    @abstractmethod
    def now(self) -> datetime:
        """現在時刻（タイムゾーン付きUTC）"""
