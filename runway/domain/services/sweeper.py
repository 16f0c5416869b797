"""
期限切れ共有の定期掃除

ベストエフォートの掃除。期限切れの判定自体は ShareService.get_share が読み取りごとに行う。
"""

from __future__ import annotations

import asyncio

from ...core.logging import get_logger, log_error
from .share import ShareService

logger = get_logger(__name__)


class ShareSweeper:
    """一定間隔で ShareService.sweep_expired を呼ぶバックグラウンドタスク"""

    def __init__(self, service: ShareService, interval_seconds: float = 3600):
        self.service = service
        self.interval_seconds = interval_seconds
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> int:
        """1回掃除する"""
        deleted = await self.service.sweep_expired()
        logger.info(f"Sweep complete: {deleted} expired share(s) deleted")
        return deleted

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.run_once()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                # 1回の失敗で掃除を止めない
                log_error(logger, e, {"task": "share_sweep"})

    def start(self) -> None:
        """掃除タスクを開始（実行中のイベントループが必要）"""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run(), name="share-sweeper")
        logger.info(f"Share sweeper started (interval: {self.interval_seconds}s)")

    async def stop(self) -> None:
        """掃除タスクを停止"""
        if self._task is None:
            return

        if not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

        self._task = None
        logger.info("Share sweeper stopped")
