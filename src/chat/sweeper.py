"""Periodic eviction of idle chat sessions."""

import asyncio
from typing import List, Optional

from .rooms import announce_deleted
from .store import SessionStore
from ..transport.base import Transport
from ..utils.logger import get_logger

logger = get_logger(__name__)


class ExpirySweeper:
    """Evicts sessions idle for longer than the configured timeout."""

    def __init__(
        self,
        store: SessionStore,
        transport: Transport,
        idle_timeout_minutes: float = 10,
        interval_seconds: float = 60,
    ):
        """
        Initialize the sweeper.

        Args:
            store: Session store to scan
            transport: Transport used to announce evictions
            idle_timeout_minutes: Idle time after which a session is evicted
            interval_seconds: Seconds between sweeps
        """
        self.store = store
        self.transport = transport
        self.idle_ms = int(idle_timeout_minutes * 60 * 1000)
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def sweep(self) -> List[str]:
        """
        Run one full scan.

        All evictions happen before the first notification is sent, and the
        store lock is held until the last one is out.

        Returns:
            Ids of the evicted sessions
        """
        async with self.store.lock:
            evicted = []
            for session in self.store.idle_sessions(self.idle_ms):
                if self.store.delete(session.id) is not None:
                    evicted.append(session.id)

            if evicted:
                logger.info(f"清理过期会话 {len(evicted)} 个: {', '.join(evicted)}")
            for chat_id in evicted:
                await announce_deleted(self.transport, chat_id)
        return evicted

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.sweep()
            except Exception as e:
                logger.error(f"会话清理失败: {e}", exc_info=True)

    def start(self) -> None:
        """Start sweeping in the background on the running event loop."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run())
        logger.info(
            f"会话清理任务已启动 (间隔 {self.interval_seconds}s, 超时 {self.idle_ms // 1000}s)"
        )

    async def stop(self) -> None:
        """Cancel the background task and wait for it to finish."""
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("会话清理任务已停止")
