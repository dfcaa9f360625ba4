"""
Notification contract dan dispatcher untuk SocialAuth.

Notifikasi adalah side effect fire-and-forget: operasi auth menjadwalkan
pengiriman lalu langsung return. Kegagalan kirim hanya di-log.
"""

import asyncio
import logging
from abc import abstractmethod
from functools import lru_cache
from typing import Awaitable, Optional, Protocol, Set

from socialauth.core.config import settings

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Kontrak pengiriman notifikasi ke user."""

    @abstractmethod
    async def send_verification(self, email: str, name: str, token: str) -> None:
        ...

    @abstractmethod
    async def send_password_reset(self, email: str, name: str, token: str) -> None:
        ...

    @abstractmethod
    async def send_welcome(self, email: str, name: str) -> None:
        ...


class NotificationDispatcher:
    """
    Menjalankan notifikasi sebagai background tasks dengan batas waktu.

    Args:
        timeout: Batas waktu per notifikasi dalam detik
    """

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout or settings.NOTIFICATION_TIMEOUT_SECONDS
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def dispatch(self, coro: Awaitable[None], description: str) -> asyncio.Task:
        """
        Jadwalkan notifikasi tanpa menunggu hasilnya.

        Args:
            coro: Coroutine pengiriman
            description: Label untuk log

        Returns:
            Task yang dijadwalkan
        """
        task = asyncio.ensure_future(self._run(coro, description))
        # Simpan reference supaya task tidak di-garbage-collect
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, coro: Awaitable[None], description: str) -> None:
        try:
            await asyncio.wait_for(coro, timeout=self.timeout)
            logger.debug(f"Notification sent: {description}")
        except asyncio.TimeoutError:
            logger.error(f"Notification timed out after {self.timeout}s: {description}")
        except asyncio.CancelledError:
            logger.warning(f"Notification cancelled: {description}")
            raise
        except Exception as e:
            logger.error(f"Notification failed: {description}: {e}", exc_info=True)

    async def drain(self) -> None:
        """Tunggu semua notifikasi yang masih berjalan (shutdown dan tests)."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


@lru_cache()
def get_dispatcher() -> NotificationDispatcher:
    """Dispatcher global untuk aplikasi."""
    return NotificationDispatcher()
