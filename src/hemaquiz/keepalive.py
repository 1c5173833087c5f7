import asyncio
import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class KeepAlive:
    """Pings a URL on a fixed interval from a background task.

    The owner calls ``start()`` once the event loop is running and
    ``stop()`` on shutdown. Starting twice is a no-op.
    """

    def __init__(
        self,
        url: str,
        interval_seconds: float = 120.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = url
        self.interval_seconds = interval_seconds
        self.client = client or httpx.AsyncClient(timeout=httpx.Timeout(10.0))
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> bool:
        if self.running:
            return False
        if self.interval_seconds <= 0:
            logger.error(
                f"Invalid keep-alive interval {self.interval_seconds}. "
                "Skipping keep-alive pings."
            )
            return False
        self._task = asyncio.create_task(self._run())
        logger.info(f"Keep-alive pinging {self.url} every {self.interval_seconds}s")
        return True

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        await self.client.aclose()

    async def ping(self) -> bool:
        try:
            response = await self.client.get(self.url)
        except httpx.HTTPError as e:
            logger.error(f"Keep-alive ping failed: {e!r}")
            return False
        if not response.is_success:
            logger.error(f"Keep-alive ping failed with status {response.status_code}")
            return False
        return True

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            await self.ping()
