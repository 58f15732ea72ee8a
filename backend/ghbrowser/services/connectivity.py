import httpx
from loguru import logger

from .observable import Observable


class ConnectivityMonitor:
    """Online/offline flag for consumers, refreshed by ``probe``."""

    def __init__(self, client: httpx.AsyncClient, timeout: float = 5.0):
        self.client = client
        self.timeout = timeout
        self.is_online: Observable[bool] = Observable(True)

    async def probe(self) -> bool:
        try:
            await self.client.head("/", timeout=self.timeout)
            online = True
        except httpx.HTTPError as exc:
            logger.debug(f"Connectivity probe failed: {type(exc).__name__}")
            online = False
        if online != self.is_online.value:
            logger.info(f"Connectivity changed: {'online' if online else 'offline'}")
            self.is_online.set(online)
        return online
