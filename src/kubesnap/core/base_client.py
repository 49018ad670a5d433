"""Base class for per-cluster access clients."""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional
import structlog

from .exceptions import ClientConnectionException

logger = structlog.get_logger(__name__)


class BaseClient(ABC):
    """A client bound to one cluster for the duration of a run.

    Used as an async context manager: entering connects, leaving
    disconnects. Cleanup errors are logged and never replace the error
    that ended the block.
    """

    def __init__(self, config: Dict[str, Any], name: Optional[str] = None):
        self.config = config
        self.name = name or self.__class__.__name__
        self.cluster_name = config.get("cluster_name", "unknown")
        self._connected = False
        self.logger = logger.bind(client=self.name)

    @abstractmethod
    async def connect(self) -> None:
        """Raise ClientConnectionException when the cluster is unusable."""
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        pass

    @property
    def is_connected(self) -> bool:
        return self._connected

    def ensure_connected(self) -> None:
        if not self.is_connected:
            raise ClientConnectionException(self.name, f"{self.cluster_name}: client not connected")

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        try:
            await self.disconnect()
        except Exception as e:
            self.logger.warning("Error during client cleanup", cluster=self.cluster_name, error=str(e))
        return False
