"""Base extractor interface."""

import asyncio
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Union
import structlog

from kubesnap.clients.kubernetes.k8s_client import KubernetesClient
from kubesnap.clients.kubernetes.kubectl import ALL_NAMESPACES
from kubesnap.core.utils import safe_filename
from kubesnap.models import ResourceKind, ResourceRecord
from kubesnap.storage.snapshot_writer import SnapshotWriter, YAML
from .parsers import DescribeParser, RecordParser

logger = structlog.get_logger(__name__)


class BaseExtractor(ABC):
    """Abstract base class for everything that snapshots one resource kind."""

    kind: ResourceKind

    def __init__(self, writer: SnapshotWriter, parser: Optional[RecordParser] = None):
        self.writer = writer
        self.parser = parser or DescribeParser()
        self.logger = logger.bind(extractor=self.__class__.__name__)

    @abstractmethod
    async def extract(self, accessor: KubernetesClient, output_dir: str) -> int:
        """Snapshot the kind into output_dir and return the artifact count."""
        pass

    async def save(self, directory: Union[str, Path], base_name: str, content: str, extension: str = YAML) -> Path:
        """Write one artifact off the event loop."""
        return await asyncio.to_thread(self.writer.write, directory, base_name, content, extension)

    async def fresh_directory(self, parent: Union[str, Path], base_name: str) -> Path:
        return await asyncio.to_thread(self.writer.fresh_directory, parent, base_name)


class DescribeExtractor(BaseExtractor):
    """Extractor for kinds snapshotted from a single describe dump.

    Namespaced objects are written to ``<subdirectory>/<namespace>/<name>.yaml``,
    cluster-scoped ones to ``<subdirectory>/<name>.yaml``.
    """

    resource: str
    subdirectory: str

    async def fetch(self, accessor: KubernetesClient) -> str:
        return await accessor.describe(self.resource, ALL_NAMESPACES)

    def records(self, dump: str) -> List[ResourceRecord]:
        """Split a dump; an empty dump yields no records."""
        records = self.parser.split(dump, self.resource)
        if not records:
            self.logger.debug("No resources found", resource=self.resource)
        return records

    @staticmethod
    def record_directory(record: ResourceRecord, directory: Path) -> Path:
        if record.namespace:
            return directory / safe_filename(record.namespace)
        return directory

    async def write_record(self, record: ResourceRecord, directory: Path) -> Path:
        return await self.save(self.record_directory(record, directory), safe_filename(record.name), record.body)

    async def extract(self, accessor: KubernetesClient, output_dir: str) -> int:
        dump = await self.fetch(accessor)
        directory = Path(output_dir) / self.subdirectory
        written = 0
        for record in self.records(dump):
            await self.write_record(record, directory)
            written += 1
        self.logger.info(f"Wrote {written} {self.resource} descriptions", directory=str(directory))
        return written
