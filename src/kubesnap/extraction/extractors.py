"""Resource extractors, one per resource kind."""

from pathlib import Path
from typing import Dict, List, Optional, Type

from kubesnap.clients.kubernetes.k8s_client import KubernetesClient
from kubesnap.clients.kubernetes.kubectl import ALL_NAMESPACES
from kubesnap.core.exceptions import CommandExecutionException, ExtractionException, SnapshotException
from kubesnap.core.utils import safe_filename
from kubesnap.models import ResourceKind
from kubesnap.storage.snapshot_writer import SnapshotWriter, LOG, OUT
from .base import BaseExtractor, DescribeExtractor
from .parsers import RecordParser, parse_container_names


class PodExtractor(DescribeExtractor):
    """Pods: cluster-info dump, flat pod listing and one description per pod."""

    kind = ResourceKind.POD
    resource = "pods"
    subdirectory = "pods-describe"

    async def extract(self, accessor: KubernetesClient, output_dir: str) -> int:
        dump_dir = await self.fresh_directory(output_dir, "cluster-info")
        await accessor.dump_info(str(dump_dir), ALL_NAMESPACES)
        self.logger.info("Dumped cluster info", directory=str(dump_dir))

        listing = await accessor.list_pods(ALL_NAMESPACES)
        await self.save(output_dir, "pods", listing, OUT)

        return 1 + await super().extract(accessor, output_dir)


class ConfigMapExtractor(DescribeExtractor):
    kind = ResourceKind.CONFIG_MAP
    resource = "configmaps"
    subdirectory = "cm"


class ServiceExtractor(DescribeExtractor):
    kind = ResourceKind.SERVICE
    resource = "services"
    subdirectory = "svc"


class CustomResourceExtractor(DescribeExtractor):
    """Instances of one custom resource definition."""

    kind = ResourceKind.CRD
    subdirectory = "instances"

    def __init__(self, writer: SnapshotWriter, crd_name: str, parser: Optional[RecordParser] = None):
        super().__init__(writer, parser)
        self.resource = crd_name

    async def fetch(self, accessor: KubernetesClient) -> str:
        return await accessor.describe_custom_resources(self.resource, ALL_NAMESPACES)


class CRDExtractor(DescribeExtractor):
    """CRDs, each in its own folder together with its instances.

    A CRD whose instances cannot be described does not stop the remaining
    CRDs; those failures are raised together once every CRD was handled.
    """

    kind = ResourceKind.CRD
    resource = "customresourcedefinitions"
    subdirectory = "crd"

    async def extract(self, accessor: KubernetesClient, output_dir: str) -> int:
        dump = await self.fetch(accessor)
        written = 0
        failures: List[str] = []

        for record in self.records(dump):
            name = safe_filename(record.name)
            crd_dir = Path(output_dir) / self.subdirectory / name
            await self.save(crd_dir, name, record.body)
            written += 1

            instances = CustomResourceExtractor(self.writer, record.name, self.parser)
            try:
                written += await instances.extract(accessor, str(crd_dir))
            except SnapshotException as e:
                self.logger.warning("Custom resource extraction failed", crd=record.name, error=str(e))
                failures.append(f"{record.name}: {e}")

        if failures:
            raise ExtractionException(
                self.kind.value,
                f"{len(failures)} custom resource definition(s) failed: " + "; ".join(failures),
                {"failures": failures, "artifacts_written": written}
            )
        return written


class PodLogExtractor(BaseExtractor):
    """Logs of every pod, one file per pod or per container.

    A pod with several containers makes kubectl refuse the request and list
    the container names; the logs are then fetched once per container.
    """

    kind = ResourceKind.LOGS
    subdirectory = "logs"

    async def extract(self, accessor: KubernetesClient, output_dir: str) -> int:
        pods = await accessor.list_pod_refs()
        written = 0
        failures: List[str] = []

        for namespace, pod in pods:
            directory = Path(output_dir) / self.subdirectory / safe_filename(namespace or "default")
            try:
                written += await self.extract_pod(accessor, directory, namespace, pod)
            except SnapshotException as e:
                self.logger.warning("Log extraction failed", namespace=namespace, pod=pod, error=str(e))
                failures.append(f"{namespace}/{pod}: {e}")

        self.logger.info(f"Wrote {written} log files", pods=len(pods), failed=len(failures))
        if failures:
            raise ExtractionException(
                self.kind.value,
                f"{len(failures)} of {len(pods)} pod(s) failed: " + "; ".join(failures),
                {"failures": failures, "artifacts_written": written}
            )
        return written

    async def extract_pod(self, accessor: KubernetesClient, directory: Path, namespace: str, pod: str) -> int:
        """Write logs for one pod and return the number of files written."""
        try:
            logs = await accessor.logs(namespace, pod)
        except CommandExecutionException as e:
            containers = parse_container_names(e.output)
            if not containers:
                raise
            for container in containers:
                logs = await accessor.logs(namespace, pod, container)
                await self.save(directory, safe_filename(f"{pod}_{container}"), logs, LOG)
            return len(containers)

        await self.save(directory, safe_filename(pod), logs, LOG)
        return 1


EXTRACTORS: Dict[ResourceKind, Type[BaseExtractor]] = {
    ResourceKind.POD: PodExtractor,
    ResourceKind.CONFIG_MAP: ConfigMapExtractor,
    ResourceKind.SERVICE: ServiceExtractor,
    ResourceKind.CRD: CRDExtractor,
    ResourceKind.LOGS: PodLogExtractor,
}
