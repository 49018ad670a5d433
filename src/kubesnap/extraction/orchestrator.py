"""Extraction orchestrator: fans out (cluster x kind) tasks and joins them."""

import asyncio
import time
from contextlib import AsyncExitStack
from typing import Dict, Iterable, List, Optional, Type
import structlog
from datetime import datetime, timezone

from kubesnap.clients.kubernetes.client_factory import KubernetesClientFactory
from kubesnap.core.base_client import BaseClient
from kubesnap.core.exceptions import ClientConnectionException, TaskTimeoutException
from kubesnap.core.utils import gather_with_concurrency
from kubesnap.models import ClusterTarget, ExtractionReport, ExtractionTask, ResourceKind, TaskOutcome
from kubesnap.storage.snapshot_writer import SnapshotWriter
from .aggregate import ErrorAggregate
from .base import BaseExtractor
from .extractors import EXTRACTORS

logger = structlog.get_logger(__name__)

CLIENT_KIND = "client"


class ExtractionOrchestrator:
    """Runs every enabled extractor against every cluster concurrently.

    A failing task is recorded and never cancels its siblings. The report is
    built only after every task finished, so all partial output is on disk
    before failures are inspected. A client that cannot be built skips that
    cluster, or aborts the run when fail_fast_on_client_error is set.
    """

    def __init__(self,
                 client_factory: KubernetesClientFactory,
                 writer: SnapshotWriter,
                 max_concurrency: int = 10,
                 timeout_seconds: Optional[float] = None,
                 fail_fast_on_client_error: bool = False,
                 extractors: Optional[Dict[ResourceKind, Type[BaseExtractor]]] = None):
        self.client_factory = client_factory
        self.writer = writer
        self.max_concurrency = max_concurrency
        self.timeout_seconds = timeout_seconds
        self.fail_fast_on_client_error = fail_fast_on_client_error
        self.extractors = extractors or EXTRACTORS
        self.logger = logger.bind(orchestrator="extraction")

    async def run(self, targets: List[ClusterTarget], kinds: Iterable[ResourceKind]) -> ExtractionReport:
        """Run all extraction tasks and return the report."""
        report = ExtractionReport(clusters=[t.cluster_name for t in targets])
        errors = ErrorAggregate()
        enabled = list(dict.fromkeys(kinds))

        async with AsyncExitStack() as stack:
            clients = await self._connect_clients(targets, errors, stack)
            tasks = [
                ExtractionTask(cluster=target, kind=kind)
                for target in targets if target.kubeconfig_path in clients
                for kind in enabled
            ]

            self.logger.info(
                f"Starting extraction with {len(tasks)} tasks",
                clusters=len(clients),
                kinds=[k.value for k in enabled],
                max_concurrency=self.max_concurrency,
                timeout_seconds=self.timeout_seconds
            )

            results = await gather_with_concurrency(
                [self._run_task_with_timeout(task, clients[task.cluster.kubeconfig_path], errors) for task in tasks],
                max_concurrency=self.max_concurrency,
                return_exceptions=True
            )

        report.outcomes = self._process_results(tasks, results, errors)
        report.failures = errors.failures()
        report.finished_at = datetime.now(timezone.utc)

        self.logger.info(
            f"Extraction completed in {report.duration_seconds:.2f}s",
            successful=sum(1 for o in report.outcomes if o.status == "success"),
            failed=len(report.failures),
            artifacts=report.artifacts_written
        )
        return report

    async def _open_client(self, target: ClusterTarget, stack: AsyncExitStack) -> BaseClient:
        """Connect a client; the stack disconnects it when the run ends."""
        return await stack.enter_async_context(self.client_factory.create_client(target))

    async def _connect_clients(self, targets: List[ClusterTarget], errors: ErrorAggregate,
                               stack: AsyncExitStack) -> Dict[str, BaseClient]:
        results = await asyncio.gather(
            *[self._open_client(target, stack) for target in targets],
            return_exceptions=True
        )

        clients: Dict[str, BaseClient] = {}
        first_error: Optional[ClientConnectionException] = None
        for target, result in zip(targets, results):
            if isinstance(result, BaseException):
                error = result
                if not isinstance(error, ClientConnectionException):
                    error = ClientConnectionException("Kubernetes", f"{target.kubeconfig_path}: {result}")
                first_error = first_error or error
                self.logger.error("Could not build client", cluster=target.cluster_name, error=str(error))
                if not self.fail_fast_on_client_error:
                    errors.add(target.cluster_name, CLIENT_KIND, error)
                continue
            clients[target.kubeconfig_path] = result

        if first_error and self.fail_fast_on_client_error:
            raise first_error
        return clients

    async def _run_task_with_timeout(self, task: ExtractionTask, k8s_client: BaseClient,
                                     errors: ErrorAggregate) -> TaskOutcome:
        """Run a single task; failures go to the aggregate, never upwards."""
        log = self.logger.bind(task=task.label)
        extractor = self.extractors[task.kind](self.writer)
        started = time.monotonic()

        try:
            if self.timeout_seconds:
                written = await asyncio.wait_for(
                    extractor.extract(k8s_client, task.cluster.output_dir),
                    timeout=self.timeout_seconds
                )
            else:
                written = await extractor.extract(k8s_client, task.cluster.output_dir)

        except asyncio.TimeoutError:
            error = TaskTimeoutException(self.timeout_seconds)
            errors.add(task.cluster.cluster_name, task.kind.value, error)
            log.error("Extraction timed out", timeout_seconds=self.timeout_seconds)
            return self._outcome(task, "timeout", started, error=str(error))

        except Exception as e:
            errors.add(task.cluster.cluster_name, task.kind.value, e)
            log.error("Extraction failed", error=str(e))
            return self._outcome(task, "failed", started, error=str(e))

        log.info("Extraction completed", artifacts=written)
        return self._outcome(task, "success", started, artifacts_written=written)

    @staticmethod
    def _outcome(task: ExtractionTask, status: str, started: float,
                 artifacts_written: int = 0, error: Optional[str] = None) -> TaskOutcome:
        return TaskOutcome(
            cluster=task.cluster.cluster_name,
            kind=task.kind.value,
            status=status,
            artifacts_written=artifacts_written,
            duration_seconds=time.monotonic() - started,
            error=error
        )

    def _process_results(self, tasks: List[ExtractionTask], results: List[object],
                         errors: ErrorAggregate) -> List[TaskOutcome]:
        outcomes = []
        for task, result in zip(tasks, results):
            if isinstance(result, BaseException):
                errors.add(task.cluster.cluster_name, task.kind.value, result)
                result = TaskOutcome(
                    cluster=task.cluster.cluster_name,
                    kind=task.kind.value,
                    status="failed",
                    error=str(result)
                )
            outcomes.append(result)
        return outcomes
