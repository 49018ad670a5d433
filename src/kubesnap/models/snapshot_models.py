"""
Snapshot Data Models
Data structures shared by discovery, extraction and reporting.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from kubesnap.core.exceptions import AggregateExtractionError


class ResourceKind(str, Enum):
    """Resource kinds that can be toggled on the command line."""
    POD = "pod"
    CONFIG_MAP = "cm"
    SERVICE = "svc"
    CRD = "crd"
    LOGS = "logs"


class ClusterTarget(BaseModel):
    """One discovered kubeconfig and where its snapshot goes."""

    model_config = ConfigDict(frozen=True)

    kubeconfig_path: str
    cluster_name: str
    output_dir: str

    @classmethod
    def from_kubeconfig(cls, kubeconfig_path: str, output_root: str) -> "ClusterTarget":
        """Derive the cluster name from the last path segment."""
        cluster_name = Path(kubeconfig_path).name
        return cls(
            kubeconfig_path=kubeconfig_path,
            cluster_name=cluster_name,
            output_dir=str(Path(output_root) / cluster_name)
        )


class ExtractionTask(BaseModel):
    """A single (cluster, kind) unit of work."""

    model_config = ConfigDict(frozen=True)

    cluster: ClusterTarget
    kind: ResourceKind

    @property
    def label(self) -> str:
        return f"{self.cluster.cluster_name}/{self.kind.value}"


class ResourceRecord(BaseModel):
    """A single object description cut out of a describe dump."""

    name: str
    kind: str
    body: str
    namespace: Optional[str] = None


class TaskFailure(BaseModel):
    """A failure recorded against a cluster and kind."""

    cluster: str
    kind: str
    error: str
    error_type: str = "Exception"

    def __str__(self) -> str:
        return f"[{self.cluster}/{self.kind}] {self.error}"


class TaskOutcome(BaseModel):
    """Result of one extraction task."""

    cluster: str
    kind: str
    status: str
    artifacts_written: int = 0
    duration_seconds: float = 0.0
    error: Optional[str] = None


class ExtractionReport(BaseModel):
    """Final report of a run."""

    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = None
    clusters: List[str] = Field(default_factory=list)
    outcomes: List[TaskOutcome] = Field(default_factory=list)
    failures: List[TaskFailure] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failures

    @property
    def artifacts_written(self) -> int:
        return sum(o.artifacts_written for o in self.outcomes)

    @property
    def duration_seconds(self) -> float:
        if not self.finished_at:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()

    def raise_for_failures(self) -> None:
        """Raise the combined error when any task failed."""
        if self.failures:
            raise AggregateExtractionError(self.failures)
