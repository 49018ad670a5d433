# src/kubesnap/clients/kubernetes/client_factory.py
"""Kubernetes client factory."""

from typing import Dict, Any
import structlog

from kubesnap.models import ClusterTarget
from .k8s_client import KubernetesClient

logger = structlog.get_logger(__name__)


class KubernetesClientFactory:
    """Factory for creating per-cluster Kubernetes clients."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.logger = logger.bind(factory="kubernetes")

    def create_client(self, target: ClusterTarget) -> KubernetesClient:
        """Create a client bound to the target's kubeconfig."""
        self.logger.debug("Creating client", cluster=target.cluster_name)
        return KubernetesClient(
            config_dict={**self.config, "cluster_name": target.cluster_name},
            kubeconfig_path=target.kubeconfig_path,
            cluster_name=target.cluster_name
        )

