# src/kubesnap/clients/kubernetes/k8s_client.py
"""Kubernetes access client for one cluster: API client plus kubectl."""

import asyncio
from typing import Dict, Any, List, Optional, Tuple
from kubernetes import client, config
from kubernetes.client.rest import ApiException

from kubesnap.core.base_client import BaseClient
from kubesnap.core.exceptions import ClientConnectionException, ExtractionException
from kubesnap.core.utils import retry_with_backoff
from .kubectl import ALL_NAMESPACES, Kubectl


class KubernetesClient(BaseClient):
    """Access facade for a single cluster identified by its kubeconfig."""

    def __init__(self,
                 config_dict: Dict[str, Any],
                 kubeconfig_path: str,
                 cluster_name: Optional[str] = None):
        super().__init__(config_dict, "KubernetesClient")
        self.kubeconfig_path = kubeconfig_path
        self.cluster_name = cluster_name or config_dict.get("cluster_name", "unknown")
        self.retry_attempts = config_dict.get("retry_attempts", 3)
        self.kubectl = Kubectl(kubeconfig_path, binary=config_dict.get("kubectl_binary", "kubectl"))
        self.logger = self.logger.bind(cluster=self.cluster_name)

        self.api_client = None
        self.v1 = None

    async def connect(self) -> None:
        """Build an isolated API client from the kubeconfig."""
        try:
            self.api_client = await asyncio.to_thread(
                config.new_client_from_config, config_file=self.kubeconfig_path
            )
            self.v1 = client.CoreV1Api(self.api_client)
            self._connected = True
            self.logger.info(f"Loaded kubeconfig from {self.kubeconfig_path}")
        except Exception as e:
            raise ClientConnectionException("Kubernetes", f"{self.kubeconfig_path}: {e}")

    async def disconnect(self) -> None:
        """Close the API client."""
        if self.api_client is not None:
            self.api_client.close()
            self.api_client = None
        self._connected = False
        self.logger.debug("Kubernetes client disconnected")

    async def health_check(self) -> bool:
        """Check that the API server answers."""
        try:
            if not self.is_connected or not self.api_client:
                return False
            await asyncio.to_thread(client.VersionApi(self.api_client).get_code)
            return True
        except Exception as e:
            self.logger.warning("Kubernetes health check failed", error=str(e))
            return False

    async def _with_retry(self, func, *args):
        return await retry_with_backoff(max_retries=self.retry_attempts)(func)(*args)

    async def list_pod_refs(self) -> List[Tuple[str, str]]:
        """(namespace, name) of every pod in the cluster."""
        return await self._with_retry(self._list_pod_refs)

    async def _list_pod_refs(self) -> List[Tuple[str, str]]:
        self.ensure_connected()
        try:
            result = await asyncio.to_thread(self.v1.list_pod_for_all_namespaces, watch=False)
        except ApiException as e:
            raise ExtractionException("pods", f"Failed to list pods: {e}")
        refs = [(pod.metadata.namespace, pod.metadata.name) for pod in result.items]
        self.logger.debug(f"Listed {len(refs)} pods")
        return refs

    async def list_pods(self, namespace: str = ALL_NAMESPACES) -> str:
        """Flat `get pods -o wide` listing."""
        return await self.kubectl.get("pods", namespace)

    async def describe(self, resource: str, namespace: str = ALL_NAMESPACES) -> str:
        """Describe every object of a resource kind."""
        return await self.kubectl.describe(resource, namespace)

    async def describe_custom_resources(self, crd_name: str, namespace: str = ALL_NAMESPACES) -> str:
        """Describe every instance of a custom resource definition."""
        return await self.kubectl.describe(crd_name, namespace)

    async def logs(self, namespace: str, pod: str,
                   container: Optional[str] = None, previous: bool = False) -> str:
        return await self.kubectl.logs(namespace, pod, container, previous)

    async def dump_info(self, output_dir: str, namespace: str = ALL_NAMESPACES) -> str:
        """Write a cluster-info dump as YAML files into output_dir."""
        return await self.kubectl.cluster_info_dump(output_dir, namespace)
