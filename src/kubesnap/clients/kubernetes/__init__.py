from .client_factory import KubernetesClientFactory
from .k8s_client import KubernetesClient
from .kubectl import Kubectl, ALL_NAMESPACES

__all__ = ["KubernetesClientFactory", "KubernetesClient", "Kubectl", "ALL_NAMESPACES"]
