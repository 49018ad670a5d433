from .kubeconfig_discovery import KubeconfigDiscovery, discover

__all__ = ["KubeconfigDiscovery", "discover"]
