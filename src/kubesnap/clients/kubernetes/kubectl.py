"""kubectl invocations bound to one kubeconfig."""

from typing import List, Optional

from .shell import execute

ALL_NAMESPACES = "all"


def config_args(kubeconfig: Optional[str]) -> List[str]:
    if kubeconfig:
        return [f"--kubeconfig={kubeconfig}"]
    return []


def namespace_args(namespace: Optional[str]) -> List[str]:
    """`all` selects every namespace, empty selects the context default."""
    if not namespace:
        return []
    if namespace == ALL_NAMESPACES:
        return ["--all-namespaces"]
    return ["-n", namespace]


def container_args(container: Optional[str]) -> List[str]:
    if container:
        return ["-c", container]
    return []


def previous_log_args(previous: bool) -> List[str]:
    if previous:
        return ["-p"]
    return []


class Kubectl:
    """Builds and runs kubectl commands for a single cluster."""

    def __init__(self, kubeconfig: Optional[str], binary: str = "kubectl"):
        self.kubeconfig = kubeconfig
        self.binary = binary

    def command(self, *args: str) -> List[str]:
        """Full argument vector for a kubectl call."""
        return [self.binary] + config_args(self.kubeconfig) + [a for a in args if a]

    async def get(self, resource: str, namespace: Optional[str] = ALL_NAMESPACES, output: str = "wide") -> str:
        return await execute(self.command("get", resource, *namespace_args(namespace), "-o", output))

    async def describe(self, resource: str, namespace: Optional[str] = ALL_NAMESPACES) -> str:
        return await execute(self.command("describe", resource, *namespace_args(namespace)))

    async def logs(self, namespace: Optional[str], pod: str,
                   container: Optional[str] = None, previous: bool = False) -> str:
        """Logs of a pod, restricted to one container when given."""
        return await execute(self.command(
            "logs", *namespace_args(namespace), pod,
            *container_args(container), *previous_log_args(previous)
        ))

    async def cluster_info_dump(self, output_dir: str, namespace: Optional[str] = ALL_NAMESPACES) -> str:
        return await execute(self.command(
            "cluster-info", "dump", *namespace_args(namespace),
            f"--output-directory={output_dir}", "--output=yaml"
        ))
