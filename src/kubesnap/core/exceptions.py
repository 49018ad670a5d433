"""Custom exceptions for the snapshot tool."""

from typing import Optional, Dict, Any, List


class SnapshotException(Exception):
    """Base exception for the snapshot tool."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationException(SnapshotException):
    """Raised when configuration is invalid."""
    pass


class KubeconfigDiscoveryException(SnapshotException):
    """Raised when kubeconfig discovery cannot complete."""

    def __init__(self, root_path: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.root_path = root_path
        super().__init__(f"Kubeconfig discovery failed for {root_path}: {message}", details)


class NoConfigsFoundException(KubeconfigDiscoveryException):
    """Raised when a scan finishes without finding a single kubeconfig."""

    def __init__(self, root_path: str):
        super().__init__(root_path, "no kubeconfig found")


class ClientConnectionException(SnapshotException):
    """Raised when the access client for a cluster cannot be built."""

    def __init__(self, client_type: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.client_type = client_type
        super().__init__(f"{client_type} connection failed: {message}", details)


class CommandExecutionException(SnapshotException):
    """Raised when an external command exits unsuccessfully."""

    def __init__(self, command: List[str], returncode: Optional[int], output: str):
        self.command = command
        self.returncode = returncode
        self.output = output
        super().__init__(
            f"command '{' '.join(command)}' failed with exit code {returncode}: {output.strip()}",
            {"returncode": returncode}
        )


class ExtractionException(SnapshotException):
    """Raised when a resource extractor fails."""

    def __init__(self, kind: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.kind = kind
        super().__init__(f"Extraction failed for {kind}: {message}", details)


class TaskTimeoutException(SnapshotException):
    """Raised when an extraction task exceeds its timeout."""

    def __init__(self, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(f"task timed out after {timeout_seconds} seconds")


class AggregateExtractionError(SnapshotException):
    """Combined report of every task failure of a run."""

    def __init__(self, failures: List[Any]):
        self.failures = list(failures)
        super().__init__(self._render(), {"failures": len(self.failures)})

    def _render(self) -> str:
        lines = ["multiple errors: "]
        for failure in self.failures:
            lines.append(f"\t{failure}")
        return "\n".join(lines) + "\n"
