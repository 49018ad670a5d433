from .exceptions import *
from .base_client import BaseClient
from .utils import *

__all__ = [
    "BaseClient",
    "SnapshotException",
    "ConfigurationException",
    "KubeconfigDiscoveryException",
    "NoConfigsFoundException",
    "ClientConnectionException",
    "CommandExecutionException",
    "ExtractionException",
    "TaskTimeoutException",
    "AggregateExtractionError",
    "retry_with_backoff",
    "setup_logging",
    "snapshot_timestamp",
    "safe_filename",
    "gather_with_concurrency",
]
