from .snapshot_models import *

__all__ = [
    "ResourceKind",
    "ClusterTarget",
    "ExtractionTask",
    "ResourceRecord",
    "TaskFailure",
    "TaskOutcome",
    "ExtractionReport",
]
