"""Thread-safe collection of task failures."""

import threading
from typing import List

from kubesnap.core.exceptions import AggregateExtractionError
from kubesnap.models import TaskFailure


class ErrorAggregate:
    """Append-only failure list shared by every task of a run."""

    def __init__(self):
        self._lock = threading.Lock()
        self._failures: List[TaskFailure] = []

    def add(self, cluster: str, kind: str, error: BaseException) -> TaskFailure:
        failure = TaskFailure(
            cluster=cluster,
            kind=kind,
            error=str(error) or type(error).__name__,
            error_type=type(error).__name__
        )
        with self._lock:
            self._failures.append(failure)
        return failure

    def failures(self) -> List[TaskFailure]:
        with self._lock:
            return list(self._failures)

    def __len__(self) -> int:
        with self._lock:
            return len(self._failures)

    def raise_if_any(self) -> None:
        failures = self.failures()
        if failures:
            raise AggregateExtractionError(failures)
