"""Parsing of kubectl's semi-structured text reports."""

import re
from abc import ABC, abstractmethod
from typing import List, Optional

from kubesnap.models import ResourceRecord

NO_RESOURCES_MARKER = "No resources found"

_CONTAINER_LIST = re.compile(r"\[([^\[\]]*)\]")


def is_empty_dump(dump: Optional[str]) -> bool:
    """True for an empty report or kubectl's "No resources found" notice."""
    if dump is None:
        return True
    stripped = dump.strip()
    return not stripped or stripped.startswith(NO_RESOURCES_MARKER)


def parse_container_names(message: str) -> List[str]:
    """Container names from an ambiguous-container error.

    kubectl lists the candidates in brackets, e.g.
    ``a container name must be specified for pod x, choose one of: [web proxy]``.
    Only the first bracket group is used.
    """
    match = _CONTAINER_LIST.search(message or "")
    if not match:
        return []
    return match.group(1).split()


class RecordParser(ABC):
    """Splits a multi-object dump into ResourceRecords."""

    @abstractmethod
    def split(self, dump: str, kind: str) -> List[ResourceRecord]:
        pass


class DescribeParser(RecordParser):
    """Parser for `kubectl describe` output.

    Objects are separated by a line starting with ``Name:``. The split
    consumes that label, so it is put back on every record but the first.
    """

    name_label = "Name:"
    namespace_label = "Namespace:"

    def __init__(self, delimiter: str = "\nName:"):
        self.delimiter = delimiter

    def split(self, dump: str, kind: str) -> List[ResourceRecord]:
        if is_empty_dump(dump):
            return []

        records = []
        for i, body in enumerate(dump.split(self.delimiter)):
            if i == 0 and not body.strip():
                continue
            if i != 0:
                body = self.name_label + body
            records.append(ResourceRecord(
                name=self.record_name(body),
                namespace=self.record_namespace(body),
                kind=kind,
                body=body
            ))
        return records

    def record_name(self, body: str) -> str:
        first_line = body.split("\n", 1)[0]
        if first_line.startswith(self.name_label):
            first_line = first_line[len(self.name_label):]
        return first_line.strip()

    def record_namespace(self, body: str) -> Optional[str]:
        """Namespace from the record header; None for cluster-scoped objects."""
        for line in body.split("\n"):
            if not line.strip():
                break
            if line.startswith(self.namespace_label):
                value = line[len(self.namespace_label):].strip()
                return value or None
        return None
