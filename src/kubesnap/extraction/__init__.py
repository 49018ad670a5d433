from .aggregate import ErrorAggregate
from .base import BaseExtractor, DescribeExtractor
from .extractors import (
    EXTRACTORS,
    PodExtractor,
    ConfigMapExtractor,
    ServiceExtractor,
    CRDExtractor,
    CustomResourceExtractor,
    PodLogExtractor,
)
from .orchestrator import ExtractionOrchestrator
from .parsers import DescribeParser, RecordParser, is_empty_dump, parse_container_names

__all__ = [
    "ErrorAggregate",
    "BaseExtractor",
    "DescribeExtractor",
    "EXTRACTORS",
    "PodExtractor",
    "ConfigMapExtractor",
    "ServiceExtractor",
    "CRDExtractor",
    "CustomResourceExtractor",
    "PodLogExtractor",
    "ExtractionOrchestrator",
    "DescribeParser",
    "RecordParser",
    "is_empty_dump",
    "parse_container_names",
]
