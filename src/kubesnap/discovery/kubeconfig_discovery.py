"""Kubeconfig discovery: find every cluster a run should snapshot."""

import os
import re
from typing import List, Optional, Pattern, Set, Union
import structlog

from kubesnap.core.exceptions import KubeconfigDiscoveryException, NoConfigsFoundException
from kubesnap.models import ClusterTarget

logger = structlog.get_logger(__name__)

DEFAULT_PATTERN = r".*\.kubeconfig$"


class KubeconfigDiscovery:
    """Recursively scans a directory for kubeconfig files."""

    def __init__(self, pattern: Union[str, Pattern[str]] = DEFAULT_PATTERN):
        self.pattern = re.compile(pattern) if isinstance(pattern, str) else pattern
        self.logger = logger.bind(component="kubeconfig_discovery")

    def discover(self, root_path: str) -> List[str]:
        """Return kubeconfig paths under root_path.

        Entries are visited in name order. Any filesystem error aborts the
        scan; an empty result raises NoConfigsFoundException.
        """
        if os.path.isfile(root_path):
            configs = [root_path] if self._matches(os.path.basename(root_path)) else []
        else:
            configs = self._scan(root_path, set())

        if not configs:
            raise NoConfigsFoundException(root_path)

        self.logger.info(f"Discovered {len(configs)} kubeconfigs", root=root_path)
        return configs

    def discover_targets(self, root_path: str, output_root: str) -> List[ClusterTarget]:
        """Discover kubeconfigs and turn each into a ClusterTarget."""
        return [ClusterTarget.from_kubeconfig(path, output_root) for path in self.discover(root_path)]

    def _scan(self, path: str, visited: Set[str]) -> List[str]:
        try:
            real = os.path.realpath(path)
            if real in visited:
                return []
            visited.add(real)
            entries = sorted(os.scandir(path), key=lambda e: e.name)
        except OSError as e:
            raise KubeconfigDiscoveryException(path, str(e))

        configs = []
        for entry in entries:
            try:
                is_dir = entry.is_dir()
                is_file = entry.is_file()
            except OSError as e:
                raise KubeconfigDiscoveryException(entry.path, str(e))

            if is_dir:
                configs.extend(self._scan(entry.path, visited))
            elif is_file and self._matches(entry.name):
                self.logger.debug("Found kubeconfig", path=entry.path)
                configs.append(entry.path)
        return configs

    def _matches(self, name: str) -> bool:
        return self.pattern.match(name) is not None


def discover(root_path: str, pattern: Optional[str] = None) -> List[str]:
    """Shortcut for KubeconfigDiscovery(pattern).discover(root_path)."""
    return KubeconfigDiscovery(pattern or DEFAULT_PATTERN).discover(root_path)
