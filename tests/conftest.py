"""Test configuration and fixtures for the kube-snapshot test suite"""

import asyncio
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import pytest

from kubesnap.core.base_client import BaseClient
from kubesnap.core.exceptions import ClientConnectionException, CommandExecutionException
from kubesnap.models import ClusterTarget
from kubesnap.storage.snapshot_writer import SnapshotWriter

POD_DUMP = """Name:         web-0
Namespace:    default
Node:         node-1
Status:       Running


Name:         api-7d9f
Namespace:    backend
Node:         node-2
Status:       Running
"""

CM_DUMP = """Name:         kube-root-ca.crt
Namespace:    default
Data
====


Name:         app-config
Namespace:    backend
Data
====
"""

SVC_DUMP = """Name:              kubernetes
Namespace:         default
Type:              ClusterIP
"""

CRD_DUMP = """Name:         widgets.example.com
Namespace:
API Version:  apiextensions.k8s.io/v1


Name:         gadgets.example.com
Namespace:
API Version:  apiextensions.k8s.io/v1
"""

WIDGET_DUMP = """Name:         first-widget
Namespace:    default
Kind:         Widget


Name:         second-widget
Namespace:    default
Kind:         Widget
"""


def command_error(output: str) -> CommandExecutionException:
    return CommandExecutionException(["kubectl", "logs"], 1, output)


class FakeKubernetesClient(BaseClient):
    """In-memory stand-in for KubernetesClient"""

    def __init__(self,
                 cluster_name: str = "fake",
                 describes: Optional[Dict[str, Union[str, Exception]]] = None,
                 custom_resources: Optional[Dict[str, Union[str, Exception]]] = None,
                 pod_listing: str = "NAME    READY   STATUS\nweb-0   1/1     Running\n",
                 pod_refs: Optional[List[Tuple[str, str]]] = None,
                 logs: Optional[Dict[Tuple[str, str, Optional[str]], Union[str, Exception]]] = None,
                 delay: float = 0.0,
                 connect_error: Optional[Exception] = None):
        super().__init__({"cluster_name": cluster_name}, "FakeKubernetesClient")
        self.connect_error = connect_error
        self.describes = describes if describes is not None else {
            "pods": POD_DUMP,
            "configmaps": CM_DUMP,
            "services": SVC_DUMP,
            "customresourcedefinitions": CRD_DUMP,
        }
        self.custom_resources = custom_resources if custom_resources is not None else {
            "widgets.example.com": WIDGET_DUMP,
            "gadgets.example.com": "No resources found",
        }
        self.pod_listing = pod_listing
        self.pod_refs = pod_refs if pod_refs is not None else [("default", "web-0")]
        self.logs_by_key = logs if logs is not None else {("default", "web-0", None): "started\n"}
        self.delay = delay
        self.calls: List[tuple] = []
        self.disconnected = False

    async def _answer(self, value):
        if self.delay:
            await asyncio.sleep(self.delay)
        if isinstance(value, Exception):
            raise value
        return value

    async def describe(self, resource, namespace="all"):
        self.calls.append(("describe", resource, namespace))
        return await self._answer(self.describes.get(resource, ""))

    async def describe_custom_resources(self, crd_name, namespace="all"):
        self.calls.append(("describe_custom_resources", crd_name, namespace))
        return await self._answer(self.custom_resources.get(crd_name, ""))

    async def list_pods(self, namespace="all"):
        self.calls.append(("list_pods", namespace))
        return await self._answer(self.pod_listing)

    async def list_pod_refs(self):
        self.calls.append(("list_pod_refs",))
        return await self._answer(self.pod_refs)

    async def logs(self, namespace, pod, container=None, previous=False):
        self.calls.append(("logs", namespace, pod, container))
        value = self.logs_by_key.get((namespace, pod, container))
        if value is None:
            value = command_error(f'pods "{pod}" not found')
        return await self._answer(value)

    async def dump_info(self, output_dir, namespace="all"):
        self.calls.append(("dump_info", output_dir, namespace))
        await self._answer("")
        Path(output_dir, "nodes.yaml").write_text("kind: NodeList\n")
        return ""

    async def connect(self):
        if self.connect_error is not None:
            raise self.connect_error
        self._connected = True

    async def disconnect(self):
        self._connected = False
        self.disconnected = True

    async def health_check(self):
        return self.is_connected


class FakeClientFactory:
    """Hands out FakeKubernetesClients keyed by kubeconfig path"""

    def __init__(self, clients: Dict[str, Union[FakeKubernetesClient, Exception]]):
        self.clients = clients

    def create_client(self, target: ClusterTarget) -> FakeKubernetesClient:
        client = self.clients[target.kubeconfig_path]
        if isinstance(client, Exception):
            return FakeKubernetesClient(cluster_name=target.cluster_name, connect_error=client)
        return client


@pytest.fixture
def fixed_clock():
    """Clock returning 2026-10-19 12:00:00 UTC"""
    return lambda: datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def writer(fixed_clock):
    return SnapshotWriter(diff_mode=False, clock=fixed_clock)


@pytest.fixture
def diff_writer(fixed_clock):
    return SnapshotWriter(diff_mode=True, clock=fixed_clock)


@pytest.fixture
def fake_client():
    return FakeKubernetesClient()


@pytest.fixture
def kubeconfig_tree(tmp_path):
    """Directory tree with three kubeconfigs at different depths plus noise"""
    root = tmp_path / "kube"
    (root / "team-a" / "nested").mkdir(parents=True)
    (root / "team-b").mkdir()
    (root / "prod.kubeconfig").write_text("apiVersion: v1\n")
    (root / "team-a" / "nested" / "staging.kubeconfig").write_text("apiVersion: v1\n")
    (root / "team-b" / "dev.kubeconfig").write_text("apiVersion: v1\n")
    (root / "config").write_text("apiVersion: v1\n")
    (root / "team-b" / "notes.txt").write_text("not a kubeconfig\n")
    (root / "team-b" / "old.kubeconfig.bak").write_text("apiVersion: v1\n")
    return root


def unreachable(path: str) -> ClientConnectionException:
    return ClientConnectionException("Kubernetes", f"{path}: invalid kubeconfig")
