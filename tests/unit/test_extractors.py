"""Tests for kubesnap/extraction/extractors.py"""

import asyncio

import pytest

from kubesnap.core.exceptions import CommandExecutionException, ExtractionException
from kubesnap.extraction import (
    EXTRACTORS,
    ConfigMapExtractor,
    CRDExtractor,
    PodExtractor,
    PodLogExtractor,
    ServiceExtractor,
)
from kubesnap.models import ResourceKind

from conftest import FakeKubernetesClient, command_error


def run(coro):
    return asyncio.run(coro)


class TestDescribeExtractors:
    """Test cases for the describe based extractors"""

    def test_config_maps(self, writer, fake_client, tmp_path):
        count = run(ConfigMapExtractor(writer).extract(fake_client, str(tmp_path)))

        assert count == 2
        assert (tmp_path / "cm" / "default" / "kube-root-ca.crt.yaml").exists()
        assert (tmp_path / "cm" / "backend" / "app-config.yaml").exists()
        assert ("describe", "configmaps", "all") in fake_client.calls

    def test_services(self, writer, fake_client, tmp_path):
        count = run(ServiceExtractor(writer).extract(fake_client, str(tmp_path)))

        assert count == 1
        assert (tmp_path / "svc" / "default" / "kubernetes.yaml").read_text().startswith("Name:              kubernetes")

    @pytest.mark.parametrize("dump", ["", "No resources found"])
    def test_empty_dump_is_a_no_op(self, writer, tmp_path, dump):
        client = FakeKubernetesClient(describes={"services": dump})

        count = run(ServiceExtractor(writer).extract(client, str(tmp_path)))

        assert count == 0
        assert not (tmp_path / "svc").exists()

    def test_describe_error_propagates(self, writer, tmp_path):
        client = FakeKubernetesClient(describes={"configmaps": command_error("forbidden")})

        with pytest.raises(CommandExecutionException):
            run(ConfigMapExtractor(writer).extract(client, str(tmp_path)))

    def test_record_body_written_verbatim(self, writer, fake_client, tmp_path):
        run(ConfigMapExtractor(writer).extract(fake_client, str(tmp_path)))

        body = (tmp_path / "cm" / "backend" / "app-config.yaml").read_text()
        assert body == "Name:         app-config\nNamespace:    backend\nData\n====\n"

    def test_same_name_in_different_namespaces(self, diff_writer, tmp_path):
        dump = (
            "Name:         kube-root-ca.crt\nNamespace:    default\nData\n====\nca.crt: A\n"
            "\n\n"
            "Name:         kube-root-ca.crt\nNamespace:    kube-system\nData\n====\nca.crt: B\n"
        )
        client = FakeKubernetesClient(describes={"configmaps": dump})

        count = run(ConfigMapExtractor(diff_writer).extract(client, str(tmp_path)))

        assert count == 2
        assert sorted(p.name for p in (tmp_path / "cm").iterdir()) == ["default", "kube-system"]
        assert [p.name for p in (tmp_path / "cm" / "default").iterdir()] == ["kube-root-ca.crt.yaml"]
        system = tmp_path / "cm" / "kube-system"
        assert [p.name for p in system.iterdir()] == ["kube-root-ca.crt.yaml"]
        assert "ca.crt: B" in (system / "kube-root-ca.crt.yaml").read_text()

    def test_cluster_scoped_records_stay_flat(self, writer, tmp_path):
        client = FakeKubernetesClient(describes={"services": "Name:         cluster-wide\nNamespace:\n"})

        run(ServiceExtractor(writer).extract(client, str(tmp_path)))

        assert (tmp_path / "svc" / "cluster-wide.yaml").exists()


class TestPodExtractor:
    """Test cases for PodExtractor"""

    def test_writes_dump_listing_and_descriptions(self, writer, fake_client, tmp_path):
        count = run(PodExtractor(writer).extract(fake_client, str(tmp_path)))

        assert count == 3
        assert (tmp_path / "pods.out").read_text() == fake_client.pod_listing
        assert (tmp_path / "cluster-info" / "nodes.yaml").exists()
        assert (tmp_path / "pods-describe" / "default" / "web-0.yaml").exists()
        assert (tmp_path / "pods-describe" / "backend" / "api-7d9f.yaml").exists()

    def test_second_run_uses_fresh_dump_directory(self, writer, fake_client, tmp_path):
        run(PodExtractor(writer).extract(fake_client, str(tmp_path)))
        run(PodExtractor(writer).extract(fake_client, str(tmp_path)))

        dumps = sorted(p.name for p in tmp_path.iterdir() if p.name.startswith("cluster-info"))
        assert dumps == ["cluster-info", "cluster-info_20261019T120000Z"]

    def test_no_pods_still_writes_listing(self, writer, tmp_path):
        client = FakeKubernetesClient(describes={"pods": "No resources found"})

        count = run(PodExtractor(writer).extract(client, str(tmp_path)))

        assert count == 1
        assert (tmp_path / "pods.out").exists()
        assert not (tmp_path / "pods-describe").exists()


class TestCRDExtractor:
    """Test cases for CRDExtractor"""

    def test_crds_and_instances(self, writer, fake_client, tmp_path):
        count = run(CRDExtractor(writer).extract(fake_client, str(tmp_path)))

        widgets = tmp_path / "crd" / "widgets.example.com"
        assert (widgets / "widgets.example.com.yaml").exists()
        assert sorted(p.name for p in (widgets / "instances" / "default").iterdir()) == [
            "first-widget.yaml", "second-widget.yaml"
        ]
        gadgets = tmp_path / "crd" / "gadgets.example.com"
        assert (gadgets / "gadgets.example.com.yaml").exists()
        assert not (gadgets / "instances").exists()
        assert count == 4

    def test_failing_crd_does_not_stop_the_others(self, writer, tmp_path):
        client = FakeKubernetesClient(custom_resources={
            "widgets.example.com": command_error("forbidden"),
            "gadgets.example.com": "Name: only-gadget\n",
        })

        with pytest.raises(ExtractionException) as exc_info:
            run(CRDExtractor(writer).extract(client, str(tmp_path)))

        assert "widgets.example.com" in str(exc_info.value)
        assert "gadgets.example.com" not in str(exc_info.value)
        assert (tmp_path / "crd" / "gadgets.example.com" / "instances" / "only-gadget.yaml").exists()


class TestPodLogExtractor:
    """Test cases for PodLogExtractor"""

    def test_single_container_pod(self, writer, fake_client, tmp_path):
        count = run(PodLogExtractor(writer).extract(fake_client, str(tmp_path)))

        assert count == 1
        assert (tmp_path / "logs" / "default" / "web-0.log").read_text() == "started\n"

    def test_multi_container_pod_retries_per_container(self, writer, tmp_path):
        client = FakeKubernetesClient(
            pod_refs=[("shop", "frontend")],
            logs={
                ("shop", "frontend", None): command_error("the pod has multiple containers [web proxy]"),
                ("shop", "frontend", "web"): "web log\n",
                ("shop", "frontend", "proxy"): "proxy log\n",
            }
        )

        count = run(PodLogExtractor(writer).extract(client, str(tmp_path)))

        log_dir = tmp_path / "logs" / "shop"
        assert count == 2
        assert (log_dir / "frontend_web.log").read_text() == "web log\n"
        assert (log_dir / "frontend_proxy.log").read_text() == "proxy log\n"
        assert [c[3] for c in client.calls if c[0] == "logs"] == [None, "web", "proxy"]

    def test_failed_pods_are_reported_after_all_pods(self, writer, tmp_path):
        client = FakeKubernetesClient(
            pod_refs=[("default", "broken"), ("default", "web-0")],
            logs={("default", "web-0", None): "ok\n"}
        )

        with pytest.raises(ExtractionException) as exc_info:
            run(PodLogExtractor(writer).extract(client, str(tmp_path)))

        assert "default/broken" in str(exc_info.value)
        assert "1 of 2" in str(exc_info.value)
        assert (tmp_path / "logs" / "default" / "web-0.log").exists()


def test_registry_covers_every_kind():
    assert set(EXTRACTORS) == set(ResourceKind)
    assert all(EXTRACTORS[kind].kind == kind for kind in ResourceKind)
