# src/kubesnap/cli.py
"""Snapshot CLI - describe and log every discovered cluster to disk."""

import asyncio
import sys
from typing import List, Optional
import click
import structlog
from pydantic import ValidationError

from kubesnap import __version__
from kubesnap.clients.kubernetes.client_factory import KubernetesClientFactory
from kubesnap.config.settings import Settings
from kubesnap.core.exceptions import (
    AggregateExtractionError,
    ClientConnectionException,
    ConfigurationException,
    KubeconfigDiscoveryException,
)
from kubesnap.core.utils import setup_logging
from kubesnap.discovery.kubeconfig_discovery import KubeconfigDiscovery
from kubesnap.extraction.orchestrator import ExtractionOrchestrator
from kubesnap.models import ResourceKind
from kubesnap.storage.snapshot_writer import SnapshotWriter

logger = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_EXTRACTION_FAILED = 2
EXIT_FATAL = 3


def enabled_kinds(no_pod: bool, no_cm: bool, no_svc: bool, no_crd: bool, no_logs: bool) -> List[ResourceKind]:
    """Kinds left enabled by the --no-* flags."""
    disabled = {
        ResourceKind.POD: no_pod,
        ResourceKind.CONFIG_MAP: no_cm,
        ResourceKind.SERVICE: no_svc,
        ResourceKind.CRD: no_crd,
        ResourceKind.LOGS: no_logs,
    }
    return [kind for kind, off in disabled.items() if not off]


def build_settings(kc: Optional[str], output: Optional[str], diff: bool, timeout: Optional[float],
                   max_concurrency: Optional[int], fail_fast: bool, log_config: Optional[str],
                   debug: bool) -> Settings:
    """Environment settings overridden by explicit command line values."""
    try:
        settings = Settings.create_from_env()
        k8s = settings.kubernetes.model_copy(
            update={k: v for k, v in {"kubeconfig_dir": kc}.items() if v is not None}
        )
        extraction_updates = {
            "output_root": output,
            "max_concurrency": max_concurrency,
        }
        extraction = settings.extraction.model_copy(
            update={k: v for k, v in extraction_updates.items() if v is not None}
        )
        if diff:
            extraction.diff_mode = True
        if fail_fast:
            extraction.fail_fast_on_client_error = True
        if timeout is not None:
            extraction.task_timeout_seconds = timeout if timeout > 0 else None
        if extraction.max_concurrency < 1:
            raise ConfigurationException("--max-concurrency must be at least 1")

        settings = settings.model_copy(update={"kubernetes": k8s, "extraction": extraction})
        if log_config:
            settings.log_config = log_config
        if debug:
            settings.debug = True
        return settings
    except ValidationError as e:
        raise ConfigurationException(f"Invalid configuration: {e}")


async def run_snapshot(settings: Settings, kinds: List[ResourceKind], verbose: bool = False) -> int:
    """Discover clusters, extract everything and return the exit code."""
    k8s = settings.kubernetes
    extraction = settings.extraction

    try:
        discovery = KubeconfigDiscovery(k8s.kubeconfig_pattern)
        targets = discovery.discover_targets(k8s.kubeconfig_dir, extraction.output_root)
    except KubeconfigDiscoveryException as e:
        logger.error("Kubeconfig discovery failed", error=str(e))
        click.echo(f"❌ {e}", err=True)
        return EXIT_FATAL

    if verbose:
        click.echo(f"🔍 Found {len(targets)} cluster(s):")
        for target in targets:
            click.echo(f"   • {target.kubeconfig_path}")

    factory = KubernetesClientFactory({
        "kubectl_binary": k8s.kubectl_binary,
        "retry_attempts": extraction.retry_attempts,
    })
    orchestrator = ExtractionOrchestrator(
        client_factory=factory,
        writer=SnapshotWriter(diff_mode=extraction.diff_mode),
        max_concurrency=extraction.max_concurrency,
        timeout_seconds=extraction.task_timeout_seconds,
        fail_fast_on_client_error=extraction.fail_fast_on_client_error,
    )

    try:
        report = await orchestrator.run(targets, kinds)
    except ClientConnectionException as e:
        logger.error("Aborting run", error=str(e))
        click.echo(f"❌ {e}", err=True)
        return EXIT_FATAL

    try:
        report.raise_for_failures()
    except AggregateExtractionError as e:
        logger.error("Extraction finished with errors", failures=len(e.failures))
        click.echo(f"⚠️  {e}", err=True)
        click.echo(f"📁 Partial snapshot written to {extraction.output_root}")
        return EXIT_EXTRACTION_FAILED

    click.echo(f"✅ Logs extracted to {extraction.output_root}")
    if verbose:
        click.echo(f"   📦 Artifacts written: {report.artifacts_written}")
        click.echo(f"   ⏱️  Duration: {report.duration_seconds:.2f}s")
    return EXIT_OK


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option('--kc', default=None, help='Kubeconfig directory to scan (default: $HOME/.kube/)')
@click.option('--output', '-o', default=None, help='Output root directory (default: /cluster-logs/)')
@click.option('--no-pod', is_flag=True, help='Do not extract pods')
@click.option('--no-cm', is_flag=True, help='Do not extract config maps')
@click.option('--no-svc', is_flag=True, help='Do not extract services')
@click.option('--no-crd', is_flag=True, help='Do not extract CRDs and their instances')
@click.option('--no-logs', is_flag=True, help='Do not extract pod logs')
@click.option('--diff', is_flag=True, help='Write diffs instead of timestamped copies on repeat runs')
@click.option('--timeout', type=float, default=None, help='Per-task timeout in seconds, 0 disables (default: 300)')
@click.option('--max-concurrency', type=int, default=None, help='Maximum concurrent extraction tasks (default: 10)')
@click.option('--fail-fast', is_flag=True, help='Abort the whole run when a cluster client cannot be built')
@click.option('--log-config', default=None, help='YAML logging configuration file')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.version_option(__version__, '--version', prog_name='kube-snapshot', message='%(prog)s version %(version)s')
@click.pass_context
def snapshot(ctx, kc, output, no_pod, no_cm, no_svc, no_crd, no_logs, diff, timeout,
             max_concurrency, fail_fast, log_config, verbose, debug):
    """
    Snapshot pods, config maps, services, CRDs and pod logs of every
    cluster found under the kubeconfig directory.

    Output layout: <output>/<cluster>/<kind>/[<namespace>/]<object>.<ext>. Repeated runs
    never overwrite earlier files: they add timestamped copies, or diffs
    with --diff.

    Exit codes: 0 success, 1 usage error, 2 some extractions failed,
    3 fatal error (no kubeconfig found, client error with --fail-fast,
    invalid configuration).
    """
    try:
        settings = build_settings(kc, output, diff, timeout, max_concurrency, fail_fast, log_config, debug)
    except ConfigurationException as e:
        click.echo(f"❌ {e}", err=True)
        ctx.exit(EXIT_FATAL)

    log_level = "DEBUG" if settings.debug else settings.log_level.value
    setup_logging(settings.log_config, log_level=log_level, log_format=settings.log_format.value)

    kinds = enabled_kinds(no_pod, no_cm, no_svc, no_crd, no_logs)
    if not kinds:
        click.echo("⚠️  Every resource kind is disabled, nothing to do")

    exit_code = asyncio.run(run_snapshot(settings, kinds, verbose=verbose))
    ctx.exit(exit_code)


def main(argv: Optional[List[str]] = None) -> int:
    """Console entry point; usage errors exit with 1."""
    try:
        return snapshot.main(args=argv, prog_name="kube-snapshot", standalone_mode=False) or EXIT_OK
    except click.ClickException as e:
        e.show()
        return EXIT_USAGE
    except click.exceptions.Abort:
        click.echo("Aborted!", err=True)
        return EXIT_USAGE


if __name__ == '__main__':
    sys.exit(main())
