"""
Command-line interface for the VC-API Data Integrity conformance suite.

Usage:
    vc-di-suite run --implementations ./implementations
    vc-di-suite run --json-output reports/matrix.json
    vc-di-suite list
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click
import httpx
from rich.console import Console

from vc_di_suite.cases import verifier_cases
from vc_di_suite.classifier import client_error_bad_request, strict_bad_request
from vc_di_suite.client import EndpointClient
from vc_di_suite.config import SuiteConfig
from vc_di_suite.errors import SuiteError
from vc_di_suite.fixtures import load_fixture
from vc_di_suite.log import configure_logging
from vc_di_suite.registry import ImplementationCatalog, Role
from vc_di_suite.report import ConsoleReportSink, JsonReportSink, ReportSink, build_matrix
from vc_di_suite.runner import CaseRunner, ReferenceIssuer, SetupPolicy


console = Console()


@click.group()
@click.option(
    "--implementations",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory of implementation manifests",
)
@click.option(
    "--verifier-tag",
    default=None,
    help="Tag selecting verifiers under test",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Log level for diagnostic output",
)
@click.version_option(package_name="vc-di-suite")
@click.pass_context
def main(
    ctx: click.Context,
    implementations: Path | None,
    verifier_tag: str | None,
    log_level: str | None,
) -> None:
    """Run the VC-API Data Integrity verifier conformance suite."""
    try:
        config = SuiteConfig.from_env().with_overrides(
            implementations=implementations,
            verifier_tag=verifier_tag,
            log_level=log_level,
        )
    except SuiteError as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(2)
    configure_logging(config.log_level)
    ctx.obj = config


def _load_catalog(config: SuiteConfig) -> ImplementationCatalog:
    return ImplementationCatalog.from_directory(config.implementations)


@main.command("list")
@click.pass_obj
def list_implementations(config: SuiteConfig) -> None:
    """List implementations with and without a matching verifier."""
    try:
        catalog = _load_catalog(config)
    except SuiteError as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(2)

    partition = catalog.filter_by_tag(Role.VERIFIER, [config.verifier_tag])
    console.print(f"[bold]Verifiers tagged {config.verifier_tag}:[/]")
    for name in partition.match:
        console.print(f"  [green]+[/] {name}")
    console.print("[bold]Not implemented:[/]")
    for name in partition.non_match:
        console.print(f"  [dim]-[/] {name}")


@main.command()
@click.option(
    "--fixture",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Unsigned credential to issue as the baseline",
)
@click.option("--issuer-tag", default=None, help="Tag of issuers in the catalog")
@click.option("--reference-issuer", default=None, help="Implementation that signs the baseline")
@click.option("--reference-issuer-tag", default=None, help="Tag of the reference issuer endpoint")
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="HTTP request timeout in seconds",
)
@click.option(
    "--no-ssl-verify",
    is_flag=True,
    help="Disable SSL certificate verification",
)
@click.option(
    "--max-workers",
    type=click.IntRange(min=1),
    default=None,
    help="Number of verifiers tested concurrently",
)
@click.option(
    "--setup-policy",
    type=click.Choice([policy.value for policy in SetupPolicy]),
    default=None,
    help="Record cells as failed (error) or skipped (skip) when issuance fails",
)
@click.option(
    "--strict-status",
    is_flag=True,
    help="Require exactly HTTP 400 for rejected credentials",
)
@click.option(
    "--json-output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write the matrix as JSON to this file",
)
@click.pass_obj
def run(
    config: SuiteConfig,
    fixture: Path | None,
    issuer_tag: str | None,
    reference_issuer: str | None,
    reference_issuer_tag: str | None,
    timeout: float | None,
    no_ssl_verify: bool,
    max_workers: int | None,
    setup_policy: str | None,
    strict_status: bool,
    json_output: Path | None,
) -> None:
    """Run every verifier case and print the interop matrix.

    Exits 0 when every cell passed, 1 when any cell failed or was skipped,
    and 2 on configuration or unexpected errors.
    """
    try:
        config = config.with_overrides(
            fixture=fixture,
            issuer_tag=issuer_tag,
            reference_issuer=reference_issuer,
            reference_issuer_tag=reference_issuer_tag,
            timeout=timeout,
            verify_ssl=False if no_ssl_verify else None,
            max_workers=max_workers,
            setup_policy=SetupPolicy(setup_policy) if setup_policy else None,
            strict_status=True if strict_status else None,
        )

        catalog = _load_catalog(config)
        credential = load_fixture(config.fixture)
        verifiers = catalog.filter_by_tag(Role.VERIFIER, [config.verifier_tag])
        cases = verifier_cases()

        runner = CaseRunner(
            client=EndpointClient(timeout=config.timeout, verify_ssl=config.verify_ssl),
            cases=cases,
            credential=credential,
            reference_issuer=ReferenceIssuer(
                name=config.reference_issuer,
                tag=config.reference_issuer_tag,
            ),
            verifier_tags=[config.verifier_tag],
            setup_policy=config.setup_policy,
            is_bad_request=strict_bad_request if config.strict_status else client_error_bad_request,
            max_workers=config.max_workers,
        )
        issuers = catalog.filter_by_tag(Role.ISSUER, [config.issuer_tag])
        context = runner.run(issuers.match, verifiers.match)

        matrix = build_matrix(context.cells(), verifiers, cases)
        sinks: list[ReportSink] = [ConsoleReportSink(console)]
        if json_output:
            sinks.append(JsonReportSink(json_output))
        for sink in sinks:
            sink.write(matrix)

    except json.JSONDecodeError as e:
        console.print(f"[red]Error:[/] Invalid JSON: {e}")
        sys.exit(2)

    except SuiteError as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(2)

    except httpx.HTTPError as e:
        console.print(f"[red]Error:[/] HTTP error: {e}")
        sys.exit(2)

    except Exception as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(2)

    sys.exit(0 if matrix.all_passed else 1)


if __name__ == "__main__":
    main()
