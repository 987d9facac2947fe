"""
SPARQL Assessment CLI: scores the quality of a SPARQL endpoint.

Usage:
    # Assess every criterion
    uv run sparql-assessment assess https://example.org/sparql

    # Only some criteria, with a vocabulary list and JSON output
    uv run sparql-assessment assess https://example.org/sparql \\
        -c usefulness -c linked_data_rules --vocabularies lov.txt --json

    # Check the endpoint answers at all
    uv run sparql-assessment alive https://example.org/sparql
"""

import json
import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.table import Table

from sparql_assessment.config import HTTP_TIMEOUT, QUERY_TIMEOUT

load_dotenv()


@click.group()
@click.version_option(version="0.1.0")
@click.option("--verbose", "-v", is_flag=True, help="Log every probe attempt.")
def cli(verbose: bool):
    """SPARQL Assessment: quality metrics for SPARQL endpoints."""
    from sparql_assessment.utils import configure_logging

    configure_logging(verbose)


@cli.command()
@click.argument("endpoint_url", envvar="SPARQL_ASSESSMENT_ENDPOINT")
@click.option(
    "--criterion", "-c", "criteria",
    multiple=True,
    type=click.Choice(["usefulness", "performance", "linked_data_rules"]),
    help="Criterion to evaluate (repeatable). Defaults to all.",
)
@click.option(
    "--resource-uri", "-r", "resource_uris",
    multiple=True,
    help="Resource URI used for content negotiation (repeatable).",
)
@click.option(
    "--vocabularies",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    envvar="SPARQL_ASSESSMENT_VOCABULARIES",
    default=None,
    help="File with one known vocabulary namespace per line.",
)
@click.option(
    "--prefix-directory",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    envvar="SPARQL_ASSESSMENT_PREFIX_DIRECTORY",
    default=None,
    help="JSON file mapping other endpoints to the prefixes they use.",
)
@click.option(
    "--query-timeout",
    type=float,
    default=QUERY_TIMEOUT,
    envvar="SPARQL_ASSESSMENT_QUERY_TIMEOUT",
    show_default=True,
    help="Read timeout per query attempt, in seconds.",
)
@click.option(
    "--http-timeout",
    type=float,
    default=HTTP_TIMEOUT,
    envvar="SPARQL_ASSESSMENT_HTTP_TIMEOUT",
    show_default=True,
    help="Timeout per HTTP request, in seconds.",
)
@click.option(
    "--workers", "-w",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="Metrics evaluated in parallel.",
)
@click.option("--json", "as_json", is_flag=True, help="Print measurements with their activities as JSON.")
def assess(
    endpoint_url: str,
    criteria: tuple[str, ...],
    resource_uris: tuple[str, ...],
    vocabularies: Path | None,
    prefix_directory: Path | None,
    query_timeout: float,
    http_timeout: float,
    workers: int,
    as_json: bool,
):
    """Assess ENDPOINT_URL and print one line per measurement."""
    from sparql_assessment.assessment import Assessment
    from sparql_assessment.utils import console
    from sparql_assessment.vocabulary import load_prefix_directory, load_vocabulary_registry

    assessment = Assessment(
        endpoint_url,
        resource_uris=resource_uris,
        vocabulary_registry=load_vocabulary_registry(vocabularies) if vocabularies else None,
        prefix_directory=load_prefix_directory(prefix_directory) if prefix_directory else None,
        query_timeout=query_timeout,
        http_timeout=http_timeout,
    )
    measurements = assessment.run(criteria=criteria or None, max_workers=workers)

    if as_json:
        click.echo(json.dumps([m.to_dict() for m in measurements], indent=2, default=str))
        sys.exit(0)

    table = Table(title=f"Assessment of {endpoint_url}")
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_column("Comment")
    for m in measurements:
        value = f"{m.value:.2f}" if isinstance(m.value, float) else str(m.value)
        table.add_row(m.name, value, m.comment)
    console.print(table)
    console.print(f"[dim]{len(assessment.cache)} distinct probes cached.[/dim]")
    sys.exit(0)


@cli.command()
@click.argument("endpoint_url", envvar="SPARQL_ASSESSMENT_ENDPOINT")
def alive(endpoint_url: str):
    """Check whether ENDPOINT_URL answers a trivial query."""
    from sparql_assessment.assessment import Assessment
    from sparql_assessment.utils import console

    act = Assessment(endpoint_url).endpoint.alive()
    for line in act.trace:
        console.print(f"  [dim]{line}[/dim]")
    if act.completed:
        console.print(f"[bold green]{act.comment}[/bold green]")
        sys.exit(0)
    console.print(f"[bold red]{act.comment}[/bold red]")
    sys.exit(1)


if __name__ == "__main__":
    cli()
