"""
FlowTalkers Command Line Interface.

Commands: sources, query, classify, talkers, zones, serve
"""

from __future__ import annotations

import json
import logging

import click

from . import __version__
from .config import load_settings
from .errors import SettingsError
from .pipeline import ClassificationPipeline, FlowRequest, top_talkers
from .zones.classifier import ZoneClassifier


def _print_messages(messages) -> None:
    for m in messages:
        click.echo(f"[{m.severity.value}] {m.text}", err=True)


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "config_path", default=None, envvar="FLOWTALKERS_CONFIG",
              help="YAML settings file")
@click.option("--log-level", default="WARNING",
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              help="Logging level")
@click.pass_context
def cli(ctx, config_path: str | None, log_level: str):
    """FlowTalkers: live top talkers classified by network zone"""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        settings = load_settings(config_path)
    except SettingsError as e:
        raise click.ClickException(str(e))
    ctx.obj = ClassificationPipeline(settings=settings)


@cli.command()
@click.pass_obj
def sources(pipeline: ClassificationPipeline):
    """List the collector sources that can be queried."""
    catalog, messages = pipeline.discover()
    _print_messages(messages)
    if not catalog:
        raise SystemExit(1)
    for source in catalog.values():
        click.echo(f"{source.id:12s} {source.path}")


@cli.command()
@click.option("--source", default="", help="Source id to query")
@click.option("--json", "as_json", is_flag=True, help="Print the full result as JSON")
@click.option("--limit", default=20, help="Rows to print")
@click.pass_obj
def query(pipeline: ClassificationPipeline, source: str, as_json: bool, limit: int):
    """Query a source and print its classified flows."""
    result = pipeline.run(FlowRequest(source=source))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    _print_messages(result.diagnostics)
    if result.selected_source:
        click.echo(f"Source: {result.selected_source}  Rows: {len(result.records)}")
    if result.headers:
        click.echo("  ".join(result.headers + ["SRC_ZONE", "DST_ZONE"]))
    for record in result.records[:limit]:
        raw = list(record.raw)
        if result.bytes_col >= 0:
            raw[result.bytes_col] = record.display[result.bytes_col]
        click.echo("  ".join(raw + [record.source_colour.value, record.dest_colour.value]))
    if len(result.records) > limit:
        click.echo(f"... and {len(result.records) - limit} more")
    if not result.ok:
        raise SystemExit(1)


@cli.command()
@click.argument("addresses", nargs=-1, required=True)
@click.pass_obj
def classify(pipeline: ClassificationPipeline, addresses: tuple[str, ...]):
    """Print the zone colour of each address."""
    classifier = ZoneClassifier(pipeline.zone_table())
    for address in addresses:
        click.echo(f"{address:18s} {classifier.classify(address).value}")


@cli.command()
@click.option("--source", default="", help="Source id to query")
@click.option("-n", "count", default=10, help="Number of talkers")
@click.option("--by", type=click.Choice(["src", "dst"]), default="src",
              help="Aggregate by source or destination address")
@click.pass_obj
def talkers(pipeline: ClassificationPipeline, source: str, count: int, by: str):
    """Show the addresses moving the most bytes."""
    result = pipeline.run(FlowRequest(source=source))
    _print_messages(result.diagnostics)

    click.echo(f"\n--- Top {count} Talkers ({by}) ---")
    for t in top_talkers(result, n=count, by=by):
        click.echo(f"  {t['address']:18s} {t['colour']:10s} {t['display_bytes']:>12s}  flows={t['flows']}")


@cli.command()
@click.pass_obj
def zones(pipeline: ClassificationPipeline):
    """Print the zone table, most specific network first."""
    for entry in pipeline.zone_table():
        click.echo(f"{entry.network:20s} {entry.colour.value}")


@cli.command()
@click.option("--host", default="127.0.0.1", help="API host")
@click.option("--port", default=5000, help="API port")
@click.pass_obj
def serve(pipeline: ClassificationPipeline, host: str, port: int):
    """Run the JSON API."""
    from .api import create_app

    click.echo(f"[*] Starting FlowTalkers API on {host}:{port}")
    app = create_app(pipeline=pipeline)
    app.run(host=host, port=port)


def main():
    cli()


if __name__ == "__main__":
    main()
