"""Click entry point for clusterdiff.

Commands:
    diff      -- local vs remote manifest diff per server.
    discover  -- correlation listing (registry node, instance, volumes, address).
"""

from __future__ import annotations

import dataclasses
import sys

import click

from clusterdiff import __version__
from clusterdiff.app import run_diff, run_discover
from clusterdiff.config import load_config, validate_log_level
from clusterdiff.errors import ConfigError
from clusterdiff.models.config import ClusterDiffConfig
from clusterdiff.observability.logging import setup_logging

_SELECTOR_HELP = "CLUSTER[-FACET[-INDEXES]], e.g. web, web-app, web-app-0..2,5"


def _source_options(func):
    func = click.option(
        "--inventory-file",
        type=click.Path(dir_okay=False),
        help="JSON-lines cloud inventory (instances, volumes, addresses).",
    )(func)
    func = click.option(
        "--registry-url",
        help="Base URL of the configuration registry API.",
    )(func)
    func = click.option(
        "--cache-file",
        "--cache_file",
        "cache_file",
        type=click.Path(dir_okay=False),
        help="JSON-lines file to read registry nodes and roles from instead of the live API.",
    )(func)
    func = click.option(
        "--topology",
        "-t",
        type=click.Path(dir_okay=False),
        help="YAML file describing the desired clusters.",
    )(func)
    return func


def _resolve_config(
    ctx: click.Context,
    topology: str | None,
    cache_file: str | None,
    registry_url: str | None,
    inventory_file: str | None,
) -> ClusterDiffConfig:
    """Environment configuration with command-line overrides applied."""
    config: ClusterDiffConfig = ctx.obj["config"]
    sources = config.sources
    if topology:
        sources = dataclasses.replace(sources, topology_path=topology)
    if cache_file:
        sources = dataclasses.replace(sources, cache_file=cache_file)
    if inventory_file:
        sources = dataclasses.replace(sources, inventory_file=inventory_file)
    registry = config.registry
    if registry_url:
        registry = dataclasses.replace(registry, url=registry_url)
    return dataclasses.replace(config, sources=sources, registry=registry)


def _require_selector(ctx: click.Context, selector: str | None) -> str:
    if not selector:
        click.echo(ctx.get_usage(), err=True)
        click.echo(f"\nMissing selector: {_SELECTOR_HELP}", err=True)
        ctx.exit(1)
    return selector


@click.group()
@click.version_option(version=__version__)
@click.option("--log-level", help="debug, info, warning or error (default: CLUSTERDIFF_LOG_LEVEL).")
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """Compare desired cluster topology with what the registry and cloud report."""
    try:
        config = load_config()
        if log_level:
            log = dataclasses.replace(config.log, level=validate_log_level(log_level))
            config = dataclasses.replace(config, log=log)
    except ConfigError as exc:
        click.echo(f"ERROR: {exc}", err=True)
        sys.exit(1)
    setup_logging(config.log.level)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@cli.command("diff")
@click.argument("selector", required=False)
@_source_options
@click.pass_context
def diff_cmd(
    ctx: click.Context,
    selector: str | None,
    topology: str | None,
    cache_file: str | None,
    registry_url: str | None,
    inventory_file: str | None,
) -> None:
    """Show differences between a cluster and its realization.

    SELECTOR is CLUSTER[-FACET[-INDEXES]].
    """
    selector = _require_selector(ctx, selector)
    config = _resolve_config(ctx, topology, cache_file, registry_url, inventory_file)
    sys.exit(run_diff(selector, config))


@cli.command("discover")
@click.argument("selector", required=False)
@_source_options
@click.pass_context
def discover_cmd(
    ctx: click.Context,
    selector: str | None,
    topology: str | None,
    cache_file: str | None,
    registry_url: str | None,
    inventory_file: str | None,
) -> None:
    """List each server slot with the registry node and cloud resources correlated to it.

    SELECTOR is CLUSTER[-FACET[-INDEXES]].
    """
    selector = _require_selector(ctx, selector)
    config = _resolve_config(ctx, topology, cache_file, registry_url, inventory_file)
    sys.exit(run_discover(selector, config))
