"""Command-line interface for gql-connector."""

import asyncio
import json
import logging
from datetime import datetime
from pathlib import Path

import click

from .connector import GraphQLConnector, RunContext
from .core.arguments import ArgumentConfiguration
from .core.auth import BearerAuth, NoAuth
from .core.errors import ConnectorError
from .core.executor import RunSession
from .core.scalars import DATETIME
from .core.settings import ConnectorSettings


def build_session(settings: ConnectorSettings, token: str | None) -> RunSession:
    """Create the run session used by every command."""
    return RunSession(settings, auth=BearerAuth(token) if token else NoAuth())


def run(ctx: click.Context, action):
    """Run ``action(connector)`` inside a fresh session and print its JSON result."""
    settings = ctx.obj["settings"]

    async def _main():
        async with build_session(settings, ctx.obj["token"]) as session:
            return await action(GraphQLConnector(session))

    try:
        result = asyncio.run(_main())
    except ConnectorError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(json.dumps(result, indent=2, default=str))


@click.group()
@click.version_option(package_name="gql-connector")
@click.option("--url", required=True, envvar="GQL_CONNECTOR_URL", help="GraphQL endpoint URL.")
@click.option("--token", envvar="GQL_CONNECTOR_TOKEN", help="Bearer token for the endpoint.")
@click.option("--timeout", type=float, default=30.0, show_default=True,
              envvar="GQL_CONNECTOR_TIMEOUT", help="Request timeout in seconds.")
@click.option("--max-page-size", type=int, default=1000, show_default=True,
              envvar="GQL_CONNECTOR_MAX_PAGE_SIZE", help="Largest page the provider allows.")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.pass_context
def main(ctx: click.Context, url: str, token: str | None, timeout: float,
         max_page_size: int, verbose: bool):
    """Discover and fetch records from a GraphQL API.

    Examples:

        gql-connector --url https://api.example.com/graphql operations

        gql-connector --url ... fetch tickets -f id -f owner.name --limit 100
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["settings"] = ConnectorSettings(url=url, timeout=timeout, max_page_size=max_page_size)
    ctx.obj["token"] = token


@main.command()
@click.pass_context
def operations(ctx: click.Context):
    """List queries (readable) and mutations (writable)."""
    async def action(connector):
        return [op.to_dict() for op in await connector.discover()]
    run(ctx, action)


@main.command()
@click.argument("operation")
@click.argument("path", nargs=-1)
@click.pass_context
def fields(ctx: click.Context, operation: str, path: tuple[str, ...]):
    """List record fields of OPERATION, optionally below a nested PATH.

    Examples:

        gql-connector --url ... fields tickets

        gql-connector --url ... fields tickets owner address
    """
    async def action(connector):
        return [f.to_dict() for f in await connector.describe_fields(operation, path)]
    run(ctx, action)


@main.command()
@click.argument("operation")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False),
              help="Argument configuration JSON to merge with the definitions.")
@click.pass_context
def arguments(ctx: click.Context, operation: str, config_path: str | None):
    """List configurable arguments of OPERATION."""
    configuration = _load_configuration(config_path)

    async def action(connector):
        definitions = await connector.describe_arguments(operation)
        merged = [m.to_dict() for m in configuration.merge(definitions)]
        missing = configuration.missing_required(definitions)
        if missing:
            click.echo(f"Missing required arguments: {', '.join(missing)}", err=True)
        return merged
    run(ctx, action)


def _load_configuration(config_path: str | None) -> ArgumentConfiguration:
    if not config_path:
        return ArgumentConfiguration()
    return ArgumentConfiguration.from_json(Path(config_path).read_text())


def _parse_since(since: str | None) -> datetime | None:
    if not since:
        return None
    try:
        return DATETIME.deserialize(since)
    except ValueError as exc:
        raise click.BadParameter(f"Not an ISO 8601 timestamp: {since}", param_hint="--since") from exc


@main.command()
@click.argument("operation")
@click.option("--limit", type=int, help="Page size ceiling (capped by --max-page-size).")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False),
              help="Argument configuration JSON.")
@click.option("--since", help="Only records modified after this ISO 8601 timestamp.")
@click.pass_context
def plan(ctx: click.Context, operation: str, limit: int | None, config_path: str | None,
         since: str | None):
    """Show how OPERATION would be fetched."""
    context = RunContext(
        operation=operation,
        page_size=limit,
        since=_parse_since(since),
        configuration=_load_configuration(config_path),
    )

    async def action(connector):
        return (await connector.plan(context)).to_dict()
    run(ctx, action)


@main.command()
@click.argument("operation")
@click.option("--field", "-f", "field_paths", multiple=True, required=True,
              help="Dotted field path to fetch; repeatable.")
@click.option("--limit", type=int, help="Page size ceiling (capped by --max-page-size).")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False),
              help="Argument configuration JSON.")
@click.option("--since", help="Only records modified after this ISO 8601 timestamp.")
@click.pass_context
def fetch(ctx: click.Context, operation: str, field_paths: tuple[str, ...], limit: int | None,
          config_path: str | None, since: str | None):
    """Fetch every record of OPERATION and print them as JSON."""
    context = RunContext(
        operation=operation,
        fields=list(field_paths),
        page_size=limit,
        since=_parse_since(since),
        configuration=_load_configuration(config_path),
    )

    async def action(connector):
        records = await connector.fetch_all(context)
        failed = sum(1 for r in records if r.has_errors)
        if failed:
            click.echo(f"{failed} of {len(records)} record(s) have errors", err=True)
        return [r.to_dict() for r in records]
    run(ctx, action)


if __name__ == "__main__":
    main()
