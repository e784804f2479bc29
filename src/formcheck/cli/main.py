"""formcheck CLI entry point: inspect and render validation messages."""

import json
import logging
from pathlib import Path

import click

from formcheck.config import FormcheckConfig
from formcheck.resolver import DefaultMessageResolver
from formcheck.types import CatalogError


def _load_resolver(catalog_path: Path | None) -> DefaultMessageResolver:
    """Build the resolver from --catalog, falling back to the environment config."""
    config = FormcheckConfig.from_env()
    if catalog_path is not None:
        config.messages_path = catalog_path

    try:
        return config.create_resolver()
    except CatalogError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)


def _parse_args(pairs: tuple[str, ...]) -> dict[str, str]:
    """Parse name=value pairs given with --arg."""
    args: dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise click.BadParameter(
                f"'{pair}' is not in name=value form", param_hint="--arg"
            )
        args[name] = value
    return args


catalog_option = click.option(
    "--catalog",
    "catalog_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML catalog overriding the default templates.",
)


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
def cli(verbose: bool):
    """formcheck: form validation message tools."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@catalog_option
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the catalog as JSON.")
def catalog(catalog_path: Path | None, as_json: bool):
    """List every message key and its template."""
    resolver = _load_resolver(catalog_path)

    if as_json:
        click.echo(json.dumps(resolver.messages, indent=2, sort_keys=True))
        return

    width = max(len(key) for key in resolver.messages)
    for key in sorted(resolver.messages):
        click.echo(f"{key.ljust(width)}  {resolver.messages[key]}")
    click.echo(f"\n{len(resolver.messages)} message(s).")


@cli.command()
@click.argument("key")
@click.option("--field", default="field", show_default=True, help="Field name to render.")
@click.option("--arg", "arg_pairs", multiple=True, help="Placeholder value as name=value.")
@catalog_option
def resolve(key: str, field: str, arg_pairs: tuple[str, ...], catalog_path: Path | None):
    """Render the message for KEY."""
    args = _parse_args(arg_pairs)
    resolver = _load_resolver(catalog_path)

    if key not in resolver.messages:
        click.echo(
            click.style(f"Warning: no template for '{key}'", fg="yellow"), err=True
        )

    click.echo(resolver.resolve_message(field, key, args))
