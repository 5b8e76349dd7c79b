# SPDX-License-Identifier: MIT

"""``resource-health``: classify one resource document read from stdin.

Exit codes: 0 healthy or unknown, 1 unhealthy, 2 warning, 3 the document
could not be processed.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import click
import yaml

from resource_health import __version__
from resource_health.checks import supported_types
from resource_health.engine import evaluate, get_health_by_config_type
from resource_health.exceptions import HealthCheckError
from resource_health.models import Health, HealthStatus
from resource_health.settings import HealthSettings
from resource_health.status_map import DEFAULT_STATUS_MAPS

EXIT_OK = 0
EXIT_UNHEALTHY = 1
EXIT_WARNING = 2
EXIT_ERROR = 3


def exit_code(health: Health) -> int:
    if health.is_worse_than(Health.UNHEALTHY):
        return EXIT_UNHEALTHY
    if health.is_worse_than(Health.WARNING):
        return EXIT_WARNING
    return EXIT_OK


def parse_properties(pairs: tuple[str, ...]) -> dict[str, str]:
    properties: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"--set expects KEY=VALUE, got {pair!r}")
        properties[key.strip()] = value.strip()
    return properties


def _load_document(text: str) -> dict[str, Any]:
    obj = yaml.safe_load(text)
    if not isinstance(obj, dict):
        raise ValueError("input must be a single YAML or JSON object")
    return obj


def _render(status: HealthStatus, json_out: bool) -> str:
    if json_out:
        return json.dumps(status.to_dict(), indent=2)
    return str(status)


def _render_error(exc: Exception, json_out: bool) -> str:
    if json_out:
        return json.dumps({"error": str(exc)}, indent=2)
    return str(exc)


@click.group(invoke_without_command=True)
@click.option("--json", "-j", "json_out", is_flag=True, help="Output in JSON format.")
@click.option(
    "--config-type",
    default=None,
    metavar="TYPE",
    help="Classify a scraped config such as AWS::EC2::Instance instead of a Kubernetes object.",
)
@click.option(
    "--set",
    "properties",
    multiple=True,
    metavar="KEY=VALUE",
    help="Override a threshold, e.g. health.cert-manager.expiryGracePeriod=72h.",
)
@click.option("--verbose", "-v", is_flag=True, help="Log dispatch decisions to stderr.")
@click.pass_context
def cli(ctx: click.Context, json_out: bool, config_type: str | None, properties: tuple[str, ...], verbose: bool):
    """Read a resource from stdin and print its health."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    if ctx.invoked_subcommand is not None:
        return

    try:
        settings = HealthSettings.from_properties(parse_properties(properties))
        obj = _load_document(click.get_text_stream("stdin").read())
        if config_type:
            status = get_health_by_config_type(config_type, obj, settings=settings)
        else:
            status = evaluate(obj, settings=settings)
    except (HealthCheckError, ValueError, yaml.YAMLError) as exc:
        click.echo(_render_error(exc, json_out))
        ctx.exit(EXIT_ERROR)
        return

    click.echo(_render(status, json_out))
    ctx.exit(exit_code(status.health))


@cli.command()
def version():
    """Print the version number."""
    click.echo(__version__)


@cli.command("supported-types")
def supported_types_cmd():
    """Print the resource types with a built-in check or a condition table."""
    for name in sorted(set(supported_types()) | set(DEFAULT_STATUS_MAPS)):
        click.echo(name)


def main():
    cli(prog_name="resource-health")


if __name__ == "__main__":
    main()
