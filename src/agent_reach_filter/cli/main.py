"""CLI entry point for agent-reach-filter.

Invoked as::

    agent-reach-filter [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m agent_reach_filter.cli.main

Available commands
------------------
* ``version``          — show detailed version information
* ``config show``      — print the effective filter configuration
* ``config validate``  — validate a YAML filter configuration
* ``risk``             — classify a boundary distance into a risk level
* ``line-world``       — run the filter on the built-in 1-D line world
"""
from __future__ import annotations

import logging
import sys

import click
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

console = Console()
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="agent-reach-filter")
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Set the log level.",
    show_default=True,
)
def cli(log_level: str) -> None:
    """Bounded-horizon reachability filtering of agent actions."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(levelname)s %(name)s — %(message)s",
    )


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from agent_reach_filter import __version__

    console.print(f"[bold]agent-reach-filter[/bold] v{__version__}")
    console.print(f"Python {sys.version}")


# ---------------------------------------------------------------------------
# config group
# ---------------------------------------------------------------------------


def _load_config(config_path: str | None):  # type: ignore[no-untyped-def]
    from agent_reach_filter.config import FilterConfig

    if config_path is None:
        return FilterConfig()
    try:
        return FilterConfig.from_yaml(config_path)
    except ValidationError as exc:
        console.print(f"[red]Invalid filter config {config_path!r}:[/red]\n{exc}")
        raise SystemExit(1) from exc
    except Exception as exc:
        console.print(f"[red]Error reading config file:[/red] {exc}")
        raise SystemExit(1) from exc


@cli.group(name="config")
def config_group() -> None:
    """Filter configuration commands."""


@config_group.command(name="show")
@click.argument("config_path", required=False, type=click.Path(exists=True))
def config_show(config_path: str | None) -> None:
    """Print the effective configuration (defaults when CONFIG_PATH is omitted)."""
    config = _load_config(config_path)

    table = Table(title="Filter Configuration", show_header=True)
    table.add_column("Setting", style="bold")
    table.add_column("Value")
    for name, value in config.model_dump(mode="json").items():
        table.add_row(name, "(unset)" if value is None else str(value))
    console.print(table)


@config_group.command(name="validate")
@click.argument("config_path", type=click.Path(exists=True))
def config_validate(config_path: str) -> None:
    """Validate the YAML filter configuration at CONFIG_PATH."""
    config = _load_config(config_path)
    console.print(
        f"[bold green]Config is valid.[/bold green] "
        f"mode={config.mode.value}, horizon={config.horizon}"
    )


# ---------------------------------------------------------------------------
# risk
# ---------------------------------------------------------------------------


@cli.command(name="risk")
@click.argument("distance", type=float)
@click.option(
    "--epsilon",
    default=1.0,
    show_default=True,
    type=float,
    help="Safety-margin unit.",
)
def risk_command(distance: float, epsilon: float) -> None:
    """Classify a distance-to-boundary DISTANCE into a risk level."""
    from agent_reach_filter.errors import InvalidDistanceError
    from agent_reach_filter.margin.risk import classify_distance

    try:
        level = classify_distance(distance, epsilon)
    except InvalidDistanceError as exc:
        console.print(f"[red]Invalid distance:[/red] {exc}")
        raise SystemExit(1) from exc
    except ValueError as exc:
        console.print(f"[red]Invalid epsilon:[/red] {exc}")
        raise SystemExit(1) from exc

    console.print(
        f"distance={distance} epsilon={epsilon} -> [bold]{level.value.upper()}[/bold]"
    )


# ---------------------------------------------------------------------------
# line-world
# ---------------------------------------------------------------------------


@cli.command(name="line-world")
@click.option("--start", default=9, show_default=True, type=int, help="Start position.")
@click.option(
    "--limit",
    default=10,
    show_default=True,
    type=int,
    help="Positions >= LIMIT are forbidden.",
)
@click.option("--horizon", default=None, type=int, help="Override the config horizon.")
@click.option(
    "--mode",
    default=None,
    type=click.Choice(["exhaustive", "policy_rollout"], case_sensitive=False),
    help="Override the config search mode.",
)
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=True),
    help="YAML filter configuration.",
)
def line_world(
    start: int,
    limit: int,
    horizon: int | None,
    mode: str | None,
    config_path: str | None,
) -> None:
    """Filter the left/right/stop actions of a 1-D line world at START.

    In policy-rollout mode the agent retreats from the limit after the
    first action.
    """
    from agent_reach_filter.convenience import LineWorld
    from agent_reach_filter.errors import AlreadyForbiddenError
    from agent_reach_filter.filter import ReachabilityFilter

    config = _load_config(config_path)
    overrides: dict[str, object] = {}
    if horizon is not None:
        overrides["horizon"] = horizon
    if mode is not None:
        overrides["mode"] = mode.lower()
    try:
        config = config.model_validate({**config.model_dump(), **overrides})
    except ValidationError as exc:
        console.print(f"[red]Invalid option:[/red]\n{exc}")
        raise SystemExit(1) from exc

    world = LineWorld(limit=limit)
    rf = ReachabilityFilter(config)
    try:
        safe = rf.safe_actions(
            start, world.actions, world.transition, world.is_forbidden,
            world.retreat_policy,
        )
    except AlreadyForbiddenError as exc:
        console.print(f"[red]{exc}[/red]")
        raise SystemExit(1) from exc

    table = Table(title=f"Line world x={start}, limit={limit}", show_header=True)
    table.add_column("Action", style="bold")
    table.add_column("Verdict")
    table.add_column("Reason")
    for verdict in safe.verdicts:
        table.add_row(
            str(verdict.action),
            "[green]safe[/green]" if verdict.safe else "[red]excluded[/red]",
            verdict.reason.value if verdict.reason else "",
        )
    console.print(table)
    console.print(f"Safe actions: {list(safe)}")
    console.print(
        f"Verified for {safe.verified_steps} step(s); "
        "behaviour beyond the horizon is unverified."
    )


if __name__ == "__main__":
    cli()
