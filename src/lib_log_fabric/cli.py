"""Click command group for operators and smoke tests.

Purpose
-------
Expose the metadata banner, show which backends the current environment would
try, and emit a demo record per level through the real priority chain.

Contents
--------
* :func:`cli` - root group (``--version``, ``--use-dotenv``).
* ``info`` / ``backends`` / ``logdemo`` sub-commands.
* :func:`main` - test-friendly runner returning an exit code.
"""

from __future__ import annotations

import os
from collections.abc import Sequence
from dataclasses import replace

import click

from . import __init__conf__
from . import config as log_config
from .domain import LogLevel
from .runtime import build_candidates, get, init, shutdown
from .settings import FabricSettings

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

_DEMO_ATTRIBUTES: dict[LogLevel, dict[str, object]] = {
    LogLevel.DEBUG: {"cache": {"hits": 12, "misses": 1}},
    LogLevel.INFO: {"order_id": 42, "customer": "ada"},
    LogLevel.WARN: {"stock": 3, "threshold": 5},
    LogLevel.ERROR: {"error": "payment gateway timeout", "retry": True},
}
_DEMO_MESSAGES: dict[LogLevel, str] = {
    LogLevel.DEBUG: "cache statistics",
    LogLevel.INFO: "order created",
    LogLevel.WARN: "stock running low",
    LogLevel.ERROR: "payment failed",
}


def _load_settings() -> FabricSettings:
    try:
        return log_config.load_settings()
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc


@click.group(
    help=__init__conf__.title,
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=True,
)
@click.version_option(
    version=__init__conf__.version,
    prog_name=__init__conf__.shell_command,
    message=f"{__init__conf__.shell_command} version {__init__conf__.version}",
)
@click.option(
    "--use-dotenv/--no-use-dotenv",
    default=False,
    help="Load environment variables from the nearest .env before running commands.",
)
@click.pass_context
def cli(ctx: click.Context, use_dotenv: bool) -> None:
    """Root command; without a sub-command it prints the metadata banner."""

    explicit: bool | None = None
    if ctx.get_parameter_source("use_dotenv") is not click.core.ParameterSource.DEFAULT:
        explicit = use_dotenv
    if log_config.should_use_dotenv(explicit=explicit, env_value=os.getenv(log_config.DOTENV_ENV_VAR)):
        log_config.enable_dotenv()
    if ctx.invoked_subcommand is None:
        __init__conf__.print_info(writer=click.echo)


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print resolved metadata so users can inspect installation details."""

    __init__conf__.print_info(writer=click.echo)


@cli.command("backends", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_backends() -> None:
    """List the backends the current configuration would try, in priority order."""

    settings = _load_settings()
    candidates = build_candidates(settings)
    rows = [(candidate.name, candidate.details) for candidate in candidates]
    rows.append(("console", "stdout"))
    width = max(len(name) for name, _ in rows)
    for position, (name, details) in enumerate(rows, start=1):
        click.echo(f"{position}. {name.ljust(width)}  {details}".rstrip())


@cli.command("logdemo", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option(
    "--format",
    "line_format",
    type=click.Choice(["text", "json"]),
    default=None,
    help="Override LOG_FORMAT for the demo run.",
)
@click.option(
    "--level",
    type=click.Choice(["debug", "info", "warn", "error"], case_sensitive=False),
    default="debug",
    show_default=True,
    help="Minimum level for the demo run.",
)
def cli_logdemo(line_format: str | None, level: str) -> None:
    """Initialise the runtime, emit one record per level, and shut down."""

    settings = _load_settings()
    settings = replace(
        settings,
        level=LogLevel.from_name(level),
        line_format=line_format or settings.line_format,
    )
    backend = init(settings)
    emitted = 0
    try:
        logger = get("logdemo").bind(service=settings.service)
        for demo_level, message in _DEMO_MESSAGES.items():
            if logger.enabled(demo_level):
                logger.log(demo_level, message, **_DEMO_ATTRIBUTES[demo_level])
                emitted += 1
    finally:
        shutdown()
    click.echo(f"emitted {emitted} records via {backend}")


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Click group in a test-friendly manner.

    Returns
    -------
    int
        Zero on success, the Click exit code otherwise.

    Examples
    --------
    >>> main(["--version"])  # doctest: +ELLIPSIS
    lib_log_fabric version 0...
    0
    """

    args = list(argv) if argv is not None else None
    try:
        cli.main(args=args, prog_name=__init__conf__.shell_command, standalone_mode=False)
    except click.ClickException as error:
        error.show()
        return error.exit_code
    except click.exceptions.Exit as exit_signal:
        return exit_signal.exit_code
    except click.exceptions.Abort:
        click.echo("Aborted!", err=True)
        return 1
    return 0


__all__ = ["cli", "main"]
