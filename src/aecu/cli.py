"""Command line interface entry point."""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from typing import Any

import click

from aecu.aecu_errors import AecuError
from aecu.configuration import (
    DEFAULT_CONFIG_FILENAME,
    ConfigurationError,
    load_configuration,
    write_placeholder_configuration,
)
from aecu.execution_history import HistoryEntry, HistoryOutcome
from aecu.history_reporting import write_history_workbook
from aecu.script_execution import ExecutionResult
from aecu.upgrade_service import AecuService, build_service, package_version

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class CliError(Exception):
    """Custom CLI error."""


def _service_options(command: Callable[..., Any]) -> Callable[..., Any]:
    command = click.option(
        "--run-mode",
        "run_modes",
        multiple=True,
        help="Active run mode; repeat to activate several. Replaces configured run modes.",
    )(command)
    command = click.option(
        "--config",
        "config_path",
        required=True,
        type=click.Path(path_type=str),
        help="Path to YAML/JSON configuration file",
    )(command)
    return command


def _load_service(config_path: str, run_modes: tuple[str, ...]) -> AecuService:
    try:
        configuration = load_configuration(config_path)
    except ConfigurationError as exc:
        raise CliError(str(exc)) from exc
    return build_service(configuration, run_modes=run_modes or None)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="aecu")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Log level for messages written to stderr",
)
def cli(log_level: str) -> None:
    """Discover, execute and record content upgrade scripts."""
    logging.basicConfig(
        level=log_level.upper(),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command(name="generate-config")
@click.option(
    "--output",
    "output_path",
    required=False,
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    type=click.Path(path_type=str),
    help="Path to the YAML configuration template to write",
)
def generate_config(output_path: str) -> None:
    """Generate a placeholder YAML configuration with guidance comments."""
    try:
        resolved_output = write_placeholder_configuration(output_path)
    except (FileExistsError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


@cli.command(name="files")
@_service_options
@click.argument("path")
def list_files(config_path: str, run_modes: tuple[str, ...], path: str) -> None:
    """List the scripts below PATH that would run, in execution order."""
    service = _load_service(config_path, run_modes)
    try:
        files = service.get_files(path)
    except AecuError as exc:
        raise CliError(str(exc)) from exc
    for file_path in files:
        click.echo(file_path)


@cli.command(name="execute")
@_service_options
@click.argument("path")
def execute_script(config_path: str, run_modes: tuple[str, ...], path: str) -> None:
    """Execute the single script at PATH without recording history."""
    service = _load_service(config_path, run_modes)
    try:
        result = service.execute(path)
    except AecuError as exc:
        raise CliError(str(exc)) from exc
    _echo_result(result)
    if result.output:
        click.echo(result.output.rstrip("\n"))


@cli.command(name="run")
@_service_options
@click.option(
    "--fail-on-error",
    is_flag=True,
    default=False,
    help="Exit with status 1 when any script failed.",
)
@click.argument("path")
def run_scripts(
    config_path: str, run_modes: tuple[str, ...], fail_on_error: bool, path: str
) -> None:
    """Execute all scripts below PATH and record the run in the history."""
    service = _load_service(config_path, run_modes)
    try:
        entry = service.run(path)
    except AecuError as exc:
        raise CliError(str(exc)) from exc
    for result in entry.results:
        _echo_result(result)
    click.echo(f"history: {entry.path} ({entry.outcome.value})")
    if fail_on_error and entry.outcome is HistoryOutcome.FAILURE:
        raise CliError(f"One or more scripts failed, see {entry.path}")


@cli.command(name="history")
@_service_options
@click.option("--start", "start_index", default=0, show_default=True, type=click.IntRange(min=0))
@click.option("--count", default=20, show_default=True, type=click.IntRange(min=0))
def show_history(
    config_path: str, run_modes: tuple[str, ...], start_index: int, count: int
) -> None:
    """Show recorded runs, newest first."""
    service = _load_service(config_path, run_modes)
    try:
        entries = service.get_history(start_index, count)
    except AecuError as exc:
        raise CliError(str(exc)) from exc
    for entry in entries:
        click.echo(_format_entry(entry))


@cli.command(name="export-history")
@_service_options
@click.option(
    "--output",
    "output_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to the history workbook to write",
)
@click.option("--start", "start_index", default=0, show_default=True, type=click.IntRange(min=0))
@click.option("--count", default=100, show_default=True, type=click.IntRange(min=0))
def export_history(
    config_path: str,
    run_modes: tuple[str, ...],
    output_path: str,
    start_index: int,
    count: int,
) -> None:
    """Write recorded runs to an Excel workbook."""
    service = _load_service(config_path, run_modes)
    try:
        entries = service.get_history(start_index, count)
        resolved_output = write_history_workbook(entries, output_path)
    except (AecuError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


@cli.command(name="version")
def show_version() -> None:
    """Print the installed aecu version."""
    try:
        click.echo(package_version())
    except AecuError as exc:
        raise CliError(str(exc)) from exc


def _echo_result(result: ExecutionResult) -> None:
    click.echo(f"{_status(result):<7} {result.path} ({result.elapsed_ms} ms)")
    if result.fallback is not None:
        fallback = result.fallback
        click.echo(
            f"  fallback {_status(fallback)} {fallback.path} ({fallback.elapsed_ms} ms)"
        )


def _status(result: ExecutionResult) -> str:
    return "OK" if result.success else "FAILED"


def _format_entry(entry: HistoryEntry) -> str:
    end = entry.end.isoformat() if entry.end else "-"
    return (
        f"{entry.path}  {entry.state.value:<8} {entry.outcome.value:<7} "
        f"{entry.start.isoformat()} -> {end}  {len(entry.results)} script(s)"
    )


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=list(argv), standalone_mode=False)
    except CliError as exc:
        click.echo(str(exc), err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
