"""Command line entry point for the welsh-stats application."""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path

import click
import structlog
from click.core import ParameterSource

from welsh_stats.data import DATASETS, Areas, AreasLoader, InputFileSource, find_dataset
from welsh_stats.errors import NotFoundError, WelshStatsError
from welsh_stats.logging import configure_logging

DIR_HELP = "Directory holding the dataset files. May also be set via WELSH_STATS_DIR."
BASE_URL_HELP = (
    "Fetch dataset files from this URL instead of --dir. "
    "May also be set via WELSH_STATS_BASE_URL."
)
DATASETS_HELP = (
    "The dataset(s) to import and analyse as a comma-separated list of codes "
    "(omit or set to 'all' to import and analyse all datasets)."
)
AREAS_HELP = (
    "The area(s) to import and analyse as a comma-separated list of authority codes "
    "or name fragments (omit or set to 'all' to import and analyse all areas)."
)
MEASURES_HELP = (
    "Select a subset of measures from the dataset(s) "
    "(omit or set to 'all' to import and analyse all measures)."
)
YEARS_HELP = "Focus on a particular year (YYYY) or inclusive range of years (YYYY-ZZZZ)."

LOG_FORMAT_CHOICES = ("console", "json")
LOG_LEVEL_CHOICES = ("critical", "error", "warning", "info", "debug")

YEARS_PATTERN = re.compile(r"^(\d{4})(?:-(\d{4}))?$")

logger = structlog.get_logger(__name__)


def split_values(values: Iterable[str]) -> list[str]:
    """Flatten repeated and comma-separated option values, dropping blanks."""
    result: list[str] = []
    for value in values:
        result.extend(part.strip() for part in value.split(",") if part.strip())
    return result


def _wants_all(values: list[str]) -> bool:
    return not values or any(value.lower() == "all" for value in values)


def parse_datasets_arg(values: Iterable[str]) -> list[InputFileSource]:
    """Resolve dataset codes to their definitions; nothing or ``all`` selects every one."""
    codes = split_values(values)
    if _wants_all(codes):
        return list(DATASETS)
    selected: list[InputFileSource] = []
    for code in codes:
        try:
            dataset = find_dataset(code)
        except NotFoundError as exc:
            raise ValueError(str(exc)) from None
        if dataset not in selected:
            selected.append(dataset)
    return selected


def parse_filter_arg(values: Iterable[str]) -> set[str]:
    """Lowercased filter entries, or an empty set (no filtering) for nothing or ``all``."""
    entries = split_values(values)
    if _wants_all(entries):
        return set()
    return {entry.lower() for entry in entries}


def parse_years_arg(value: str) -> tuple[int, int]:
    """Parse ``YYYY`` or ``YYYY-ZZZZ`` into an inclusive range; ``0`` means all years."""
    value = value.strip()
    if value in {"0", "0-0"}:
        return (0, 0)
    match = YEARS_PATTERN.match(value)
    if match is None:
        raise ValueError("Invalid input for years argument")
    start = int(match.group(1))
    end = int(match.group(2) or start)
    if start > end:
        raise ValueError("Invalid input for years argument")
    return (start, end)


def _as_bad_parameter(parse):
    """Wrap an argument parser as a click callback reporting ValueError as usage errors."""

    def callback(ctx: click.Context, param: click.Parameter, value):
        try:
            return parse(value)
        except ValueError as exc:
            raise click.BadParameter(str(exc), ctx=ctx, param=param) from exc

    return callback


def _build_loader(ctx: click.Context, directory: Path, base_url: str | None) -> AreasLoader:
    """Choose between local files and a remote directory."""
    if base_url:
        if ctx.get_parameter_source("directory") in {
            ParameterSource.COMMANDLINE,
            ParameterSource.ENVIRONMENT,
        }:
            raise click.UsageError("--dir cannot be combined with --base-url.")
        return AreasLoader.from_base_url(base_url)
    return AreasLoader.from_directory(directory)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--dir",
    "directory",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="WELSH_STATS_DIR",
    default=Path("datasets"),
    show_default=True,
    help=DIR_HELP,
)
@click.option("--base-url", envvar="WELSH_STATS_BASE_URL", default=None, help=BASE_URL_HELP)
@click.option(
    "-d",
    "--datasets",
    "datasets",
    multiple=True,
    callback=_as_bad_parameter(parse_datasets_arg),
    help=DATASETS_HELP,
)
@click.option(
    "-a",
    "--areas",
    "areas_filter",
    multiple=True,
    callback=_as_bad_parameter(parse_filter_arg),
    help=AREAS_HELP,
)
@click.option(
    "-m",
    "--measures",
    "measures_filter",
    multiple=True,
    callback=_as_bad_parameter(parse_filter_arg),
    help=MEASURES_HELP,
)
@click.option(
    "-y",
    "--years",
    "years_filter",
    default="0",
    show_default=True,
    callback=_as_bad_parameter(parse_years_arg),
    help=YEARS_HELP,
)
@click.option(
    "-j", "--json", "as_json", is_flag=True, help="Print the output as JSON instead of tables."
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVEL_CHOICES, case_sensitive=False),
    envvar="WELSH_STATS_LOG_LEVEL",
    default="warning",
    show_default=True,
    help="Verbosity for structured logs (written to stderr).",
)
@click.option(
    "--log-format",
    type=click.Choice(LOG_FORMAT_CHOICES, case_sensitive=False),
    envvar="WELSH_STATS_LOG_FORMAT",
    default="console",
    show_default=True,
    help="Render logs as console-friendly text or JSON.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    *,
    directory: Path,
    base_url: str | None,
    datasets: list[InputFileSource],
    areas_filter: set[str],
    measures_filter: set[str],
    years_filter: tuple[int, int],
    as_json: bool,
    log_level: str,
    log_format: str,
) -> None:
    """Parse official Welsh Government statistics data files and summarise them."""
    configure_logging(level=log_level, json_output=log_format.lower() == "json")
    cmd_log = logger.bind(command="welsh-stats")
    cmd_log.info(
        "command.start",
        datasets=[dataset.code for dataset in datasets],
        areas=sorted(areas_filter),
        measures=sorted(measures_filter),
        years=list(years_filter),
    )

    areas = Areas()
    loader = _build_loader(ctx, directory, base_url)
    try:
        try:
            loader.load_areas(areas, areas_filter)
        except (WelshStatsError, OSError, ValueError) as exc:
            cmd_log.error("command.areas_failed", error=str(exc))
            raise click.ClickException(f"Error importing areas: {exc}") from exc
        failures = loader.load_datasets(
            areas,
            datasets,
            areas_filter=areas_filter,
            measures_filter=measures_filter,
            years_filter=years_filter,
        )
    finally:
        loader.close()

    for failure in failures:
        click.echo(f"Error importing dataset:\n{failure.message}", err=True)

    if as_json:
        click.echo(areas.to_json())
    else:
        click.echo(areas.render(), nl=False)
    cmd_log.info("command.completed", areas=len(areas), failed=[f.code for f in failures])


if __name__ == "__main__":
    cli()
