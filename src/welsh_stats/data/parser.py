"""Streaming parsers for the three supported source layouts.

Each parser applies the area, measure, and year filters while it reads, so
rows that are filtered out never become :class:`Area` or :class:`Measure`
objects.
"""

import csv
import json
import math
from collections.abc import Iterator
from typing import Any, TextIO

from ..errors import MalformedSourceError, NotFoundError
from .files import SourceColumn, SourceColumnMapping
from .filters import (
    StringFilterSet,
    YearFilterTuple,
    area_matches,
    measure_matches,
    year_in_range,
)
from .models import Area, Measure

# StatsWales OData documents keep their rows under this key.
WELSH_STATS_ROWS_KEY = "value"


def _column(cols: SourceColumnMapping, key: SourceColumn) -> str:
    """Look up the dataset-specific name of a logical column."""
    try:
        return cols[key]
    except KeyError:
        raise NotFoundError(f"Column mapping has no entry for {key.name}") from None


def _read_csv(stream: TextIO) -> Iterator[list[str]]:
    """Yield CSV rows, dropping blank lines such as a trailing newline."""
    for row in csv.reader(stream):
        if not row or all(cell.strip() == "" for cell in row):
            continue
        yield row


def _to_year(raw: Any) -> int:
    if isinstance(raw, bool) or not isinstance(raw, (str, int)):
        raise MalformedSourceError(f"Malformed file: {raw!r} is not a year")
    try:
        return int(str(raw).strip())
    except ValueError:
        raise MalformedSourceError(f"Malformed file: {raw!r} is not a year") from None


def _to_value(raw: Any) -> float:
    """Readings are finite floats; JSON may carry them as numbers or strings."""
    if isinstance(raw, bool) or raw is None:
        raise MalformedSourceError(f"Malformed file: {raw!r} is not a number")
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise MalformedSourceError(f"Malformed file: {raw!r} is not a number") from None
    if not math.isfinite(value):
        raise MalformedSourceError(f"Malformed file: {raw!r} is not a finite number")
    return value


def parse_authority_code_csv(
    stream: TextIO,
    cols: SourceColumnMapping,
    areas_filter: StringFilterSet | None = None,
) -> Iterator[Area]:
    """Parse the ``code,English name,Welsh name`` list of local authorities."""
    expected = [
        _column(cols, SourceColumn.AUTH_CODE),
        _column(cols, SourceColumn.AUTH_NAME_ENG),
        _column(cols, SourceColumn.AUTH_NAME_CYM),
    ]
    rows = _read_csv(stream)
    headings = next(rows, None)
    if headings != expected:
        raise MalformedSourceError("Malformed file: headings are not correct")

    for row in rows:
        if len(row) != 3:
            raise MalformedSourceError("Malformed file: incorrect number of columns")
        code, name_eng, name_cym = row
        if not area_matches(areas_filter, code, name_eng, name_cym):
            continue
        area = Area(code)
        area.set_name("eng", name_eng)
        area.set_name("cym", name_cym)
        yield area


def parse_authority_by_year_csv(
    stream: TextIO,
    cols: SourceColumnMapping,
    areas_filter: StringFilterSet | None = None,
    measures_filter: StringFilterSet | None = None,
    years_filter: YearFilterTuple | None = None,
) -> Iterator[tuple[str, Measure]]:
    """Parse a single-measure CSV with one row per area and one column per year.

    Yields ``(authority code, measure)`` pairs. The file carries no area names.
    """
    auth_code_heading = _column(cols, SourceColumn.AUTH_CODE)
    codename = _column(cols, SourceColumn.SINGLE_MEASURE_CODE)
    label = _column(cols, SourceColumn.SINGLE_MEASURE_NAME)

    rows = _read_csv(stream)
    headings = next(rows, None)
    if not headings or headings[0] != auth_code_heading:
        raise MalformedSourceError("Malformed file: headings are not correct")
    years = [_to_year(heading) for heading in headings[1:]]

    if not measure_matches(measures_filter, codename):
        return

    for row in rows:
        code, cells = row[0], row[1:]
        if not area_matches(areas_filter, code):
            continue
        if len(cells) > len(years):
            raise MalformedSourceError("Malformed file: incorrect number of columns")
        measure = Measure(codename, label)
        for year, cell in zip(years, cells):
            if not cell.strip() or not year_in_range(years_filter, year):
                continue
            measure.set_value(year, _to_value(cell))
        yield code, measure


def parse_welsh_stats_json(
    stream: TextIO,
    cols: SourceColumnMapping,
    areas_filter: StringFilterSet | None = None,
    measures_filter: StringFilterSet | None = None,
    years_filter: YearFilterTuple | None = None,
) -> Iterator[Area]:
    """Parse a StatsWales OData JSON document, one area/measure/year per row."""
    auth_code_key = _column(cols, SourceColumn.AUTH_CODE)
    name_eng_key = _column(cols, SourceColumn.AUTH_NAME_ENG)
    year_key = _column(cols, SourceColumn.YEAR)
    value_key = _column(cols, SourceColumn.VALUE)
    # Single-measure datasets name their measure in the mapping, not per row.
    per_row_measure = SourceColumn.MEASURE_CODE in cols
    if per_row_measure:
        measure_code_key = _column(cols, SourceColumn.MEASURE_CODE)
        measure_name_key = _column(cols, SourceColumn.MEASURE_NAME)
    else:
        fixed_code = _column(cols, SourceColumn.SINGLE_MEASURE_CODE)
        fixed_name = _column(cols, SourceColumn.SINGLE_MEASURE_NAME)

    try:
        document = json.load(stream)
    except json.JSONDecodeError as exc:
        raise MalformedSourceError(f"Malformed file: invalid JSON ({exc})") from exc
    if not isinstance(document, dict) or not isinstance(
        document.get(WELSH_STATS_ROWS_KEY), list
    ):
        raise MalformedSourceError(
            f"Malformed file: expected a {WELSH_STATS_ROWS_KEY!r} array of rows"
        )

    for record in document[WELSH_STATS_ROWS_KEY]:
        try:
            code = str(record[auth_code_key])
            name_eng = str(record[name_eng_key])
            if per_row_measure:
                measure_code = str(record[measure_code_key])
                measure_name = str(record[measure_name_key])
            else:
                measure_code, measure_name = fixed_code, fixed_name
            raw_year = record[year_key]
            raw_value = record[value_key]
        except (KeyError, TypeError) as exc:
            raise MalformedSourceError(f"Malformed file: row is missing {exc}") from exc

        if not area_matches(areas_filter, code, name_eng):
            continue
        if not measure_matches(measures_filter, measure_code):
            continue
        year = _to_year(raw_year)
        if not year_in_range(years_filter, year):
            continue

        measure = Measure(measure_code, measure_name)
        measure.set_value(year, _to_value(raw_value))
        area = Area(code)
        area.set_name("eng", name_eng)
        area.set_measure(measure_code, measure)
        yield area


__all__ = [
    "WELSH_STATS_ROWS_KEY",
    "parse_authority_code_csv",
    "parse_authority_by_year_csv",
    "parse_welsh_stats_json",
]
