"""The top-level collection of areas and its import and output operations."""

from __future__ import annotations

import json
from collections.abc import Iterator
from typing import TextIO

import marshmallow as ma
import structlog
from attrs import define, field

from ..errors import InputSourceError, MalformedSourceError, NotFoundError
from . import parser
from .files import SourceColumnMapping, SourceDataType
from .filters import StringFilterSet, YearFilterTuple
from .models import Area, AreaSchema

logger = structlog.get_logger(__name__)


@define(slots=True)
class Areas:
    """All imported areas, keyed by local authority code.

    Codes keep the casing they were first inserted with but are matched
    case-insensitively, so there is at most one area per code.
    """

    container: dict[str, Area] = field(factory=dict)
    _index: dict[str, str] = field(factory=dict, init=False, repr=False, eq=False)

    def __attrs_post_init__(self) -> None:
        """Build the case-insensitive code index for a pre-filled container."""
        for code in self.container:
            self._index[code.lower()] = code

    def set_area(self, local_authority_code: str, area: Area) -> None:
        """Insert ``area``, or merge its names and measures into an existing one."""
        existing_code = self._index.get(local_authority_code.lower())
        if existing_code is None:
            self.container[local_authority_code] = area.copy()
            self._index[local_authority_code.lower()] = local_authority_code
            return
        self.container[existing_code].merge(area)

    def get_area(self, local_authority_code: str) -> Area:
        existing_code = self._index.get(local_authority_code.lower())
        if existing_code is None:
            raise NotFoundError(f"No area found matching {local_authority_code}")
        return self.container[existing_code]

    def authority_codes(self) -> list[str]:
        return sorted(self.container)

    def __len__(self) -> int:
        return len(self.container)

    def __contains__(self, local_authority_code: object) -> bool:
        if not isinstance(local_authority_code, str):
            return False
        return local_authority_code.lower() in self._index

    def __iter__(self) -> Iterator[Area]:
        """Iterate over areas in authority-code order."""
        return (self.container[code] for code in self.authority_codes())

    # Importing

    def populate(
        self,
        stream: TextIO,
        source_type: SourceDataType,
        cols: SourceColumnMapping,
        *,
        areas_filter: StringFilterSet | None = None,
        measures_filter: StringFilterSet | None = None,
        years_filter: YearFilterTuple | None = None,
    ) -> None:
        """Parse ``stream`` with the parser for ``source_type`` and merge the result.

        Omitting the filters imports everything in the stream.
        """
        if stream is None or stream.closed:
            raise InputSourceError("Stream is not open for reading")
        log = logger.bind(source_type=getattr(source_type, "value", repr(source_type)))
        log.debug("store.populate_start", areas_before=len(self))

        if source_type is SourceDataType.AUTHORITY_CODE_CSV:
            self.populate_from_authority_code_csv(stream, cols, areas_filter)
        elif source_type is SourceDataType.AUTHORITY_BY_YEAR_CSV:
            self.populate_from_authority_by_year_csv(
                stream, cols, areas_filter, measures_filter, years_filter
            )
        elif source_type is SourceDataType.WELSH_STATS_JSON:
            self.populate_from_welsh_stats_json(
                stream, cols, areas_filter, measures_filter, years_filter
            )
        else:
            raise MalformedSourceError("Unexpected data type")
        log.debug("store.populate_complete", areas_after=len(self))

    def populate_from_authority_code_csv(
        self,
        stream: TextIO,
        cols: SourceColumnMapping,
        areas_filter: StringFilterSet | None = None,
    ) -> None:
        """Import local authority codes with their English and Welsh names."""
        for area in parser.parse_authority_code_csv(stream, cols, areas_filter):
            self.set_area(area.local_authority_code, area)

    def populate_from_authority_by_year_csv(
        self,
        stream: TextIO,
        cols: SourceColumnMapping,
        areas_filter: StringFilterSet | None = None,
        measures_filter: StringFilterSet | None = None,
        years_filter: YearFilterTuple | None = None,
    ) -> None:
        """Import a single-measure-by-year CSV onto areas that already exist.

        Raises :class:`NotFoundError` for a code with no area, so the areas file
        must be imported first.
        """
        rows = parser.parse_authority_by_year_csv(
            stream, cols, areas_filter, measures_filter, years_filter
        )
        for code, measure in rows:
            self.get_area(code).set_measure(measure.codename, measure)

    def populate_from_welsh_stats_json(
        self,
        stream: TextIO,
        cols: SourceColumnMapping,
        areas_filter: StringFilterSet | None = None,
        measures_filter: StringFilterSet | None = None,
        years_filter: YearFilterTuple | None = None,
    ) -> None:
        """Import a StatsWales JSON document, creating areas as they appear."""
        rows = parser.parse_welsh_stats_json(
            stream, cols, areas_filter, measures_filter, years_filter
        )
        for area in rows:
            self.set_area(area.local_authority_code, area)

    # Output

    def to_dict(self) -> dict[str, dict]:
        schema = AreaSchema()
        return {code: schema.dump(self.container[code]) for code in self.authority_codes()}

    def to_json(self) -> str:
        """Serialize every area as ``{code: {"names": ..., "measures": ...}}``."""
        if not self.container:
            return "{}"
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_json(cls, text: str) -> Areas:
        """Rebuild a store from the output of :meth:`to_json`."""
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise MalformedSourceError(f"Malformed file: invalid JSON ({exc})") from exc
        if not isinstance(payload, dict):
            raise MalformedSourceError("Malformed file: expected an object keyed by area code")
        schema = AreaSchema()
        areas = cls()
        for code, entry in payload.items():
            if not isinstance(entry, dict):
                raise MalformedSourceError(f"Malformed file: entry for {code} is not an object")
            try:
                area = schema.load({"code": code, **entry})
            except ma.ValidationError as exc:
                raise MalformedSourceError(f"Malformed file: {code}: {exc.messages}") from exc
            areas.set_area(code, area)
        return areas

    def render(self) -> str:
        """Every area's text block, in authority-code order."""
        return "".join(area.render() for area in self)

    def __str__(self) -> str:
        return self.render()


__all__ = ["Areas"]
