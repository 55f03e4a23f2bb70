"""Orchestration for importing the areas list and datasets into a store."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path

import structlog
from attrs import define, field

from ..errors import WelshStatsError
from .client import StatsWalesHttpClient
from .files import AREAS, InputFileSource
from .filters import StringFilterSet, YearFilterTuple
from .sources import InputFile, InputSource, InputUrl
from .store import Areas

logger = structlog.get_logger(__name__)


@define(slots=True, frozen=True)
class DatasetFailure:
    """A dataset that could not be imported and why."""

    code: str
    message: str


@define(slots=True)
class AreasLoader:
    """Open each dataset through ``source_for`` and merge it into an :class:`Areas`.

    The areas list must be loaded before any dataset: the by-year CSVs only
    attach measures to areas that already exist.
    """

    source_for: Callable[[str], InputSource]
    client: StatsWalesHttpClient | None = field(default=None)

    @classmethod
    def from_directory(cls, directory: str | Path) -> AreasLoader:
        """Read dataset files from a local directory."""
        root = Path(directory)
        return cls(source_for=lambda filename: InputFile(root / filename))

    @classmethod
    def from_base_url(
        cls, base_url: str, *, client: StatsWalesHttpClient | None = None
    ) -> AreasLoader:
        """Download dataset files from a directory served over HTTP."""
        http = client or StatsWalesHttpClient(base_url=base_url)
        return cls(source_for=lambda filename: InputUrl(filename, http), client=http)

    def import_source(
        self,
        areas: Areas,
        dataset: InputFileSource,
        *,
        areas_filter: StringFilterSet | None = None,
        measures_filter: StringFilterSet | None = None,
        years_filter: YearFilterTuple | None = None,
    ) -> None:
        """Open one dataset, import it, and close the stream on every exit path."""
        source = self.source_for(dataset.file)
        log = logger.bind(dataset=dataset.code, source=source.source)
        log.debug("loader.import_start")
        with source.open() as stream:
            areas.populate(
                stream,
                dataset.source_type,
                dataset.cols,
                areas_filter=areas_filter,
                measures_filter=measures_filter,
                years_filter=years_filter,
            )
        log.info("loader.import_complete", areas=len(areas))

    def load_areas(self, areas: Areas, areas_filter: StringFilterSet | None = None) -> None:
        """Import the authority code list. Errors propagate to the caller."""
        self.import_source(areas, AREAS, areas_filter=areas_filter)

    def load_datasets(
        self,
        areas: Areas,
        datasets: Iterable[InputFileSource],
        *,
        areas_filter: StringFilterSet | None = None,
        measures_filter: StringFilterSet | None = None,
        years_filter: YearFilterTuple | None = None,
    ) -> list[DatasetFailure]:
        """Import each dataset in turn; a failing dataset does not stop the rest."""
        failures: list[DatasetFailure] = []
        for dataset in datasets:
            try:
                self.import_source(
                    areas,
                    dataset,
                    areas_filter=areas_filter,
                    measures_filter=measures_filter,
                    years_filter=years_filter,
                )
            except (WelshStatsError, OSError, ValueError) as exc:
                logger.warning("loader.dataset_failed", dataset=dataset.code, error=str(exc))
                failures.append(DatasetFailure(code=dataset.code, message=str(exc)))
        return failures

    def close(self) -> None:
        """Close the HTTP client, if one is in use."""
        if self.client is not None:
            self.client.close()


__all__ = ["AreasLoader", "DatasetFailure"]
