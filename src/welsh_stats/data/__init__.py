"""Data model, parsers, and loaders for Welsh government statistics."""

from .client import StatsWalesHttpClient
from .files import (
    AREAS,
    DATASETS,
    InputFileSource,
    SourceColumn,
    SourceDataType,
    find_dataset,
)
from .ingest import AreasLoader, DatasetFailure
from .models import Area, AreaSchema, Measure
from .sources import InputFile, InputUrl
from .store import Areas

__all__ = [
    "Area",
    "AreaSchema",
    "Areas",
    "AreasLoader",
    "DatasetFailure",
    "InputFile",
    "InputFileSource",
    "InputUrl",
    "Measure",
    "SourceColumn",
    "SourceDataType",
    "StatsWalesHttpClient",
    "AREAS",
    "DATASETS",
    "find_dataset",
]
