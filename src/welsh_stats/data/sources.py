"""Providers of readable text streams for dataset files."""

import io
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from pathlib import Path
from typing import Protocol, TextIO

import requests
import structlog
from attrs import define, field

from ..errors import InputSourceError
from .client import StatsWalesHttpClient

logger = structlog.get_logger(__name__)


class InputSource(Protocol):
    """Anything that can hand out a text stream for one dataset file."""

    @property
    def source(self) -> str: ...

    def open(self) -> AbstractContextManager[TextIO]: ...


@define(frozen=True)
class InputFile:
    """A dataset file on the local filesystem."""

    path: Path = field(converter=Path)

    @property
    def source(self) -> str:
        return str(self.path)

    @contextmanager
    def open(self) -> Iterator[TextIO]:
        """Open the file for reading and close it however the caller exits."""
        try:
            # utf-8-sig drops the byte-order mark some exported CSVs start with.
            handle = open(self.path, encoding="utf-8-sig", newline="")
        except OSError as exc:
            raise InputSourceError(f"Failed to open file {self.path}") from exc
        logger.debug("source.opened", source=self.source)
        try:
            yield handle
        finally:
            handle.close()


@define(frozen=True)
class InputUrl:
    """A dataset file fetched from a remote directory."""

    filename: str
    client: StatsWalesHttpClient

    @property
    def source(self) -> str:
        return self.client.url_for(self.filename)

    @contextmanager
    def open(self) -> Iterator[TextIO]:
        """Download the file and expose its text as an in-memory stream.

        JSON files are OData documents whose pages are fetched and joined.
        """
        try:
            if self.filename.lower().endswith(".json"):
                text = self.client.get_odata_document(self.filename)
            else:
                text = self.client.get_text(self.filename)
        except requests.RequestException as exc:
            raise InputSourceError(f"Failed to fetch {self.source}") from exc
        handle = io.StringIO(text.removeprefix("\ufeff"), newline="")
        try:
            yield handle
        finally:
            handle.close()


__all__ = ["InputSource", "InputFile", "InputUrl"]
