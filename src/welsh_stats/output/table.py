"""Right-aligned two-row tables for measure summaries."""

from collections.abc import Sequence


def format_number(value: float) -> str:
    """Format a reading or statistic with six decimal places."""
    return f"{value:f}"


def format_table(headers: Sequence[str], row: Sequence[str]) -> str:
    """Return a header line and a value line, each column right-aligned.

    Every column is as wide as its widest cell and columns are separated by a
    single space.
    """
    if len(headers) != len(row):
        raise ValueError("Headers and row must have the same number of cells.")
    widths = [max(len(header), len(cell)) for header, cell in zip(headers, row)]
    header_line = " ".join(header.rjust(width) for header, width in zip(headers, widths))
    value_line = " ".join(cell.rjust(width) for cell, width in zip(row, widths))
    return f"{header_line}\n{value_line}"


__all__ = ["format_number", "format_table"]
