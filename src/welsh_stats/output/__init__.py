"""Plain-text rendering helpers."""

from .table import format_number, format_table

__all__ = ["format_number", "format_table"]
