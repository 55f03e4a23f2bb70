"""Exception hierarchy shared by the data model, parsers, and loaders."""


class WelshStatsError(Exception):
    """Base class for every error raised by welsh_stats."""


class NotFoundError(WelshStatsError, LookupError):
    """A year, name, measure, area, or column mapping entry does not exist."""


class MalformedSourceError(WelshStatsError, ValueError):
    """A source file does not have the shape its parser expects."""


class InputSourceError(WelshStatsError, OSError):
    """A source could not be opened, fetched, or read."""


__all__ = ["WelshStatsError", "NotFoundError", "MalformedSourceError", "InputSourceError"]
