"""Inclusion predicates applied while a source is being parsed."""

from collections.abc import Collection

StringFilterSet = Collection[str]
YearFilterTuple = tuple[int, int]


def area_matches(areas_filter: StringFilterSet | None, *values: str) -> bool:
    """Return True when any filter entry is a substring of any of ``values``.

    Matching ignores case. An empty or missing filter accepts everything.
    """
    if not areas_filter:
        return True
    haystacks = [value.lower() for value in values]
    for needle in areas_filter:
        needle = needle.lower()
        if any(needle in haystack for haystack in haystacks):
            return True
    return False


def measure_matches(measures_filter: StringFilterSet | None, codename: str) -> bool:
    """Return True when ``codename`` is named by the filter, ignoring case."""
    if not measures_filter:
        return True
    return codename.lower() in {entry.lower() for entry in measures_filter}


def year_in_range(years_filter: YearFilterTuple | None, year: int) -> bool:
    """Return True when ``year`` lies inside the inclusive ``(start, end)`` range.

    A zero in either bound switches the filter off.
    """
    if years_filter is None:
        return True
    start, end = years_filter
    if start == 0 or end == 0:
        return True
    return start <= year <= end


__all__ = [
    "StringFilterSet",
    "YearFilterTuple",
    "area_matches",
    "measure_matches",
    "year_in_range",
]
