"""Domain models for local authority areas and their yearly measures."""

from __future__ import annotations

from typing import Any

import marshmallow as ma
from attrs import define, evolve, field, setters

from ..errors import NotFoundError
from ..math import absolute_change, mean, percentage_change
from ..output import format_number, format_table

# Languages shown first, in this order, when an area has names in them.
PREFERRED_LANGUAGES = ("eng", "cym")


def _lower(value: str) -> str:
    """Normalize identifiers that are matched case-insensitively."""
    return value.lower()


@define(slots=True)
class Measure:
    """A named statistical series with one reading per year.

    ``codename`` is lowercased on construction and cannot be reassigned.
    """

    codename: str = field(converter=_lower, on_setattr=setters.frozen)
    label: str
    values: dict[int, float] = field(factory=dict)

    def set_value(self, year: int, value: float) -> None:
        """Insert or overwrite the reading for ``year``."""
        self.values[int(year)] = float(value)

    def get_value(self, year: int) -> float:
        """Return the reading for ``year``."""
        try:
            return self.values[year]
        except KeyError:
            raise NotFoundError(f"No value found for year {year}") from None

    def set_label(self, label: str) -> None:
        self.label = label

    def years(self) -> list[int]:
        """All years with a reading, oldest first."""
        return sorted(self.values)

    def average(self) -> float:
        """Mean of every reading, or ``0.0`` when there are none."""
        return mean(self.values[year] for year in self.years())

    def difference(self) -> float:
        """Absolute change between the earliest and latest year."""
        if not self.values:
            return 0.0
        years = self.years()
        return absolute_change(self.values[years[0]], self.values[years[-1]])

    def difference_as_percentage(self) -> float:
        """Absolute change relative to the earliest year, in percent.

        Returns ``0.0`` when there are no readings or the earliest reading is 0.
        """
        if not self.values:
            return 0.0
        years = self.years()
        return percentage_change(self.values[years[0]], self.values[years[-1]])

    def merge(self, other: Measure) -> None:
        """Take ``other``'s label and readings, keeping years it does not have."""
        self.set_label(other.label)
        for year, value in other.values.items():
            self.set_value(year, value)

    def copy(self) -> Measure:
        return evolve(self, values=dict(self.values))

    def render(self) -> str:
        """Text block: heading, aligned table of years and statistics, blank line."""
        heading = f"{self.label} ({self.codename})\n"
        if not self.values:
            return f"{heading}<no data>\n\n"
        years = self.years()
        headers = [str(year) for year in years] + ["Average", "Diff.", "% Diff."]
        row = [format_number(self.values[year]) for year in years]
        row += [
            format_number(self.average()),
            format_number(self.difference()),
            format_number(self.difference_as_percentage()),
        ]
        return f"{heading}{format_table(headers, row)}\n\n"

    def __len__(self) -> int:
        return len(self.values)

    def __str__(self) -> str:
        return self.render()


def _is_language_code(lang: str) -> bool:
    return len(lang) == 3 and lang.isascii() and lang.isalpha()


@define(slots=True)
class Area:
    """A local authority with localized names and the measures recorded for it."""

    local_authority_code: str = field(on_setattr=setters.frozen)
    names: dict[str, str] = field(factory=dict)
    measures: dict[str, Measure] = field(factory=dict)

    def set_name(self, lang: str, name: str) -> None:
        """Store ``name`` under a three-letter language code such as ``eng``."""
        if not _is_language_code(lang):
            raise ValueError("Language code must be three alphabetical letters only")
        self.names[lang.lower()] = name

    def get_name(self, lang: str) -> str:
        try:
            return self.names[lang.lower()]
        except KeyError:
            raise NotFoundError(f"No name found for language {lang}") from None

    def language_codes(self) -> list[str]:
        """Language codes with English and Welsh first, then the rest alphabetically."""
        preferred = [lang for lang in PREFERRED_LANGUAGES if lang in self.names]
        others = sorted(lang for lang in self.names if lang not in PREFERRED_LANGUAGES)
        return preferred + others

    def set_measure(self, codename: str, measure: Measure) -> None:
        """Insert ``measure``, or merge it into the measure already under ``codename``."""
        key = codename.lower()
        existing = self.measures.get(key)
        if existing is None:
            self.measures[key] = measure.copy()
        else:
            existing.merge(measure)

    def get_measure(self, codename: str) -> Measure:
        try:
            return self.measures[codename.lower()]
        except KeyError:
            raise NotFoundError(f"No measure found matching {codename}") from None

    def measure_codenames(self) -> list[str]:
        return sorted(self.measures)

    def merge(self, other: Area) -> None:
        """Apply every name and measure of ``other`` on top of this area."""
        for lang in other.language_codes():
            self.set_name(lang, other.names[lang])
        for codename in other.measure_codenames():
            self.set_measure(codename, other.measures[codename])

    def copy(self) -> Area:
        return evolve(
            self,
            names=dict(self.names),
            measures={codename: m.copy() for codename, m in self.measures.items()},
        )

    def display_name(self) -> str:
        names = [self.names[lang] for lang in self.language_codes()]
        title = " / ".join(names) if names else "Unnamed"
        return f"{title} ({self.local_authority_code})"

    def render(self) -> str:
        """Text block: name line followed by each measure in codename order."""
        heading = f"{self.display_name()}\n"
        if not self.measures:
            return f"{heading}<no measures>\n\n"
        return heading + "".join(self.measures[c].render() for c in self.measure_codenames())

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-friendly ``names``/``measures`` payload for this area."""
        return {
            "names": {lang: self.names[lang] for lang in self.language_codes()},
            "measures": {
                codename: {
                    str(year): self.measures[codename].values[year]
                    for year in self.measures[codename].years()
                }
                for codename in self.measure_codenames()
            },
        }

    def __len__(self) -> int:
        return len(self.measures)

    def __str__(self) -> str:
        return self.render()


class AreaSchema(ma.Schema):
    """Marshmallow schema for one area entry of the JSON output."""

    code = ma.fields.Str(required=True, load_only=True)
    names = ma.fields.Dict(keys=ma.fields.Str(), values=ma.fields.Str(), load_default=dict)
    measures = ma.fields.Dict(
        keys=ma.fields.Str(),
        values=ma.fields.Dict(
            keys=ma.fields.Str(validate=ma.validate.Regexp(r"^\d+$")),
            values=ma.fields.Float(),
        ),
        load_default=dict,
    )

    @ma.pre_dump
    def area_payload(self, area: Area, **kwargs: object) -> dict[str, Any]:
        """Flatten an :class:`Area` into the serialized shape."""
        return area.to_dict()

    @ma.post_load
    def make_area(self, data: dict[str, Any], **kwargs: object) -> Area:
        """Instantiate :class:`Area` from a validated payload.

        The document does not carry measure labels, so the codename stands in.
        """
        area = Area(data["code"])
        for lang, name in data["names"].items():
            area.set_name(lang, name)
        for codename, readings in data["measures"].items():
            measure = Measure(codename, codename)
            for year, value in readings.items():
                measure.set_value(int(year), value)
            area.set_measure(codename, measure)
        return area


__all__ = ["Measure", "Area", "AreaSchema", "PREFERRED_LANGUAGES"]
