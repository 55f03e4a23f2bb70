"""Unit tests for the Areas store: merging, import dispatch, and output."""

import io
import json

import pytest

from welsh_stats.data.files import AREAS, COMPLETE_POP, POPDEN, SourceColumn, SourceDataType
from welsh_stats.data.models import Area, Measure
from welsh_stats.data.store import Areas
from welsh_stats.errors import InputSourceError, MalformedSourceError, NotFoundError

from tests.conftest import AREAS_CSV, POP_CSV, POPDEN_JSON


def _area(code="W06000023", **names):
    area = Area(code)
    for lang, name in names.items():
        area.set_name(lang, name)
    return area


def _loaded_store() -> Areas:
    areas = Areas()
    areas.populate(io.StringIO(AREAS_CSV), SourceDataType.AUTHORITY_CODE_CSV, AREAS.cols)
    return areas


def test_set_and_get_area_ignores_case():
    areas = Areas()
    areas.set_area("W06000023", _area(eng="Powys"))
    assert areas.get_area("w06000023").get_name("eng") == "Powys"
    assert "w06000023" in areas
    assert len(areas) == 1


def test_get_missing_area():
    with pytest.raises(NotFoundError, match="No area found matching W99"):
        Areas().get_area("W99")


def test_set_area_merges_into_existing_area():
    areas = Areas()
    first = _area(eng="Powys", cym="Powys")
    pop = Measure("pop", "Population")
    pop.set_value(1999, 1.0)
    pop.set_value(2000, 2.0)
    first.set_measure("pop", pop)
    areas.set_area("W06000023", first)

    second = _area("w06000023", eng="Powys County")
    update = Measure("POP", "Population (mid-year)")
    update.set_value(2000, 3.0)
    second.set_measure("pop", update)
    areas.set_area("w06000023", second)

    assert len(areas) == 1
    assert areas.authority_codes() == ["W06000023"]
    merged = areas.get_area("W06000023")
    assert merged.names == {"eng": "Powys County", "cym": "Powys"}
    assert merged.get_measure("pop").label == "Population (mid-year)"
    assert merged.get_measure("pop").values == {1999: 1.0, 2000: 3.0}


def test_authority_codes_are_sorted():
    areas = Areas()
    for code in ("W3", "W1", "W2"):
        areas.set_area(code, Area(code))
    assert areas.authority_codes() == ["W1", "W2", "W3"]
    assert [area.local_authority_code for area in areas] == ["W1", "W2", "W3"]


def test_to_json_empty():
    assert Areas().to_json() == "{}"


def test_to_json_after_authority_csv_import():
    areas = Areas()
    text = "Local authority code,Name (eng),Name (cym)\nW1,Eng1,Cym1\n"
    areas.populate(io.StringIO(text), SourceDataType.AUTHORITY_CODE_CSV, AREAS.cols)
    assert json.loads(areas.to_json()) == {
        "W1": {"names": {"eng": "Eng1", "cym": "Cym1"}, "measures": {}}
    }


def test_to_json_keeps_welsh_characters():
    assert "Ynys Môn" in _loaded_store().to_json()


def test_json_round_trip():
    areas = _loaded_store()
    areas.populate(io.StringIO(POP_CSV), SourceDataType.AUTHORITY_BY_YEAR_CSV, COMPLETE_POP.cols)
    restored = Areas.from_json(areas.to_json())
    assert restored.authority_codes() == areas.authority_codes()
    for code in areas.authority_codes():
        original, copy = areas.get_area(code), restored.get_area(code)
        assert copy.names == original.names
        assert copy.measure_codenames() == original.measure_codenames()
        for codename in original.measure_codenames():
            assert copy.get_measure(codename).values == original.get_measure(codename).values


def test_from_json_rejects_bad_documents():
    with pytest.raises(MalformedSourceError):
        Areas.from_json("[]")
    with pytest.raises(MalformedSourceError):
        Areas.from_json('{"W1": {"measures": {"pop": {"year": 1}}}}')


def test_end_to_end_areas_then_by_year_csv():
    """The by-year CSV attaches a measure to an area loaded from the areas list."""
    areas = Areas()
    areas.populate(
        io.StringIO("Local authority code,Name (eng),Name (cym)\nW06000023,Powys,Powys\n"),
        SourceDataType.AUTHORITY_CODE_CSV,
        AREAS.cols,
    )
    areas.populate(
        io.StringIO("code,1999,2000\nW06000023,10,20\n"),
        SourceDataType.AUTHORITY_BY_YEAR_CSV,
        {**COMPLETE_POP.cols, SourceColumn.AUTH_CODE: "code"},
    )
    measure = areas.get_area("W06000023").get_measure("pop")
    assert measure.values == {1999: 10.0, 2000: 20.0}
    assert measure.average() == pytest.approx(15.0)
    assert measure.difference() == pytest.approx(10.0)
    assert measure.difference_as_percentage() == pytest.approx(100.0)


def test_by_year_csv_requires_existing_area():
    with pytest.raises(NotFoundError, match="No area found matching W06000001"):
        Areas().populate(
            io.StringIO(POP_CSV), SourceDataType.AUTHORITY_BY_YEAR_CSV, COMPLETE_POP.cols
        )


def test_area_filter_on_authority_csv():
    areas = Areas()
    areas.populate(
        io.StringIO(AREAS_CSV),
        SourceDataType.AUTHORITY_CODE_CSV,
        AREAS.cols,
        areas_filter={"powys"},
    )
    assert areas.authority_codes() == ["W06000023"]

    skipped = Areas()
    skipped.populate(
        io.StringIO(AREAS_CSV),
        SourceDataType.AUTHORITY_CODE_CSV,
        AREAS.cols,
        areas_filter={"nomatch"},
    )
    assert len(skipped) == 0


def test_year_filter_on_by_year_csv():
    areas = _loaded_store()
    areas.populate(
        io.StringIO(POP_CSV),
        SourceDataType.AUTHORITY_BY_YEAR_CSV,
        COMPLETE_POP.cols,
        years_filter=(2000, 2000),
    )
    assert areas.get_area("W06000023").get_measure("pop").years() == [2000]


def test_welsh_stats_json_creates_and_merges_areas():
    areas = _loaded_store()
    areas.populate(
        io.StringIO(json.dumps(POPDEN_JSON)), SourceDataType.WELSH_STATS_JSON, POPDEN.cols
    )
    powys = areas.get_area("W06000023")
    assert powys.names == {"eng": "Powys", "cym": "Powys"}
    assert powys.get_measure("dens").values == {1999: 25.5, 2000: 26.0}
    assert areas.get_area("W06000001").get_measure("area").label == "Land area"


def test_populate_rejects_unknown_source_type():
    with pytest.raises(MalformedSourceError, match="Unexpected data type"):
        Areas().populate(io.StringIO(AREAS_CSV), "xml", AREAS.cols)


def test_populate_rejects_closed_stream():
    stream = io.StringIO(AREAS_CSV)
    stream.close()
    with pytest.raises(InputSourceError):
        Areas().populate(stream, SourceDataType.AUTHORITY_CODE_CSV, AREAS.cols)


def test_render_orders_areas_by_code():
    areas = _loaded_store()
    text = areas.render()
    assert text.startswith("Isle of Anglesey / Ynys Môn (W06000001)\n<no measures>\n\n")
    assert text.endswith("Powys / Powys (W06000023)\n<no measures>\n\n")
    assert str(areas) == text
