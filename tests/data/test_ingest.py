"""Unit tests for the areas/dataset loader."""

import json
from unittest.mock import MagicMock

import pytest

from welsh_stats.data.client import StatsWalesHttpClient
from welsh_stats.data.files import COMPLETE_AREA, COMPLETE_POP, POPDEN
from welsh_stats.data.ingest import AreasLoader, DatasetFailure
from welsh_stats.data.store import Areas
from welsh_stats.errors import InputSourceError

from tests.conftest import AREAS_CSV, POP_CSV, POPDEN_JSON


def test_load_areas_then_datasets(datasets_dir):
    loader = AreasLoader.from_directory(datasets_dir)
    areas = Areas()
    loader.load_areas(areas)
    failures = loader.load_datasets(areas, [POPDEN, COMPLETE_POP])

    assert failures == []
    assert areas.authority_codes() == ["W06000001", "W06000023"]
    powys = areas.get_area("W06000023")
    assert powys.measure_codenames() == ["dens", "pop"]
    assert powys.get_measure("pop").values == {1999: 10.0, 2000: 20.0}


def test_load_datasets_applies_filters(datasets_dir):
    loader = AreasLoader.from_directory(datasets_dir)
    areas = Areas()
    loader.load_areas(areas, {"powys"})
    loader.load_datasets(
        areas,
        [POPDEN, COMPLETE_POP],
        areas_filter={"powys", "w06000023"},
        measures_filter={"pop"},
        years_filter=(2000, 2000),
    )
    assert areas.authority_codes() == ["W06000023"]
    powys = areas.get_area("W06000023")
    assert powys.measure_codenames() == ["pop"]
    assert powys.get_measure("pop").years() == [2000]


def test_load_datasets_continues_after_a_failure(datasets_dir):
    """A missing file is reported and the remaining datasets still load."""
    loader = AreasLoader.from_directory(datasets_dir)
    areas = Areas()
    loader.load_areas(areas)
    failures = loader.load_datasets(areas, [COMPLETE_AREA, COMPLETE_POP])

    assert len(failures) == 1
    assert isinstance(failures[0], DatasetFailure)
    assert failures[0].code == "complete-area"
    assert "Failed to open file" in failures[0].message
    assert areas.get_area("W06000023").measure_codenames() == ["pop"]


def test_load_datasets_reports_missing_area(datasets_dir):
    loader = AreasLoader.from_directory(datasets_dir)
    areas = Areas()
    failures = loader.load_datasets(areas, [COMPLETE_POP])
    assert [failure.code for failure in failures] == ["complete-pop"]
    assert "No area found matching" in failures[0].message


def test_load_areas_propagates_errors(tmp_path):
    loader = AreasLoader.from_directory(tmp_path)
    with pytest.raises(InputSourceError):
        loader.load_areas(Areas())


def test_from_base_url_uses_http_client():
    files = {
        "areas.csv": AREAS_CSV,
        "complete-popu1009-pop.csv": POP_CSV,
        "popu1009.json": json.dumps(POPDEN_JSON),
    }
    client = MagicMock(spec=StatsWalesHttpClient)
    client.get_text.side_effect = lambda filename, **kwargs: files[filename]
    client.url_for.side_effect = lambda filename: f"https://example.org/{filename}"

    loader = AreasLoader.from_base_url("https://example.org/", client=client)
    areas = Areas()
    loader.load_areas(areas)
    assert loader.load_datasets(areas, [COMPLETE_POP]) == []
    loader.close()

    assert areas.get_area("W06000001").get_measure("pop").values == {
        1999: 68000.0,
        2000: 69000.0,
    }
    client.close.assert_called_once()


def test_load_datasets_skips_json_with_structured_value(datasets_dir):
    """A JSON row whose value is an object fails that dataset only."""
    document = json.loads(json.dumps(POPDEN_JSON))
    document["value"][0]["Data"] = {"n": 1}
    (datasets_dir / POPDEN.file).write_text(json.dumps(document), encoding="utf-8")

    loader = AreasLoader.from_directory(datasets_dir)
    areas = Areas()
    loader.load_areas(areas)
    failures = loader.load_datasets(areas, [POPDEN, COMPLETE_POP])

    assert [failure.code for failure in failures] == ["popden"]
    assert "is not a number" in failures[0].message
    assert areas.get_area("W06000023").measure_codenames() == ["pop"]
