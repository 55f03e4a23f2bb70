"""Shared fixtures: small dataset files in the layouts the parsers understand."""

import json
from pathlib import Path

import pytest
import structlog

AREAS_CSV = (
    "Local authority code,Name (eng),Name (cym)\n"
    "W06000001,Isle of Anglesey,Ynys Môn\n"
    "W06000023,Powys,Powys\n"
)

POP_CSV = "AuthorityCode,1999,2000\nW06000001,68000,69000\nW06000023,10,20\n"

POPDEN_JSON = {
    "odata.metadata": "http://open.statswales.gov.wales/en-gb/discover/$metadata",
    "value": [
        {
            "Localauthority_Code": "W06000023",
            "Localauthority_ItemName_ENG": "Powys",
            "Measure_Code": "Dens",
            "Measure_ItemName_ENG": "Population density",
            "Year_Code": "1999",
            "Data": "25.5",
        },
        {
            "Localauthority_Code": "W06000023",
            "Localauthority_ItemName_ENG": "Powys",
            "Measure_Code": "Dens",
            "Measure_ItemName_ENG": "Population density",
            "Year_Code": "2000",
            "Data": 26.0,
        },
        {
            "Localauthority_Code": "W06000001",
            "Localauthority_ItemName_ENG": "Isle of Anglesey",
            "Measure_Code": "Area",
            "Measure_ItemName_ENG": "Land area",
            "Year_Code": "1999",
            "Data": 711.68,
        },
    ],
}


@pytest.fixture
def datasets_dir(tmp_path: Path) -> Path:
    """A directory holding the areas list, one by-year CSV, and one JSON dataset."""
    directory = tmp_path / "datasets"
    directory.mkdir()
    (directory / "areas.csv").write_text(AREAS_CSV, encoding="utf-8")
    (directory / "complete-popu1009-pop.csv").write_text(POP_CSV, encoding="utf-8")
    (directory / "popu1009.json").write_text(json.dumps(POPDEN_JSON), encoding="utf-8")
    return directory


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()
