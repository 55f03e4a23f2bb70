"""Source formats, column keys, and the bundled dataset definitions."""

from enum import Enum

from attrs import define, field

from ..errors import NotFoundError


class SourceDataType(Enum):
    """Layout of a source file, selecting the parser used to import it."""

    AUTHORITY_CODE_CSV = "authority-code-csv"
    AUTHORITY_BY_YEAR_CSV = "authority-by-year-csv"
    WELSH_STATS_JSON = "welsh-stats-json"


class SourceColumn(Enum):
    """Logical fields that a dataset maps onto its own header or JSON key names."""

    AUTH_CODE = "auth_code"
    AUTH_NAME_ENG = "auth_name_eng"
    AUTH_NAME_CYM = "auth_name_cym"
    MEASURE_CODE = "measure_code"
    MEASURE_NAME = "measure_name"
    SINGLE_MEASURE_CODE = "single_measure_code"
    SINGLE_MEASURE_NAME = "single_measure_name"
    YEAR = "year"
    VALUE = "value"


SourceColumnMapping = dict[SourceColumn, str]


@define(frozen=True)
class InputFileSource:
    """A dataset that can be imported: its file name, layout, and columns."""

    name: str
    code: str
    file: str
    source_type: SourceDataType
    cols: SourceColumnMapping = field(converter=dict, hash=False)


AREAS = InputFileSource(
    name="Areas",
    code="areas",
    file="areas.csv",
    source_type=SourceDataType.AUTHORITY_CODE_CSV,
    cols={
        SourceColumn.AUTH_CODE: "Local authority code",
        SourceColumn.AUTH_NAME_ENG: "Name (eng)",
        SourceColumn.AUTH_NAME_CYM: "Name (cym)",
    },
)

POPDEN = InputFileSource(
    name="Population density",
    code="popden",
    file="popu1009.json",
    source_type=SourceDataType.WELSH_STATS_JSON,
    cols={
        SourceColumn.AUTH_CODE: "Localauthority_Code",
        SourceColumn.AUTH_NAME_ENG: "Localauthority_ItemName_ENG",
        SourceColumn.MEASURE_CODE: "Measure_Code",
        SourceColumn.MEASURE_NAME: "Measure_ItemName_ENG",
        SourceColumn.YEAR: "Year_Code",
        SourceColumn.VALUE: "Data",
    },
)

BIZ = InputFileSource(
    name="Active Businesses",
    code="biz",
    file="econ0080.json",
    source_type=SourceDataType.WELSH_STATS_JSON,
    cols={
        SourceColumn.AUTH_CODE: "Area_Code",
        SourceColumn.AUTH_NAME_ENG: "Area_ItemName_ENG",
        SourceColumn.MEASURE_CODE: "Variable_Code",
        SourceColumn.MEASURE_NAME: "Variable_ItemName_ENG",
        SourceColumn.YEAR: "Year_Code",
        SourceColumn.VALUE: "Data",
    },
)

AQI = InputFileSource(
    name="Air Quality Indicators",
    code="aqi",
    file="envi0201.json",
    source_type=SourceDataType.WELSH_STATS_JSON,
    cols={
        SourceColumn.AUTH_CODE: "Area_Code",
        SourceColumn.AUTH_NAME_ENG: "Area_ItemName_ENG",
        SourceColumn.MEASURE_CODE: "Pollutant_ItemName_ENG",
        SourceColumn.MEASURE_NAME: "Pollutant_ItemName_ENG",
        SourceColumn.YEAR: "Year_Code",
        SourceColumn.VALUE: "Data",
    },
)

TRAINS = InputFileSource(
    name="Rail passenger journeys",
    code="trains",
    file="tran0152.json",
    source_type=SourceDataType.WELSH_STATS_JSON,
    cols={
        SourceColumn.AUTH_CODE: "LocalAuthority_Code",
        SourceColumn.AUTH_NAME_ENG: "LocalAuthority_ItemName_ENG",
        SourceColumn.SINGLE_MEASURE_CODE: "rail",
        SourceColumn.SINGLE_MEASURE_NAME: "Rail passenger journeys",
        SourceColumn.YEAR: "Year_Code",
        SourceColumn.VALUE: "Data",
    },
)

COMPLETE_POPDEN = InputFileSource(
    name="Population density",
    code="complete-popden",
    file="complete-popu1009-popden.csv",
    source_type=SourceDataType.AUTHORITY_BY_YEAR_CSV,
    cols={
        SourceColumn.AUTH_CODE: "AuthorityCode",
        SourceColumn.SINGLE_MEASURE_CODE: "dens",
        SourceColumn.SINGLE_MEASURE_NAME: "Population density",
    },
)

COMPLETE_POP = InputFileSource(
    name="Population",
    code="complete-pop",
    file="complete-popu1009-pop.csv",
    source_type=SourceDataType.AUTHORITY_BY_YEAR_CSV,
    cols={
        SourceColumn.AUTH_CODE: "AuthorityCode",
        SourceColumn.SINGLE_MEASURE_CODE: "pop",
        SourceColumn.SINGLE_MEASURE_NAME: "Population",
    },
)

COMPLETE_AREA = InputFileSource(
    name="Land area",
    code="complete-area",
    file="complete-popu1009-area.csv",
    source_type=SourceDataType.AUTHORITY_BY_YEAR_CSV,
    cols={
        SourceColumn.AUTH_CODE: "AuthorityCode",
        SourceColumn.SINGLE_MEASURE_CODE: "area",
        SourceColumn.SINGLE_MEASURE_NAME: "Land area",
    },
)

# Import order: the complete-* CSVs carry no names and attach to existing areas.
DATASETS: tuple[InputFileSource, ...] = (
    POPDEN,
    BIZ,
    AQI,
    TRAINS,
    COMPLETE_POPDEN,
    COMPLETE_POP,
    COMPLETE_AREA,
)


def find_dataset(code: str) -> InputFileSource:
    """Return the dataset registered under ``code`` (case-insensitive)."""
    wanted = code.strip().lower()
    for dataset in DATASETS:
        if dataset.code == wanted:
            return dataset
    raise NotFoundError(f"No dataset matches key: {code}")


__all__ = [
    "SourceDataType",
    "SourceColumn",
    "SourceColumnMapping",
    "InputFileSource",
    "AREAS",
    "POPDEN",
    "BIZ",
    "AQI",
    "TRAINS",
    "COMPLETE_POPDEN",
    "COMPLETE_POP",
    "COMPLETE_AREA",
    "DATASETS",
    "find_dataset",
]
