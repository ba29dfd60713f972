import pytest

from conftest import modis_record
from ndvi_watch.ndvi import (
    SOURCE_CSV,
    SOURCE_MODIS,
    CanonicalPoint,
    first_present,
    month_key_from_date,
    normalize,
    ordinal_to_iso,
)


@pytest.mark.parametrize("value", [0, 1, 2500, 5000, 9999, 10000])
def test_modis_values_scale_into_unit_range(value):
    point = normalize(modis_record(52.0, 19.0, value, "2024-07-11"), SOURCE_MODIS)
    assert point is not None
    assert 0.0 <= point.ndvi <= 1.0
    assert point.ndvi == pytest.approx(value / 10000)


def test_modis_record_becomes_canonical_point():
    point = normalize(modis_record("52.1", "19.2", 6123, "2024-08-27"), SOURCE_MODIS)
    assert point == CanonicalPoint(lat=52.1, lng=19.2, ndvi=pytest.approx(0.6123), month_key="08")


def test_modis_rejects_wrong_band_and_missing_modis_date():
    assert normalize(modis_record(52.0, 19.0, 6000, "2024-07-11", band="250m_16_days_EVI"), SOURCE_MODIS) is None
    assert normalize(modis_record(52.0, 19.0, 6000, "2024-07-11", modis_date=""), SOURCE_MODIS) is None


def test_csv_values_are_not_rescaled():
    # scaling follows the declared source, not the magnitude
    point = normalize({"date": "2024-07-15", "latitude": "50", "longitude": "21", "NDVI": "4000"}, SOURCE_CSV)
    assert point.ndvi == 4000.0
    point = normalize({"date": "2024-07-15", "latitude": "50", "longitude": "21", "NDVI": "0.42"}, SOURCE_CSV)
    assert point.ndvi == pytest.approx(0.42)


@pytest.mark.parametrize("row", [
    {"latitude": "50", "longitude": "21", "NDVI": "0.5"},
    {"date": "2024-07-15", "longitude": "21", "NDVI": "0.5"},
    {"date": "2024-07-15", "latitude": "50", "NDVI": "0.5"},
    {"date": "2024-07-15", "latitude": "50", "longitude": "21"},
    {"date": "2024-07-15", "latitude": "", "longitude": "21", "NDVI": "0.5"},
    {"date": "2024-07-15", "latitude": "north", "longitude": "21", "NDVI": "0.5"},
    {"date": "2024-07-15", "latitude": "50", "longitude": "inf", "NDVI": "0.5"},
    {"date": "2024-07-15", "latitude": "50", "longitude": "21", "NDVI": "nan"},
    {"date": "15/07/2024", "latitude": "50", "longitude": "21", "NDVI": "0.5"},
])
def test_csv_rows_with_missing_or_bad_fields_are_rejected(row):
    assert normalize(row, SOURCE_CSV) is None


def test_column_name_variants_are_accepted():
    row = {"acquisition_date": "2024-09-01", "Latitude": "50.5", "lon": "20.5", "ndvi": "0.3"}
    assert normalize(row, SOURCE_CSV) == CanonicalPoint(50.5, 20.5, 0.3, "09")


def test_accessor_priority_prefers_earlier_names():
    row = {"latitude": "50.0", "lat": "10.0", "date": "2024-07-01", "calendar_date": "2024-09-01",
           "longitude": "21.0", "NDVI": "0.5", "value": "9000"}
    point = normalize(row, SOURCE_CSV)
    assert (point.lat, point.ndvi, point.month_key) == (50.0, 0.5, "07")


def test_first_present_skips_blank_values():
    assert first_present({"a": " ", "b": None, "c": 0}, ("a", "b", "c")) == 0
    assert first_present({}, ("a",)) is None


def test_non_mapping_is_rejected_without_raising():
    assert normalize(["2024-07-15", 50, 21, 0.5], SOURCE_CSV) is None


def test_unknown_source_kind_is_a_programming_error():
    with pytest.raises(ValueError):
        normalize({}, "sentinel")


def test_month_key_from_date():
    assert month_key_from_date("2024-07-15") == "07"
    assert month_key_from_date("2024-12-01T00:00:00") == "12"
    assert month_key_from_date("2024-13-01") is None
    assert month_key_from_date("2024-7-01") is None
    assert month_key_from_date(20240715) is None


@pytest.mark.parametrize("raw, expected", [
    ("A2024193", "2024-07-11"),
    ("A2024273", "2024-09-29"),
    ("2023001", "2023-01-01"),
    ("2024366", "2024-12-31"),
    ("2023366", None),
    ("A2024000", None),
    ("A20241", None),
    (None, None),
])
def test_ordinal_to_iso(raw, expected):
    assert ordinal_to_iso(raw) == expected
