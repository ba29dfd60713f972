# ndvi_watch/ndvi.py
import math
import logging
import datetime
from typing import NamedTuple, Optional

from ndvi_watch.config import NDVI_BAND, MODIS_NDVI_SCALE

logger = logging.getLogger("ndvi")

SOURCE_MODIS = "modis"
SOURCE_CSV = "csv"

# Accessor rules: candidate field names per value, highest priority first
FIELD_RULES = {
    "lat": ("latitude", "lat", "Latitude"),
    "lng": ("longitude", "lon", "Longitude"),
    "ndvi": ("NDVI", "value", "ndvi"),
    "date": ("date", "acquisition_date", "calendar_date"),
}


class CanonicalPoint(NamedTuple):
    lat: float
    lng: float
    ndvi: float
    month_key: str


def first_present(raw: dict, candidates) -> Optional[object]:
    """Return the first candidate field that is present and not blank."""
    for name in candidates:
        value = raw.get(name)
        if value is None:
            continue
        if isinstance(value, str) and value.strip() == "":
            continue
        return value
    return None


def _to_float(value) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        out = float(value)
    except (TypeError, ValueError):
        return None
    return out if math.isfinite(out) else None


def month_key_from_date(value) -> Optional[str]:
    """Extract the zero-padded month from a YYYY-MM-DD string."""
    if not isinstance(value, str):
        return None
    parts = value.strip()[:10].split("-")
    if len(parts) != 3 or len(parts[0]) != 4 or len(parts[1]) != 2 or not parts[1].isdigit():
        return None
    if not 1 <= int(parts[1]) <= 12:
        return None
    return parts[1]


def ordinal_to_iso(value) -> Optional[str]:
    """
    Convert a MODIS ordinal date ('A2024193' or '2024193') to 'YYYY-MM-DD'.
    Returns None when the value is not a valid ordinal date.
    """
    if not isinstance(value, str):
        return None
    s = value.strip()
    if s[:1] in ("A", "a"):
        s = s[1:]
    if len(s) != 7 or not s.isdigit():
        return None
    year, doy = int(s[:4]), int(s[4:])
    try:
        day = datetime.date(year, 1, 1) + datetime.timedelta(days=doy - 1)
    except OverflowError:
        return None
    if doy < 1 or day.year != year:
        return None
    return day.isoformat()


def _reject(raw, source_kind, why):
    logger.warning("Skipping %s record (%s): %s", source_kind, why, raw)
    return None


def normalize(raw: dict, source_kind: str) -> Optional[CanonicalPoint]:
    """
    Convert one raw source record into a CanonicalPoint.

    Parameters
    ----------
    raw : dict
        A MODIS subset entry or a CSV row; field names vary (see FIELD_RULES).
    source_kind : str
        SOURCE_MODIS (integer-encoded NDVI, scaled by 1/10000) or
        SOURCE_CSV (NDVI already in 0-1).

    Returns
    -------
    CanonicalPoint, or None when the record is rejected. Never raises for bad data.
    """
    if source_kind not in (SOURCE_MODIS, SOURCE_CSV):
        raise ValueError(f"Unknown source kind: {source_kind!r}")
    if not isinstance(raw, dict):
        return _reject(raw, source_kind, "not a mapping")

    if source_kind == SOURCE_MODIS:
        if raw.get("band") != NDVI_BAND:
            return _reject(raw, source_kind, "wrong band")
        modis_date = raw.get("modis_date")
        if not isinstance(modis_date, str) or not modis_date:
            return _reject(raw, source_kind, "missing modis_date")

    values = {name: first_present(raw, rules) for name, rules in FIELD_RULES.items()}
    missing = [name for name, value in values.items() if value is None]
    if missing:
        return _reject(raw, source_kind, "missing " + ", ".join(missing))

    lat = _to_float(values["lat"])
    lng = _to_float(values["lng"])
    ndvi = _to_float(values["ndvi"])
    if lat is None or lng is None or ndvi is None:
        return _reject(raw, source_kind, "non-numeric coordinate or NDVI")

    if source_kind == SOURCE_MODIS:
        ndvi = ndvi / MODIS_NDVI_SCALE

    month_key = month_key_from_date(values["date"])
    if month_key is None:
        return _reject(raw, source_kind, "unparseable date")

    return CanonicalPoint(lat=lat, lng=lng, ndvi=ndvi, month_key=month_key)
