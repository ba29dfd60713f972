# ndvi_watch/config.py
import os
import datetime
import calendar
from dataclasses import dataclass, field
from typing import Optional

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))  # project root
DATA_DIR = os.path.join(BASE_DIR, "data")

# --- Primary source (ORNL DAAC MODIS web service) ---
MODIS_BASE_URL = "https://modis.ornl.gov/rst/api/v1"
MODIS_PRODUCT = "MOD13Q1"
NDVI_BAND = "250m_16_days_NDVI"
MODIS_NDVI_SCALE = 10000.0

# --- Defaults ---
DEFAULT_CSV_PATH = os.path.join(DATA_DIR, "modis_ndvi.csv")
DEFAULT_HTTP_TIMEOUT = 15.0
DEFAULT_MIN_NDVI = 0.1  # low threshold for Poland
DEFAULT_TOLERANCE_DEG = 0.1

# Labels shown by the month slider
MONTH_LABELS = {
    "07": "July 2024",
    "08": "August 2024",
    "09": "September 2024",
}


def month_label(month_key: str) -> str:
    """Human label for a month key, falling back to the calendar month name."""
    if month_key in MONTH_LABELS:
        return MONTH_LABELS[month_key]
    try:
        number = int(month_key)
    except (TypeError, ValueError):
        return month_key
    return calendar.month_name[number] if 1 <= number <= 12 else month_key


@dataclass(frozen=True)
class Region:
    """Request window (center + km extent) and the inclusive filter box."""
    center_lat: float = 52.0
    center_lng: float = 19.0
    km_above_below: int = 50
    km_left_right: int = 50
    lat_min: float = 49.0
    lat_max: float = 54.9
    lng_min: float = 14.1
    lng_max: float = 24.2

    def __post_init__(self):
        if self.lat_min > self.lat_max or self.lng_min > self.lng_max:
            raise ValueError("Region bounding box is inverted")
        if self.km_above_below < 0 or self.km_left_right < 0:
            raise ValueError("Region window sizes must be non-negative")

    def contains(self, lat: float, lng: float) -> bool:
        return self.lat_min <= lat <= self.lat_max and self.lng_min <= lng <= self.lng_max


@dataclass(frozen=True)
class DateRange:
    start: datetime.date = datetime.date(2024, 7, 11)
    end: datetime.date = datetime.date(2024, 9, 29)

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError("DateRange start is after end")

    @staticmethod
    def to_ordinal(day: datetime.date) -> str:
        # MODIS web service format: AYYYYDDD
        return f"A{day.year}{day.timetuple().tm_yday:03d}"

    @property
    def start_ordinal(self) -> str:
        return self.to_ordinal(self.start)

    @property
    def end_ordinal(self) -> str:
        return self.to_ordinal(self.end)


def _env_float(name, default):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def _env_int(name, default):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    region: Region = field(default_factory=Region)
    date_range: DateRange = field(default_factory=DateRange)
    csv_path: str = DEFAULT_CSV_PATH
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    min_ndvi: float = DEFAULT_MIN_NDVI
    stride: int = 1
    max_points: Optional[int] = None
    tolerance_deg: float = DEFAULT_TOLERANCE_DEG

    def __post_init__(self):
        if self.http_timeout <= 0:
            raise ValueError("http_timeout must be positive")
        if self.stride < 1:
            raise ValueError("stride must be >= 1")
        if self.max_points is not None and self.max_points < 0:
            raise ValueError("max_points must be >= 0")
        if self.tolerance_deg <= 0:
            raise ValueError("tolerance_deg must be positive")

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from NDVI_* environment variables.
        Unset or blank variables keep their defaults.
        """
        return cls(
            csv_path=os.getenv("NDVI_CSV_PATH") or DEFAULT_CSV_PATH,
            http_timeout=_env_float("NDVI_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT),
            min_ndvi=_env_float("NDVI_MIN_VALUE", DEFAULT_MIN_NDVI),
            stride=_env_int("NDVI_STRIDE", 1),
            max_points=_env_int("NDVI_MAX_POINTS", None),
            tolerance_deg=_env_float("NDVI_TOLERANCE_DEG", DEFAULT_TOLERANCE_DEG),
        )
