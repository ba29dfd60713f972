# ndvi_watch/data_loader.py
import logging
from typing import List, NamedTuple, Optional, Union

import pandas as pd
import requests

from ndvi_watch.config import (
    MODIS_BASE_URL,
    MODIS_PRODUCT,
    DateRange,
    Region,
    Settings,
)
from ndvi_watch.month_index import MonthIndex, MonthIndexBuilder
from ndvi_watch.ndvi import SOURCE_CSV, SOURCE_MODIS, normalize, ordinal_to_iso

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("data_loader")


class SourceOk(NamedTuple):
    kind: str
    records: List[dict]


class SourceFailed(NamedTuple):
    kind: str
    reason: str
    terminal: bool = False


SourceResult = Union[SourceOk, SourceFailed]


def modis_subset_url(product: str = MODIS_PRODUCT) -> str:
    return f"{MODIS_BASE_URL}/{product}/subset"


def fetch_modis_subset(region: Region, date_range: DateRange, http=None,
                       timeout: float = 15.0) -> SourceResult:
    """
    Request the MOD13Q1 subset around the region center.
    `http` is anything with a requests-style get() (defaults to the requests module).
    """
    http = http or requests
    url = modis_subset_url()
    params = {
        "latitude": region.center_lat,
        "longitude": region.center_lng,
        "startDate": date_range.start_ordinal,
        "endDate": date_range.end_ordinal,
        "kmAboveBelow": region.km_above_below,
        "kmLeftRight": region.km_left_right,
    }
    logger.info("Requesting MODIS subset from %s params=%s", url, params)
    try:
        r = http.get(url, params=params, headers={"Accept": "application/json"}, timeout=timeout)
        r.raise_for_status()
        data = r.json()
    except requests.RequestException as e:
        return SourceFailed(SOURCE_MODIS, f"API request failed: {e}")
    except ValueError as e:
        return SourceFailed(SOURCE_MODIS, f"API returned invalid JSON: {e}")

    subset = data.get("subset") if isinstance(data, dict) else None
    if not isinstance(subset, list) or not subset:
        return SourceFailed(SOURCE_MODIS, "Invalid or empty subset in API response")
    logger.info("MODIS subset returned %d records", len(subset))
    return SourceOk(SOURCE_MODIS, subset)


def read_ndvi_csv(path: str) -> SourceResult:
    """
    Read the fallback CSV as raw string records (header row required).
    Blank cells come back as empty strings and are treated as missing by the normalizer.
    """
    logger.info("Reading fallback CSV from %s", path)
    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False, skipinitialspace=True)
    except (OSError, ValueError) as e:
        return SourceFailed(SOURCE_CSV, f"CSV load failed: {e}", terminal=True)
    df.columns = [str(c).strip() for c in df.columns]
    logger.info("Fallback CSV loaded with %d rows, columns=%s", len(df), list(df.columns))
    return SourceOk(SOURCE_CSV, df.to_dict(orient="records"))


def _prepare_modis_record(raw):
    # Some subset entries only carry the ordinal modis_date
    if isinstance(raw, dict) and not raw.get("calendar_date"):
        iso = ordinal_to_iso(raw.get("modis_date"))
        if iso is not None:
            return {**raw, "calendar_date": iso}
    return raw


def build_month_index(source: SourceOk, region: Region, min_ndvi: float,
                      stride: int = 1, max_points: Optional[int] = None,
                      warnings=()) -> MonthIndex:
    """
    Normalize, filter and group one source's records into a MonthIndex.

    Spatial (inclusive box) and quality (ndvi > min_ndvi) failures are dropped
    silently; normalizer rejections are counted.
    """
    builder = MonthIndexBuilder()
    builder.warnings.extend(warnings)
    dropped = 0
    for i, raw in enumerate(source.records):
        if i % stride != 0:
            continue
        if max_points is not None and builder.accepted >= max_points:
            logger.info("Point cap of %d reached; ignoring remaining records", max_points)
            break
        if source.kind == SOURCE_MODIS:
            raw = _prepare_modis_record(raw)
        point = normalize(raw, source.kind)
        if point is None:
            builder.rejected += 1
            continue
        if not region.contains(point.lat, point.lng) or not point.ndvi > min_ndvi:
            dropped += 1
            continue
        builder.add(point)

    if builder.rejected:
        builder.warn(f"Skipped {builder.rejected} invalid {source.kind} record(s)")
    index = builder.build(source=source.kind)
    logger.info("Built month index from %s: months=%s accepted=%d rejected=%d filtered=%d",
                source.kind, index.months(), builder.accepted, builder.rejected, dropped)
    return index


def ingest(region: Optional[Region] = None, date_range: Optional[DateRange] = None,
           settings: Optional[Settings] = None, http=None) -> MonthIndex:
    """
    Run one ingestion: MODIS first, CSV fallback, then normalize/filter/group.
    Never raises for source failures; both failing yields an empty index with a warning.
    """
    settings = settings or Settings()
    region = region or settings.region
    date_range = date_range or settings.date_range

    primary = fetch_modis_subset(region, date_range, http=http, timeout=settings.http_timeout)
    warnings = []
    if isinstance(primary, SourceOk):
        source = primary
    else:
        logger.warning("MODIS source unavailable (%s); using CSV fallback", primary.reason)
        warnings.append(f"Live MODIS data unavailable: {primary.reason}")
        source = read_ndvi_csv(settings.csv_path)

    if isinstance(source, SourceFailed):
        logger.error("CSV fallback failed: %s", source.reason)
        warnings.append(f"No NDVI data could be loaded: {source.reason}")
        return MonthIndex(warnings=warnings)

    return build_month_index(source, region, settings.min_ndvi, stride=settings.stride,
                             max_points=settings.max_points, warnings=warnings)
