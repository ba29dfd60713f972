# ndvi_watch/month_index.py
import logging
import threading
from typing import Dict, List, Optional, Tuple

import pandas as pd

from ndvi_watch.ndvi import CanonicalPoint

logger = logging.getLogger("month_index")

POINT_COLUMNS = ["lat", "lng", "ndvi", "month_key"]


class MonthIndex:
    """
    Read-only mapping month_key -> points, in source iteration order.
    Build it with MonthIndexBuilder; a finished index is never mutated.
    """

    def __init__(self, months: Optional[Dict[str, Tuple[CanonicalPoint, ...]]] = None,
                 source: Optional[str] = None, rejected: int = 0, warnings=()):
        self._months = dict(months or {})
        self.source = source
        self.rejected = rejected
        self.warnings = tuple(warnings)

    @classmethod
    def empty(cls, warning: Optional[str] = None) -> "MonthIndex":
        return cls(warnings=[warning] if warning else [])

    def get(self, month_key: str) -> Tuple[CanonicalPoint, ...]:
        return self._months.get(month_key, ())

    def months(self) -> List[str]:
        return sorted(self._months)

    def total_points(self) -> int:
        return sum(len(points) for points in self._months.values())

    def to_frame(self, month_key: str) -> pd.DataFrame:
        """Points for one month as a DataFrame (lat, lng, ndvi, month_key)."""
        return pd.DataFrame(list(self.get(month_key)), columns=POINT_COLUMNS)

    def __contains__(self, month_key) -> bool:
        return month_key in self._months

    def __len__(self) -> int:
        return len(self._months)

    def __iter__(self):
        return iter(self.months())

    def __repr__(self):
        return (f"MonthIndex(months={self.months()}, points={self.total_points()}, "
                f"source={self.source!r}, rejected={self.rejected})")


class MonthIndexBuilder:
    def __init__(self):
        self._months: Dict[str, List[CanonicalPoint]] = {}
        self.rejected = 0
        self.warnings: List[str] = []
        self.accepted = 0

    def add(self, point: CanonicalPoint):
        self._months.setdefault(point.month_key, []).append(point)
        self.accepted += 1

    def warn(self, message: str):
        logger.warning(message)
        self.warnings.append(message)

    def build(self, source: Optional[str] = None) -> MonthIndex:
        months = {key: tuple(points) for key, points in self._months.items()}
        return MonthIndex(months, source=source, rejected=self.rejected, warnings=self.warnings)


class IndexHolder:
    """
    Owns the published MonthIndex. Each ingestion run takes a run id from
    begin_run(); publish() only swaps in results from the latest run.
    """

    def __init__(self, index: Optional[MonthIndex] = None):
        self._lock = threading.Lock()
        self._index = index if index is not None else MonthIndex.empty()
        self._latest_run = 0

    @property
    def index(self) -> MonthIndex:
        with self._lock:
            return self._index

    @property
    def latest_run(self) -> int:
        with self._lock:
            return self._latest_run

    def begin_run(self) -> int:
        with self._lock:
            self._latest_run += 1
            return self._latest_run

    def publish(self, run_id: int, index: MonthIndex) -> bool:
        with self._lock:
            if run_id != self._latest_run:
                logger.info("Dropping stale ingestion run %d (latest is %d)", run_id, self._latest_run)
                return False
            self._index = index
        logger.info("Published run %d: %r", run_id, index)
        return True
