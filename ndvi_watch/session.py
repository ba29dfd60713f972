# ndvi_watch/session.py
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

from ndvi_watch.config import DateRange, Region, Settings
from ndvi_watch.data_loader import ingest
from ndvi_watch.month_index import IndexHolder, MonthIndex
from ndvi_watch.regression import PredictionResult, submit_prediction

logger = logging.getLogger("session")


class NdviSession:
    """
    Owns the published MonthIndex for one user session and runs ingestion and
    predictions on a worker pool. Readers always see a complete index: each run
    builds privately and is swapped in on completion, unless a newer run started.
    """

    def __init__(self, settings: Optional[Settings] = None, executor=None, http=None):
        self.settings = settings or Settings()
        self._own_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=4, thread_name_prefix="ndvi")
        self._http = http
        self._holder = IndexHolder()

    @property
    def index(self) -> MonthIndex:
        return self._holder.index

    def _run(self, run_id, region, date_range) -> bool:
        index = ingest(region, date_range, settings=self.settings, http=self._http)
        return self._holder.publish(run_id, index)

    def refresh(self, region: Optional[Region] = None,
                date_range: Optional[DateRange] = None) -> "Future[bool]":
        """Start an ingestion run; the future resolves to True if its index was published."""
        run_id = self._holder.begin_run()
        logger.info("Starting ingestion run %d", run_id)
        return self._executor.submit(self._run, run_id, region, date_range)

    def predict(self, lat: float, lng: float, target_month: Optional[int] = None,
                tolerance: Optional[float] = None) -> "Future[PredictionResult]":
        tolerance = self.settings.tolerance_deg if tolerance is None else tolerance
        return submit_prediction(self._executor, self.index, lat, lng, tolerance, target_month)

    def close(self):
        if self._own_executor:
            self._executor.shutdown(wait=True)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
