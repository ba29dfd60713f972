# ndvi_watch/regression.py
import math
import logging
from concurrent.futures import Executor, Future
from typing import List, NamedTuple, Optional, Tuple

import numpy as np
from sklearn.linear_model import LinearRegression
from sklearn.pipeline import make_pipeline
from sklearn.preprocessing import StandardScaler

from ndvi_watch.config import DEFAULT_TOLERANCE_DEG, month_label
from ndvi_watch.month_index import MonthIndex

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("regression")

MIN_SAMPLES = 2
INSUFFICIENT_HISTORY = "insufficient history"
PREDICTION_ERROR = "prediction error"


class TrainingSample(NamedTuple):
    month: int
    ndvi: float


class PredictionResult(NamedTuple):
    ndvi: Optional[float]
    reason: Optional[str]
    samples: Tuple[TrainingSample, ...]
    target_month: Optional[int]

    @property
    def available(self) -> bool:
        return self.ndvi is not None


def collect_samples(index: MonthIndex, lat: float, lng: float,
                    tolerance: float = DEFAULT_TOLERANCE_DEG) -> List[TrainingSample]:
    """
    For every month in the index take the first point within `tolerance`
    degrees of (lat, lng) on both axes. Per-axis boxes, not geodesic distance.
    """
    samples = []
    for month_key in index.months():
        for p in index.get(month_key):
            if abs(p.lat - lat) < tolerance and abs(p.lng - lng) < tolerance:
                samples.append(TrainingSample(int(month_key), p.ndvi))
                break
    return sorted(samples)


def fit_trend(samples):
    """Fit month -> NDVI on standardized month numbers. Returns a fresh fitted model."""
    X = np.array([[s.month] for s in samples], dtype=float)
    y = np.array([s.ndvi for s in samples], dtype=float)
    return make_pipeline(StandardScaler(), LinearRegression()).fit(X, y)


def predict(index: MonthIndex, lat: float, lng: float,
            tolerance: float = DEFAULT_TOLERANCE_DEG,
            target_month: Optional[int] = None) -> PredictionResult:
    """
    Forecast NDVI at (lat, lng) for `target_month` (default: one month past the
    last observed month). Failures come back as a PredictionResult with a reason.
    """
    samples = tuple(collect_samples(index, lat, lng, tolerance))
    logger.info("Training data for (%.4f, %.4f): %s", lat, lng, list(samples))
    if target_month is None and samples:
        target_month = samples[-1].month + 1
    if len(samples) < MIN_SAMPLES:
        return PredictionResult(None, INSUFFICIENT_HISTORY, samples, target_month)

    try:
        model = fit_trend(samples)
        value = float(model.predict(np.array([[target_month]], dtype=float))[0])
    except Exception as e:
        logger.exception("Prediction failed for (%.4f, %.4f): %s", lat, lng, e)
        return PredictionResult(None, PREDICTION_ERROR, samples, target_month)

    if not math.isfinite(value):
        logger.warning("Non-finite forecast for (%.4f, %.4f)", lat, lng)
        return PredictionResult(None, PREDICTION_ERROR, samples, target_month)

    logger.info("Forecast for month %d at (%.4f, %.4f): %.3f", target_month, lat, lng, value)
    return PredictionResult(value, None, samples, target_month)


def submit_prediction(executor: Executor, index: MonthIndex, lat: float, lng: float,
                      tolerance: float = DEFAULT_TOLERANCE_DEG,
                      target_month: Optional[int] = None) -> "Future[PredictionResult]":
    # Each task fits its own model; nothing is shared between queries.
    return executor.submit(predict, index, lat, lng, tolerance, target_month)


def target_label(month: int) -> str:
    # month 13 wraps to January
    return month_label(f"{(month - 1) % 12 + 1:02d}").split(" ")[0]


def describe(result: PredictionResult) -> str:
    """Message shown at the query location."""
    if result.available:
        return f"Predicted NDVI for {target_label(result.target_month)}: {result.ndvi:.2f}"
    if result.reason == INSUFFICIENT_HISTORY:
        return f"Need at least {MIN_SAMPLES} months of data to predict"
    return "No data to predict"
