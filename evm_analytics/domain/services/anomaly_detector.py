"""
Anomaly Detector - Z-score outlier detection over metric series.

A point is anomalous when |z| exceeds the threshold, where
z = (value - mean) / population_std. Series shorter than 3 points or
with zero spread yield no anomalies; insufficient data is a valid,
silent outcome here.
"""
import logging
from datetime import date
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

from ..entities import AnomalyResult, Deviation, Snapshot
from ..entities.snapshot import validate_metric_name
from ..exceptions import InvalidInputError

logger = logging.getLogger(__name__)

MIN_ANOMALY_POINTS = 3

SeriesPoint = Union[Tuple[str, float], Tuple[str, float, Optional[date]]]


def detect_anomalies(
    series: Iterable[SeriesPoint],
    threshold: float = 2.0,
) -> List[AnomalyResult]:
    """
    Flag points whose z-score magnitude exceeds the threshold.

    Args:
        series: Ordered (sample_id, value) or (sample_id, value, date) tuples
        threshold: Z-score magnitude above which a point is anomalous

    Returns:
        AnomalyResult list in input order (possibly empty)
    """
    if threshold <= 0:
        raise InvalidInputError("threshold", f"must be positive, got {threshold}")

    points = list(series)
    if len(points) < MIN_ANOMALY_POINTS:
        logger.warning(
            f"Anomaly detection needs at least {MIN_ANOMALY_POINTS} points, "
            f"got {len(points)}; skipping"
        )
        return []

    values = np.array([float(p[1]) for p in points])
    mean = float(values.mean())
    std = float(values.std())

    if std == 0:
        logger.debug("Series has zero variance; no anomalies possible")
        return []

    anomalies = []
    for point, value in zip(points, values):
        z_score = (float(value) - mean) / std
        if abs(z_score) <= threshold:
            continue
        anomalies.append(AnomalyResult(
            sample_id=str(point[0]),
            value=float(value),
            z_score=z_score,
            deviation=Deviation.HIGH if z_score > 0 else Deviation.LOW,
            sample_date=point[2] if len(point) > 2 else None,
        ))

    logger.debug(
        f"Detected {len(anomalies)} anomalies in {len(points)} points "
        f"(mean={mean:.4f}, std={std:.4f}, threshold={threshold})"
    )
    return anomalies


def detect_snapshot_anomalies(
    snapshots: Sequence[Snapshot],
    metric: str = "cpi",
    threshold: float = 2.0,
) -> List[AnomalyResult]:
    """Run anomaly detection on one metric across a snapshot history."""
    validate_metric_name(metric)
    series = [(s.snapshot_id, s.value_of(metric), s.date) for s in snapshots]
    return detect_anomalies(series, threshold)
