"""
Metrics Calculator - Standard EVM formulas per PMI/PMBOK.

Core values:
- PV (Planned Value): budgeted cost of work scheduled
- EV (Earned Value): budgeted cost of work performed
- AC (Actual Cost): actual cost of work performed
- BAC (Budget at Completion): total planned budget

Derived metrics:
- CV  = EV - AC                    (positive = under budget)
- SV  = EV - PV                    (positive = ahead of schedule)
- CPI = EV / AC                    (0 when AC == 0)
- SPI = EV / PV                    (0 when PV == 0)
- EAC = BAC / CPI                  (BAC when CPI == 0)
- ETC = EAC - AC
- VAC = BAC - EAC                  (positive = under budget)
- TCPI = (BAC - EV) / (BAC - AC)   (0 when BAC == AC)

Zero divisions never raise; the fallbacks above apply uniformly.
"""
import logging
from dataclasses import replace
from datetime import date
from typing import Optional, Sequence

from evm_analytics.config import HealthThresholds
from ..entities import (
    EVMMetrics,
    HealthLevel,
    HealthStatus,
    MetricSample,
    Snapshot,
    SnapshotComparison,
    TrendDirection,
)
from .health_classifier import classify_health
from .trend_analyzer import analyze_trend, combine_trends

logger = logging.getLogger(__name__)


def calculate_evm_metrics(pv: float, ev: float, ac: float, bac: float) -> EVMMetrics:
    """
    Calculate all derived EVM metrics from base values.

    Pure and referentially transparent: identical inputs always
    produce identical output.
    """
    # Variances
    cv = ev - ac
    sv = ev - pv

    # Performance indices
    cpi = ev / ac if ac > 0 else 0.0
    spi = ev / pv if pv > 0 else 0.0

    cv_percent = (cv / ac) * 100 if ac > 0 else 0.0
    sv_percent = (sv / pv) * 100 if pv > 0 else 0.0

    # Forecasting metrics
    eac = bac / cpi if cpi > 0 else bac
    etc = eac - ac
    vac = bac - eac

    remaining_budget = bac - ac
    tcpi = (bac - ev) / remaining_budget if remaining_budget != 0 else 0.0

    percent_complete = (ev / bac) * 100 if bac > 0 else 0.0
    percent_schedule_complete = (pv / bac) * 100 if bac > 0 else 0.0

    return EVMMetrics(
        cv=cv,
        sv=sv,
        cv_percent=cv_percent,
        sv_percent=sv_percent,
        cpi=cpi,
        spi=spi,
        eac=eac,
        etc=etc,
        vac=vac,
        tcpi=tcpi,
        percent_complete=percent_complete,
        percent_schedule_complete=percent_schedule_complete,
    )


def calculate_sample_metrics(sample: MetricSample) -> EVMMetrics:
    """Calculate EVM metrics for a validated sample."""
    return calculate_evm_metrics(sample.pv, sample.ev, sample.ac, sample.bac)


def reporting_period_for(as_of: date) -> str:
    """Quarter label for a reporting date, e.g. '2024-Q1'."""
    quarter = (as_of.month - 1) // 3 + 1
    return f"{as_of.year}-Q{quarter}"


def _trend_from_health(metrics: EVMMetrics, health: HealthStatus) -> TrendDirection:
    """Single-point trend label when no prior history exists."""
    if health.status == HealthLevel.HEALTHY and (metrics.cpi >= 1.05 or metrics.spi >= 1.05):
        return TrendDirection.IMPROVING
    if health.status == HealthLevel.CRITICAL or (metrics.cpi < 0.9 and metrics.spi < 0.9):
        return TrendDirection.DECLINING
    return TrendDirection.STABLE


def create_snapshot(
    sample: MetricSample,
    history: Sequence[Snapshot] = (),
    snapshot_id: Optional[str] = None,
    thresholds: Optional[HealthThresholds] = None,
    slope_threshold: float = 0.01,
    notes: str = "",
) -> Snapshot:
    """
    Build an immutable snapshot for one reporting period.

    With prior history, the trend label is the combined CPI/SPI regression
    trend over history + this sample. Without history it is inferred from
    the health classification.

    Args:
        sample: Base values for the period
        history: Earlier snapshots for the same program (any order)
        snapshot_id: Identifier; defaults to SNAP-YYYYMMDD
        thresholds: Health thresholds
        slope_threshold: Regression slope that separates stable from moving
        notes: Free-text note stored on the snapshot

    Returns:
        Snapshot
    """
    metrics = calculate_sample_metrics(sample)
    health = classify_health(metrics, thresholds)
    snapshot_id = snapshot_id or sample.sample_id or f"SNAP-{sample.date:%Y%m%d}"

    snapshot = Snapshot(
        snapshot_id=snapshot_id,
        sample=sample,
        metrics=metrics,
        trend=_trend_from_health(metrics, health),
        health=health,
        reporting_period=reporting_period_for(sample.date),
        notes=notes,
    )

    prior = [
        s for s in history
        if s.date <= sample.date and s.snapshot_id != snapshot_id
    ]
    if prior:
        series = sorted(prior, key=lambda s: s.date) + [snapshot]
        cpi_trend = analyze_trend(series, "cpi", slope_threshold=slope_threshold).trend
        spi_trend = analyze_trend(series, "spi", slope_threshold=slope_threshold).trend
        snapshot = replace(snapshot, trend=combine_trends(cpi_trend, spi_trend))

    logger.debug(
        f"Created snapshot {snapshot.snapshot_id}: CPI={metrics.cpi:.4f} "
        f"SPI={metrics.spi:.4f} trend={snapshot.trend.value}"
    )
    return snapshot


def _delta_trend(delta: float, threshold: float) -> TrendDirection:
    if delta > threshold:
        return TrendDirection.IMPROVING
    if delta < -threshold:
        return TrendDirection.DECLINING
    return TrendDirection.STABLE


def compare_snapshots(
    baseline: Snapshot,
    current: Snapshot,
    threshold: float = 0.02,
) -> SnapshotComparison:
    """
    Compare two snapshots to identify performance movement.

    An index that moved by more than `threshold` is improving/declining;
    otherwise stable. Health delta is 0 when either score is unknown.
    """
    health_delta = 0
    if baseline.health_score is not None and current.health_score is not None:
        health_delta = current.health_score - baseline.health_score

    return SnapshotComparison(
        cpi_trend=_delta_trend(current.metrics.cpi - baseline.metrics.cpi, threshold),
        spi_trend=_delta_trend(current.metrics.spi - baseline.metrics.spi, threshold),
        cost_delta=current.metrics.cv - baseline.metrics.cv,
        schedule_delta=current.metrics.sv - baseline.metrics.sv,
        health_delta=health_delta,
    )
