"""
Trend Analyzer - Statistical analysis of EVM snapshot histories.

Uses:
- Ordinary least-squares regression over (index, value) pairs
- Trailing moving averages for smoothing
- Coefficient of variation (population std / |mean|) as volatility

Trend classification on regression slope:
- improving: slope >  threshold (default 0.01)
- declining: slope < -threshold
- stable:    otherwise
"""
import logging
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

from evm_analytics.config import RiskThresholds
from ..entities import (
    BaselineComparison,
    DataPoint,
    PerformanceTrendAnalysis,
    RegressionResult,
    RiskLevel,
    Snapshot,
    TrendAnalysis,
    TrendDirection,
)
from ..entities.snapshot import validate_metric_name
from ..exceptions import InvalidInputError, SnapshotNotFoundError
from .health_classifier import classify_health

logger = logging.getLogger(__name__)

PointLike = Union[DataPoint, Tuple[float, float]]


# =============================================================================
# Primitives
# =============================================================================

def linear_regression(points: Iterable[PointLike]) -> RegressionResult:
    """
    Fit y = slope * x + intercept by least squares.

    slope = sum((x - x_mean)(y - y_mean)) / sum((x - x_mean)^2)
    r2    = 1 - SS_res / SS_tot, clamped to [0, 1]

    Degenerate cases return zeros: no points -> all zero; one point ->
    intercept = y; constant x -> slope 0; constant y -> r2 0.
    """
    pairs = [(p.x, p.y) if isinstance(p, DataPoint) else (p[0], p[1]) for p in points]
    n = len(pairs)

    if n == 0:
        return RegressionResult()
    if n == 1:
        return RegressionResult(slope=0.0, intercept=float(pairs[0][1]), r2=0.0)

    data = np.asarray(pairs, dtype=float)
    x, y = data[:, 0], data[:, 1]
    dx = x - x.mean()
    dy = y - y.mean()

    denominator = float(np.sum(dx * dx))
    slope = float(np.sum(dx * dy)) / denominator if denominator != 0 else 0.0
    intercept = float(y.mean()) - slope * float(x.mean())

    residuals = y - (slope * x + intercept)
    ss_res = float(np.sum(residuals * residuals))
    ss_tot = float(np.sum(dy * dy))
    r2 = 1.0 - ss_res / ss_tot if ss_tot != 0 else 0.0

    return RegressionResult(slope=slope, intercept=intercept, r2=min(1.0, max(0.0, r2)))


def moving_average(values: Sequence[float], window: int = 3) -> List[float]:
    """
    Trailing simple moving average, one output per input.

    Before the window fills, only the available prefix is averaged, so
    window=1 reproduces the series and a window at least as long as the
    series yields cumulative averages.
    """
    if window < 1:
        raise InvalidInputError("window", f"must be at least 1, got {window}")

    arr = np.asarray(values, dtype=float)
    result = []
    for i in range(len(arr)):
        start = max(0, i - window + 1)
        result.append(float(arr[start:i + 1].mean()))
    return result


def classify_trend(slope: float, threshold: float = 0.01) -> TrendDirection:
    """Label a regression slope as improving, stable or declining."""
    if slope > threshold:
        return TrendDirection.IMPROVING
    if slope < -threshold:
        return TrendDirection.DECLINING
    return TrendDirection.STABLE


def combine_trends(cpi_trend: TrendDirection, spi_trend: TrendDirection) -> TrendDirection:
    """
    Overall direction from the CPI and SPI trends.

    Improving when one index improves and the other is not declining;
    declining when either declines otherwise; stable for everything else.
    """
    not_declining = (TrendDirection.IMPROVING, TrendDirection.STABLE)
    if cpi_trend == TrendDirection.IMPROVING and spi_trend in not_declining:
        return TrendDirection.IMPROVING
    if spi_trend == TrendDirection.IMPROVING and cpi_trend in not_declining:
        return TrendDirection.IMPROVING
    if TrendDirection.DECLINING in (cpi_trend, spi_trend):
        return TrendDirection.DECLINING
    return TrendDirection.STABLE


def volatility_of(values: Sequence[float]) -> float:
    """Population standard deviation divided by |mean|; 0 for a zero mean."""
    if len(values) == 0:
        return 0.0
    arr = np.asarray(values, dtype=float)
    mean = float(arr.mean())
    if mean == 0:
        return 0.0
    return float(arr.std()) / abs(mean)


# =============================================================================
# Series analysis
# =============================================================================

def analyze_series(
    values: Sequence[float],
    metric: str = "value",
    window: int = 3,
    slope_threshold: float = 0.01,
) -> TrendAnalysis:
    """Trend statistics for an ordered series of metric values."""
    if window < 1:
        raise InvalidInputError("window", f"must be at least 1, got {window}")

    if len(values) == 0:
        return TrendAnalysis(
            metric=metric,
            trend=TrendDirection.STABLE,
            slope=0.0,
            intercept=0.0,
            r2=0.0,
            current_value=0.0,
            average_value=0.0,
            volatility=0.0,
            sample_count=0,
        )

    regression = linear_regression((i, v) for i, v in enumerate(values))

    return TrendAnalysis(
        metric=metric,
        trend=classify_trend(regression.slope, slope_threshold),
        slope=regression.slope,
        intercept=regression.intercept,
        r2=regression.r2,
        current_value=float(values[-1]),
        average_value=float(np.mean(values)),
        volatility=volatility_of(values),
        sample_count=len(values),
        moving_average=tuple(moving_average(values, window)),
    )


def analyze_trend(
    snapshots: Sequence[Snapshot],
    metric: str = "cpi",
    window: int = 3,
    slope_threshold: float = 0.01,
) -> TrendAnalysis:
    """
    Analyze one metric across snapshots ordered ascending by date.

    Args:
        snapshots: Snapshot history (ascending by date)
        metric: EVM metric name, e.g. 'cpi', 'spi', 'cv'
        window: Moving average window
        slope_threshold: Slope beyond which the trend is not stable

    Returns:
        TrendAnalysis; all-zero and stable for an empty history
    """
    validate_metric_name(metric)
    values = [s.value_of(metric) for s in snapshots]
    analysis = analyze_series(values, metric, window, slope_threshold)
    logger.debug(
        f"{metric} trend over {len(values)} snapshots: {analysis.trend.value} "
        f"(slope={analysis.slope:.4f}, r2={analysis.r2:.4f})"
    )
    return analysis


# =============================================================================
# Performance roll-up
# =============================================================================

def _health_scores(snapshots: Sequence[Snapshot]) -> List[float]:
    scores = []
    for snapshot in snapshots:
        if snapshot.health_score is not None:
            scores.append(float(snapshot.health_score))
        else:
            scores.append(float(classify_health(snapshot.metrics).score))
    return scores


def _assess_risk(
    cpi: TrendAnalysis,
    spi: TrendAnalysis,
    overall: TrendDirection,
    risk: RiskThresholds,
) -> RiskLevel:
    current_cpi, current_spi = cpi.current_value, spi.current_value

    if (
        current_cpi < risk.high_index
        or current_spi < risk.high_index
        or (
            overall == TrendDirection.DECLINING
            and (current_cpi < risk.declining_index or current_spi < risk.declining_index)
        )
    ):
        return RiskLevel.HIGH

    if (
        current_cpi < risk.medium_index
        or current_spi < risk.medium_index
        or overall == TrendDirection.DECLINING
        or cpi.volatility > risk.medium_volatility
        or spi.volatility > risk.medium_volatility
    ):
        return RiskLevel.MEDIUM

    return RiskLevel.LOW


def _recommendations(
    cpi: TrendAnalysis,
    spi: TrendAnalysis,
    overall: TrendDirection,
    health_forecast: float,
    risk: RiskThresholds,
) -> List[str]:
    recommendations = []

    if cpi.trend == TrendDirection.DECLINING:
        recommendations.append(
            "Cost performance is declining. Review budget allocation and cost controls."
        )
        if cpi.current_value < risk.declining_index:
            recommendations.append(
                f"Critical: CPI below {risk.declining_index} indicates significant cost "
                "overruns. Immediate corrective action required."
            )

    if spi.trend == TrendDirection.DECLINING:
        recommendations.append(
            "Schedule performance is declining. Review project timeline and resource allocation."
        )
        if spi.current_value < risk.declining_index:
            recommendations.append(
                f"Critical: SPI below {risk.declining_index} indicates significant schedule "
                "delays. Re-baseline may be necessary."
            )

    if (
        cpi.volatility > risk.recommendation_volatility
        or spi.volatility > risk.recommendation_volatility
    ):
        recommendations.append(
            "High performance volatility detected. Implement more consistent "
            "tracking and control processes."
        )

    if health_forecast < risk.health_forecast_floor:
        recommendations.append(
            "Health score forecast indicates deteriorating conditions. "
            "Proactive intervention recommended."
        )

    if overall == TrendDirection.IMPROVING:
        recommendations.append(
            "Performance is improving. Continue current management practices "
            "and monitor for sustainability."
        )

    if not recommendations:
        recommendations.append(
            "Performance is stable. Maintain current tracking and control processes."
        )

    return recommendations


def analyze_performance_trend(
    snapshots: Sequence[Snapshot],
    window: int = 3,
    slope_threshold: float = 0.01,
    forecast_periods: int = 3,
    risk: Optional[RiskThresholds] = None,
) -> PerformanceTrendAnalysis:
    """
    Holistic view of program trajectory.

    Combines the CPI and SPI trends, regresses per-snapshot health scores
    to project `forecast_periods` reporting periods ahead, and assesses
    risk from current indices, direction and volatility.
    """
    risk = risk or RiskThresholds()

    cpi_analysis = analyze_trend(snapshots, "cpi", window, slope_threshold)
    spi_analysis = analyze_trend(snapshots, "spi", window, slope_threshold)
    overall = combine_trends(cpi_analysis.trend, spi_analysis.trend)

    scores = _health_scores(snapshots)
    health_regression = linear_regression((i, s) for i, s in enumerate(scores))
    if scores:
        projected = health_regression.predict(len(scores) - 1 + forecast_periods)
    else:
        projected = 0.0
    health_forecast = int(round(max(0.0, min(100.0, projected))))

    risk_level = _assess_risk(cpi_analysis, spi_analysis, overall, risk)
    recommendations = _recommendations(
        cpi_analysis, spi_analysis, overall, health_forecast, risk
    )

    return PerformanceTrendAnalysis(
        overall_trend=overall,
        cpi_analysis=cpi_analysis,
        spi_analysis=spi_analysis,
        health_slope=health_regression.slope,
        health_forecast=health_forecast,
        risk_level=risk_level,
        recommendations=tuple(recommendations),
    )


def compare_to_baseline(
    snapshots: Sequence[Snapshot],
    baseline_id: str,
    planned_duration_days: int,
) -> BaselineComparison:
    """
    Compare the latest snapshot against a baseline snapshot.

    Days variance converts the change in schedule slip (1 - SPI) into
    calendar days over the program's planned duration; positive means
    further behind than at baseline.

    Raises:
        InvalidInputError: planned_duration_days is not positive
        SnapshotNotFoundError: baseline_id is not in the history
    """
    if planned_duration_days <= 0:
        raise InvalidInputError(
            "planned_duration_days", f"must be positive, got {planned_duration_days}"
        )

    ordered = sorted(snapshots, key=lambda s: s.date)
    baseline = next((s for s in ordered if s.snapshot_id == baseline_id), None)
    if baseline is None:
        raise SnapshotNotFoundError(baseline_id)

    current = ordered[-1]
    slip_change = (1 - current.metrics.spi) - (1 - baseline.metrics.spi)

    return BaselineComparison(
        baseline_id=baseline.snapshot_id,
        current_id=current.snapshot_id,
        cost_variance=current.metrics.cv - baseline.metrics.cv,
        schedule_variance=current.metrics.sv - baseline.metrics.sv,
        cpi_change=current.metrics.cpi - baseline.metrics.cpi,
        spi_change=current.metrics.spi - baseline.metrics.spi,
        days_variance=int(round(slip_change * planned_duration_days)),
    )
