"""
Snapshot Entity - Immutable point-in-time EVM record.

A snapshot is created once per reporting period from a MetricSample and
is never mutated afterwards. Histories of snapshots, ordered by date,
feed trend analysis, anomaly detection and forecasting.
"""
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import List, Optional, Tuple

from ..exceptions import InvalidInputError
from .evm_metrics import EVMMetrics, METRIC_FIELDS, SAMPLE_FIELDS
from .metric_sample import MetricSample


class TrendDirection(str, Enum):
    """Direction of a performance trend."""
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


class HealthLevel(str, Enum):
    """3-tier health classification."""
    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True)
class HealthStatus:
    """Health score (0-100), tier, and human-readable indicators."""
    status: HealthLevel
    score: int
    indicators: Tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "score": self.score,
            "indicators": list(self.indicators),
        }


@dataclass(frozen=True)
class Snapshot:
    """
    Immutable EVM snapshot.

    Attributes:
        snapshot_id: Unique identifier (e.g. SNAP-20240131)
        sample: Base values the metrics were derived from
        metrics: Derived EVM metric set
        trend: Trend label assigned at creation
        health: Health classification at creation
        reporting_period: Period label, e.g. "2024-Q1"
    """

    snapshot_id: str
    sample: MetricSample
    metrics: EVMMetrics
    trend: TrendDirection = TrendDirection.STABLE
    health: Optional[HealthStatus] = None
    reporting_period: str = ""
    notes: str = ""

    @property
    def date(self) -> date:
        return self.sample.date

    @property
    def program_id(self) -> Optional[str]:
        return self.sample.program_id

    @property
    def health_indicators(self) -> List[str]:
        return list(self.health.indicators) if self.health else []

    @property
    def health_score(self) -> Optional[int]:
        return self.health.score if self.health else None

    def value_of(self, metric: str) -> float:
        """Return a named metric (EVM field or base sample value)."""
        if metric in METRIC_FIELDS:
            return getattr(self.metrics, metric)
        if metric in SAMPLE_FIELDS:
            return getattr(self.sample, metric)
        raise InvalidInputError(
            "metric",
            f"unknown metric '{metric}'; expected one of "
            f"{', '.join(METRIC_FIELDS + SAMPLE_FIELDS)}",
        )

    def to_dict(self) -> dict:
        return {
            "snapshot_id": self.snapshot_id,
            "reporting_period": self.reporting_period,
            **self.sample.to_dict(),
            **self.metrics.to_dict(),
            "trend": self.trend.value,
            "health": self.health.to_dict() if self.health else None,
            "notes": self.notes,
        }


def validate_metric_name(metric: str) -> str:
    """Raise InvalidInputError unless metric names a selectable field."""
    if metric not in METRIC_FIELDS and metric not in SAMPLE_FIELDS:
        raise InvalidInputError(
            "metric",
            f"unknown metric '{metric}'; expected one of "
            f"{', '.join(METRIC_FIELDS + SAMPLE_FIELDS)}",
        )
    return metric
