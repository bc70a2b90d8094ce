"""
Analysis Result Entities - Regression, trend, anomaly and comparison outputs.
"""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional, Tuple

from .snapshot import TrendDirection


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class DataPoint:
    x: float
    y: float


@dataclass(frozen=True)
class RegressionResult:
    """Least-squares fit y = slope * x + intercept."""
    slope: float = 0.0
    intercept: float = 0.0
    r2: float = 0.0

    def predict(self, x: float) -> float:
        return self.slope * x + self.intercept


@dataclass(frozen=True)
class TrendAnalysis:
    """Trend statistics for one metric over a snapshot history."""
    metric: str
    trend: TrendDirection
    slope: float
    intercept: float
    r2: float
    current_value: float
    average_value: float
    volatility: float  # coefficient of variation (std / |mean|)
    sample_count: int = 0
    moving_average: Tuple[float, ...] = ()

    def to_dict(self) -> dict:
        return {
            "metric": self.metric,
            "trend": self.trend.value,
            "slope": self.slope,
            "intercept": self.intercept,
            "r2": self.r2,
            "current_value": self.current_value,
            "average_value": self.average_value,
            "volatility": self.volatility,
            "sample_count": self.sample_count,
            "moving_average": list(self.moving_average),
        }


@dataclass(frozen=True)
class PerformanceTrendAnalysis:
    """Combined CPI/SPI trend roll-up with risk and recommendations."""
    overall_trend: TrendDirection
    cpi_analysis: TrendAnalysis
    spi_analysis: TrendAnalysis
    health_slope: float
    health_forecast: int
    risk_level: RiskLevel
    recommendations: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "overall_trend": self.overall_trend.value,
            "cpi_analysis": self.cpi_analysis.to_dict(),
            "spi_analysis": self.spi_analysis.to_dict(),
            "health_trend": {
                "slope": self.health_slope,
                "forecast": self.health_forecast,
            },
            "risk_level": self.risk_level.value,
            "recommendations": list(self.recommendations),
        }


class Deviation(str, Enum):
    HIGH = "high"
    LOW = "low"


@dataclass(frozen=True)
class AnomalyResult:
    """A sample whose metric value deviates beyond the z-score threshold."""
    sample_id: str
    value: float
    z_score: float
    deviation: Deviation
    sample_date: Optional[date] = None

    def to_dict(self) -> dict:
        return {
            "sample_id": self.sample_id,
            "date": self.sample_date.isoformat() if self.sample_date else None,
            "value": self.value,
            "z_score": self.z_score,
            "deviation": self.deviation.value,
        }


@dataclass(frozen=True)
class SnapshotComparison:
    """Period-over-period movement between two snapshots."""
    cpi_trend: TrendDirection
    spi_trend: TrendDirection
    cost_delta: float
    schedule_delta: float
    health_delta: int

    def to_dict(self) -> dict:
        return {
            "cpi_trend": self.cpi_trend.value,
            "spi_trend": self.spi_trend.value,
            "cost_delta": self.cost_delta,
            "schedule_delta": self.schedule_delta,
            "health_delta": self.health_delta,
        }


@dataclass(frozen=True)
class BaselineComparison:
    """Current performance measured against a baseline snapshot."""
    baseline_id: str
    current_id: str
    cost_variance: float
    schedule_variance: float
    cpi_change: float
    spi_change: float
    days_variance: int

    def to_dict(self) -> dict:
        return {
            "baseline_id": self.baseline_id,
            "current_id": self.current_id,
            "cost_variance": self.cost_variance,
            "schedule_variance": self.schedule_variance,
            "cpi_change": self.cpi_change,
            "spi_change": self.spi_change,
            "days_variance": self.days_variance,
        }
