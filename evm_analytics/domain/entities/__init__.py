"""
Domain Entities - Immutable value objects for EVM analytics.
"""

from .metric_sample import MetricSample
from .evm_metrics import EVMMetrics, METRIC_FIELDS, SAMPLE_FIELDS
from .snapshot import Snapshot, TrendDirection, HealthLevel, HealthStatus
from .activity import Activity, ScheduledActivity, SchedulerResult
from .analysis import (
    DataPoint, RegressionResult, TrendAnalysis, PerformanceTrendAnalysis,
    AnomalyResult, Deviation, RiskLevel, SnapshotComparison, BaselineComparison,
)
from .forecast import (
    ForecastMethod, ConfidenceLevel, BudgetForecast, CompletionForecast,
    ForecastScenario, RequiredPerformance, ForecastResult,
)

__all__ = [
    'MetricSample',
    'EVMMetrics', 'METRIC_FIELDS', 'SAMPLE_FIELDS',
    'Snapshot', 'TrendDirection', 'HealthLevel', 'HealthStatus',
    'Activity', 'ScheduledActivity', 'SchedulerResult',
    'DataPoint', 'RegressionResult', 'TrendAnalysis', 'PerformanceTrendAnalysis',
    'AnomalyResult', 'Deviation', 'RiskLevel', 'SnapshotComparison', 'BaselineComparison',
    'ForecastMethod', 'ConfidenceLevel', 'BudgetForecast', 'CompletionForecast',
    'ForecastScenario', 'RequiredPerformance', 'ForecastResult',
]
