"""
Domain Services - Metrics, health, trend, anomaly, forecast and CPM analytics.
"""

from .metrics_calculator import (
    calculate_evm_metrics, calculate_sample_metrics, create_snapshot, compare_snapshots,
)
from .health_classifier import classify_health, classify_status, calculate_health_score
from .trend_analyzer import (
    linear_regression, moving_average, classify_trend, combine_trends,
    analyze_trend, analyze_performance_trend, compare_to_baseline,
)
from .anomaly_detector import detect_anomalies, detect_snapshot_anomalies
from .forecaster import (
    forecast, forecast_budget, forecast_completion_date, generate_scenarios,
    required_performance, forecast_eac_cpi, forecast_eac_cpi_spi,
    confidence_from_volatility,
)
from .critical_path_scheduler import schedule
from .schedule_baseline import (
    allocate_budget, planned_value, earned_value, sample_from_schedule,
)
from .analytics_service import AnalyticsService

__all__ = [
    'calculate_evm_metrics',
    'calculate_sample_metrics',
    'create_snapshot',
    'compare_snapshots',
    'classify_health',
    'classify_status',
    'calculate_health_score',
    'linear_regression',
    'moving_average',
    'classify_trend',
    'combine_trends',
    'analyze_trend',
    'analyze_performance_trend',
    'compare_to_baseline',
    'detect_anomalies',
    'detect_snapshot_anomalies',
    'forecast',
    'forecast_budget',
    'forecast_completion_date',
    'generate_scenarios',
    'required_performance',
    'forecast_eac_cpi',
    'forecast_eac_cpi_spi',
    'confidence_from_volatility',
    'schedule',
    'allocate_budget',
    'planned_value',
    'earned_value',
    'sample_from_schedule',
    'AnalyticsService',
]
