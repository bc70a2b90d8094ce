"""
Reporting - Narrative text over structured analytics results.
"""

from .narrative import (
    describe_metrics, describe_health, describe_trend, describe_performance,
    describe_forecast, describe_required_performance,
    describe_baseline_comparison, describe_schedule,
)

__all__ = [
    'describe_metrics',
    'describe_health',
    'describe_trend',
    'describe_performance',
    'describe_forecast',
    'describe_required_performance',
    'describe_baseline_comparison',
    'describe_schedule',
]
