"""
Domain Layer - Core value objects and analytics services for EVM.

This module contains:
- entities/: Immutable value objects (MetricSample, Snapshot, Activity, results)
- services/: Pure analytics (metrics, health, trend, anomaly, forecast, CPM)
- providers: Collaborator interfaces for snapshot and activity sources
"""

from .entities import (
    MetricSample, EVMMetrics, Snapshot, TrendDirection, HealthLevel, HealthStatus,
    Activity, ScheduledActivity, SchedulerResult,
)
from .exceptions import (
    DomainError, InvalidInputError, InsufficientDataError,
    SnapshotNotFoundError, CyclicDependencyError, ConfigurationError,
)

__all__ = [
    'MetricSample', 'EVMMetrics', 'Snapshot', 'TrendDirection',
    'HealthLevel', 'HealthStatus',
    'Activity', 'ScheduledActivity', 'SchedulerResult',
    'DomainError', 'InvalidInputError', 'InsufficientDataError',
    'SnapshotNotFoundError', 'CyclicDependencyError', 'ConfigurationError',
]
