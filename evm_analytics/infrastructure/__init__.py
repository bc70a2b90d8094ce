"""
Infrastructure Layer - CSV loading and snapshot/activity providers.
"""

from .loaders import DataLoader, samples_from_frame, activities_from_frame
from .repositories import (
    InMemorySnapshotRepository,
    InMemoryActivityRepository,
    CsvSnapshotRepository,
    CsvActivityRepository,
)

__all__ = [
    'DataLoader',
    'samples_from_frame',
    'activities_from_frame',
    'InMemorySnapshotRepository',
    'InMemoryActivityRepository',
    'CsvSnapshotRepository',
    'CsvActivityRepository',
]
