"""
Repositories - Snapshot history and activity network providers.
"""

from .in_memory_repository import InMemorySnapshotRepository, InMemoryActivityRepository
from .csv_repository import CsvSnapshotRepository, CsvActivityRepository, build_history

__all__ = [
    'InMemorySnapshotRepository',
    'InMemoryActivityRepository',
    'CsvSnapshotRepository',
    'CsvActivityRepository',
    'build_history',
]
