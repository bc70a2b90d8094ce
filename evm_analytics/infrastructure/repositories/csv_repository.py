"""
CSV Repositories - Providers backed by sample and activity CSV files.

Snapshots are derived from the sample rows on load, oldest first, so
each snapshot's trend label reflects only the history before it.
"""
import logging
from datetime import date
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from evm_analytics.config import HealthThresholds
from evm_analytics.domain.entities import Activity, MetricSample, Snapshot
from evm_analytics.domain.services.metrics_calculator import create_snapshot
from ..loaders import DataLoader

logger = logging.getLogger(__name__)

DEFAULT_PROGRAM = "default"


def build_history(
    samples: Iterable[MetricSample],
    thresholds: Optional[HealthThresholds] = None,
    slope_threshold: float = 0.01,
) -> List[Snapshot]:
    """Create snapshots in date order, each seeing the snapshots before it."""
    history: List[Snapshot] = []
    for sample in sorted(samples, key=lambda s: s.date):
        history.append(create_snapshot(
            sample,
            history=history,
            thresholds=thresholds,
            slope_threshold=slope_threshold,
        ))
    return history


class CsvSnapshotRepository:
    """
    Snapshot provider reading a samples CSV.

    Rows without a program_id belong to every program requested, so a
    single-program file works with any id.
    """

    def __init__(
        self,
        path: Union[str, Path],
        thresholds: Optional[HealthThresholds] = None,
        slope_threshold: float = 0.01,
        loader: Optional[DataLoader] = None,
    ):
        self.path = Path(path)
        self.thresholds = thresholds
        self.slope_threshold = slope_threshold
        self.loader = loader or DataLoader()
        self._cache: Dict[str, List[Snapshot]] = {}

    def _load(self, program_id: str) -> List[Snapshot]:
        if program_id not in self._cache:
            samples = self.loader.load_samples(self.path, program_id=program_id)
            self._cache[program_id] = build_history(
                samples, self.thresholds, self.slope_threshold
            )
            logger.debug(f"Built {len(self._cache[program_id])} snapshots for {program_id}")
        return self._cache[program_id]

    def get_snapshots(
        self,
        program_id: str = DEFAULT_PROGRAM,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[Snapshot]:
        return [
            s for s in self._load(program_id)
            if (start is None or s.date >= start) and (end is None or s.date <= end)
        ]


class CsvActivityRepository:
    """Activity provider reading an activities CSV (one network per file)."""

    def __init__(self, path: Union[str, Path], loader: Optional[DataLoader] = None):
        self.path = Path(path)
        self.loader = loader or DataLoader()

    def get_activities(self, program_id: str = DEFAULT_PROGRAM) -> List[Activity]:
        return self.loader.load_activities(self.path)
