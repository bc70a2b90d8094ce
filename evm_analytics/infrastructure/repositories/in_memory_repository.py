"""
In-Memory Repositories - Dictionary-backed snapshot and activity providers.
"""
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional

from evm_analytics.domain.entities import Activity, Snapshot
from evm_analytics.domain.exceptions import InvalidInputError


class InMemorySnapshotRepository:
    """
    Snapshot history keyed by program id.

    Snapshots are immutable; adding a second snapshot with an existing id
    for the same program is rejected.
    """

    def __init__(self, snapshots: Optional[Dict[str, Iterable[Snapshot]]] = None):
        self._snapshots: Dict[str, List[Snapshot]] = defaultdict(list)
        for program_id, items in (snapshots or {}).items():
            for snapshot in items:
                self.add(program_id, snapshot)

    def add(self, program_id: str, snapshot: Snapshot) -> Snapshot:
        if any(s.snapshot_id == snapshot.snapshot_id for s in self._snapshots[program_id]):
            raise InvalidInputError(
                "snapshot_id",
                f"snapshot '{snapshot.snapshot_id}' already exists for program '{program_id}'",
            )
        self._snapshots[program_id].append(snapshot)
        return snapshot

    def get_snapshots(
        self,
        program_id: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[Snapshot]:
        """Snapshots within [start, end], ascending by date."""
        result = [
            s for s in self._snapshots.get(program_id, [])
            if (start is None or s.date >= start) and (end is None or s.date <= end)
        ]
        return sorted(result, key=lambda s: s.date)

    def get_latest(self, program_id: str) -> Optional[Snapshot]:
        snapshots = self.get_snapshots(program_id)
        return snapshots[-1] if snapshots else None

    def count(self, program_id: str) -> int:
        return len(self._snapshots.get(program_id, []))


class InMemoryActivityRepository:
    """Activity networks keyed by program id; set_activities replaces the whole network."""

    def __init__(self, activities: Optional[Dict[str, Iterable[Activity]]] = None):
        self._activities: Dict[str, List[Activity]] = {
            program_id: list(items) for program_id, items in (activities or {}).items()
        }

    def set_activities(self, program_id: str, activities: Iterable[Activity]) -> None:
        self._activities[program_id] = list(activities)

    def get_activities(self, program_id: str) -> List[Activity]:
        return list(self._activities.get(program_id, []))
