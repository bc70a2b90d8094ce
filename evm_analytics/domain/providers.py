"""
Collaborator interfaces consumed by the analytics service.

Implementations live in evm_analytics.infrastructure.repositories.
"""
from datetime import date
from typing import List, Optional, Protocol

from .entities import Activity, Snapshot


class SnapshotHistoryProvider(Protocol):
    """Returns snapshots for a program within an optional date window."""

    def get_snapshots(
        self,
        program_id: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[Snapshot]:
        ...


class ActivityGraphProvider(Protocol):
    """Returns the current activity network for a program."""

    def get_activities(self, program_id: str) -> List[Activity]:
        ...
