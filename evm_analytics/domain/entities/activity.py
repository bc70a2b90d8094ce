"""
Schedule Activity Entities - Activity network input and CPM results.
"""
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class Activity:
    """
    Single schedule activity in a dependency network.

    Attributes:
        id: Unique activity identifier
        duration: Planned duration in whole time units (days)
        dependencies: Ids of predecessor activities (finish-to-start)
        name: Optional descriptive name
        budgeted_cost: Optional budget assigned to the activity
    """

    id: str
    duration: int
    dependencies: FrozenSet[str] = field(default_factory=frozenset)
    name: str = ""
    budgeted_cost: Optional[float] = None

    def __post_init__(self) -> None:
        # Accept lists/tuples/sets from callers
        if not isinstance(self.dependencies, frozenset):
            object.__setattr__(self, "dependencies", frozenset(self.dependencies))

    @classmethod
    def create(
        cls,
        id: str,
        duration: int,
        dependencies: Iterable[str] = (),
        name: str = "",
        budgeted_cost: Optional[float] = None,
    ) -> "Activity":
        return cls(
            id=str(id),
            duration=duration,
            dependencies=frozenset(str(d) for d in dependencies),
            name=name,
            budgeted_cost=budgeted_cost,
        )


@dataclass(frozen=True)
class ScheduledActivity:
    """Activity with forward/backward pass results."""

    activity: Activity
    early_start: int
    early_finish: int
    late_start: int
    late_finish: int
    slack: int
    free_float: int

    @property
    def id(self) -> str:
        return self.activity.id

    @property
    def duration(self) -> int:
        return self.activity.duration

    @property
    def critical(self) -> bool:
        return self.slack == 0

    def to_dict(self) -> dict:
        return {
            "id": self.activity.id,
            "name": self.activity.name,
            "duration": self.activity.duration,
            "dependencies": sorted(self.activity.dependencies),
            "early_start": self.early_start,
            "early_finish": self.early_finish,
            "late_start": self.late_start,
            "late_finish": self.late_finish,
            "slack": self.slack,
            "free_float": self.free_float,
            "critical": self.critical,
        }


@dataclass(frozen=True)
class SchedulerResult:
    """
    Critical path analysis for an activity network.

    Attributes:
        critical_path_ids: Zero-slack activity ids in topological order
        activities: Every activity's CPM timings, in topological order
        total_duration: Minimum project duration (max early finish)
    """

    critical_path_ids: Tuple[str, ...]
    activities: Tuple[ScheduledActivity, ...]
    total_duration: int

    @property
    def critical_activities(self) -> List[ScheduledActivity]:
        return [a for a in self.activities if a.critical]

    def get(self, activity_id: str) -> Optional[ScheduledActivity]:
        for scheduled in self.activities:
            if scheduled.id == activity_id:
                return scheduled
        return None

    def to_dict(self) -> dict:
        return {
            "critical_path_ids": list(self.critical_path_ids),
            "critical_activities": [a.to_dict() for a in self.critical_activities],
            "total_duration": self.total_duration,
            "activities": [a.to_dict() for a in self.activities],
        }
