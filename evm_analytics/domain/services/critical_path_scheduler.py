"""
Critical Path Scheduler - Two-pass CPM over an activity network.

Steps:
1. Validate ids, durations and dependency references
2. Topological order via Kahn's algorithm (ties broken by input order)
3. Forward pass:  ES = max(EF of predecessors), EF = ES + duration
4. Backward pass: LF = min(LS of successors) or project duration, LS = LF - duration
5. Slack = LS - ES; critical when slack == 0

Cycles, including self-loops, raise CyclicDependencyError.
"""
import heapq
import logging
from typing import Dict, Iterable, List

from ..entities import Activity, ScheduledActivity, SchedulerResult
from ..exceptions import CyclicDependencyError, InvalidInputError

logger = logging.getLogger(__name__)


def validate_activities(activities: List[Activity]) -> None:
    """Reject duplicate ids, non-integer or negative durations and unknown dependencies."""
    seen = set()
    for activity in activities:
        if activity.id in seen:
            raise InvalidInputError("id", f"duplicate activity id '{activity.id}'")
        seen.add(activity.id)
        duration = activity.duration
        whole = isinstance(duration, int) or (isinstance(duration, float) and duration.is_integer())
        if isinstance(duration, bool) or not whole:
            raise InvalidInputError(
                "duration",
                f"activity '{activity.id}' must have a whole-number duration, got {duration!r}",
            )
        if duration < 0:
            raise InvalidInputError(
                "duration",
                f"activity '{activity.id}' has negative duration {activity.duration}",
            )

    for activity in activities:
        unknown = sorted(d for d in activity.dependencies if d not in seen)
        if unknown:
            raise InvalidInputError(
                "dependencies",
                f"activity '{activity.id}' depends on unknown ids: {', '.join(unknown)}",
            )


def build_successors(activities: List[Activity]) -> Dict[str, List[str]]:
    """Successor lists in input order."""
    successors: Dict[str, List[str]] = {a.id: [] for a in activities}
    for activity in activities:
        for dep in activity.dependencies:
            successors[dep].append(activity.id)
    position = {a.id: i for i, a in enumerate(activities)}
    for ids in successors.values():
        ids.sort(key=position.__getitem__)
    return successors


def topological_order(activities: List[Activity]) -> List[str]:
    """
    Kahn's algorithm.

    Nodes become ready when all predecessors are placed; ready nodes are
    released in input order. Any node never released sits on or behind a
    cycle.
    """
    position = {a.id: i for i, a in enumerate(activities)}
    in_degree = {a.id: len(a.dependencies) for a in activities}
    successors = build_successors(activities)

    ready = [(position[a.id], a.id) for a in activities if in_degree[a.id] == 0]
    heapq.heapify(ready)
    order: List[str] = []

    while ready:
        _, current = heapq.heappop(ready)
        order.append(current)
        for succ in successors[current]:
            in_degree[succ] -= 1
            if in_degree[succ] == 0:
                heapq.heappush(ready, (position[succ], succ))

    if len(order) != len(activities):
        remaining = [a.id for a in activities if in_degree[a.id] > 0]
        raise CyclicDependencyError(remaining)

    return order


def schedule(activities: Iterable[Activity]) -> SchedulerResult:
    """
    Compute CPM timings for an activity network.

    Args:
        activities: Activity records forming a DAG

    Returns:
        SchedulerResult with activities and critical path in topological order

    Raises:
        InvalidInputError: Duplicate id, negative duration or unknown dependency
        CyclicDependencyError: The dependency graph has a cycle
    """
    activities = list(activities)
    validate_activities(activities)

    by_id = {a.id: a for a in activities}
    order = topological_order(activities)
    successors = build_successors(activities)

    # Forward pass
    early_start: Dict[str, int] = {}
    early_finish: Dict[str, int] = {}
    for activity_id in order:
        activity = by_id[activity_id]
        es = max((early_finish[d] for d in activity.dependencies), default=0)
        early_start[activity_id] = es
        early_finish[activity_id] = es + activity.duration

    total_duration = max(early_finish.values(), default=0)

    # Backward pass
    late_start: Dict[str, int] = {}
    late_finish: Dict[str, int] = {}
    for activity_id in reversed(order):
        succs = successors[activity_id]
        lf = min((late_start[s] for s in succs), default=total_duration)
        late_finish[activity_id] = lf
        late_start[activity_id] = lf - by_id[activity_id].duration

    scheduled = []
    for activity_id in order:
        succs = successors[activity_id]
        next_start = min((early_start[s] for s in succs), default=total_duration)
        scheduled.append(ScheduledActivity(
            activity=by_id[activity_id],
            early_start=early_start[activity_id],
            early_finish=early_finish[activity_id],
            late_start=late_start[activity_id],
            late_finish=late_finish[activity_id],
            slack=late_start[activity_id] - early_start[activity_id],
            free_float=next_start - early_finish[activity_id],
        ))

    critical_path_ids = tuple(s.id for s in scheduled if s.critical)

    logger.debug(
        f"Scheduled {len(scheduled)} activities: duration={total_duration}, "
        f"critical path={' -> '.join(critical_path_ids)}"
    )

    return SchedulerResult(
        critical_path_ids=critical_path_ids,
        activities=tuple(scheduled),
        total_duration=total_duration,
    )
