"""
Schedule Baseline - Derives PV and EV from a scheduled activity network.

Used when schedule actuals are unknown. Each activity gets an EXPECTED
budget:
1. Its own budgeted_cost when set
2. Otherwise a duration-proportional share of the unassigned budget

Formula:
    activity_budget = remaining_budget * (activity_duration / unbudgeted_total_duration)

PV at elapsed time t is the linear burn of each activity over
[ES, EF]; EV is each activity's budget times its percent complete.
"""
import logging
from datetime import date
from typing import Dict, Mapping, Optional

from ..entities import MetricSample, SchedulerResult
from ..exceptions import InvalidInputError

logger = logging.getLogger(__name__)


def allocate_budget(result: SchedulerResult, bac: float) -> Dict[str, float]:
    """
    Split BAC across scheduled activities.

    Activities without a budgeted_cost share what remains after the
    explicitly budgeted ones, in proportion to duration (equally when
    every unbudgeted duration is 0).
    """
    if bac < 0:
        raise InvalidInputError("bac", f"must be non-negative, got {bac}")

    allocations: Dict[str, float] = {}
    unbudgeted = []
    for scheduled in result.activities:
        cost = scheduled.activity.budgeted_cost
        if cost is None:
            unbudgeted.append(scheduled)
        else:
            allocations[scheduled.id] = float(cost)

    remaining = max(0.0, bac - sum(allocations.values()))
    if unbudgeted:
        total_duration = sum(s.duration for s in unbudgeted)
        for scheduled in unbudgeted:
            if total_duration > 0:
                share = scheduled.duration / total_duration
            else:
                share = 1.0 / len(unbudgeted)
            allocations[scheduled.id] = remaining * share

    logger.debug(
        f"Allocated {sum(allocations.values()):,.2f} of BAC {bac:,.2f} "
        f"across {len(allocations)} activities"
    )
    return allocations


def planned_value(result: SchedulerResult, bac: float, elapsed: float) -> float:
    """
    Budgeted cost of work scheduled by `elapsed` time units.

    Zero-duration activities count fully once elapsed >= ES.
    """
    allocations = allocate_budget(result, bac)
    total = 0.0
    for scheduled in result.activities:
        budget = allocations[scheduled.id]
        if scheduled.duration == 0:
            fraction = 1.0 if elapsed >= scheduled.early_start else 0.0
        else:
            fraction = (elapsed - scheduled.early_start) / scheduled.duration
            fraction = max(0.0, min(1.0, fraction))
        total += budget * fraction
    return total


def earned_value(
    result: SchedulerResult,
    bac: float,
    percent_complete_by_id: Mapping[str, float],
) -> float:
    """Budgeted cost of work performed; missing ids count as 0% complete."""
    allocations = allocate_budget(result, bac)
    total = 0.0
    for activity_id, pct in percent_complete_by_id.items():
        if activity_id not in allocations:
            raise InvalidInputError(
                "percent_complete", f"unknown activity id '{activity_id}'"
            )
        if not 0 <= pct <= 100:
            raise InvalidInputError(
                "percent_complete",
                f"activity '{activity_id}' must be within [0, 100], got {pct}",
            )
        total += allocations[activity_id] * pct / 100
    return total


def sample_from_schedule(
    result: SchedulerResult,
    bac: float,
    ac: float,
    elapsed: float,
    percent_complete_by_id: Mapping[str, float],
    sample_date: date,
    sample_id: Optional[str] = None,
    program_id: Optional[str] = None,
) -> MetricSample:
    """Build a MetricSample whose PV and EV come from the schedule."""
    return MetricSample(
        date=sample_date,
        pv=planned_value(result, bac, elapsed),
        ev=earned_value(result, bac, percent_complete_by_id),
        ac=ac,
        bac=bac,
        sample_id=sample_id,
        program_id=program_id,
    )
