"""
Tests for deriving PV/EV from a scheduled network.
"""
from datetime import date

import pytest

from evm_analytics.domain.entities import Activity
from evm_analytics.domain.exceptions import InvalidInputError
from evm_analytics.domain.services.critical_path_scheduler import schedule
from evm_analytics.domain.services.schedule_baseline import (
    allocate_budget,
    earned_value,
    planned_value,
    sample_from_schedule,
)


@pytest.fixture
def network():
    """A (4 days) -> B (6 days); C (10 days) runs in parallel."""
    return schedule([
        Activity.create("A", 4),
        Activity.create("B", 6, ["A"]),
        Activity.create("C", 10),
    ])


class TestAllocateBudget:

    def test_duration_proportional(self, network):
        allocations = allocate_budget(network, 2000)
        assert allocations == pytest.approx({"A": 400, "B": 600, "C": 1000})

    def test_explicit_budgets_respected(self):
        result = schedule([
            Activity.create("A", 4, budgeted_cost=700),
            Activity.create("B", 2),
            Activity.create("C", 6),
        ])
        allocations = allocate_budget(result, 1500)
        assert allocations["A"] == 700
        assert allocations["B"] == pytest.approx(200)
        assert allocations["C"] == pytest.approx(600)

    def test_equal_split_when_all_zero_duration(self):
        result = schedule([Activity.create("M1", 0), Activity.create("M2", 0)])
        assert allocate_budget(result, 100) == pytest.approx({"M1": 50, "M2": 50})


class TestPlannedValue:

    def test_at_start_and_end(self, network):
        assert planned_value(network, 2000, 0) == 0
        assert planned_value(network, 2000, 10) == pytest.approx(2000)

    def test_midway(self, network):
        # A complete (400), B 1/6 (100), C half (500)
        assert planned_value(network, 2000, 5) == pytest.approx(1000)

    def test_milestone_counts_once_reached(self):
        result = schedule([Activity.create("W", 4), Activity.create("M", 0, ["W"])])
        allocations = allocate_budget(result, 100)
        assert planned_value(result, 100, 3) == pytest.approx(75)
        assert allocations["M"] == 0


class TestEarnedValue:

    def test_percent_complete(self, network):
        ev = earned_value(network, 2000, {"A": 100, "B": 50, "C": 20})
        assert ev == pytest.approx(400 + 300 + 200)

    def test_missing_ids_count_as_zero(self, network):
        assert earned_value(network, 2000, {"A": 100}) == pytest.approx(400)

    @pytest.mark.parametrize("pct", [-1, 101])
    def test_percent_out_of_range(self, network, pct):
        with pytest.raises(InvalidInputError):
            earned_value(network, 2000, {"A": pct})

    def test_unknown_activity(self, network):
        with pytest.raises(InvalidInputError):
            earned_value(network, 2000, {"Z": 10})


class TestSampleFromSchedule:

    def test_builds_sample(self, network):
        sample = sample_from_schedule(
            network, bac=2000, ac=1100, elapsed=5,
            percent_complete_by_id={"A": 100, "B": 10, "C": 50},
            sample_date=date(2024, 3, 31), sample_id="M3",
        )
        assert sample.pv == pytest.approx(1000)
        assert sample.ev == pytest.approx(400 + 60 + 500)
        assert sample.ac == 1100
        assert sample.sample_id == "M3"
