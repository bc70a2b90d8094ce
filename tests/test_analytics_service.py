"""
Tests for the report-level analytics service with in-memory providers.
"""
from datetime import date

import pytest

from evm_analytics.config import get_config
from evm_analytics.domain.entities import Activity, ForecastMethod, TrendDirection
from evm_analytics.domain.exceptions import (
    ConfigurationError,
    CyclicDependencyError,
    InsufficientDataError,
    InvalidInputError,
    SnapshotNotFoundError,
)
from evm_analytics.domain.services import AnalyticsService
from evm_analytics.infrastructure.repositories import (
    InMemoryActivityRepository,
    InMemorySnapshotRepository,
)


@pytest.fixture
def snapshot_repo(snapshot_factory):
    history = snapshot_factory(
        [0.85, 0.89, 0.93, 0.97, 1.01, 1.05],
        [0.90, 0.92, 0.94, 0.96, 0.98, 1.00],
    )
    # Stored out of order; the service sorts
    return InMemorySnapshotRepository({"P1": list(reversed(history))})


@pytest.fixture
def activity_repo():
    return InMemoryActivityRepository({
        "P1": [
            Activity.create("A", 3),
            Activity.create("B", 4, ["A"]),
            Activity.create("C", 1, ["A"]),
        ],
    })


@pytest.fixture
def service(snapshot_repo, activity_repo):
    return AnalyticsService(snapshot_repo, activity_repo, config=get_config())


class TestTrendReports:
    """Tests for trend and performance reports."""

    def test_trend_report(self, service):
        analysis = service.trend_report("P1", "cpi")
        assert analysis.trend == TrendDirection.IMPROVING
        assert analysis.sample_count == 6

    def test_trend_report_date_window(self, service):
        analysis = service.trend_report(
            "P1", "cpi", start=date(2024, 2, 1), end=date(2024, 4, 1)
        )
        assert analysis.sample_count == 3

    def test_trend_report_needs_two_snapshots(self, service):
        with pytest.raises(InsufficientDataError) as exc:
            service.trend_report("P1", "cpi", start=date(2024, 6, 1))
        assert exc.value.required == 2
        assert exc.value.available == 1
        assert exc.value.code == "INSUFFICIENT_DATA"

    def test_unknown_program_has_no_data(self, service):
        with pytest.raises(InsufficientDataError):
            service.trend_report("NOPE")

    def test_performance_report(self, service):
        result = service.performance_report("P1")
        assert result.overall_trend == TrendDirection.IMPROVING
        assert result.recommendations

    def test_performance_report_needs_two_snapshots(self, service):
        with pytest.raises(InsufficientDataError):
            service.performance_report("P1", end=date(2024, 1, 1))


class TestAnomalyReport:

    def test_no_anomalies_in_smooth_series(self, service):
        assert service.anomaly_report("P1", "cpi") == []

    def test_short_history_is_empty_not_error(self, service):
        assert service.anomaly_report("NOPE") == []

    def test_spike_detected(self, snapshot_factory):
        repo = InMemorySnapshotRepository({"P1": snapshot_factory([1.0] * 9 + [1.5])})
        results = AnalyticsService(repo).anomaly_report("P1", "cpi", threshold=2.0)
        assert [r.sample_id for r in results] == ["S10"]


class TestForecastReport:

    def test_forecast_and_required_performance(self, service):
        result, required = service.forecast_report("P1", planned_completion=date(2024, 12, 31))
        assert result.method == ForecastMethod.CPI
        assert result.estimated_budget == pytest.approx(1_000_000 / 1.05)
        assert result.estimated_completion_date == date(2024, 12, 31)
        assert required.target_eac == pytest.approx(1_000_000)

    def test_method_override(self, service):
        result, _ = service.forecast_report(
            "P1", planned_completion=date(2024, 12, 31), method="bottom-up"
        )
        assert result.method == ForecastMethod.BOTTOM_UP

    def test_no_snapshots(self, service):
        with pytest.raises(InvalidInputError):
            service.forecast_report("NOPE", planned_completion=date(2024, 12, 31))


class TestBaselineAndSchedule:

    def test_baseline_comparison(self, service):
        comparison = service.baseline_comparison("P1", "S1", planned_duration_days=100)
        assert comparison.current_id == "S6"
        assert comparison.spi_change == pytest.approx(0.1)
        assert comparison.days_variance == -10

    def test_missing_baseline(self, service):
        with pytest.raises(SnapshotNotFoundError):
            service.baseline_comparison("P1", "S99", planned_duration_days=100)

    def test_critical_path(self, service):
        result = service.critical_path("P1")
        assert result.total_duration == 7
        assert result.critical_path_ids == ("A", "B")

    def test_critical_path_requires_provider(self, snapshot_repo):
        with pytest.raises(ConfigurationError):
            AnalyticsService(snapshot_repo).critical_path("P1")

    def test_cycle_propagates(self, snapshot_repo):
        activities = InMemoryActivityRepository({
            "P1": [Activity.create("A", 1, ["B"]), Activity.create("B", 1, ["A"])],
        })
        with pytest.raises(CyclicDependencyError):
            AnalyticsService(snapshot_repo, activities).critical_path("P1")


class TestInMemoryRepository:

    def test_duplicate_snapshot_rejected(self, snapshot_factory):
        repo = InMemorySnapshotRepository()
        snapshot = snapshot_factory([1.0])[0]
        repo.add("P1", snapshot)
        with pytest.raises(InvalidInputError):
            repo.add("P1", snapshot)

    def test_latest(self, snapshot_repo):
        assert snapshot_repo.get_latest("P1").snapshot_id == "S6"
        assert snapshot_repo.get_latest("NOPE") is None
