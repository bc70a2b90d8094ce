"""
Tests for EVM metric calculation and snapshot creation.
"""
from datetime import date

import pytest

from evm_analytics.domain.entities import (
    HealthLevel, MetricSample, TrendDirection,
)
from evm_analytics.domain.exceptions import InvalidInputError
from evm_analytics.domain.services.metrics_calculator import (
    calculate_evm_metrics,
    compare_snapshots,
    create_snapshot,
    reporting_period_for,
)


class TestCalculateEVMMetrics:
    """Tests for the core EVM formulas."""

    def test_indices_are_simple_ratios(self):
        m = calculate_evm_metrics(pv=200.0, ev=150.0, ac=120.0, bac=1000.0)
        assert m.spi == pytest.approx(150 / 200)
        assert m.cpi == pytest.approx(150 / 120)

    def test_worked_example_equal_indices(self):
        """PV=100k, EV=95k, AC=100k, BAC=300k."""
        m = calculate_evm_metrics(pv=100000, ev=95000, ac=100000, bac=300000)
        assert m.spi == pytest.approx(0.95)
        assert m.cpi == pytest.approx(0.95)
        assert m.cv == pytest.approx(-5000)
        assert m.sv == pytest.approx(-5000)
        assert m.eac == pytest.approx(315789.47, abs=0.01)
        assert m.vac == pytest.approx(-15789.47, abs=0.01)
        assert m.tcpi == pytest.approx(205000 / 200000)
        assert m.percent_complete == pytest.approx(31.67, abs=0.01)

    def test_worked_example_schedule_lag(self):
        """PV=500k, EV=450k, AC=480k, BAC=1M."""
        m = calculate_evm_metrics(pv=500000, ev=450000, ac=480000, bac=1000000)
        assert m.spi == pytest.approx(0.90)
        assert m.cpi == pytest.approx(0.9375)
        assert m.cv == pytest.approx(-30000)
        assert m.sv == pytest.approx(-50000)
        assert m.eac == pytest.approx(1066666.67, abs=0.01)
        assert m.vac == pytest.approx(-66666.67, abs=0.01)
        assert m.tcpi == pytest.approx(550000 / 520000)
        assert m.percent_complete == pytest.approx(45.0)
        assert m.percent_schedule_complete == pytest.approx(50.0)

    def test_zero_actual_cost_gives_zero_cpi_and_eac_equals_bac(self):
        m = calculate_evm_metrics(pv=100, ev=50, ac=0, bac=1000)
        assert m.cpi == 0
        assert m.cv_percent == 0
        assert m.eac == 1000
        assert m.vac == 0

    def test_zero_planned_value_gives_zero_spi(self):
        m = calculate_evm_metrics(pv=0, ev=50, ac=40, bac=1000)
        assert m.spi == 0
        assert m.sv_percent == 0

    def test_tcpi_zero_when_budget_fully_spent(self):
        m = calculate_evm_metrics(pv=1000, ev=900, ac=1000, bac=1000)
        assert m.tcpi == 0

    def test_zero_bac_gives_zero_percent_complete(self):
        m = calculate_evm_metrics(pv=0, ev=0, ac=0, bac=0)
        assert m.percent_complete == 0
        assert m.percent_schedule_complete == 0

    def test_identical_inputs_give_identical_output(self):
        a = calculate_evm_metrics(pv=123.0, ev=456.0, ac=789.0, bac=1000.0)
        b = calculate_evm_metrics(pv=123.0, ev=456.0, ac=789.0, bac=1000.0)
        assert a == b


class TestMetricSample:
    """Tests for sample validation."""

    def test_negative_amount_rejected(self):
        with pytest.raises(InvalidInputError) as exc:
            MetricSample(date=date(2024, 1, 31), pv=-1, ev=0, ac=0, bac=100)
        assert exc.value.field == "pv"
        assert exc.value.code == "INVALID_INPUT"

    def test_non_numeric_rejected(self):
        with pytest.raises(InvalidInputError):
            MetricSample(date=date(2024, 1, 31), pv="abc", ev=0, ac=0, bac=100)

    def test_nan_rejected(self):
        with pytest.raises(InvalidInputError):
            MetricSample(date=date(2024, 1, 31), pv=1, ev=float("nan"), ac=0, bac=100)

    @pytest.mark.parametrize("value", [float("inf"), float("-inf")])
    def test_infinite_rejected(self, value):
        with pytest.raises(InvalidInputError) as exc:
            MetricSample(date=date(2024, 1, 31), pv=1, ev=1, ac=value, bac=100)
        assert exc.value.field == "ac"

    def test_values_coerced_to_float(self):
        sample = MetricSample(date=date(2024, 1, 31), pv=1, ev="2", ac=3, bac=10)
        assert sample.ev == 2.0
        assert isinstance(sample.pv, float)


class TestCreateSnapshot:
    """Tests for snapshot creation."""

    def test_default_id_and_period(self):
        sample = MetricSample(date=date(2024, 2, 29), pv=100, ev=100, ac=100, bac=1000)
        snapshot = create_snapshot(sample)
        assert snapshot.snapshot_id == "SNAP-20240229"
        assert snapshot.reporting_period == "2024-Q1"

    def test_sample_id_used_when_present(self):
        sample = MetricSample(date=date(2024, 2, 29), pv=100, ev=100, ac=100,
                              bac=1000, sample_id="JAN")
        assert create_snapshot(sample).snapshot_id == "JAN"

    def test_health_attached(self):
        sample = MetricSample(date=date(2024, 5, 1), pv=100, ev=70, ac=100, bac=1000)
        snapshot = create_snapshot(sample)
        assert snapshot.health.status == HealthLevel.CRITICAL
        assert snapshot.health_indicators[0] == "Project requires immediate action"

    def test_trend_from_history(self, snapshot_factory):
        history = snapshot_factory([0.85, 0.89, 0.93, 0.97])
        assert history[-1].trend == TrendDirection.IMPROVING

    def test_declining_history(self, snapshot_factory):
        history = snapshot_factory([1.05, 1.0, 0.95, 0.9], [1.0, 0.96, 0.92, 0.88])
        assert history[-1].trend == TrendDirection.DECLINING

    def test_later_history_ignored(self, snapshot_factory):
        history = snapshot_factory([1.2, 0.5, 0.4])
        early = MetricSample(date=date(2023, 12, 1), pv=100, ev=100, ac=100, bac=1000)
        snapshot = create_snapshot(early, history=history)
        # No earlier snapshots, so the label comes from health alone
        assert snapshot.trend == TrendDirection.STABLE

    def test_snapshot_is_immutable(self):
        sample = MetricSample(date=date(2024, 1, 1), pv=100, ev=100, ac=100, bac=1000)
        snapshot = create_snapshot(sample)
        with pytest.raises(AttributeError):
            snapshot.notes = "changed"

    def test_value_of_unknown_metric(self):
        sample = MetricSample(date=date(2024, 1, 1), pv=100, ev=100, ac=100, bac=1000)
        with pytest.raises(InvalidInputError):
            create_snapshot(sample).value_of("margin")

    def test_to_dict_contains_sample_and_metrics(self):
        sample = MetricSample(date=date(2024, 1, 1), pv=100, ev=90, ac=100, bac=1000)
        data = create_snapshot(sample).to_dict()
        assert data["date"] == "2024-01-01"
        assert data["cpi"] == pytest.approx(0.9)
        assert data["health"]["status"] == "warning"


class TestReportingPeriod:

    @pytest.mark.parametrize("month,label", [(1, "Q1"), (3, "Q1"), (4, "Q2"), (12, "Q4")])
    def test_quarter_labels(self, month, label):
        assert reporting_period_for(date(2024, month, 15)) == f"2024-{label}"


class TestCompareSnapshots:

    def test_movement_beyond_threshold(self, snapshot_factory):
        history = snapshot_factory([0.9, 1.0], [1.0, 0.95])
        comparison = compare_snapshots(history[0], history[1])
        assert comparison.cpi_trend == TrendDirection.IMPROVING
        assert comparison.spi_trend == TrendDirection.DECLINING
        assert comparison.health_delta == history[1].health_score - history[0].health_score

    def test_small_movement_is_stable(self, snapshot_factory):
        history = snapshot_factory([1.0, 1.01])
        comparison = compare_snapshots(history[0], history[1])
        assert comparison.cpi_trend == TrendDirection.STABLE
