"""
Tests for z-score anomaly detection.
"""
from datetime import date

import pytest

from evm_analytics.domain.entities import Deviation
from evm_analytics.domain.exceptions import InvalidInputError
from evm_analytics.domain.services.anomaly_detector import (
    detect_anomalies,
    detect_snapshot_anomalies,
)


class TestDetectAnomalies:
    """Tests for the core detector."""

    def test_short_series_returns_empty(self):
        assert detect_anomalies([("a", 1.0), ("b", 100.0)]) == []

    def test_short_series_ignores_threshold(self):
        assert detect_anomalies([("a", 1.0), ("b", 1000.0)], threshold=0.01) == []

    def test_zero_variance_returns_empty(self):
        assert detect_anomalies([("a", 1.0), ("b", 1.0), ("c", 1.0)]) == []

    def test_high_outlier(self):
        series = [(f"s{i}", 1.0) for i in range(9)] + [("spike", 10.0)]
        results = detect_anomalies(series)
        assert len(results) == 1
        assert results[0].sample_id == "spike"
        assert results[0].deviation == Deviation.HIGH
        assert results[0].z_score == pytest.approx(3.0)

    def test_low_outlier(self):
        series = [(f"s{i}", 1.0) for i in range(9)] + [("dip", -8.0)]
        results = detect_anomalies(series)
        assert [r.deviation for r in results] == [Deviation.LOW]
        assert results[0].z_score == pytest.approx(-3.0)

    def test_threshold_is_exclusive(self):
        # z-scores of [0, 0, 3] are about -0.707, -0.707, 1.414
        series = [("a", 0.0), ("b", 0.0), ("c", 3.0)]
        assert detect_anomalies(series, threshold=1.5) == []
        assert len(detect_anomalies(series, threshold=1.4)) == 1

    def test_lower_threshold_flags_more(self):
        series = [("a", 1.0), ("b", 2.0), ("c", 3.0), ("d", 10.0)]
        assert len(detect_anomalies(series, threshold=1.0)) >= len(detect_anomalies(series))

    def test_dates_carried_through(self):
        series = [(f"s{i}", 1.0, date(2024, 1, i + 1)) for i in range(9)]
        series.append(("spike", 10.0, date(2024, 1, 10)))
        result = detect_anomalies(series)[0]
        assert result.sample_date == date(2024, 1, 10)
        assert result.to_dict()["date"] == "2024-01-10"

    @pytest.mark.parametrize("threshold", [0, -1.5])
    def test_non_positive_threshold_rejected(self, threshold):
        with pytest.raises(InvalidInputError):
            detect_anomalies([("a", 1.0), ("b", 2.0), ("c", 3.0)], threshold)


class TestSnapshotAnomalies:

    def test_cpi_spike_in_history(self, snapshot_factory):
        history = snapshot_factory([1.0] * 9 + [1.5])
        results = detect_snapshot_anomalies(history, "cpi")
        assert [r.sample_id for r in results] == ["S10"]
        assert results[0].sample_date == history[-1].date

    def test_unknown_metric(self, snapshot_factory):
        with pytest.raises(InvalidInputError):
            detect_snapshot_anomalies(snapshot_factory([1.0, 1.0, 1.0]), "nope")
