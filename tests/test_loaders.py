"""
Tests for CSV loaders and file-backed repositories.
"""
from datetime import date

import pandas as pd
import pytest

from evm_analytics.domain.entities import TrendDirection
from evm_analytics.domain.exceptions import InvalidInputError
from evm_analytics.infrastructure.loaders import (
    DataLoader,
    activities_from_frame,
    parse_dependencies,
    samples_from_frame,
)
from evm_analytics.infrastructure.repositories import (
    CsvActivityRepository,
    CsvSnapshotRepository,
)

SAMPLES_CSV = """Date,PV,EV,AC,BAC,Sample ID,Program ID
2024-03-31,150000,150000,150000,1000000,M3,P1
2024-01-31,50000,45000,50000,1000000,M1,P1
2024-02-29,100000,95000,100000,1000000,M2,P1
2024-01-31,20000,20000,20000,500000,X1,P2
"""

ACTIVITIES_CSV = """id,name,duration,dependencies,budgeted_cost
DES,Design,10,,
PRO,Procure,5,DES,
BLD,Build,20,DES;PRO,500000
INS,Inspect,2,BLD|PRO,
"""


@pytest.fixture
def samples_path(tmp_path):
    path = tmp_path / "samples.csv"
    path.write_text(SAMPLES_CSV)
    return path


@pytest.fixture
def activities_path(tmp_path):
    path = tmp_path / "activities.csv"
    path.write_text(ACTIVITIES_CSV)
    return path


class TestSampleLoading:
    """Tests for sample CSV parsing."""

    def test_columns_case_and_space_insensitive(self, samples_path):
        samples = DataLoader().load_samples(samples_path)
        assert len(samples) == 4
        assert samples[0].sample_id in ("M1", "X1")

    def test_sorted_by_date(self, samples_path):
        samples = DataLoader().load_samples(samples_path, program_id="P1")
        assert [s.sample_id for s in samples] == ["M1", "M2", "M3"]
        assert samples[0].date == date(2024, 1, 31)
        assert samples[0].ev == 45000.0

    def test_relative_path_resolves_against_data_dir(self, samples_path):
        loader = DataLoader(samples_path.parent)
        assert len(loader.load_samples("samples.csv", program_id="P2")) == 1

    def test_missing_columns(self):
        df = pd.DataFrame({"date": ["2024-01-31"], "pv": ["1"]})
        with pytest.raises(InvalidInputError) as exc:
            samples_from_frame(df)
        assert "ev" in exc.value.message
        assert "bac" in exc.value.message

    def test_non_numeric_amount(self):
        df = pd.DataFrame({
            "date": ["2024-01-31"], "pv": ["lots"], "ev": ["1"], "ac": ["1"], "bac": ["10"],
        })
        with pytest.raises(InvalidInputError):
            samples_from_frame(df)

    def test_blank_date(self):
        df = pd.DataFrame({
            "date": ["2024-01-31", None], "pv": ["1", "1"], "ev": ["1", "1"],
            "ac": ["1", "1"], "bac": ["10", "10"],
        })
        with pytest.raises(InvalidInputError) as exc:
            samples_from_frame(df)
        assert exc.value.field == "date"

    def test_negative_amount(self):
        df = pd.DataFrame({
            "date": ["2024-01-31"], "pv": ["1"], "ev": ["1"], "ac": ["-5"], "bac": ["10"],
        })
        with pytest.raises(InvalidInputError):
            samples_from_frame(df)

    def test_missing_file(self, tmp_path):
        with pytest.raises(InvalidInputError):
            DataLoader(tmp_path).load_samples("absent.csv")


class TestActivityLoading:
    """Tests for activity CSV parsing."""

    def test_load_activities(self, activities_path):
        activities = DataLoader().load_activities(activities_path)
        by_id = {a.id: a for a in activities}
        assert [a.id for a in activities] == ["DES", "PRO", "BLD", "INS"]
        assert by_id["DES"].dependencies == frozenset()
        assert by_id["BLD"].dependencies == frozenset({"DES", "PRO"})
        assert by_id["INS"].dependencies == frozenset({"BLD", "PRO"})
        assert by_id["BLD"].budgeted_cost == 500000
        assert by_id["PRO"].budgeted_cost is None
        assert by_id["DES"].name == "Design"

    def test_fractional_duration_rejected(self):
        df = pd.DataFrame({"id": ["A"], "duration": ["1.5"]})
        with pytest.raises(InvalidInputError):
            activities_from_frame(df)

    def test_missing_duration_column(self):
        with pytest.raises(InvalidInputError):
            activities_from_frame(pd.DataFrame({"id": ["A"]}))

    @pytest.mark.parametrize("cell,expected", [
        ("A;B", ["A", "B"]),
        ("A | B", ["A", "B"]),
        (" A ", ["A"]),
        ("", []),
        (float("nan"), []),
    ])
    def test_parse_dependencies(self, cell, expected):
        assert parse_dependencies(cell) == expected


class TestCsvRepositories:
    """Tests for file-backed providers."""

    def test_snapshot_history_per_program(self, samples_path):
        repo = CsvSnapshotRepository(samples_path)
        p1 = repo.get_snapshots("P1")
        assert [s.snapshot_id for s in p1] == ["M1", "M2", "M3"]
        assert [s.snapshot_id for s in repo.get_snapshots("P2")] == ["X1"]

    def test_trend_labels_use_prior_history(self, samples_path):
        p1 = CsvSnapshotRepository(samples_path).get_snapshots("P1")
        # SPI rises 0.90 -> 0.95 -> 1.0
        assert p1[-1].trend == TrendDirection.IMPROVING

    def test_date_window(self, samples_path):
        repo = CsvSnapshotRepository(samples_path)
        window = repo.get_snapshots("P1", start=date(2024, 2, 1), end=date(2024, 2, 29))
        assert [s.snapshot_id for s in window] == ["M2"]

    def test_activity_repository(self, activities_path):
        activities = CsvActivityRepository(activities_path).get_activities("any")
        assert len(activities) == 4
