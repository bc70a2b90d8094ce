"""
Data Loaders for Program Performance Analytics.

Reads caller-supplied CSV files into domain value objects:
- samples CSV:    date, pv, ev, ac, bac [, sample_id, program_id]
- activities CSV: id, duration [, dependencies, name, budgeted_cost]

Column names are matched case- and whitespace-insensitively.
Activity dependencies are separated by ';' or '|'.
"""
import logging
import re
from pathlib import Path
from typing import List, Optional, Sequence, Union

import pandas as pd

from evm_analytics.domain.entities import Activity, MetricSample
from evm_analytics.domain.exceptions import InvalidInputError

logger = logging.getLogger(__name__)

SAMPLE_REQUIRED_COLUMNS = ("date", "pv", "ev", "ac", "bac")
ACTIVITY_REQUIRED_COLUMNS = ("id", "duration")

DEPENDENCY_SEPARATOR = re.compile(r"[;|]")

PathLike = Union[str, Path]


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Lower-case column names and collapse inner whitespace to underscores."""
    df = df.copy()
    df.columns = [re.sub(r"\s+", "_", str(c).strip().lower()) for c in df.columns]
    return df


def _require_columns(df: pd.DataFrame, required: Sequence[str], source: str) -> None:
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise InvalidInputError(
            "columns", f"{source} is missing required columns: {', '.join(missing)}"
        )


def _optional_str(value) -> Optional[str]:
    if pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


def _numeric(df: pd.DataFrame, column: str, source: str) -> pd.Series:
    values = pd.to_numeric(df[column], errors="coerce")
    bad = df[column][values.isna() & df[column].notna()]
    if not bad.empty:
        raise InvalidInputError(column, f"{source} has non-numeric value {bad.iloc[0]!r}")
    return values


def parse_dependencies(value) -> List[str]:
    """Split a dependency cell into activity ids."""
    text = _optional_str(value)
    if text is None:
        return []
    return [part.strip() for part in DEPENDENCY_SEPARATOR.split(text) if part.strip()]


# =============================================================================
# DataFrame -> domain
# =============================================================================

def samples_from_frame(df: pd.DataFrame, source: str = "samples") -> List[MetricSample]:
    """Convert a samples DataFrame into MetricSample records sorted by date."""
    df = normalize_columns(df)
    _require_columns(df, SAMPLE_REQUIRED_COLUMNS, source)

    try:
        parsed = pd.to_datetime(df["date"])
    except (ValueError, TypeError) as e:
        raise InvalidInputError("date", f"{source} has an unparseable date: {e}")

    missing = parsed.isna()
    if missing.any():
        raise InvalidInputError("date", f"{source} has {int(missing.sum())} row(s) with a blank date")
    dates = parsed.dt.date

    amounts = {c: _numeric(df, c, source) for c in ("pv", "ev", "ac", "bac")}

    samples = []
    for i in range(len(df)):
        samples.append(MetricSample(
            date=dates.iloc[i],
            pv=amounts["pv"].iloc[i],
            ev=amounts["ev"].iloc[i],
            ac=amounts["ac"].iloc[i],
            bac=amounts["bac"].iloc[i],
            sample_id=_optional_str(df["sample_id"].iloc[i]) if "sample_id" in df else None,
            program_id=_optional_str(df["program_id"].iloc[i]) if "program_id" in df else None,
        ))

    samples.sort(key=lambda s: s.date)
    return samples


def activities_from_frame(df: pd.DataFrame, source: str = "activities") -> List[Activity]:
    """Convert an activities DataFrame into Activity records in file order."""
    df = normalize_columns(df)
    _require_columns(df, ACTIVITY_REQUIRED_COLUMNS, source)

    durations = _numeric(df, "duration", source)
    costs = _numeric(df, "budgeted_cost", source) if "budgeted_cost" in df else None

    activities = []
    for i in range(len(df)):
        activity_id = _optional_str(df["id"].iloc[i])
        if activity_id is None:
            raise InvalidInputError("id", f"{source} row {i + 1} has no activity id")

        duration = durations.iloc[i]
        if pd.isna(duration) or duration != int(duration):
            raise InvalidInputError(
                "duration", f"activity '{activity_id}' needs a whole-number duration"
            )

        cost = None
        if costs is not None and not pd.isna(costs.iloc[i]):
            cost = float(costs.iloc[i])

        activities.append(Activity.create(
            id=activity_id,
            duration=int(duration),
            dependencies=(
                parse_dependencies(df["dependencies"].iloc[i]) if "dependencies" in df else ()
            ),
            name=(_optional_str(df["name"].iloc[i]) or "") if "name" in df else "",
            budgeted_cost=cost,
        ))

    return activities


# =============================================================================
# Files
# =============================================================================

class DataLoader:
    """
    CSV loader for program samples and activity networks.

    Relative paths resolve against data_dir.
    """

    def __init__(self, data_dir: PathLike = "."):
        """
        Initialize loader.

        Args:
            data_dir: Directory containing data files
        """
        self.data_dir = Path(data_dir)

    def _resolve(self, path: PathLike) -> Path:
        path = Path(path)
        return path if path.is_absolute() else self.data_dir / path

    def _read(self, path: PathLike) -> pd.DataFrame:
        resolved = self._resolve(path)
        if not resolved.exists():
            raise InvalidInputError("path", f"file not found: {resolved}")
        df = pd.read_csv(resolved, dtype=str, skipinitialspace=True)
        logger.info(f"Loaded {resolved.name}: {len(df)} rows")
        return df

    def load_samples(self, path: PathLike, program_id: Optional[str] = None) -> List[MetricSample]:
        """
        Load metric samples, optionally filtered to one program.

        Args:
            path: Samples CSV
            program_id: Keep only rows for this program (when the column exists)

        Returns:
            MetricSample list ascending by date
        """
        samples = samples_from_frame(self._read(path), source=str(path))
        if program_id is not None:
            samples = [s for s in samples if s.program_id in (None, program_id)]
        return samples

    def load_activities(self, path: PathLike) -> List[Activity]:
        """Load an activity network."""
        return activities_from_frame(self._read(path), source=str(path))
