"""
Metric Sample Entity - Raw cost/schedule observation for one reporting date.
"""
import math
from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..exceptions import InvalidInputError


@dataclass(frozen=True)
class MetricSample:
    """
    One observation of the four base EVM values.

    Attributes:
        date: Reporting (status) date
        pv: Planned Value - budgeted cost of work scheduled to date
        ev: Earned Value - budgeted cost of work performed to date
        ac: Actual Cost - cost incurred for work performed to date
        bac: Budget at Completion - total approved budget
        sample_id: Optional identifier carried through to anomaly results
        program_id: Optional owning program
    """

    date: date
    pv: float
    ev: float
    ac: float
    bac: float
    sample_id: Optional[str] = None
    program_id: Optional[str] = None

    def __post_init__(self) -> None:
        for name in ("pv", "ev", "ac", "bac"):
            value = getattr(self, name)
            try:
                value = float(value)
            except (TypeError, ValueError):
                raise InvalidInputError(name, f"must be numeric, got {value!r}")
            if not math.isfinite(value):
                raise InvalidInputError(name, f"must be finite, got {value}")
            if value < 0:
                raise InvalidInputError(name, f"must be non-negative, got {value}")
            object.__setattr__(self, name, value)

    def to_dict(self) -> dict:
        return {
            "sample_id": self.sample_id,
            "program_id": self.program_id,
            "date": self.date.isoformat(),
            "pv": self.pv,
            "ev": self.ev,
            "ac": self.ac,
            "bac": self.bac,
        }
