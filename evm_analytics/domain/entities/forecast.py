"""
Forecast Entities - Budget, completion-date and scenario projections.
"""
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Tuple


class ForecastMethod(str, Enum):
    """EAC forecasting methods."""
    CPI = "cpi"                # EAC = BAC / CPI
    CPI_SPI = "cpi-spi"        # EAC = AC + (BAC - EV) / (CPI * SPI)
    BOTTOM_UP = "bottom-up"    # EAC = AC + (BAC - EV)


class ConfidenceLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


CONFIDENCE_RANK = {
    ConfidenceLevel.HIGH: 2,
    ConfidenceLevel.MEDIUM: 1,
    ConfidenceLevel.LOW: 0,
}


@dataclass(frozen=True)
class BudgetForecast:
    eac: float
    etc: float
    vac: float
    method: ForecastMethod
    confidence: ConfidenceLevel

    def to_dict(self) -> dict:
        return {
            "eac": self.eac,
            "etc": self.etc,
            "vac": self.vac,
            "method": self.method.value,
            "confidence": self.confidence.value,
        }


@dataclass(frozen=True)
class CompletionForecast:
    planned_date: date
    forecast_date: date
    variance_days: int  # positive = late
    on_time: bool

    def to_dict(self) -> dict:
        return {
            "planned_date": self.planned_date.isoformat(),
            "forecast_date": self.forecast_date.isoformat(),
            "variance_days": self.variance_days,
            "on_time": self.on_time,
        }


@dataclass(frozen=True)
class ForecastScenario:
    name: str
    eac: float
    completion_date: date
    probability: float

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "eac": self.eac,
            "completion_date": self.completion_date.isoformat(),
            "probability": self.probability,
        }


@dataclass(frozen=True)
class RequiredPerformance:
    """
    Efficiency the remaining work must sustain to land on a target EAC.

    required_cpi: (BAC - AC) / (target - AC)
    tcpi_target:  (BAC - EV) / (target - AC)
    Both are 0 when the target equals spend to date.
    """
    target_eac: float
    required_cpi: float
    tcpi_target: float
    feasible: bool

    def to_dict(self) -> dict:
        return {
            "target_eac": self.target_eac,
            "required_cpi": self.required_cpi,
            "tcpi_target": self.tcpi_target,
            "feasible": self.feasible,
        }


@dataclass(frozen=True)
class ForecastResult:
    """Consolidated budget and schedule forecast for a program."""
    estimated_completion_date: date
    estimated_budget: float
    budget_variance: float
    schedule_variance: int
    confidence_level: ConfidenceLevel
    method: ForecastMethod
    budget: BudgetForecast
    completion: CompletionForecast
    scenarios: Tuple[ForecastScenario, ...] = ()

    def to_dict(self) -> dict:
        return {
            "estimated_completion_date": self.estimated_completion_date.isoformat(),
            "estimated_budget": self.estimated_budget,
            "budget_variance": self.budget_variance,
            "schedule_variance": self.schedule_variance,
            "confidence_level": self.confidence_level.value,
            "method": self.method.value,
            "budget": self.budget.to_dict(),
            "completion": self.completion.to_dict(),
            "scenarios": [s.to_dict() for s in self.scenarios],
        }
