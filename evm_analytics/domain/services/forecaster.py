"""
Forecaster - Budget, completion-date and scenario projections.

EAC methods:
- cpi:       EAC = BAC / CPI                      (BAC when CPI == 0)
- cpi-spi:   EAC = AC + (BAC - EV) / (CPI * SPI)  (AC + BAC - EV when 0)
- bottom-up: EAC = AC + (BAC - EV)

Confidence buckets from trend volatility:
- high:   volatility < 0.1
- medium: volatility < 0.2
- low:    otherwise, or no trend available

Degenerate indices fall back to the planned baseline instead of raising.
"""
import logging
import math
from datetime import date, timedelta
from typing import List, Optional, Sequence, Union

from evm_analytics.config import ForecastSettings
from ..entities import (
    BudgetForecast,
    CompletionForecast,
    ConfidenceLevel,
    EVMMetrics,
    ForecastMethod,
    ForecastResult,
    ForecastScenario,
    MetricSample,
    RequiredPerformance,
    Snapshot,
    TrendAnalysis,
)
from ..entities.forecast import CONFIDENCE_RANK
from ..exceptions import InvalidInputError

logger = logging.getLogger(__name__)


# =============================================================================
# EAC methods
# =============================================================================

def forecast_eac_cpi(bac: float, cpi: float) -> float:
    """EAC assuming current cost efficiency persists."""
    if cpi <= 0:
        logger.warning("CPI is zero; EAC falls back to BAC")
        return bac
    return bac / cpi


def forecast_eac_cpi_spi(bac: float, ac: float, ev: float, cpi: float, spi: float) -> float:
    """EAC where both cost and schedule efficiency drive remaining work."""
    factor = cpi * spi
    if factor <= 0:
        logger.warning("CPI*SPI is zero; EAC falls back to AC + remaining budget")
        return ac + (bac - ev)
    return ac + (bac - ev) / factor


def forecast_eac_bottom_up(bac: float, ac: float, ev: float) -> float:
    """EAC assuming remaining work proceeds at budgeted rates."""
    return ac + (bac - ev)


def parse_method(method: Union[str, ForecastMethod]) -> ForecastMethod:
    try:
        return ForecastMethod(method)
    except ValueError:
        valid = ", ".join(m.value for m in ForecastMethod)
        raise InvalidInputError("method", f"unknown method '{method}'; expected one of {valid}")


def estimate_at_completion(
    sample: MetricSample,
    metrics: EVMMetrics,
    method: Union[str, ForecastMethod] = ForecastMethod.CPI,
) -> float:
    method = parse_method(method)
    if method == ForecastMethod.CPI_SPI:
        return forecast_eac_cpi_spi(sample.bac, sample.ac, sample.ev, metrics.cpi, metrics.spi)
    if method == ForecastMethod.BOTTOM_UP:
        return forecast_eac_bottom_up(sample.bac, sample.ac, sample.ev)
    return forecast_eac_cpi(sample.bac, metrics.cpi)


# =============================================================================
# Budget & schedule
# =============================================================================

def confidence_from_volatility(
    volatility: Optional[float],
    settings: Optional[ForecastSettings] = None,
) -> ConfidenceLevel:
    settings = settings or ForecastSettings()
    if volatility is None:
        return ConfidenceLevel.LOW
    if volatility < settings.confidence_high:
        return ConfidenceLevel.HIGH
    if volatility < settings.confidence_medium:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


def forecast_budget(
    sample: MetricSample,
    metrics: EVMMetrics,
    method: Union[str, ForecastMethod] = ForecastMethod.CPI,
    cpi_trend: Optional[TrendAnalysis] = None,
    settings: Optional[ForecastSettings] = None,
) -> BudgetForecast:
    """
    Forecast final cost.

    Args:
        sample: Latest base values
        metrics: Latest derived metrics
        method: EAC method
        cpi_trend: CPI trend analysis, used for confidence
        settings: Confidence bands

    Returns:
        BudgetForecast with EAC, ETC (never negative), VAC and confidence
    """
    method = parse_method(method)
    eac = estimate_at_completion(sample, metrics, method)
    volatility = cpi_trend.volatility if cpi_trend is not None else None

    return BudgetForecast(
        eac=eac,
        etc=max(0.0, eac - sample.ac),
        vac=sample.bac - eac,
        method=method,
        confidence=confidence_from_volatility(volatility, settings),
    )


def forecast_completion_date(
    spi: float,
    planned_date: date,
    as_of: date,
    settings: Optional[ForecastSettings] = None,
) -> CompletionForecast:
    """
    Project the finish date from schedule efficiency.

    forecast = as_of + ceil(remaining_planned_days / SPI); with SPI of 0
    the planned date is kept. variance_days is positive when late.
    """
    settings = settings or ForecastSettings()
    remaining_days = max(0, (planned_date - as_of).days)

    if spi > 0:
        forecast_date = as_of + timedelta(days=math.ceil(remaining_days / spi))
    else:
        logger.warning("SPI is zero; completion forecast falls back to planned date")
        forecast_date = planned_date

    variance_days = (forecast_date - planned_date).days

    return CompletionForecast(
        planned_date=planned_date,
        forecast_date=forecast_date,
        variance_days=variance_days,
        on_time=variance_days <= settings.on_time_tolerance_days,
    )


def generate_scenarios(
    eac: float,
    forecast_date: date,
    settings: Optional[ForecastSettings] = None,
) -> List[ForecastScenario]:
    """Optimistic / realistic / pessimistic projections around a base forecast."""
    settings = settings or ForecastSettings()
    return [
        ForecastScenario(
            name=definition.name,
            eac=eac * definition.eac_factor,
            completion_date=forecast_date + timedelta(days=definition.day_offset),
            probability=definition.probability,
        )
        for definition in settings.scenarios
    ]


def required_performance(
    bac: float,
    ev: float,
    ac: float,
    target_eac: Optional[float] = None,
    settings: Optional[ForecastSettings] = None,
) -> RequiredPerformance:
    """
    Efficiency the remaining work must sustain to land on target_eac.

    Feasible when tcpi_target <= feasibility limit (default 1.1), so finished
    work (EV == BAC) is feasible. A target at or below spend to date leaves
    no room: both indices are 0 and the target is infeasible.
    """
    settings = settings or ForecastSettings()
    target = bac if target_eac is None else target_eac
    remaining_funds = target - ac

    if remaining_funds <= 0:
        return RequiredPerformance(
            target_eac=target, required_cpi=0.0, tcpi_target=0.0, feasible=False
        )

    required_cpi = (bac - ac) / remaining_funds
    tcpi_target = (bac - ev) / remaining_funds

    return RequiredPerformance(
        target_eac=target,
        required_cpi=required_cpi,
        tcpi_target=tcpi_target,
        feasible=tcpi_target <= settings.feasibility_tcpi,
    )


# =============================================================================
# Consolidated forecast
# =============================================================================

def _worse(a: ConfidenceLevel, b: ConfidenceLevel) -> ConfidenceLevel:
    return a if CONFIDENCE_RANK[a] <= CONFIDENCE_RANK[b] else b


def forecast(
    snapshots: Sequence[Snapshot],
    planned_completion: date,
    as_of: Optional[date] = None,
    method: Union[str, ForecastMethod] = ForecastMethod.CPI,
    cpi_trend: Optional[TrendAnalysis] = None,
    spi_trend: Optional[TrendAnalysis] = None,
    settings: Optional[ForecastSettings] = None,
) -> ForecastResult:
    """
    Forecast budget and completion from the latest snapshot.

    Args:
        snapshots: Snapshot history (any order; latest by date is used)
        planned_completion: Baseline completion date
        as_of: Forecast reference date; defaults to the latest snapshot date
        method: EAC method
        cpi_trend: CPI trend analysis for confidence
        spi_trend: SPI trend analysis for confidence
        settings: Forecast settings

    Returns:
        ForecastResult

    Raises:
        InvalidInputError: No snapshots, or BAC <= 0
    """
    if not snapshots:
        raise InvalidInputError("snapshots", "at least one snapshot is required to forecast")

    settings = settings or ForecastSettings()
    latest = max(snapshots, key=lambda s: s.date)
    if latest.sample.bac <= 0:
        raise InvalidInputError("bac", f"must be positive to forecast, got {latest.sample.bac}")

    as_of = as_of or latest.date

    budget = forecast_budget(latest.sample, latest.metrics, method, cpi_trend, settings)
    completion = forecast_completion_date(
        latest.metrics.spi, planned_completion, as_of, settings
    )
    scenarios = generate_scenarios(budget.eac, completion.forecast_date, settings)

    spi_confidence = confidence_from_volatility(
        spi_trend.volatility if spi_trend is not None else None, settings
    )
    confidence = _worse(budget.confidence, spi_confidence)

    logger.debug(
        f"Forecast from {latest.snapshot_id}: EAC={budget.eac:,.2f} "
        f"completion={completion.forecast_date} confidence={confidence.value}"
    )

    return ForecastResult(
        estimated_completion_date=completion.forecast_date,
        estimated_budget=budget.eac,
        budget_variance=budget.vac,
        schedule_variance=completion.variance_days,
        confidence_level=confidence,
        method=budget.method,
        budget=budget,
        completion=completion,
        scenarios=tuple(scenarios),
    )
