"""
Health Classifier - Threshold-based project health assessment.

Maps an EVM metric set to a 3-tier status, a 0-100 score, and a list
of human-readable indicators. Pure threshold logic; no side effects.

Status:
- critical: CPI or SPI below 0.85, or TCPI above 1.1
- warning:  CPI or SPI below 0.95
- healthy:  otherwise

Score:
    cpi_weight * min(CPI, 1) * 100 + spi_weight * min(SPI, 1) * 100
    minus TCPI / VAC penalties, clamped to [0, 100]
"""
import logging
from typing import List, Optional

from evm_analytics.config import HealthThresholds
from ..entities import EVMMetrics, HealthLevel, HealthStatus

logger = logging.getLogger(__name__)


def classify_status(
    metrics: EVMMetrics,
    thresholds: Optional[HealthThresholds] = None,
) -> HealthLevel:
    """Return the health tier for a metric set."""
    t = thresholds or HealthThresholds()

    if metrics.cpi < t.critical or metrics.spi < t.critical or metrics.tcpi > t.tcpi_critical:
        return HealthLevel.CRITICAL
    if metrics.cpi < t.warning or metrics.spi < t.warning:
        return HealthLevel.WARNING
    return HealthLevel.HEALTHY


def calculate_health_score(
    metrics: EVMMetrics,
    thresholds: Optional[HealthThresholds] = None,
) -> int:
    """
    Weighted CPI/SPI composite with TCPI and VAC penalties.

    Non-decreasing in both CPI and SPI; indices above 1.0 earn no
    extra credit so a strong index cannot mask a weak one.
    """
    t = thresholds or HealthThresholds()

    score = (
        t.cpi_weight * min(max(metrics.cpi, 0.0), 1.0) * 100
        + t.spi_weight * min(max(metrics.spi, 0.0), 1.0) * 100
    )

    if metrics.tcpi > t.tcpi_difficult:
        score -= t.tcpi_difficult_points
    elif metrics.tcpi > t.tcpi_elevated:
        score -= t.tcpi_elevated_points

    if metrics.vac < 0:
        overrun_pct = abs(metrics.cv_percent)
        if overrun_pct > t.vac_significant_percent:
            score -= t.vac_significant_points
        elif overrun_pct > t.vac_moderate_percent:
            score -= t.vac_moderate_points

    return int(round(max(0.0, min(100.0, score))))


def build_indicators(
    metrics: EVMMetrics,
    status: HealthLevel,
    thresholds: Optional[HealthThresholds] = None,
) -> List[str]:
    """Human-readable indicator strings; first entry summarizes status."""
    t = thresholds or HealthThresholds()
    indicators: List[str] = []

    # Cost performance
    if metrics.cpi < t.critical:
        indicators.append(f"Critical cost overrun (CPI: {metrics.cpi:.2f})")
    elif metrics.cpi < t.warning:
        indicators.append(f"Moderate cost overrun (CPI: {metrics.cpi:.2f})")
    elif metrics.cpi >= t.favorable:
        indicators.append(f"Under budget (CPI: {metrics.cpi:.2f})")

    # Schedule performance
    if metrics.spi < t.critical:
        indicators.append(f"Critically behind schedule (SPI: {metrics.spi:.2f})")
    elif metrics.spi < t.warning:
        indicators.append(f"Moderately behind schedule (SPI: {metrics.spi:.2f})")
    elif metrics.spi >= t.favorable:
        indicators.append(f"Ahead of schedule (SPI: {metrics.spi:.2f})")

    # To-complete performance
    if metrics.tcpi > t.tcpi_critical:
        indicators.append(
            f"Difficult target performance required (TCPI: {metrics.tcpi:.2f})"
        )
    elif metrics.tcpi > t.tcpi_elevated:
        indicators.append(f"Improved performance needed (TCPI: {metrics.tcpi:.2f})")

    # Variance at completion
    if metrics.vac < 0:
        overrun_pct = abs(metrics.cv_percent)
        if overrun_pct > t.vac_significant_percent:
            indicators.append(
                f"Significant budget overrun expected (VAC: {metrics.vac:,.0f})"
            )
        elif overrun_pct > t.vac_moderate_percent:
            indicators.append(
                f"Moderate budget overrun expected (VAC: {metrics.vac:,.0f})"
            )
    elif metrics.vac > 0:
        indicators.append(f"Under budget at completion (VAC: {metrics.vac:,.0f})")

    summary = {
        HealthLevel.HEALTHY: "Project is performing well",
        HealthLevel.WARNING: "Project requires attention",
        HealthLevel.CRITICAL: "Project requires immediate action",
    }[status]
    indicators.insert(0, summary)

    return indicators


def classify_health(
    metrics: EVMMetrics,
    thresholds: Optional[HealthThresholds] = None,
) -> HealthStatus:
    """
    Assess overall project health from EVM metrics.

    Args:
        metrics: Derived EVM metric set
        thresholds: Optional overrides; defaults are the standard thresholds

    Returns:
        HealthStatus with tier, score and indicators
    """
    status = classify_status(metrics, thresholds)
    score = calculate_health_score(metrics, thresholds)
    indicators = build_indicators(metrics, status, thresholds)

    logger.debug(f"Health classified as {status.value} (score {score})")

    return HealthStatus(status=status, score=score, indicators=tuple(indicators))
