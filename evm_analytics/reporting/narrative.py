"""
Narrative - Human-readable text layered over structured analytics results.

These functions only format; nothing here is read back into a calculation.
"""
from typing import List

from evm_analytics.domain.entities import (
    BaselineComparison,
    EVMMetrics,
    ForecastResult,
    HealthStatus,
    PerformanceTrendAnalysis,
    RequiredPerformance,
    SchedulerResult,
    TrendAnalysis,
)


def _money(value: float) -> str:
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def describe_metrics(metrics: EVMMetrics) -> str:
    """Summarize cost and schedule status in a few sentences."""
    cost_state = "under budget" if metrics.cv >= 0 else "over budget"
    schedule_state = "ahead of schedule" if metrics.sv >= 0 else "behind schedule"

    lines = [
        f"Cost: {_money(metrics.cv)} variance ({metrics.cv_percent:.1f}%), "
        f"CPI {metrics.cpi:.2f} - {cost_state}.",
        f"Schedule: {_money(metrics.sv)} variance ({metrics.sv_percent:.1f}%), "
        f"SPI {metrics.spi:.2f} - {schedule_state}.",
        f"Estimate at completion {_money(metrics.eac)} "
        f"(VAC {_money(metrics.vac)}, ETC {_money(metrics.etc)}).",
        f"TCPI {metrics.tcpi:.2f}; {metrics.percent_complete:.1f}% complete "
        f"against {metrics.percent_schedule_complete:.1f}% planned.",
    ]
    return "\n".join(lines)


def describe_health(health: HealthStatus) -> str:
    lines = [f"Health: {health.status.value.upper()} (score {health.score}/100)"]
    lines.extend(f"  - {indicator}" for indicator in health.indicators)
    return "\n".join(lines)


def describe_trend(analysis: TrendAnalysis) -> str:
    """One-paragraph description of a single metric trend."""
    metric = analysis.metric.upper()
    if analysis.sample_count == 0:
        return f"{metric}: no data available."

    return (
        f"{metric} is {analysis.trend.value} over {analysis.sample_count} periods "
        f"(slope {analysis.slope:+.4f} per period, R² {analysis.r2:.2f}). "
        f"Current {analysis.current_value:.2f}, average {analysis.average_value:.2f}, "
        f"volatility {analysis.volatility:.1%}."
    )


def describe_performance(analysis: PerformanceTrendAnalysis) -> str:
    lines = [
        f"Overall trend: {analysis.overall_trend.value}; "
        f"risk level: {analysis.risk_level.value}.",
        describe_trend(analysis.cpi_analysis),
        describe_trend(analysis.spi_analysis),
        f"Health score trending {analysis.health_slope:+.1f} per period, "
        f"forecast {analysis.health_forecast}/100.",
        "Recommendations:",
    ]
    lines.extend(f"  - {r}" for r in analysis.recommendations)
    return "\n".join(lines)


def describe_forecast(result: ForecastResult) -> str:
    """Budget and completion forecast with scenarios."""
    completion = result.completion
    if completion.variance_days > 0:
        timing = f"{completion.variance_days} days late"
    elif completion.variance_days < 0:
        timing = f"{-completion.variance_days} days early"
    else:
        timing = "on the planned date"

    lines = [
        f"Forecast ({result.method.value} method, {result.confidence_level.value} confidence):",
        f"  Estimated budget: {_money(result.estimated_budget)} "
        f"(variance {_money(result.budget_variance)}, "
        f"remaining {_money(result.budget.etc)})",
        f"  Estimated completion: {result.estimated_completion_date.isoformat()} "
        f"({timing}; planned {completion.planned_date.isoformat()})",
    ]
    if not completion.on_time:
        lines.append("  Completion is outside the on-time tolerance.")

    if result.scenarios:
        lines.append("  Scenarios:")
        for scenario in result.scenarios:
            lines.append(
                f"    {scenario.name}: {_money(scenario.eac)} by "
                f"{scenario.completion_date.isoformat()} (p={scenario.probability:.2f})"
            )
    return "\n".join(lines)


def describe_required_performance(required: RequiredPerformance) -> str:
    if required.tcpi_target == 0 and not required.feasible:
        return (
            f"Target EAC {_money(required.target_eac)} leaves no remaining funds; "
            "not achievable."
        )
    verdict = "achievable" if required.feasible else "not realistically achievable"
    return (
        f"To finish at {_money(required.target_eac)}, remaining work must run at "
        f"TCPI {required.tcpi_target:.2f} (required CPI {required.required_cpi:.2f}); "
        f"{verdict}."
    )


def describe_baseline_comparison(comparison: BaselineComparison) -> str:
    if comparison.days_variance > 0:
        days = f"{comparison.days_variance} days further behind"
    elif comparison.days_variance < 0:
        days = f"{-comparison.days_variance} days recovered"
    else:
        days = "no schedule change"

    return (
        f"Since baseline {comparison.baseline_id} (now {comparison.current_id}): "
        f"cost variance changed {_money(comparison.cost_variance)}, "
        f"schedule variance changed {_money(comparison.schedule_variance)}; "
        f"CPI {comparison.cpi_change:+.2f}, SPI {comparison.spi_change:+.2f}; {days}."
    )


def describe_schedule(result: SchedulerResult) -> str:
    """Critical path summary plus a per-activity float table."""
    lines: List[str] = [
        f"Project duration: {result.total_duration} days",
        f"Critical path: {' -> '.join(result.critical_path_ids) or '(none)'}",
        "",
        f"{'Activity':<16}{'ES':>6}{'EF':>6}{'LS':>6}{'LF':>6}{'Slack':>7}{'Free':>6}",
    ]
    for scheduled in result.activities:
        marker = " *" if scheduled.critical else ""
        lines.append(
            f"{scheduled.id:<16}{scheduled.early_start:>6}{scheduled.early_finish:>6}"
            f"{scheduled.late_start:>6}{scheduled.late_finish:>6}"
            f"{scheduled.slack:>7}{scheduled.free_float:>6}{marker}"
        )
    return "\n".join(lines)
