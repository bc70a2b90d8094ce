"""
Analytics CLI Commands - Command-line access to the analytics core.

Provides commands for:
- EVM metrics and health for a single observation
- Snapshot histories built from a samples CSV
- Trend, anomaly, forecast and baseline reports
- Critical path analysis of an activity network
"""
import json
import logging
from datetime import date
from typing import Any, Optional

import click

from evm_analytics import __version__
from evm_analytics.config import get_config
from evm_analytics.domain.entities import ForecastMethod, MetricSample
from evm_analytics.domain.exceptions import DomainError
from evm_analytics.domain.services import (
    AnalyticsService,
    calculate_evm_metrics,
    classify_health,
)
from evm_analytics.infrastructure.repositories import (
    CsvActivityRepository,
    CsvSnapshotRepository,
)
from evm_analytics.reporting import narrative

logger = logging.getLogger(__name__)

DATE = click.DateTime(formats=["%Y-%m-%d"])

MONEY_KEYS = {
    "pv", "ev", "ac", "bac", "cv", "sv", "eac", "etc", "vac",
    "cost_variance", "schedule_variance", "cost_delta", "schedule_delta",
    "estimated_budget", "budget_variance", "target_eac",
}


def round_output(data: Any, money_decimals: int, index_decimals: int, key: str = "") -> Any:
    """Round floats for display; structured results stay unrounded."""
    if isinstance(data, dict):
        return {k: round_output(v, money_decimals, index_decimals, k) for k, v in data.items()}
    if isinstance(data, list):
        return [round_output(v, money_decimals, index_decimals, key) for v in data]
    if isinstance(data, float):
        return round(data, money_decimals if key in MONEY_KEYS else index_decimals)
    return data


def emit(ctx: click.Context, payload: Any, text: str) -> None:
    """Write JSON or narrative output according to --format."""
    if ctx.obj["format"] == "text":
        click.echo(text)
        return
    config = ctx.obj["config"]
    rounded = round_output(payload, config.money_decimals, config.index_decimals)
    click.echo(json.dumps(rounded, indent=2, default=str))


def _service(ctx: click.Context, samples: Optional[str] = None,
             activities: Optional[str] = None) -> AnalyticsService:
    config = ctx.obj["config"]
    snapshot_repo = None
    if samples:
        snapshot_repo = CsvSnapshotRepository(
            samples,
            thresholds=config.health_thresholds,
            slope_threshold=config.trend_settings.slope_threshold,
        )
    activity_repo = CsvActivityRepository(activities) if activities else None
    return AnalyticsService(snapshot_repo, activity_repo, config=config)


def _as_date(value) -> Optional[date]:
    return value.date() if value is not None else None


class DomainErrorGroup(click.Group):
    """Click group that reports DomainError as a clean CLI failure."""

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except DomainError as e:
            logger.debug(f"Command failed with {e.code}", exc_info=True)
            raise click.ClickException(f"[{e.code}] {e.message}")


@click.group(cls=DomainErrorGroup)
@click.version_option(version=__version__)
@click.option('--config', 'config_path', default=None, type=click.Path(exists=True),
              help='Path to analytics configuration YAML file')
@click.option('--format', 'output_format', type=click.Choice(['json', 'text']),
              default='json', show_default=True, help='Output format')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[str], output_format: str, verbose: bool):
    """Program Performance Analytics CLI.

    Compute EVM metrics, trends, anomalies, forecasts and critical paths
    from CSV inputs.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    ctx.ensure_object(dict)
    ctx.obj["config"] = get_config(config_path)
    ctx.obj["format"] = output_format


@cli.command()
@click.option('--pv', type=float, required=True, help='Planned value')
@click.option('--ev', type=float, required=True, help='Earned value')
@click.option('--ac', type=float, required=True, help='Actual cost')
@click.option('--bac', type=float, required=True, help='Budget at completion')
@click.pass_context
def metrics(ctx: click.Context, pv: float, ev: float, ac: float, bac: float):
    """Calculate EVM metrics and health for one observation."""
    sample = MetricSample(date=date.today(), pv=pv, ev=ev, ac=ac, bac=bac)
    evm = calculate_evm_metrics(sample.pv, sample.ev, sample.ac, sample.bac)
    health = classify_health(evm, ctx.obj["config"].health_thresholds)

    emit(
        ctx,
        {"metrics": evm.to_dict(), "health": health.to_dict()},
        narrative.describe_metrics(evm) + "\n\n" + narrative.describe_health(health),
    )


@cli.command()
@click.argument('samples', type=click.Path(exists=True))
@click.option('--program', default='default', help='Program id to select')
@click.pass_context
def snapshot(ctx: click.Context, samples: str, program: str):
    """Build the snapshot history for a samples CSV."""
    service = _service(ctx, samples=samples)
    history = service.snapshot_provider.get_snapshots(program)

    lines = [
        f"{s.snapshot_id} ({s.date.isoformat()}): CPI {s.metrics.cpi:.2f}, "
        f"SPI {s.metrics.spi:.2f}, {s.trend.value}, "
        f"{s.health.status.value if s.health else 'unclassified'}"
        for s in history
    ]
    emit(ctx, [s.to_dict() for s in history], "\n".join(lines) or "No snapshots.")


@cli.command()
@click.argument('samples', type=click.Path(exists=True))
@click.option('--program', default='default', help='Program id to select')
@click.option('--metric', default='cpi', show_default=True, help='Metric to analyze')
@click.option('--window', type=int, default=None, help='Moving average window')
@click.option('--start', type=DATE, default=None, help='Window start (YYYY-MM-DD)')
@click.option('--end', type=DATE, default=None, help='Window end (YYYY-MM-DD)')
@click.option('--performance', is_flag=True,
              help='Combined CPI/SPI performance report instead of a single metric')
@click.pass_context
def trend(ctx: click.Context, samples: str, program: str, metric: str,
          window: Optional[int], start, end, performance: bool):
    """Analyze a metric trend over the sample history."""
    service = _service(ctx, samples=samples)

    if performance:
        result = service.performance_report(program, _as_date(start), _as_date(end))
        emit(ctx, result.to_dict(), narrative.describe_performance(result))
        return

    result = service.trend_report(program, metric, _as_date(start), _as_date(end), window)
    emit(ctx, result.to_dict(), narrative.describe_trend(result))


@cli.command()
@click.argument('samples', type=click.Path(exists=True))
@click.option('--program', default='default', help='Program id to select')
@click.option('--metric', default='cpi', show_default=True, help='Metric to analyze')
@click.option('--threshold', type=float, default=None, help='Z-score threshold')
@click.pass_context
def anomalies(ctx: click.Context, samples: str, program: str, metric: str,
              threshold: Optional[float]):
    """Detect z-score anomalies in a metric."""
    service = _service(ctx, samples=samples)
    results = service.anomaly_report(program, metric, threshold)

    if results:
        text = "\n".join(
            f"{a.sample_id}: {metric} {a.value:.4f} (z={a.z_score:+.2f}, {a.deviation.value})"
            for a in results
        )
    else:
        text = "No anomalies detected."
    emit(ctx, [a.to_dict() for a in results], text)


@cli.command()
@click.argument('samples', type=click.Path(exists=True))
@click.option('--planned-completion', type=DATE, required=True,
              help='Planned completion date (YYYY-MM-DD)')
@click.option('--program', default='default', help='Program id to select')
@click.option('--as-of', type=DATE, default=None,
              help='Forecast reference date; defaults to the latest sample date')
@click.option('--method', type=click.Choice([m.value for m in ForecastMethod]),
              default=None, help='EAC forecasting method')
@click.option('--target-eac', type=float, default=None,
              help='Target EAC for required performance (defaults to BAC)')
@click.pass_context
def forecast(ctx: click.Context, samples: str, planned_completion, program: str,
             as_of, method: Optional[str], target_eac: Optional[float]):
    """Forecast final cost and completion date."""
    service = _service(ctx, samples=samples)
    result, required = service.forecast_report(
        program,
        planned_completion.date(),
        as_of=_as_date(as_of),
        method=method,
        target_eac=target_eac,
    )

    emit(
        ctx,
        {"forecast": result.to_dict(), "required_performance": required.to_dict()},
        narrative.describe_forecast(result) + "\n"
        + narrative.describe_required_performance(required),
    )


@cli.command()
@click.argument('samples', type=click.Path(exists=True))
@click.option('--baseline', 'baseline_id', required=True, help='Baseline snapshot id')
@click.option('--planned-duration', type=int, required=True,
              help='Planned program duration in days')
@click.option('--program', default='default', help='Program id to select')
@click.pass_context
def compare(ctx: click.Context, samples: str, baseline_id: str,
            planned_duration: int, program: str):
    """Compare the latest snapshot against a baseline snapshot."""
    service = _service(ctx, samples=samples)
    result = service.baseline_comparison(program, baseline_id, planned_duration)
    emit(ctx, result.to_dict(), narrative.describe_baseline_comparison(result))


@cli.command('critical-path')
@click.argument('activities', type=click.Path(exists=True))
@click.option('--program', default='default', help='Program id to select')
@click.pass_context
def critical_path(ctx: click.Context, activities: str, program: str):
    """Compute the critical path of an activity network."""
    service = _service(ctx, activities=activities)
    result = service.critical_path(program)
    emit(ctx, result.to_dict(), narrative.describe_schedule(result))
