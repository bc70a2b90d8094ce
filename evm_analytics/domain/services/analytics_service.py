"""
Analytics Service - Report-level entry points over injected providers.

Fetches snapshot histories and activity networks from collaborators,
enforces report minimums, and delegates to the pure analytics functions.
"""
import logging
from datetime import date
from typing import List, Optional, Tuple, Union

from evm_analytics.config import AnalyticsConfig, get_config
from ..entities import (
    AnomalyResult,
    BaselineComparison,
    ForecastMethod,
    ForecastResult,
    PerformanceTrendAnalysis,
    RequiredPerformance,
    SchedulerResult,
    Snapshot,
    TrendAnalysis,
)
from ..exceptions import ConfigurationError, InsufficientDataError
from ..providers import ActivityGraphProvider, SnapshotHistoryProvider
from . import anomaly_detector, critical_path_scheduler, forecaster, trend_analyzer

logger = logging.getLogger(__name__)

MIN_TREND_SNAPSHOTS = 2


class AnalyticsService:
    """
    Service for program performance reporting.

    Collaborators are passed in explicitly; the service holds no state
    beyond them and every report is recomputed from provider data.
    """

    def __init__(
        self,
        snapshot_provider: SnapshotHistoryProvider,
        activity_provider: Optional[ActivityGraphProvider] = None,
        config: Optional[AnalyticsConfig] = None,
    ):
        self.snapshot_provider = snapshot_provider
        self.activity_provider = activity_provider
        self.config = config or get_config()

    def _history(
        self,
        program_id: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[Snapshot]:
        snapshots = self.snapshot_provider.get_snapshots(program_id, start, end)
        return sorted(snapshots, key=lambda s: s.date)

    def _require(self, snapshots: List[Snapshot], required: int, context: str) -> None:
        if len(snapshots) < required:
            raise InsufficientDataError(required, len(snapshots), context)

    # =========================================================================
    # Trend
    # =========================================================================

    def trend_report(
        self,
        program_id: str,
        metric: str = "cpi",
        start: Optional[date] = None,
        end: Optional[date] = None,
        window: Optional[int] = None,
    ) -> TrendAnalysis:
        """
        Trend of one metric over a program's history.

        Raises:
            InsufficientDataError: Fewer than 2 snapshots in range
        """
        settings = self.config.trend_settings
        snapshots = self._history(program_id, start, end)
        self._require(snapshots, MIN_TREND_SNAPSHOTS, "Trend report")

        logger.info(f"Trend report for {program_id}: {metric} over {len(snapshots)} snapshots")
        return trend_analyzer.analyze_trend(
            snapshots,
            metric,
            window or settings.moving_average_window,
            settings.slope_threshold,
        )

    def performance_report(
        self,
        program_id: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> PerformanceTrendAnalysis:
        """Combined CPI/SPI trend, health forecast and risk for a program."""
        settings = self.config.trend_settings
        snapshots = self._history(program_id, start, end)
        self._require(snapshots, MIN_TREND_SNAPSHOTS, "Performance report")

        return trend_analyzer.analyze_performance_trend(
            snapshots,
            window=settings.moving_average_window,
            slope_threshold=settings.slope_threshold,
            forecast_periods=settings.health_forecast_periods,
            risk=settings.risk,
        )

    # =========================================================================
    # Anomalies
    # =========================================================================

    def anomaly_report(
        self,
        program_id: str,
        metric: str = "cpi",
        threshold: Optional[float] = None,
    ) -> List[AnomalyResult]:
        """Z-score outliers for one metric; empty when history is short."""
        snapshots = self._history(program_id)
        if threshold is None:
            threshold = self.config.anomaly_threshold
        return anomaly_detector.detect_snapshot_anomalies(snapshots, metric, threshold)

    # =========================================================================
    # Forecast
    # =========================================================================

    def forecast_report(
        self,
        program_id: str,
        planned_completion: date,
        as_of: Optional[date] = None,
        method: Union[str, ForecastMethod, None] = None,
        target_eac: Optional[float] = None,
    ) -> Tuple[ForecastResult, RequiredPerformance]:
        """
        Budget/schedule forecast plus the efficiency needed to hit target_eac.

        Trend-based confidence is used when at least 2 snapshots exist.
        """
        forecast_settings = self.config.forecast_settings
        trend_settings = self.config.trend_settings
        snapshots = self._history(program_id)

        cpi_trend = spi_trend = None
        if len(snapshots) >= MIN_TREND_SNAPSHOTS:
            cpi_trend = trend_analyzer.analyze_trend(
                snapshots, "cpi", trend_settings.moving_average_window,
                trend_settings.slope_threshold,
            )
            spi_trend = trend_analyzer.analyze_trend(
                snapshots, "spi", trend_settings.moving_average_window,
                trend_settings.slope_threshold,
            )

        result = forecaster.forecast(
            snapshots,
            planned_completion,
            as_of=as_of,
            method=method or forecast_settings.default_method,
            cpi_trend=cpi_trend,
            spi_trend=spi_trend,
            settings=forecast_settings,
        )

        latest = snapshots[-1].sample
        required = forecaster.required_performance(
            latest.bac, latest.ev, latest.ac, target_eac, forecast_settings
        )

        logger.info(
            f"Forecast for {program_id}: EAC={result.estimated_budget:,.2f}, "
            f"completion={result.estimated_completion_date}"
        )
        return result, required

    # =========================================================================
    # Baseline & schedule
    # =========================================================================

    def baseline_comparison(
        self,
        program_id: str,
        baseline_id: str,
        planned_duration_days: int,
    ) -> BaselineComparison:
        """Latest snapshot against a named baseline snapshot."""
        snapshots = self._history(program_id)
        return trend_analyzer.compare_to_baseline(snapshots, baseline_id, planned_duration_days)

    def critical_path(self, program_id: str) -> SchedulerResult:
        """
        Critical path for a program's activity network.

        Raises:
            ConfigurationError: No activity provider was configured
        """
        if self.activity_provider is None:
            raise ConfigurationError("No activity provider configured for critical path analysis")

        activities = self.activity_provider.get_activities(program_id)
        return critical_path_scheduler.schedule(activities)
