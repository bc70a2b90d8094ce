"""
Configuration loader for Program Performance Analytics.

Loads settings from analytics_config.yaml and provides typed access
to all configuration sections. Defaults equal the standard thresholds,
so every calculation behaves identically with or without a config file
on hand.
"""
import math
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional, Tuple

import yaml

from evm_analytics.domain.exceptions import ConfigurationError


# Default config path shipped alongside the package
DEFAULT_CONFIG_PATH = Path(__file__).parent / "analytics_config.yaml"

CONFIG_PATH_ENV = "EVM_ANALYTICS_CONFIG"


# =============================================================================
# Typed sections
# =============================================================================

@dataclass(frozen=True)
class HealthThresholds:
    """Thresholds and score weighting for the 3-tier health classification."""

    critical: float = 0.85
    warning: float = 0.95
    favorable: float = 1.05
    tcpi_critical: float = 1.1
    cpi_weight: float = 0.5
    spi_weight: float = 0.5
    tcpi_difficult: float = 1.15
    tcpi_difficult_points: int = 20
    tcpi_elevated: float = 1.05
    tcpi_elevated_points: int = 10
    vac_significant_percent: float = 10.0
    vac_significant_points: int = 20
    vac_moderate_percent: float = 5.0
    vac_moderate_points: int = 10


@dataclass(frozen=True)
class RiskThresholds:
    """Cut-offs used when rolling CPI/SPI trends into a risk level."""

    high_index: float = 0.85
    declining_index: float = 0.9
    medium_index: float = 0.95
    medium_volatility: float = 0.15
    recommendation_volatility: float = 0.2
    health_forecast_floor: float = 60.0


@dataclass(frozen=True)
class TrendSettings:
    slope_threshold: float = 0.01
    moving_average_window: int = 3
    comparison_threshold: float = 0.02
    health_forecast_periods: int = 3
    risk: RiskThresholds = field(default_factory=RiskThresholds)


@dataclass(frozen=True)
class ScenarioDefinition:
    """One forecast scenario: EAC multiplier, completion shift, and weight."""

    name: str
    eac_factor: float
    day_offset: int
    probability: float


DEFAULT_SCENARIOS: Tuple[ScenarioDefinition, ...] = (
    ScenarioDefinition("optimistic", 0.95, -7, 0.15),
    ScenarioDefinition("realistic", 1.0, 0, 0.70),
    ScenarioDefinition("pessimistic", 1.10, 14, 0.15),
)


@dataclass(frozen=True)
class ForecastSettings:
    default_method: str = "cpi"
    on_time_tolerance_days: int = 7
    feasibility_tcpi: float = 1.1
    confidence_high: float = 0.1
    confidence_medium: float = 0.2
    scenarios: Tuple[ScenarioDefinition, ...] = DEFAULT_SCENARIOS


def validate_scenarios(scenarios: Tuple[ScenarioDefinition, ...]) -> None:
    """Scenario probabilities must be non-negative and sum to 1.0."""
    if not scenarios:
        raise ConfigurationError("At least one forecast scenario must be configured")
    if any(s.probability < 0 for s in scenarios):
        raise ConfigurationError("Scenario probabilities must be non-negative")
    total = sum(s.probability for s in scenarios)
    if not math.isclose(total, 1.0, abs_tol=1e-9):
        raise ConfigurationError(
            f"Scenario probabilities must sum to 1.0 (got {total:.4f})"
        )


# =============================================================================
# Config manager
# =============================================================================

class AnalyticsConfig:
    """
    Configuration manager for Program Performance Analytics.

    Loads YAML configuration and provides typed access to all sections.
    Use get_config() to obtain the shared instance.
    """

    def __init__(self, config_path: Optional[Path] = None):
        self._config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self._config: dict = {}
        self._load()

    def _load(self) -> None:
        """Load configuration from YAML file."""
        if not self._config_path.exists():
            raise ConfigurationError(f"Config file not found: {self._config_path}")

        try:
            with open(self._config_path, 'r') as f:
                self._config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file: {e}")

        if not isinstance(self._config, dict):
            raise ConfigurationError("Config file must contain a YAML mapping")

        # Fail at load time rather than at first forecast
        validate_scenarios(self.forecast_settings.scenarios)

    def reload(self) -> None:
        """Reload configuration from disk."""
        self._load()
        get_config.cache_clear()

    @property
    def config_path(self) -> Path:
        return self._config_path

    @property
    def version(self) -> str:
        """Configuration file version."""
        return self._config.get("version", "unknown")

    def _section(self, name: str) -> dict:
        section = self._config.get(name) or {}
        if not isinstance(section, dict):
            raise ConfigurationError(f"Config section '{name}' must be a mapping")
        return section

    # =========================================================================
    # Health
    # =========================================================================

    @property
    def health_thresholds(self) -> HealthThresholds:
        """Health classification thresholds."""
        health = self._section("health")
        weights = health.get("weights", {})
        penalties = health.get("penalties", {})
        defaults = HealthThresholds()
        return HealthThresholds(
            critical=float(health.get("critical_threshold", defaults.critical)),
            warning=float(health.get("warning_threshold", defaults.warning)),
            favorable=float(health.get("favorable_threshold", defaults.favorable)),
            tcpi_critical=float(health.get("tcpi_critical", defaults.tcpi_critical)),
            cpi_weight=float(weights.get("cpi", defaults.cpi_weight)),
            spi_weight=float(weights.get("spi", defaults.spi_weight)),
            tcpi_difficult=float(penalties.get("tcpi_difficult", defaults.tcpi_difficult)),
            tcpi_difficult_points=int(
                penalties.get("tcpi_difficult_points", defaults.tcpi_difficult_points)
            ),
            tcpi_elevated=float(penalties.get("tcpi_elevated", defaults.tcpi_elevated)),
            tcpi_elevated_points=int(
                penalties.get("tcpi_elevated_points", defaults.tcpi_elevated_points)
            ),
            vac_significant_percent=float(
                penalties.get("vac_significant_percent", defaults.vac_significant_percent)
            ),
            vac_significant_points=int(
                penalties.get("vac_significant_points", defaults.vac_significant_points)
            ),
            vac_moderate_percent=float(
                penalties.get("vac_moderate_percent", defaults.vac_moderate_percent)
            ),
            vac_moderate_points=int(
                penalties.get("vac_moderate_points", defaults.vac_moderate_points)
            ),
        )

    # =========================================================================
    # Trend & Anomaly
    # =========================================================================

    @property
    def trend_settings(self) -> TrendSettings:
        """Trend classification and risk roll-up settings."""
        trend = self._section("trend")
        risk = trend.get("risk", {})
        defaults = TrendSettings()
        risk_defaults = RiskThresholds()
        return TrendSettings(
            slope_threshold=float(trend.get("slope_threshold", defaults.slope_threshold)),
            moving_average_window=int(
                trend.get("moving_average_window", defaults.moving_average_window)
            ),
            comparison_threshold=float(
                trend.get("comparison_threshold", defaults.comparison_threshold)
            ),
            health_forecast_periods=int(
                trend.get("health_forecast_periods", defaults.health_forecast_periods)
            ),
            risk=RiskThresholds(
                high_index=float(risk.get("high_index", risk_defaults.high_index)),
                declining_index=float(
                    risk.get("declining_index", risk_defaults.declining_index)
                ),
                medium_index=float(risk.get("medium_index", risk_defaults.medium_index)),
                medium_volatility=float(
                    risk.get("medium_volatility", risk_defaults.medium_volatility)
                ),
                recommendation_volatility=float(
                    risk.get(
                        "recommendation_volatility",
                        risk_defaults.recommendation_volatility,
                    )
                ),
                health_forecast_floor=float(
                    risk.get("health_forecast_floor", risk_defaults.health_forecast_floor)
                ),
            ),
        )

    @property
    def anomaly_threshold(self) -> float:
        """Default z-score threshold for anomaly detection."""
        return float(self._section("anomaly").get("z_threshold", 2.0))

    # =========================================================================
    # Forecast
    # =========================================================================

    @property
    def forecast_settings(self) -> ForecastSettings:
        """Forecast confidence bands, tolerance, and scenario definitions."""
        forecast = self._section("forecast")
        confidence = forecast.get("confidence", {})
        defaults = ForecastSettings()

        raw_scenarios = forecast.get("scenarios")
        if raw_scenarios is None:
            scenarios = defaults.scenarios
        else:
            try:
                scenarios = tuple(
                    ScenarioDefinition(
                        name=str(s["name"]),
                        eac_factor=float(s.get("eac_factor", 1.0)),
                        day_offset=int(s.get("day_offset", 0)),
                        probability=float(s["probability"]),
                    )
                    for s in raw_scenarios
                )
            except (KeyError, TypeError, ValueError) as e:
                raise ConfigurationError(f"Invalid forecast scenario definition: {e}")

        return ForecastSettings(
            default_method=str(forecast.get("default_method", defaults.default_method)),
            on_time_tolerance_days=int(
                forecast.get("on_time_tolerance_days", defaults.on_time_tolerance_days)
            ),
            feasibility_tcpi=float(forecast.get("feasibility_tcpi", defaults.feasibility_tcpi)),
            confidence_high=float(confidence.get("high", defaults.confidence_high)),
            confidence_medium=float(confidence.get("medium", defaults.confidence_medium)),
            scenarios=scenarios,
        )

    # =========================================================================
    # Output
    # =========================================================================

    @property
    def money_decimals(self) -> int:
        return int(self._section("rounding").get("money", 2))

    @property
    def index_decimals(self) -> int:
        return int(self._section("rounding").get("index", 4))

    def get(self, key: str, default: Any = None) -> Any:
        """Get a top-level config value by key."""
        return self._config.get(key, default)

    def __getitem__(self, key: str) -> Any:
        """Dictionary-style access to config."""
        return self._config[key]

    def __contains__(self, key: str) -> bool:
        """Check if key exists in config."""
        return key in self._config


@lru_cache(maxsize=1)
def get_config(config_path: Optional[str] = None) -> AnalyticsConfig:
    """
    Get the shared configuration instance.

    Args:
        config_path: Optional path to config file. Falls back to the
            EVM_ANALYTICS_CONFIG environment variable, then the packaged default.

    Returns:
        AnalyticsConfig instance
    """
    path = config_path or os.environ.get(CONFIG_PATH_ENV)
    return AnalyticsConfig(Path(path) if path else None)


def reload_config() -> AnalyticsConfig:
    """Reload configuration from disk and return new instance."""
    get_config.cache_clear()
    return get_config()
