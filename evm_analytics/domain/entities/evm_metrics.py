"""
EVM Metrics Entity - Derived Earned Value indicators for a single sample.
"""
from dataclasses import asdict, dataclass, fields


@dataclass(frozen=True)
class EVMMetrics:
    """
    Full derived metric set for one (PV, EV, AC, BAC) observation.

    Variances are positive when favorable (under budget / ahead of
    schedule); indices above 1.0 are favorable, except TCPI where
    values above 1.0 mean remaining work must be done more efficiently.
    """

    cv: float
    sv: float
    cv_percent: float
    sv_percent: float
    cpi: float
    spi: float
    eac: float
    etc: float
    vac: float
    tcpi: float
    percent_complete: float
    percent_schedule_complete: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


# Selectable numeric fields for trend and anomaly analysis
METRIC_FIELDS = tuple(f.name for f in fields(EVMMetrics))
SAMPLE_FIELDS = ("pv", "ev", "ac", "bac")
