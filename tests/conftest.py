"""
Shared fixtures for analytics tests.
"""
from datetime import date

import pytest

from evm_analytics.domain.entities import MetricSample
from evm_analytics.domain.services.metrics_calculator import create_snapshot


def month_end(index: int) -> date:
    """Month-start dates from January 2024 onward."""
    year = 2024 + index // 12
    month = index % 12 + 1
    return date(year, month, 1)


def build_snapshots(cpis, spis=None, bac=1_000_000.0, program_id="P1"):
    """
    Snapshot history whose CPI/SPI follow the given series.

    PV grows by 50k per period; EV and AC are back-solved from SPI and CPI.
    """
    spis = spis if spis is not None else [1.0] * len(cpis)
    history = []
    for i, (cpi, spi) in enumerate(zip(cpis, spis)):
        pv = 50_000.0 * (i + 1)
        ev = pv * spi
        ac = ev / cpi
        sample = MetricSample(
            date=month_end(i), pv=pv, ev=ev, ac=ac, bac=bac,
            sample_id=f"S{i + 1}", program_id=program_id,
        )
        history.append(create_snapshot(sample, history=history))
    return history


@pytest.fixture
def snapshot_factory():
    return build_snapshots
