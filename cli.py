#!/usr/bin/env python3
"""
CLI for Program Performance Analytics.

Usage:
    python cli.py metrics --pv 100000 --ev 95000 --ac 100000 --bac 300000
    python cli.py trend data/samples.csv --metric spi --window 3
    python cli.py forecast data/samples.csv --planned-completion 2025-06-30
    python cli.py critical-path data/activities.csv --format text

Commands:
    metrics        EVM metrics and health for one observation
    snapshot       Snapshot history built from a samples CSV
    trend          Metric trend or combined performance report
    anomalies      Z-score anomalies in a metric
    forecast       Budget and completion forecast with scenarios
    compare        Latest snapshot against a baseline snapshot
    critical-path  CPM schedule for an activity network
"""
from evm_analytics.cli import cli


if __name__ == '__main__':
    cli()
