"""
Program Performance Analytics - EVM metrics, trends, forecasts and critical path.
"""

__version__ = "1.0.0"
