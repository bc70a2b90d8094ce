"""
CLI - Click command group for Program Performance Analytics.
"""

from .analytics_commands import cli

__all__ = ['cli']
