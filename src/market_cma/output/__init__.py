"""Visualization and formatting utilities for market analytics."""

from .plots import ChartConfig, ChartReport, generate_metric_chart
from .utils import format_change, format_value

__all__ = [
    "ChartConfig",
    "ChartReport",
    "format_change",
    "format_value",
    "generate_metric_chart",
]
