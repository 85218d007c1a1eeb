"""Shared helpers for formatting metric values and charts."""

from collections.abc import Iterable
from pathlib import Path

import numpy as np

FORMATS = ("currency", "percent", "days", "integer")


def to_numpy(values: Iterable[float | None]) -> np.ndarray:
    """Return the values as a 1D float array with absent entries as NaN."""
    if isinstance(values, np.ndarray):
        return values
    return np.asarray([np.nan if value is None else value for value in values], dtype=float)


def ensure_directory(path: str | Path) -> Path:
    """Create the directory at ``path`` if needed and return its Path."""
    directory = Path(path)
    if not directory.exists():
        directory.mkdir(parents=True, exist_ok=True)
    return directory


def format_percent(value: float, digits: int = 1) -> str:
    """Format a value expressed as a fraction as a percentage string."""
    return f"{value * 100:.{digits}f}%"


def format_currency(value: float) -> str:
    """Format a dollar amount with thousands separators and no cents."""
    return f"${value:,.0f}"


def format_number(value: float) -> str:
    """Format a count, dropping the decimal part for whole numbers."""
    if float(value).is_integer():
        return f"{value:,.0f}"
    return f"{value:,}"


def format_value(value: float | None, format_as: str) -> str:
    """Format a metric value for display; absent values render as ``N/A``."""
    if value is None:
        return "N/A"
    if format_as == "currency":
        return format_currency(value)
    if format_as == "percent":
        return format_percent(value)
    if format_as in {"days", "integer"}:
        return format_number(value)
    raise ValueError(f"Unsupported format {format_as!r}. Choose one of: {', '.join(FORMATS)}.")


def format_axis_value(value: float, format_as: str) -> str:
    """Compact tick labels such as ``$1.2M``, ``$450K`` or ``98%``."""
    if format_as == "percent":
        return f"{value * 100:.0f}%"
    prefix = "$" if format_as == "currency" else ""
    magnitude = abs(value)
    if magnitude >= 1_000_000:
        return f"{prefix}{value / 1_000_000:.1f}M"
    if magnitude >= 1_000:
        return f"{prefix}{value / 1_000:.0f}K"
    return f"{prefix}{value:.0f}"


def format_change(change: float | None, label: str = "YoY") -> str:
    """Render a YoY change as an arrow plus magnitude, or an empty string."""
    if change is None:
        return ""
    arrow = "▲" if change > 0 else "▼"
    return f"{arrow} {abs(change):.1f}% {label}"
