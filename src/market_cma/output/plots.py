"""Plotting tools for comparative market metrics."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

import matplotlib.dates as mdates
import matplotlib.pyplot as plt
import numpy as np
from matplotlib.ticker import FuncFormatter

from .utils import FORMATS, ensure_directory, format_axis_value, to_numpy

PRIMARY_COLOR = "#22d3ee"
COMPARISON_COLOR = "#f472b6"
NATIONAL_COLOR = "#a78bfa"
DEFAULT_COLORS = (PRIMARY_COLOR, COMPARISON_COLOR, NATIONAL_COLOR)


@dataclass(frozen=True)
class ChartConfig:
    """Styling options for a multi-line metric chart."""

    title: str = "Market Metric"
    format_as: str = "integer"
    ylabel: str = ""
    colors: Sequence[str] = DEFAULT_COLORS
    line_width: float = 2.0
    figsize: tuple[float, float] = (11, 6)
    color_overrides: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate the value format up front."""
        if self.format_as not in FORMATS:
            raise ValueError(
                f"Unsupported format {self.format_as!r}. Choose one of: {', '.join(FORMATS)}."
            )

    def color_for(self, name: str, index: int) -> str:
        """Return the line color for the ``index``-th series."""
        if name in self.color_overrides:
            return self.color_overrides[name]
        return self.colors[index % len(self.colors)]


@dataclass(frozen=True)
class ChartReport:
    """Metadata describing a saved chart."""

    path: Path
    series: tuple[str, ...]
    dates: int


def chart_arrays(
    rows: Sequence[Mapping[str, Any]],
    names: Sequence[str],
) -> tuple[list[date], dict[str, np.ndarray]]:
    """Split merged rows into a date axis and one NaN-gapped array per series."""
    dates = [row["date"] for row in rows]
    columns = {name: to_numpy([row.get(name) for row in rows]) for name in names}
    return dates, columns


def generate_metric_chart(
    rows: Sequence[Mapping[str, Any]],
    names: Sequence[str],
    *,
    output_dir: str | Path = "out",
    filename: str = "chart.png",
    config: ChartConfig | None = None,
) -> ChartReport:
    """Render merged chart rows as one line per series; gaps stay unconnected."""
    if not rows:
        raise ValueError("No data points available to chart.")
    config = config or ChartConfig()
    out_dir = ensure_directory(output_dir)
    dates, columns = chart_arrays(rows, names)

    fig, ax = plt.subplots(figsize=config.figsize)
    for index, name in enumerate(names):
        ax.plot(
            dates,
            columns[name],
            color=config.color_for(name, index),
            linewidth=config.line_width,
            label=name,
        )

    ax.set_title(config.title)
    if config.ylabel:
        ax.set_ylabel(config.ylabel)
    ax.yaxis.set_major_formatter(
        FuncFormatter(lambda value, _pos: format_axis_value(value, config.format_as))
    )
    ax.xaxis.set_major_formatter(mdates.DateFormatter("%b '%y"))
    ax.legend(loc="upper left")
    ax.grid(True, linestyle="--", linewidth=0.5, alpha=0.6)
    fig.autofmt_xdate()
    fig.tight_layout()

    output_path = out_dir / filename
    fig.savefig(output_path, dpi=150)
    plt.close(fig)
    return ChartReport(path=output_path, series=tuple(names), dates=len(dates))


__all__ = [
    "COMPARISON_COLOR",
    "ChartConfig",
    "ChartReport",
    "NATIONAL_COLOR",
    "PRIMARY_COLOR",
    "chart_arrays",
    "generate_metric_chart",
]
