"""UI widgets for the system analyzer application."""

from .time_series_chart import PlotLine, TimeSeriesChart

__all__ = ["PlotLine", "TimeSeriesChart"]
