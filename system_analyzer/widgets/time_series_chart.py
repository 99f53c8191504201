from __future__ import annotations

import math
from typing import Dict, Hashable, Iterable, List, NamedTuple, Sequence, Tuple

from PySide6.QtCore import QMargins, QPointF, Qt
from PySide6.QtGui import QColor, QPainter
from PySide6.QtCharts import QChart, QChartView, QLineSeries, QValueAxis
from PySide6.QtWidgets import QSizePolicy, QVBoxLayout, QWidget


class PlotLine(NamedTuple):
    key: Hashable  # identifies the chart series; names may repeat
    name: str
    color: str  # "#rrggbb"
    points: Iterable[Tuple[float, float]]


def finite_points(points: Iterable[Tuple[float, float]]) -> List[Tuple[float, float]]:
    """Drop NaN "no data" samples; QtCharts cannot draw them."""
    return [(x, y) for x, y in points if not math.isnan(y)]


class TimeSeriesChart(QWidget):
    """Line chart over the virtual sampling clock, redrawn from series windows."""

    def __init__(self, title: str, y_title: str = "Value", legend_visible: bool = True) -> None:
        super().__init__()
        self._series: Dict[Hashable, QLineSeries] = {}

        layout = QVBoxLayout(self)
        self.chart = QChart()
        self.chart.setTheme(QChart.ChartThemeDark)
        self.chart.setTitle(title)
        self.chart.legend().setVisible(legend_visible)
        self.chart.legend().setAlignment(Qt.AlignBottom)
        self.chart.setAnimationOptions(QChart.NoAnimation)
        self.chart.setBackgroundVisible(False)
        self.chart.setMargins(QMargins(8, 8, 8, 8))

        self.axis_x = QValueAxis()
        self.axis_x.setTitleText("Seconds")
        self.axis_x.setTickCount(6)
        self.chart.addAxis(self.axis_x, Qt.AlignBottom)

        self.axis_y = QValueAxis()
        self.axis_y.setTitleText(y_title)
        self.axis_y.setTickCount(5)
        self.chart.addAxis(self.axis_y, Qt.AlignLeft)

        self.view = QChartView(self.chart)
        self.view.setRenderHint(QPainter.Antialiasing, True)
        self.view.setStyleSheet("background-color: transparent;")
        layout.addWidget(self.view)

        self.setSizePolicy(QSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding))

    def _line(self, key: Hashable, name: str, color: str) -> QLineSeries:
        s = self._series.get(key)
        if s is None:
            s = QLineSeries()
            self.chart.addSeries(s)
            s.attachAxis(self.axis_x)
            s.attachAxis(self.axis_y)
            self._series[key] = s
        s.setName(name)
        s.setColor(QColor(color))
        return s

    def set_lines(self, lines: Sequence[PlotLine]) -> None:
        """Show exactly ``lines``; series whose key is no longer listed are removed."""
        wanted = {line.key for line in lines}
        for key in list(self._series):
            if key not in wanted:
                self.chart.removeSeries(self._series.pop(key))
        for line in lines:
            s = self._line(line.key, line.name, line.color)
            s.replace([QPointF(x, y) for x, y in finite_points(line.points)])

    def set_bounds(self, x_min: float, x_max: float, y_min: float, y_max: float) -> None:
        self.axis_x.setRange(x_min, x_max)
        self.axis_y.setRange(y_min, y_max)
