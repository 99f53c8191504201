"""
SIA - System Information Analyzer (PySide6)

Dependencies:
- PySide6 (Qt 6)
- psutil
- pydantic-settings
- nvidia-ml-py (NVIDIA GPU metrics; system nvidia-smi is used as fallback)

Install:
  pip install -e .

Run:
  system-analyzer        (or: python -m system_analyzer.app)

Notes:
- Samples once per SIA_SAMPLE_PERIOD seconds (default 1.0) regardless of how
  often the window redraws (SIA_REFRESH_INTERVAL_MS, default 16 ms).
- Temperatures come from /sys/class/hwmon, core clocks from
  /sys/devices/system/cpu; both are discovered once at startup.
- Keyboard shortcuts: Esc=Quit
"""
from __future__ import annotations

import logging
import sys
import time
from typing import List, Optional

from PySide6.QtCore import Qt, QTimer
from PySide6.QtGui import QAction, QColor, QKeySequence
from PySide6.QtWidgets import (
    QApplication,
    QCheckBox,
    QColorDialog,
    QComboBox,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QSpinBox,
    QSplitter,
    QTreeWidget,
    QTreeWidgetItem,
    QVBoxLayout,
    QWidget,
)

from system_analyzer.config import MonitorSettings, get_settings
from system_analyzer.core.engine import TelemetryEngine
from system_analyzer.core.palette import group_palette, theme_color
from system_analyzer.core.series import Channel
from system_analyzer.providers.gpu_provider import probe_accelerator
from system_analyzer.providers.system_provider import PsutilSystemProvider
from system_analyzer.ui.view_state import (
    GPU_CLOCK_CHANNELS,
    KHZ_PER_GHZ,
    LegendPlacement,
    ViewState,
)
from system_analyzer.utils.theme import apply_dark_theme, font_stylesheet
from system_analyzer.widgets import PlotLine, TimeSeriesChart

logger = logging.getLogger(__name__)

STATUS_MARKERS = {"hot": " 🔥", "warn": " 🥵"}

GPU_CLOCK_LABELS = {
    Channel.GPU_CLOCK_GRAPHICS: "GPU Graphics",
    Channel.GPU_CLOCK_STREAMING: "GPU SM",
    Channel.GPU_CLOCK_MEMORY: "GPU Memory",
    Channel.GPU_CLOCK_VIDEO: "GPU Video",
}

# Tree item roles: what a checkbox controls and which entity it refers to
ROLE_KIND = Qt.UserRole
ROLE_REF = Qt.UserRole + 1


class SystemAnalyzer(QMainWindow):
    def __init__(self, engine: TelemetryEngine, settings: MonitorSettings) -> None:
        super().__init__()
        self.engine = engine
        self.settings = settings
        self.view = ViewState.from_engine(engine, window_secs=settings.display_window_secs)
        self._started = time.monotonic()
        self._dirty = True
        self._syncing_tree = False

        self.setWindowTitle(settings.app_name)
        self.resize(1230, 1130)

        self._build_toolbar()

        central = QWidget()
        self.setCentralWidget(central)
        root = QVBoxLayout(central)

        self.lbl_status = QLabel("")
        self.lbl_status.setObjectName("Status")
        root.addWidget(self.lbl_status)

        splitter = QSplitter(Qt.Horizontal)
        root.addWidget(splitter, 1)

        charts = QWidget()
        charts_l = QVBoxLayout(charts)
        self.chart_util = TimeSeriesChart("Utilization", "%")
        self.chart_temp = TimeSeriesChart("Temperatures (°C)", "°C", legend_visible=False)
        self.chart_freq = TimeSeriesChart("Frequencies (GHz)", "GHz", legend_visible=False)
        charts_l.addWidget(self.chart_util)
        charts_l.addWidget(self.chart_temp)
        charts_l.addWidget(self.chart_freq)
        self.lbl_legend_footer = QLabel("")
        self.lbl_legend_footer.setObjectName("Legend")
        self.lbl_legend_footer.setWordWrap(True)
        self.lbl_legend_footer.setTextFormat(Qt.RichText)
        charts_l.addWidget(self.lbl_legend_footer)
        splitter.addWidget(charts)

        side = QWidget()
        side_l = QVBoxLayout(side)
        self.lbl_legend_side = QLabel("")
        self.lbl_legend_side.setObjectName("Legend")
        self.lbl_legend_side.setTextFormat(Qt.RichText)
        self.lbl_legend_side.setAlignment(Qt.AlignTop)
        side_l.addWidget(self.lbl_legend_side)
        freq_buttons = QHBoxLayout()
        btn_all = QPushButton("All cores")
        btn_none = QPushButton("No cores")
        btn_all.clicked.connect(lambda: self.on_all_frequencies(True))
        btn_none.clicked.connect(lambda: self.on_all_frequencies(False))
        freq_buttons.addWidget(btn_all)
        freq_buttons.addWidget(btn_none)
        side_l.addLayout(freq_buttons)
        self.sensor_tree = QTreeWidget()
        self.sensor_tree.setHeaderLabels(["Sensors"])
        self.sensor_tree.itemChanged.connect(self.on_tree_item_changed)
        side_l.addWidget(self.sensor_tree, 1)
        splitter.addWidget(side)

        self._populate_sensor_tree()
        self._apply_legend_placement()
        self._apply_font()

        # Redraw timer; sampling cadence is decided by the engine
        self.timer = QTimer(self)
        self.timer.timeout.connect(self.on_timer)
        self.timer.start(settings.refresh_interval_ms)

        quit_action = QAction("Quit", self)
        quit_action.setShortcut(QKeySequence("Esc"))
        quit_action.triggered.connect(self.close)
        self.addAction(quit_action)

    # ---------------------- Builders ----------------------
    def _build_toolbar(self) -> None:
        toolbar = self.addToolBar("Display")
        toolbar.setMovable(False)
        toolbar.setFloatable(False)

        toolbar.addWidget(QLabel("Window length (s):"))
        self.spin_window = QSpinBox()
        self.spin_window.setRange(30, 900)
        self.spin_window.setValue(int(self.view.window_secs))
        self.spin_window.valueChanged.connect(self.on_window_changed)
        toolbar.addWidget(self.spin_window)

        toolbar.addWidget(QLabel("Legend:"))
        self.combo_legend = QComboBox()
        self.combo_legend.addItems(["Footer", "Side strip"])
        self.combo_legend.currentIndexChanged.connect(self.on_legend_changed)
        toolbar.addWidget(self.combo_legend)

        toolbar.addSeparator()
        toolbar.addWidget(QLabel("Font size:"))
        self.spin_font = QSpinBox()
        self.spin_font.setRange(10, 22)
        self.spin_font.setValue(int(self.view.font_size))
        self.spin_font.valueChanged.connect(self.on_font_size_changed)
        toolbar.addWidget(self.spin_font)
        btn_color = QPushButton("Font color")
        btn_color.clicked.connect(self.on_pick_font_color)
        toolbar.addWidget(btn_color)

        toolbar.addSeparator()
        self.chk_util = QCheckBox("Utilization")
        self.chk_temp = QCheckBox("Temperatures")
        self.chk_freq = QCheckBox("Frequencies")
        for chk in (self.chk_util, self.chk_temp, self.chk_freq):
            chk.setChecked(True)
            chk.toggled.connect(self.on_plots_toggled)
            toolbar.addWidget(chk)

    def _check_item(self, parent, text: str, kind: str, ref, checked: bool) -> QTreeWidgetItem:
        item = QTreeWidgetItem(parent)
        item.setText(0, text)
        item.setFlags(item.flags() | Qt.ItemIsUserCheckable)
        item.setCheckState(0, Qt.Checked if checked else Qt.Unchecked)
        item.setData(0, ROLE_KIND, kind)
        item.setData(0, ROLE_REF, ref)
        return item

    def _populate_sensor_tree(self) -> None:
        self._syncing_tree = True
        self.sensor_tree.clear()
        for group in self.engine.groups:
            top = self._check_item(
                self.sensor_tree, group.display, "group", group.key,
                self.view.group_visible.get(group.key, True),
            )
            for item in group.items:
                child = self._check_item(
                    top, item.name, "item", item.series_index,
                    self.view.item_visible.get(item.series_index, item.visible),
                )
                child.setForeground(0, QColor(item.color.hex()))

        if self.engine.catalog.frequencies:
            freq_top = QTreeWidgetItem(self.sensor_tree)
            freq_top.setText(0, "Core frequencies")
            for i, sensor in enumerate(self.engine.catalog.frequencies):
                self._check_item(freq_top, f"CPU Core {sensor.core_index}", "freq", i, self.view.freq_visible[i])

        if self.engine.accelerator.present:
            gpu_top = QTreeWidgetItem(self.sensor_tree)
            gpu_top.setText(0, "GPU clocks")
            for channel in GPU_CLOCK_CHANNELS:
                self._check_item(
                    gpu_top, GPU_CLOCK_LABELS[channel], "gpu_clock", channel.value,
                    self.view.gpu_clock_visible[channel],
                )
            self._check_item(
                gpu_top, "Show memory as effective (x2)", "gpu_mem_effective", None,
                self.view.gpu_mem_effective,
            )
        self._syncing_tree = False

    # ----------------------- Handlers ---------------------
    def on_tree_item_changed(self, item: QTreeWidgetItem, column: int) -> None:
        if self._syncing_tree:
            return
        kind = item.data(0, ROLE_KIND)
        ref = item.data(0, ROLE_REF)
        checked = item.checkState(0) == Qt.Checked
        if kind == "group":
            self.view.set_group_visible(ref, checked)
        elif kind == "item":
            self.view.set_item_visible(int(ref), checked)
        elif kind == "freq":
            self.view.set_freq_visible(int(ref), checked)
        elif kind == "gpu_clock":
            self.view.set_gpu_clock_visible(Channel(ref), checked)
        elif kind == "gpu_mem_effective":
            self.view.gpu_mem_effective = checked
        self._dirty = True

    def on_all_frequencies(self, visible: bool) -> None:
        self.view.set_all_frequencies(visible)
        self._populate_sensor_tree()
        self._dirty = True

    def on_window_changed(self, value: int) -> None:
        self.view.set_window_secs(float(value))
        self._dirty = True

    def on_legend_changed(self, index: int) -> None:
        self.view.legend_placement = LegendPlacement.SIDE if index == 1 else LegendPlacement.FOOTER
        self._apply_legend_placement()

    def on_font_size_changed(self, value: int) -> None:
        self.view.set_font_size(float(value))
        self._apply_font()

    def on_pick_font_color(self) -> None:
        color = QColorDialog.getColor(QColor(self.view.font_color), self, "Font color")
        if color.isValid():
            self.view.font_color = color.name()
            self._apply_font()

    def on_plots_toggled(self, _checked: bool) -> None:
        self.view.show_util = self.chk_util.isChecked()
        self.view.show_temps = self.chk_temp.isChecked()
        self.view.show_freq = self.chk_freq.isChecked()
        self.chart_util.setVisible(self.view.show_util)
        self.chart_temp.setVisible(self.view.show_temps)
        self.chart_freq.setVisible(self.view.show_freq)
        self._dirty = True

    def _apply_legend_placement(self) -> None:
        side = self.view.legend_placement is LegendPlacement.SIDE
        self.lbl_legend_side.setVisible(side)
        self.lbl_legend_footer.setVisible(not side)
        self._dirty = True

    def _apply_font(self) -> None:
        self.centralWidget().setStyleSheet(font_stylesheet(self.view.font_size, self.view.font_color))

    # ----------------------- Timer update ----------------------
    def on_timer(self) -> None:
        """Sample when due, then redraw if anything changed."""
        if self.engine.maybe_sample():
            self._dirty = True
        if self._dirty:
            self._dirty = False
            self.redraw()

    def redraw(self) -> None:
        engine = self.engine
        x_min, x_max = self.view.x_window(engine.elapsed)
        self._update_status()

        if self.view.show_util:
            self.chart_util.set_lines([
                PlotLine(Channel.CPU_UTIL, "CPU %", theme_color("cpu").hex(), engine.channel(Channel.CPU_UTIL).points_after(x_min)),
                PlotLine(Channel.GPU_UTIL, "GPU %", theme_color("gpu").hex(), engine.channel(Channel.GPU_UTIL).points_after(x_min)),
                PlotLine(Channel.RAM_UTIL, "RAM %", theme_color("ram").hex(), engine.channel(Channel.RAM_UTIL).points_after(x_min)),
                PlotLine(Channel.VRAM_UTIL, "GPU Memory %", theme_color("vram").hex(), engine.channel(Channel.VRAM_UTIL).points_after(x_min)),
            ])
            self.chart_util.set_bounds(x_min, x_max, 0.0, 100.0)

        if self.view.show_temps:
            lines = [
                PlotLine(("temp", item.series_index), f"{group.display}: {item.name}", item.color.hex(),
                         engine.temperature_series(item.series_index).points_after(x_min))
                for group, item in self.view.visible_items(engine.groups)
            ]
            self.chart_temp.set_lines(lines)
            self.chart_temp.set_bounds(x_min, x_max, *self.view.temperature_bounds(engine, x_min, x_max))

        if self.view.show_freq:
            self.chart_freq.set_lines(self._frequency_lines(x_min))
            self.chart_freq.set_bounds(x_min, x_max, *self.view.frequency_bounds(engine, x_min, x_max))

        self._update_legend()

    def _frequency_lines(self, x_min: float) -> List[PlotLine]:
        engine = self.engine
        colors = engine.frequency_colors
        lines: List[PlotLine] = []
        for i, sensor in enumerate(engine.catalog.frequencies):
            if not self.view.freq_visible[i]:
                continue
            lines.append(PlotLine(
                ("freq", i),
                f"CPU Core {sensor.core_index}",
                colors[i % len(colors)].hex(),
                engine.frequency_series(i).points_after_scaled(x_min, KHZ_PER_GHZ),
            ))
        if engine.accelerator.present:
            gpu_colors = group_palette("gpu", len(GPU_CLOCK_CHANNELS))
            for channel, color in zip(GPU_CLOCK_CHANNELS, gpu_colors):
                if not self.view.gpu_clock_visible[channel]:
                    continue
                name = GPU_CLOCK_LABELS[channel]
                if channel is Channel.GPU_CLOCK_MEMORY and self.view.gpu_mem_effective:
                    name = "GPU Memory (effective)"
                lines.append(PlotLine(
                    channel,
                    name,
                    color.hex(),
                    engine.channel(channel).points_after_scaled(x_min, self.view.gpu_clock_divisor(channel)),
                ))
        return lines

    def _update_status(self) -> None:
        engine = self.engine
        cpu: Optional[float] = engine.channel(Channel.CPU_UTIL).last_value()
        ram: Optional[float] = engine.channel(Channel.RAM_UTIL).last_value()
        self.lbl_status.setText(
            f"Uptime: {int(time.monotonic() - self._started)}s | "
            f"Samples: {engine.samples} | "
            f"CPU: {cpu or 0.0:.0f}% | RAM: {ram or 0.0:.0f}%"
        )

    def _update_legend(self) -> None:
        parts = []
        for entry in self.view.legend_entries(self.engine):
            marker = STATUS_MARKERS.get(entry.status, "")
            parts.append(f'<span style="color:{entry.color.hex()}">●</span> {entry.text}{marker}')
        if self.view.legend_placement is LegendPlacement.SIDE:
            self.lbl_legend_side.setText("<b>Legend</b><br>" + "<br>".join(parts))
        else:
            self.lbl_legend_footer.setText("<b>Legend:</b> " + " &nbsp; ".join(parts))


def build_engine(settings: MonitorSettings) -> TelemetryEngine:
    engine = TelemetryEngine(
        PsutilSystemProvider(),
        probe_accelerator(settings.accelerator),
        sample_period=settings.sample_period,
        capacity=settings.capacity,
        hwmon_root=settings.hwmon_root,
        cpu_root=settings.cpu_root,
    )
    return engine.start()


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = QApplication(sys.argv)
    apply_dark_theme(app)
    engine = build_engine(settings)
    win = SystemAnalyzer(engine, settings)
    win.show()
    code = app.exec()
    engine.shutdown()
    sys.exit(code)


if __name__ == "__main__":
    main()
