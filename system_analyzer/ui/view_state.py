"""Presentation state kept apart from the telemetry engine.

Nothing here is sampled; it only records what the user chose to look at and
derives plot bounds and legend entries from the engine's read-only queries.
Engine entities are referenced by group key or series index.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from system_analyzer.core.groups import SensorGroup, SensorItem
from system_analyzer.core.palette import Color
from system_analyzer.core.series import Channel

WINDOW_MIN_SECS = 30.0
WINDOW_MAX_SECS = 900.0
FONT_MIN = 10.0
FONT_MAX = 22.0

KHZ_PER_GHZ = 1_000_000.0
MHZ_PER_GHZ = 1000.0

GPU_CLOCK_CHANNELS = (
    Channel.GPU_CLOCK_GRAPHICS,
    Channel.GPU_CLOCK_STREAMING,
    Channel.GPU_CLOCK_MEMORY,
    Channel.GPU_CLOCK_VIDEO,
)


class LegendPlacement(Enum):
    FOOTER = "footer"
    SIDE = "side"


@dataclass(frozen=True)
class LegendEntry:
    text: str
    color: Color
    status: Optional[str] = None  # "hot", "warn" or None


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


@dataclass
class ViewState:
    window_secs: float = 120.0
    legend_placement: LegendPlacement = LegendPlacement.FOOTER
    font_size: float = 14.0
    font_color: str = "#d3d3d3"
    show_util: bool = True
    show_temps: bool = True
    show_freq: bool = True
    item_visible: Dict[int, bool] = field(default_factory=dict)
    group_visible: Dict[str, bool] = field(default_factory=dict)
    freq_visible: List[bool] = field(default_factory=list)
    gpu_clock_visible: Dict[Channel, bool] = field(
        default_factory=lambda: {c: c is Channel.GPU_CLOCK_GRAPHICS for c in GPU_CLOCK_CHANNELS}
    )
    # Show the memory clock doubled, as vendors advertise it
    gpu_mem_effective: bool = True

    def __post_init__(self) -> None:
        self.window_secs = _clamp(self.window_secs, WINDOW_MIN_SECS, WINDOW_MAX_SECS)
        self.font_size = _clamp(self.font_size, FONT_MIN, FONT_MAX)

    @classmethod
    def from_engine(cls, engine, **kwargs) -> "ViewState":
        state = cls(**kwargs)
        for group in engine.groups:
            state.group_visible[group.key] = group.visible
            for item in group.items:
                state.item_visible[item.series_index] = item.visible
        state.freq_visible = [True for _ in engine.catalog.frequencies]
        return state

    # ---------------------- Mutations ----------------------
    def set_window_secs(self, secs: float) -> None:
        self.window_secs = _clamp(secs, WINDOW_MIN_SECS, WINDOW_MAX_SECS)

    def set_font_size(self, size: float) -> None:
        self.font_size = _clamp(size, FONT_MIN, FONT_MAX)

    def set_item_visible(self, series_index: int, visible: bool) -> None:
        self.item_visible[series_index] = visible

    def set_group_visible(self, key: str, visible: bool) -> None:
        self.group_visible[key] = visible

    def set_freq_visible(self, index: int, visible: bool) -> None:
        if 0 <= index < len(self.freq_visible):
            self.freq_visible[index] = visible

    def set_gpu_clock_visible(self, channel: Channel, visible: bool) -> None:
        if channel not in self.gpu_clock_visible:
            raise ValueError(f"{channel} is not an accelerator clock channel")
        self.gpu_clock_visible[channel] = visible

    def set_all_frequencies(self, visible: bool) -> None:
        self.freq_visible = [visible for _ in self.freq_visible]

    # ----------------------- Queries -----------------------
    def x_window(self, elapsed: float) -> Tuple[float, float]:
        """Scrolling window once enough history exists, otherwise a fixed one from zero."""
        if elapsed > self.window_secs:
            return elapsed - self.window_secs, elapsed
        return 0.0, self.window_secs

    def visible_items(self, groups: Iterable[SensorGroup]) -> Iterator[Tuple[SensorGroup, SensorItem]]:
        for group in groups:
            if not self.group_visible.get(group.key, group.visible):
                continue
            for item in group.items:
                if self.item_visible.get(item.series_index, item.visible):
                    yield group, item

    def legend_entries(self, engine) -> List[LegendEntry]:
        entries: List[LegendEntry] = []
        for group, item in self.visible_items(engine.groups):
            last = engine.temperature_series(item.series_index).last_value()
            status = None
            if last is not None:
                if last >= group.hot:
                    status = "hot"
                elif last >= group.warn:
                    status = "warn"
            entries.append(LegendEntry(item.name, item.color, status))
        return entries

    def temperature_bounds(self, engine, x_min: float, x_max: float) -> Tuple[float, float]:
        lo, hi = math.inf, -math.inf
        for _, item in self.visible_items(engine.groups):
            mm = engine.temperature_series(item.series_index).min_max_y(x_min, x_max)
            if mm is not None:
                lo, hi = min(lo, mm[0]), max(hi, mm[1])
        if not math.isfinite(lo) or not math.isfinite(hi) or abs(hi - lo) < 1e-6:
            lo, hi = 0.0, 120.0
        pad = max((hi - lo) * 0.1, 2.0)
        return max(lo - pad, 0.0), min(hi + pad, 130.0)

    def gpu_clock_divisor(self, channel: Channel) -> float:
        """MHz to GHz, with the memory clock optionally doubled."""
        if channel is Channel.GPU_CLOCK_MEMORY and self.gpu_mem_effective:
            return MHZ_PER_GHZ / 2.0
        return MHZ_PER_GHZ

    def frequency_bounds(self, engine, x_min: float, x_max: float) -> Tuple[float, float]:
        """Y range in GHz over the visible core and accelerator clocks."""
        lo, hi = math.inf, -math.inf
        for i, visible in enumerate(self.freq_visible):
            if not visible:
                continue
            mm = engine.frequency_series(i).min_max_y(x_min, x_max)
            if mm is not None:
                lo, hi = min(lo, mm[0] / KHZ_PER_GHZ), max(hi, mm[1] / KHZ_PER_GHZ)
        for channel, visible in self.gpu_clock_visible.items():
            if not visible:
                continue
            mm = engine.channel(channel).min_max_y(x_min, x_max)
            if mm is not None:
                div = self.gpu_clock_divisor(channel)
                lo, hi = min(lo, mm[0] / div), max(hi, mm[1] / div)
        if not math.isfinite(lo) or not math.isfinite(hi) or abs(hi - lo) < 1e-6:
            lo, hi = 0.1, 10.0
        pad = max((hi - lo) * 0.08, 0.05)
        return max(lo - pad, 0.0), min(hi + pad, 12.0)
