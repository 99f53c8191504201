"""Fixed-capacity rolling time series."""

from __future__ import annotations

import math
from collections import deque
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

Point = Tuple[float, float]


class Channel(Enum):
    """Series slots that do not come from the sensor catalog."""

    CPU_UTIL = "cpu_util"
    RAM_UTIL = "ram_util"
    GPU_UTIL = "gpu_util"
    VRAM_UTIL = "vram_util"
    GPU_CLOCK_GRAPHICS = "gpu_clock_graphics"
    GPU_CLOCK_STREAMING = "gpu_clock_streaming"
    GPU_CLOCK_MEMORY = "gpu_clock_memory"
    GPU_CLOCK_VIDEO = "gpu_clock_video"


class SeriesWindow:
    """Points of a series at or after ``x_min``, optionally divided by ``divisor``.

    Iterating walks the live buffers again each time, so a window can be
    consumed more than once (e.g. once for bounds, once for drawing).
    """

    __slots__ = ("_series", "_x_min", "_divisor")

    def __init__(self, series: "RollingSeries", x_min: float, divisor: float = 1.0) -> None:
        self._series = series
        self._x_min = x_min
        self._divisor = divisor

    def __iter__(self) -> Iterator[Point]:
        x_min = self._x_min
        div = self._divisor
        for x, y in zip(self._series._xs, self._series._ys):
            if x >= x_min:
                yield x, y / div


class RollingSeries:
    """Parallel timestamp/value buffers; the oldest pair is dropped at capacity."""

    __slots__ = ("_capacity", "_xs", "_ys")

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._xs: deque = deque(maxlen=capacity)
        self._ys: deque = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def timestamps(self) -> Tuple[float, ...]:
        return tuple(self._xs)

    @property
    def values(self) -> Tuple[float, ...]:
        return tuple(self._ys)

    def __len__(self) -> int:
        return len(self._xs)

    def push(self, timestamp: float, value: float) -> None:
        if self._xs and timestamp < self._xs[-1]:
            raise ValueError(
                f"timestamp {timestamp} is older than the newest sample {self._xs[-1]}"
            )
        # deque(maxlen) evicts from the left on overflow
        self._xs.append(float(timestamp))
        self._ys.append(float(value))

    def points_after(self, x_min: float) -> SeriesWindow:
        return SeriesWindow(self, x_min)

    def points_after_scaled(self, x_min: float, divisor: float) -> SeriesWindow:
        return SeriesWindow(self, x_min, divisor)

    def min_max_y(self, x_min: float, x_max: float) -> Optional[Tuple[float, float]]:
        """Extrema of the values stamped within ``[x_min, x_max]``, NaN ignored."""
        lo = math.inf
        hi = -math.inf
        found = False
        for x, y in zip(self._xs, self._ys):
            if x_min <= x <= x_max and not math.isnan(y):
                lo = min(lo, y)
                hi = max(hi, y)
                found = True
        if not found:
            return None
        return lo, hi

    def last_value(self) -> Optional[float]:
        """Newest value, or ``None`` when empty or when the newest tick had no data."""
        if not self._ys:
            return None
        y = self._ys[-1]
        return None if math.isnan(y) else y


class SeriesStore:
    """All series of one engine: fixed channels plus one per discovered sensor."""

    def __init__(self, capacity: int, temperature_count: int, frequency_count: int) -> None:
        self.capacity = capacity
        self._channels: Dict[Channel, RollingSeries] = {c: RollingSeries(capacity) for c in Channel}
        self.temperatures: List[RollingSeries] = [RollingSeries(capacity) for _ in range(temperature_count)]
        self.frequencies: List[RollingSeries] = [RollingSeries(capacity) for _ in range(frequency_count)]

    def channel(self, channel: Channel) -> RollingSeries:
        return self._channels[channel]

    def temperature(self, index: int) -> RollingSeries:
        return self.temperatures[index]

    def frequency(self, index: int) -> RollingSeries:
        return self.frequencies[index]
