"""Fixed-period sampling into the series store."""

from __future__ import annotations

import logging
import math
import time
from typing import Optional

from system_analyzer.core.catalog import SensorCatalog, read_freq_khz, read_temp_c
from system_analyzer.core.series import Channel, SeriesStore

logger = logging.getLogger(__name__)

NO_DATA = math.nan


class SamplingClock:
    """Synthetic time: tick N is stamped exactly ``N * period``."""

    def __init__(self, period: float) -> None:
        if period <= 0:
            raise ValueError(f"period must be positive, got {period}")
        self.period = float(period)
        self.ticks = 0

    @property
    def elapsed(self) -> float:
        return self.ticks * self.period

    def advance(self) -> float:
        self.ticks += 1
        return self.elapsed


class SamplingScheduler:
    """Pulls one sample per channel each tick.

    Every read is independent: a failing source only loses its own sample
    for that tick. The accelerator's utilization channels get ``NaN`` instead
    so "no data" stays distinct from zero.
    """

    def __init__(
        self,
        catalog: SensorCatalog,
        store: SeriesStore,
        system,
        accelerator,
        period: float,
        accelerator_temp_index: Optional[int] = None,
        clock=time.monotonic,
    ) -> None:
        self.catalog = catalog
        self.store = store
        self.system = system
        self.accelerator = accelerator
        self.accelerator_temp_index = accelerator_temp_index
        self.clock = SamplingClock(period)
        self._now = clock
        self._last_tick: Optional[float] = None

    @property
    def period(self) -> float:
        return self.clock.period

    @property
    def ticks(self) -> int:
        return self.clock.ticks

    @property
    def elapsed(self) -> float:
        return self.clock.elapsed

    def maybe_sample(self, now: Optional[float] = None) -> bool:
        """Tick if a full period has passed since the previous tick."""
        if now is None:
            now = self._now()
        if self._last_tick is not None and now - self._last_tick < self.clock.period:
            return False
        self.tick()
        self._last_tick = now
        return True

    def tick(self) -> float:
        ts = self.clock.advance()
        self._sample_utilization(ts)
        self._sample_frequencies(ts)
        self._sample_temperatures(ts)
        self._sample_accelerator(ts)
        return ts

    def _sample_utilization(self, ts: float) -> None:
        try:
            cores = self.system.core_utilization()
            if cores:
                self.store.channel(Channel.CPU_UTIL).push(ts, sum(cores) / len(cores))
        except Exception as e:
            logger.debug("CPU utilization read failed: %s", e)

        try:
            used, total = self.system.memory_bytes()
            used = min(used, total)
            pct = (used / total) * 100.0 if total > 0 else 0.0
            self.store.channel(Channel.RAM_UTIL).push(ts, pct)
        except Exception as e:
            logger.debug("Memory read failed: %s", e)

    def _sample_frequencies(self, ts: float) -> None:
        for i, sensor in enumerate(self.catalog.frequencies):
            khz = read_freq_khz(sensor.source_path)
            if khz is None:
                logger.debug("Frequency read failed for core %d", sensor.core_index)
                continue
            self.store.frequency(i).push(ts, khz)

    def _sample_temperatures(self, ts: float) -> None:
        for i, sensor in enumerate(self.catalog.temperatures):
            temp = read_temp_c(sensor.source_path)
            if temp is None:
                logger.debug("Temperature read failed for %s", sensor.source_path)
                continue
            self.store.temperature(i).push(ts, temp)

    def _sample_accelerator(self, ts: float) -> None:
        metrics = None
        clocks = None
        try:
            metrics = self.accelerator.first_device_metrics()
        except Exception as e:
            logger.debug("Accelerator metrics poll failed: %s", e)
        try:
            clocks = self.accelerator.clock_rates_mhz()
        except Exception as e:
            logger.debug("Accelerator clock poll failed: %s", e)

        if metrics is None:
            self.store.channel(Channel.GPU_UTIL).push(ts, NO_DATA)
            self.store.channel(Channel.VRAM_UTIL).push(ts, NO_DATA)
        else:
            util, mem, temp = metrics
            self.store.channel(Channel.GPU_UTIL).push(ts, util)
            self.store.channel(Channel.VRAM_UTIL).push(ts, mem)
            if self.accelerator_temp_index is not None:
                self.store.temperature(self.accelerator_temp_index).push(ts, temp)

        if clocks is not None:
            graphics, streaming, memory, video = clocks
            self.store.channel(Channel.GPU_CLOCK_GRAPHICS).push(ts, graphics)
            self.store.channel(Channel.GPU_CLOCK_STREAMING).push(ts, streaming)
            self.store.channel(Channel.GPU_CLOCK_MEMORY).push(ts, memory)
            self.store.channel(Channel.GPU_CLOCK_VIDEO).push(ts, video)
