"""Telemetry engine: owns discovery results, series and the scheduler."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

from system_analyzer.core.catalog import CPU_ROOT, HWMON_ROOT, SensorCatalog
from system_analyzer.core.errors import EngineStateError
from system_analyzer.core.groups import SensorGroup, build_groups
from system_analyzer.core.palette import Color, group_palette
from system_analyzer.core.scheduler import SamplingScheduler
from system_analyzer.core.series import Channel, RollingSeries, SeriesStore
from system_analyzer.providers.gpu_provider import AbsentAccelerator, AcceleratorProvider

logger = logging.getLogger(__name__)


class EngineState(Enum):
    UNINITIALIZED = "uninitialized"
    SAMPLING = "sampling"


class TelemetryEngine:
    """Context object built once by the application root.

    ``start()`` discovers sensors, builds groups and series, and moves the
    engine into ``SAMPLING`` for the rest of the process. Consumers only
    read from it; the scheduler is the only writer of the series.
    """

    def __init__(
        self,
        system,
        accelerator: Optional[AcceleratorProvider] = None,
        sample_period: float = 1.0,
        capacity: int = 300,
        hwmon_root: Path = HWMON_ROOT,
        cpu_root: Path = CPU_ROOT,
        catalog: Optional[SensorCatalog] = None,
    ) -> None:
        self.system = system
        self.accelerator = accelerator if accelerator is not None else AbsentAccelerator()
        self.sample_period = sample_period
        self.capacity = capacity
        self.hwmon_root = Path(hwmon_root)
        self.cpu_root = Path(cpu_root)
        self.state = EngineState.UNINITIALIZED
        self._preset_catalog = catalog
        self._catalog: Optional[SensorCatalog] = None
        self._groups: Tuple[SensorGroup, ...] = ()
        self._store: Optional[SeriesStore] = None
        self._scheduler: Optional[SamplingScheduler] = None
        self._frequency_colors: List[Color] = []

    def start(self) -> "TelemetryEngine":
        if self.state is not EngineState.UNINITIALIZED:
            raise EngineStateError("engine has already been started")

        catalog = self._preset_catalog or SensorCatalog.discover(self.hwmon_root, self.cpu_root)
        accelerator_present = self.accelerator.present
        temp_slots = len(catalog.temperatures) + (1 if accelerator_present else 0)

        self._catalog = catalog
        self._groups = tuple(build_groups(catalog.temperatures, accelerator_present))
        self._store = SeriesStore(self.capacity, temp_slots, len(catalog.frequencies))
        self._frequency_colors = group_palette("cpu", len(catalog.frequencies))
        self._scheduler = SamplingScheduler(
            catalog,
            self._store,
            self.system,
            self.accelerator,
            self.sample_period,
            accelerator_temp_index=len(catalog.temperatures) if accelerator_present else None,
        )
        self.state = EngineState.SAMPLING
        logger.info(
            "Telemetry engine sampling every %.3fs into %d groups (accelerator: %s)",
            self.sample_period,
            len(self._groups),
            self.accelerator.method,
        )
        return self

    def _require_sampling(self) -> None:
        if self.state is not EngineState.SAMPLING:
            raise EngineStateError("engine has not been started")

    # ---------------------- Sampling ----------------------
    def tick(self) -> float:
        self._require_sampling()
        return self._scheduler.tick()

    def maybe_sample(self, now: Optional[float] = None) -> bool:
        self._require_sampling()
        return self._scheduler.maybe_sample(now)

    # ----------------------- Queries ----------------------
    @property
    def catalog(self) -> SensorCatalog:
        self._require_sampling()
        return self._catalog

    @property
    def groups(self) -> Tuple[SensorGroup, ...]:
        self._require_sampling()
        return self._groups

    @property
    def frequency_colors(self) -> List[Color]:
        self._require_sampling()
        return list(self._frequency_colors)

    @property
    def elapsed(self) -> float:
        self._require_sampling()
        return self._scheduler.elapsed

    @property
    def samples(self) -> int:
        self._require_sampling()
        return self._scheduler.ticks

    def temperature_series(self, index: int) -> RollingSeries:
        self._require_sampling()
        return self._store.temperature(index)

    def frequency_series(self, index: int) -> RollingSeries:
        self._require_sampling()
        return self._store.frequency(index)

    def channel(self, channel: Channel) -> RollingSeries:
        self._require_sampling()
        return self._store.channel(channel)

    def shutdown(self) -> None:
        self.accelerator.shutdown()
