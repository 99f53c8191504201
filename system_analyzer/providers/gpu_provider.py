"""Accelerator (GPU) metrics providers.

Tries nvidia-ml-py first; falls back to calling nvidia-smi if available, and
to a stub that never has data when neither works. Only the first device is
sampled.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

import pynvml

from system_analyzer.core.errors import IntegrationUnavailable

logger = logging.getLogger(__name__)

# (utilization %, memory used %, temperature °C)
DeviceMetrics = Tuple[float, float, float]
# (graphics, streaming multiprocessor, memory, video) in MHz
ClockRates = Tuple[float, float, float, float]

ACCELERATOR_MODES = ("auto", "nvml", "nvidia-smi", "none")


def _memory_percent(used: float, total: float) -> float:
    return (used / total) * 100.0 if total > 0 else 0.0


class AcceleratorProvider(ABC):
    """Capability interface the sampling scheduler polls once per tick."""

    method: str = "none"

    def __init__(self) -> None:
        self.device_name: str = ""

    @property
    def present(self) -> bool:
        return True

    @abstractmethod
    def first_device_metrics(self) -> Optional[DeviceMetrics]:
        """Utilization, memory and temperature of the first device, or None."""

    @abstractmethod
    def clock_rates_mhz(self) -> Optional[ClockRates]:
        """Current clocks of the first device, or None."""

    def shutdown(self) -> None:
        pass


class AbsentAccelerator(AcceleratorProvider):
    """Used when no accelerator backend is configured or reachable."""

    @property
    def present(self) -> bool:
        return False

    def first_device_metrics(self) -> Optional[DeviceMetrics]:
        return None

    def clock_rates_mhz(self) -> Optional[ClockRates]:
        return None


class NvmlAccelerator(AcceleratorProvider):
    method = "nvml"

    def __init__(self, device_index: int = 0) -> None:
        super().__init__()
        try:
            pynvml.nvmlInit()
            count = pynvml.nvmlDeviceGetCount()
        except Exception as e:
            raise IntegrationUnavailable(f"NVML initialization failed: {e}") from e
        if count <= device_index:
            self._shutdown_quietly()
            raise IntegrationUnavailable(f"NVML reports {count} device(s), need index {device_index}")
        try:
            self._handle = pynvml.nvmlDeviceGetHandleByIndex(device_index)
            name = pynvml.nvmlDeviceGetName(self._handle)
        except Exception as e:
            self._shutdown_quietly()
            raise IntegrationUnavailable(f"NVML device {device_index} unavailable: {e}") from e
        if isinstance(name, bytes):
            name = name.decode("utf-8", errors="ignore")
        self.device_name = str(name)

    def first_device_metrics(self) -> Optional[DeviceMetrics]:
        try:
            util = pynvml.nvmlDeviceGetUtilizationRates(self._handle)
            mem = pynvml.nvmlDeviceGetMemoryInfo(self._handle)
            temp = pynvml.nvmlDeviceGetTemperature(self._handle, pynvml.NVML_TEMPERATURE_GPU)
        except Exception as e:
            logger.debug("NVML metrics poll failed: %s", e)
            return None
        return float(util.gpu), _memory_percent(float(mem.used), float(mem.total)), float(temp)

    def _clock(self, clock_type) -> Optional[float]:
        try:
            return float(pynvml.nvmlDeviceGetClockInfo(self._handle, clock_type))
        except Exception:
            return None

    def clock_rates_mhz(self) -> Optional[ClockRates]:
        graphics = self._clock(pynvml.NVML_CLOCK_GRAPHICS)
        memory = self._clock(pynvml.NVML_CLOCK_MEM)
        if graphics is None or memory is None:
            return None
        # Not every board reports SM and video clocks separately
        sm = self._clock(pynvml.NVML_CLOCK_SM)
        video = self._clock(pynvml.NVML_CLOCK_VIDEO)
        return (
            graphics,
            sm if sm is not None else graphics,
            memory,
            video if video is not None else graphics,
        )

    def _shutdown_quietly(self) -> None:
        try:
            pynvml.nvmlShutdown()
        except Exception:
            pass

    def shutdown(self) -> None:
        self._shutdown_quietly()


class NvidiaSmiAccelerator(AcceleratorProvider):
    """Polls ``nvidia-smi`` synchronously; slower than NVML but needs no bindings."""

    method = "nvidia-smi"

    def __init__(self, device_index: int = 0, timeout: float = 1.5) -> None:
        super().__init__()
        self.device_index = device_index
        self.timeout = timeout
        if shutil.which("nvidia-smi") is None:
            raise IntegrationUnavailable("nvidia-smi not found on PATH")
        names = self._query(["name"])
        if not names or not names[0]:
            raise IntegrationUnavailable("nvidia-smi reported no devices")
        self.device_name = names[0]

    def _query(self, fields: List[str]) -> Optional[List[str]]:
        cmd = [
            "nvidia-smi",
            f"--query-gpu={','.join(fields)}",
            "--format=csv,noheader,nounits",
            f"--id={self.device_index}",
        ]
        try:
            out = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout)
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug("nvidia-smi query failed: %s", e)
            return None
        if out.returncode != 0:
            return None
        lines = [line.strip() for line in out.stdout.strip().splitlines() if line.strip()]
        if not lines:
            return None
        parts = [p.strip() for p in lines[0].split(",")]
        if len(parts) != len(fields):
            return None
        return parts

    @staticmethod
    def _to_float(text: str) -> Optional[float]:
        try:
            return float(text)
        except ValueError:
            # "[N/A]", "[Not Supported]"
            return None

    def first_device_metrics(self) -> Optional[DeviceMetrics]:
        parts = self._query(["utilization.gpu", "memory.used", "memory.total", "temperature.gpu"])
        if parts is None:
            return None
        util, used, total, temp = (self._to_float(p) for p in parts)
        if util is None or used is None or total is None or temp is None:
            return None
        return util, _memory_percent(used, total), temp

    def clock_rates_mhz(self) -> Optional[ClockRates]:
        parts = self._query(["clocks.gr", "clocks.sm", "clocks.mem", "clocks.video"])
        if parts is None:
            return None
        graphics, sm, memory, video = (self._to_float(p) for p in parts)
        if graphics is None or memory is None:
            return None
        return (
            graphics,
            sm if sm is not None else graphics,
            memory,
            video if video is not None else graphics,
        )


def probe_accelerator(mode: str = "auto") -> AcceleratorProvider:
    """Pick the accelerator backend for ``mode``.

    ``auto`` tries NVML, then nvidia-smi. A requested backend that is not
    available degrades to :class:`AbsentAccelerator`; it never raises.
    """
    if mode not in ACCELERATOR_MODES:
        raise ValueError(f"Unknown accelerator mode {mode!r}; expected one of {ACCELERATOR_MODES}")
    if mode == "none":
        return AbsentAccelerator()

    candidates = []
    if mode in ("auto", "nvml"):
        candidates.append(NvmlAccelerator)
    if mode in ("auto", "nvidia-smi"):
        candidates.append(NvidiaSmiAccelerator)

    for factory in candidates:
        try:
            provider = factory()
        except IntegrationUnavailable as e:
            logger.info("Accelerator backend %s unavailable: %s", factory.method, e)
            continue
        logger.info("Using %s accelerator backend for %s", provider.method, provider.device_name)
        return provider

    if mode != "auto":
        logger.warning("Requested accelerator backend %r is unavailable; GPU channels will report no data", mode)
    return AbsentAccelerator()
