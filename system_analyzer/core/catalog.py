"""Sensor discovery from the hwmon registry and the CPU topology tree."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

HWMON_ROOT = Path("/sys/class/hwmon")
CPU_ROOT = Path("/sys/devices/system/cpu")

# First existing file wins
FREQ_FILE_CANDIDATES = ("scaling_cur_freq", "cpuinfo_cur_freq")

_TEMP_INPUT_RE = re.compile(r"^temp\d+_input$")
_CPU_DIR_RE = re.compile(r"^cpu(\d+)$")


@dataclass(frozen=True)
class RawTempSensor:
    raw_name: str
    raw_label: str
    source_path: Path


@dataclass(frozen=True)
class RawFreqSensor:
    core_index: int
    source_path: Path


def _read_text(path: Path) -> Optional[str]:
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            return f.read().strip()
    except OSError:
        return None


def _list_dir(path: Path) -> List[str]:
    try:
        return sorted(os.listdir(path))
    except OSError as e:
        logger.debug("Skipping unreadable directory %s: %s", path, e)
        return []


def discover_temperatures(hwmon_root: Path = HWMON_ROOT) -> List[RawTempSensor]:
    """Enumerate every ``tempN_input`` below the hwmon registry.

    The label comes from the sibling ``tempN_label`` file; when that is
    missing or blank the device's ``name`` is used instead.
    """
    sensors: List[RawTempSensor] = []
    for entry in _list_dir(hwmon_root):
        device_dir = Path(hwmon_root) / entry
        if not device_dir.is_dir():
            continue
        device_name = _read_text(device_dir / "name") or ""
        for fname in _list_dir(device_dir):
            if not _TEMP_INPUT_RE.match(fname):
                continue
            label = _read_text(device_dir / fname.replace("_input", "_label"))
            if not label:
                label = device_name
            input_path = device_dir / fname
            try:
                input_path = input_path.resolve()
            except OSError:
                pass
            sensors.append(RawTempSensor(device_name, label, input_path))
    return sensors


def discover_frequencies(cpu_root: Path = CPU_ROOT) -> List[RawFreqSensor]:
    """One current-frequency counter per core, sorted by core index."""
    sensors: List[RawFreqSensor] = []
    for entry in _list_dir(cpu_root):
        m = _CPU_DIR_RE.match(entry)
        if not m:
            continue
        cpufreq = Path(cpu_root) / entry / "cpufreq"
        for candidate in FREQ_FILE_CANDIDATES:
            path = cpufreq / candidate
            if path.exists():
                sensors.append(RawFreqSensor(int(m.group(1)), path))
                break
        else:
            logger.debug("No frequency counter for %s", entry)
    sensors.sort(key=lambda s: s.core_index)
    return sensors


def normalize_temperature(raw: float) -> float:
    """Values above 1000 are milli-degrees; anything else is whole degrees."""
    if raw > 1000.0:
        return raw / 1000.0
    return float(raw)


def read_freq_khz(path: Path) -> Optional[float]:
    text = _read_text(path)
    if text is None:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def read_temp_c(path: Path) -> Optional[float]:
    text = _read_text(path)
    if text is None:
        return None
    try:
        return normalize_temperature(float(text))
    except ValueError:
        return None


@dataclass(frozen=True)
class SensorCatalog:
    """Immutable result of the one-time discovery pass."""

    temperatures: Tuple[RawTempSensor, ...] = ()
    frequencies: Tuple[RawFreqSensor, ...] = ()

    @classmethod
    def discover(
        cls, hwmon_root: Path = HWMON_ROOT, cpu_root: Path = CPU_ROOT
    ) -> "SensorCatalog":
        catalog = cls(
            temperatures=tuple(discover_temperatures(hwmon_root)),
            frequencies=tuple(discover_frequencies(cpu_root)),
        )
        logger.info(
            "Discovered %d temperature and %d frequency sensors",
            len(catalog.temperatures),
            len(catalog.frequencies),
        )
        return catalog
