"""Maps raw hwmon device names onto sensor groups."""

from __future__ import annotations

from typing import NamedTuple, Tuple


class Classification(NamedTuple):
    group_key: str
    display: str
    warn: float
    hot: float


# Ordered; first match wins.
_RULES: Tuple[Tuple[Tuple[str, ...], Classification], ...] = (
    (("coretemp", "k10temp", "zen", "cpu"), Classification("cpu", "CPU", 90.0, 100.0)),
    (("amdgpu",), Classification("gpu", "GPU", 85.0, 95.0)),
    (("nvidia", "gpu"), Classification("gpu", "GPU", 85.0, 95.0)),
    (("nvme",), Classification("ssd", "SSD (NVMe)", 70.0, 80.0)),
    (("spd",), Classification("ram", "Memory (SPD Hub)", 70.0, 85.0)),
    (("iwlwifi",), Classification("wifi", "Wi-Fi", 80.0, 90.0)),
    (("r8169", "igc", "e1000", "r8125"), Classification("eth", "Ethernet", 80.0, 90.0)),
    (("acpitz",), Classification("acpi", "System (ACPI)", 80.0, 95.0)),
    (("pch", "isa"), Classification("chipset", "Chipset", 85.0, 95.0)),
)

DEFAULT_WARN = 90.0
DEFAULT_HOT = 100.0


def classify(raw_name: str) -> Classification:
    """Return the group, display name and thresholds for a raw device name.

    Unknown names become a group of their own, keyed and displayed by the
    raw name.
    """
    lowered = raw_name.lower()
    for patterns, result in _RULES:
        if any(p in lowered for p in patterns):
            return result
    return Classification(raw_name, raw_name, DEFAULT_WARN, DEFAULT_HOT)
