"""Builds the ordered sensor groups shown to the user.

Every discovered temperature lands in exactly one group. Within a group the
items get a readable label, a default visibility (one representative per
group), a deterministic sort order and a tint of the group color.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from system_analyzer.core.catalog import RawTempSensor
from system_analyzer.core.classifier import classify
from system_analyzer.core.palette import Color, group_palette

GROUP_RANK: Dict[str, int] = {"cpu": 0, "gpu": 1, "ssd": 2, "ram": 3, "wifi": 4, "eth": 5}
OTHER_RANK = 6

ACCELERATOR_ITEM_NAME = "GPU Die"

_CORE_NUMBER_RE = re.compile(r"core (\d+)")
_NVME_CONTROLLER_RE = re.compile(r"^nvme\d")


@dataclass(frozen=True)
class SensorItem:
    name: str
    series_index: int
    visible: bool
    color: Color


@dataclass(frozen=True)
class SensorGroup:
    key: str
    display: str
    warn: float
    hot: float
    items: Tuple[SensorItem, ...] = ()
    visible: bool = True


@dataclass
class _Draft:
    """Mutable group while items are being collected."""

    key: str
    display: str
    warn: float
    hot: float
    entries: List[Tuple[str, int, str]] = field(default_factory=list)  # (name, series index, raw label)


def nvme_hint_from_path(path: Path) -> Optional[str]:
    """First path component naming an NVMe device, e.g. ``nvme0`` or ``nvme0n1``."""
    for part in Path(path).parts:
        if _NVME_CONTROLLER_RE.match(part):
            return part
    return None


def humanize_item_label(group_key: str, raw_label: str, position: int, path: Path) -> str:
    label = raw_label.strip()
    lowered = label.lower()
    if group_key == "wifi":
        return "Wi-Fi"
    if group_key == "eth":
        return "Ethernet"
    if group_key == "ram":
        return "SPD Hub" if lowered.startswith("spd") else "Memory"
    if group_key == "ssd":
        hint = nvme_hint_from_path(path)
        name = f"SSD (NVMe {hint})" if hint else f"SSD (NVMe #{position + 1})"
        # nvme devices without a label file fall back to "nvme" itself
        if lowered and lowered != "composite" and lowered != "nvme":
            name = f"{name} {label}"
        return name
    if group_key == "gpu":
        if "edge" in lowered:
            return "GPU Edge"
        if "hotspot" in lowered:
            return "GPU Hotspot"
        return "GPU"
    return label


def _is_aggregate(raw_label: str) -> bool:
    lowered = raw_label.lower()
    return "package" in lowered or "composite" in lowered


def _representative(group_key: str, entries: Sequence[Tuple[str, int, str]]) -> Optional[int]:
    """Series index of the item shown by default."""
    if not entries:
        return None
    for name, index, raw_label in entries:
        if _is_aggregate(raw_label):
            return index
        if group_key == "gpu" and "edge" in name.lower():
            return index
    return entries[0][1]


def cpu_sort_key(name: str) -> Tuple[int, int, str]:
    lowered = name.lower()
    if "package" in lowered or "composite" in lowered:
        tier = 0
    elif "cpu core " in lowered or lowered.startswith("core "):
        tier = 1
    else:
        tier = 2
    m = _CORE_NUMBER_RE.search(lowered)
    number = int(m.group(1)) if m else 2**31 - 1
    return tier, number, lowered


def gpu_sort_key(name: str) -> Tuple[int, str]:
    lowered = name.lower()
    if "edge" in lowered:
        return 0, name
    if "hotspot" in lowered:
        return 1, name
    return 2, name


def _sorted_items(key: str, items: List[SensorItem]) -> List[SensorItem]:
    if key == "cpu":
        return sorted(items, key=lambda it: cpu_sort_key(it.name))
    if key == "gpu":
        return sorted(items, key=lambda it: gpu_sort_key(it.name))
    return sorted(items, key=lambda it: it.name)


def group_rank(key: str) -> int:
    return GROUP_RANK.get(key, OTHER_RANK)


def build_groups(
    temperatures: Sequence[RawTempSensor],
    accelerator_present: bool = False,
) -> List[SensorGroup]:
    """Classify, label, sort, color and order the discovered temperatures.

    When ``accelerator_present`` is set the ``gpu`` group also gets an item
    for the accelerator's die temperature, backed by the series slot right
    after the last discovered sensor.
    """
    drafts: Dict[str, _Draft] = {}
    for index, sensor in enumerate(temperatures):
        cls = classify(sensor.raw_name)
        draft = drafts.get(cls.group_key)
        if draft is None:
            draft = _Draft(cls.group_key, cls.display, cls.warn, cls.hot)
            drafts[cls.group_key] = draft
        name = humanize_item_label(cls.group_key, sensor.raw_label, len(draft.entries), sensor.source_path)
        draft.entries.append((name, index, sensor.raw_label))

    if accelerator_present:
        draft = drafts.get("gpu")
        if draft is None:
            gpu = classify("gpu")
            draft = _Draft(gpu.group_key, gpu.display, gpu.warn, gpu.hot)
            drafts["gpu"] = draft
        draft.entries.append((ACCELERATOR_ITEM_NAME, len(temperatures), ""))

    groups: List[SensorGroup] = []
    for draft in drafts.values():
        shown = _representative(draft.key, draft.entries)
        # Shades follow discovery order, not display order
        palette = group_palette(draft.key, len(draft.entries))
        items = [
            SensorItem(name, index, index == shown, palette[i % len(palette)])
            for i, (name, index, _) in enumerate(draft.entries)
        ]
        items = _sorted_items(draft.key, items)
        groups.append(SensorGroup(draft.key, draft.display, draft.warn, draft.hot, tuple(items)))

    # sorted() is stable, so unranked groups keep insertion order
    return sorted(groups, key=lambda g: group_rank(g.key))
