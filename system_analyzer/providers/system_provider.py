"""OS utilization and memory queries backed by psutil."""

from __future__ import annotations

import logging
from typing import List, Tuple

import psutil

logger = logging.getLogger(__name__)


class PsutilSystemProvider:
    """Per-core utilization and memory usage for the local host."""

    def __init__(self) -> None:
        # The first non-blocking cpu_percent() call only establishes a baseline
        try:
            psutil.cpu_percent(interval=None, percpu=True)
        except Exception as e:
            logger.debug("CPU percent warm-up failed: %s", e)

    def core_utilization(self) -> List[float]:
        """Percent busy per logical core since the previous call (0-100)."""
        values = psutil.cpu_percent(interval=None, percpu=True)
        return [float(v) for v in values or []]

    def memory_bytes(self) -> Tuple[int, int]:
        """(used, total) physical memory in bytes."""
        mem = psutil.virtual_memory()
        return int(mem.used), int(mem.total)
