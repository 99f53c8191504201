"""Data providers for host and accelerator metrics."""

from .gpu_provider import AcceleratorProvider, probe_accelerator
from .system_provider import PsutilSystemProvider

__all__ = ["AcceleratorProvider", "probe_accelerator", "PsutilSystemProvider"]
