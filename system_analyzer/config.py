from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from system_analyzer.core.catalog import CPU_ROOT, HWMON_ROOT


class MonitorSettings(BaseSettings):
    """Runtime settings; every field can be overridden with an ``SIA_`` env variable."""

    model_config = SettingsConfigDict(env_prefix="SIA_", env_file=".env", extra="ignore")

    app_name: str = "SIA - System Information Analyzer"
    # Sampling period in seconds, independent of the redraw interval
    sample_period: float = Field(default=1.0, gt=0)
    history_seconds: float = Field(default=300.0, gt=0)
    hwmon_root: Path = HWMON_ROOT
    cpu_root: Path = CPU_ROOT
    accelerator: Literal["auto", "nvml", "nvidia-smi", "none"] = "auto"
    refresh_interval_ms: int = Field(default=16, ge=1)
    display_window_secs: float = Field(default=120.0, gt=0)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value):
        return value.upper() if isinstance(value, str) else value

    @property
    def capacity(self) -> int:
        """Samples kept per series."""
        return max(1, int(round(self.history_seconds / self.sample_period)))


def get_settings() -> MonitorSettings:
    return MonitorSettings()
