"""Exceptions raised by the telemetry core."""


class TelemetryError(Exception):
    """Base class for telemetry errors."""


class IntegrationUnavailable(TelemetryError):
    """An accelerator backend is missing or failed to initialize."""


class EngineStateError(TelemetryError):
    """The engine was used outside of its lifecycle (e.g. sampled before start)."""
