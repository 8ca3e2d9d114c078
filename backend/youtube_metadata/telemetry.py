from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal, Protocol

import structlog

LookupKind = Literal["video", "playlist"]
LookupOutcome = Literal["ok", "not_found", "error"]
TelemetryValue = bool | int | float | str | None

# Attribute names that may carry upstream credentials.
_CREDENTIAL_KEY_PATTERN = re.compile(r"api_?key|developer_?key|authorization|cookie|secret|token")


class TelemetrySink(Protocol):
    def emit(self, *, event_name: str, attributes: Mapping[str, TelemetryValue]) -> None:
        ...


class NoOpTelemetrySink:
    def emit(self, *, event_name: str, attributes: Mapping[str, TelemetryValue]) -> None:
        pass


class StructuredLogTelemetrySink:
    """Writes each event through the `youtube_metadata.telemetry` logger (own log file)."""

    def __init__(self) -> None:
        self._logger = structlog.get_logger("youtube_metadata.telemetry")

    def emit(self, *, event_name: str, attributes: Mapping[str, TelemetryValue]) -> None:
        self._logger.info(event_name, **attributes)


@dataclass(frozen=True)
class TelemetryClient:
    enabled: bool
    sink: TelemetrySink

    @classmethod
    def disabled(cls) -> TelemetryClient:
        return cls(enabled=False, sink=NoOpTelemetrySink())

    def emit(self, event_name: str, **attributes: Any) -> None:
        if not self.enabled:
            return
        self.sink.emit(event_name=event_name, attributes=_scrub_attributes(attributes))

    def lookup(self, kind: LookupKind, outcome: LookupOutcome, **attributes: Any) -> None:
        """Record the result of one `/video` or `/playlist` lookup."""
        self.emit(f"youtube.{kind}.lookup", outcome=outcome, **attributes)


def build_telemetry_client(*, enabled: bool, sink: Literal["none", "log"]) -> TelemetryClient:
    if enabled and sink == "log":
        return TelemetryClient(enabled=True, sink=StructuredLogTelemetrySink())
    return TelemetryClient.disabled()


def _scrub_attributes(attributes: Mapping[str, Any]) -> dict[str, TelemetryValue]:
    scrubbed: dict[str, TelemetryValue] = {}
    for raw_key, raw_value in attributes.items():
        key = raw_key.strip().lower()
        if not key:
            continue
        if _CREDENTIAL_KEY_PATTERN.search(key):
            scrubbed[key] = "[redacted]"
        elif raw_value is None or isinstance(raw_value, bool | int | float | str):
            scrubbed[key] = raw_value
        else:
            # Only scalars are recorded; containers are reduced to their type.
            scrubbed[key] = type(raw_value).__name__
    return scrubbed
