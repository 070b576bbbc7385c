"""Shared telemetry: logging setup and tracing helpers."""

from gatekeeper.shared.telemetry.logging import setup_logging
from gatekeeper.shared.telemetry.tracing import (
    add_span_attributes,
    set_span_error,
    traced,
)

__all__ = [
    "setup_logging",
    "traced",
    "add_span_attributes",
    "set_span_error",
]
