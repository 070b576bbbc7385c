"""Shared utilities: telemetry and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from gatekeeper.shared.utils import SystemClock, ensure_utc, generate_cuid, utc_now

__all__ = [
    "SystemClock",
    "generate_cuid",
    "utc_now",
    "ensure_utc",
]
