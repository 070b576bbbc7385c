"""Shared utilities: datetime and id generators."""

from gatekeeper.shared.utils.datetime import SystemClock, ensure_utc, utc_now
from gatekeeper.shared.utils.generators import generate_cuid

__all__ = [
    "SystemClock",
    "generate_cuid",
    "utc_now",
    "ensure_utc",
]
