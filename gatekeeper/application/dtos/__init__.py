"""Application DTOs (no ORM dependency)."""

from gatekeeper.application.dtos.permission import BulkUpdateResult, EffectivePolicy

__all__ = ["BulkUpdateResult", "EffectivePolicy"]
