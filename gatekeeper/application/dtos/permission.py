"""DTOs for permission use cases (no dependency on ORM)."""

from dataclasses import dataclass, field

from gatekeeper.domain.entities.policy import OperationPolicy


@dataclass(frozen=True)
class EffectivePolicy:
    """Policy that applies to an operation in a tenant right now."""

    operation_name: str
    policy: OperationPolicy
    is_default: bool


@dataclass(frozen=True)
class BulkUpdateResult:
    """Outcome of applying one config to many operations.

    Operations whose stored config is locked against edits are skipped, not failed.
    """

    updated: list[str] = field(default_factory=list)
    not_configurable: list[str] = field(default_factory=list)
