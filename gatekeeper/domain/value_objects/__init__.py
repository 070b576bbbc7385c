"""Domain value objects and shared value types."""

from gatekeeper.domain.value_objects.core import (
    Actor,
    Decision,
    DeveloperAllowlist,
    PermissionString,
    Tenant,
    grants_operation,
    is_snowflake,
    is_valid_operation_name,
)

__all__ = [
    "Actor",
    "Decision",
    "DeveloperAllowlist",
    "PermissionString",
    "Tenant",
    "grants_operation",
    "is_snowflake",
    "is_valid_operation_name",
]
