"""Input validators shared by the mutating services.

All raise ValidationException with the offending field name so the API can
report it; nothing is persisted when one fails.
"""

from gatekeeper.domain.exceptions import ValidationException
from gatekeeper.domain.value_objects.core import (
    OPERATION_NAME_MAX_LENGTH,
    PermissionString,
    is_snowflake,
    is_valid_operation_name,
)

ROLE_NAME_MAX_LENGTH = 100


def require_snowflake(value: str, field: str) -> str:
    """Return value if it is a platform id, else raise ValidationException."""
    if not is_snowflake(value):
        raise ValidationException(f"{field} must be a numeric platform id", field=field)
    return value


def require_operation_name(value: str, field: str = "operation_name") -> str:
    """Return value if it is a well-formed operation name, else raise ValidationException."""
    if not is_valid_operation_name(value):
        raise ValidationException(
            f"{field} must be lowercase dotted segments of at most "
            f"{OPERATION_NAME_MAX_LENGTH} characters",
            field=field,
        )
    return value


def require_permission_string(value: str, field: str = "permission") -> str:
    if not PermissionString.is_valid(value):
        raise ValidationException(
            "Permission must be 'operation.<name>' or 'operation.*'", field=field
        )
    return value


def require_role_name(value: str, field: str = "name") -> str:
    """Return the stripped role name, or raise if it is blank or too long."""
    name = (value or "").strip()
    if not name or len(name) > ROLE_NAME_MAX_LENGTH:
        raise ValidationException(
            f"Role name must be 1-{ROLE_NAME_MAX_LENGTH} characters", field=field
        )
    return name
