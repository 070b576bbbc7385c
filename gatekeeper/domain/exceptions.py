"""Domain exceptions for the Gatekeeper application.

Defines domain-level exceptions that represent business rule violations and
infrastructure failures on the decision path. Presentation layer maps them
to HTTP responses in exception handlers.

A missing operation config is not an exception: stores return None and the
resolver falls back to the operation's default policy.
"""

from typing import Any


class GatekeeperException(Exception):
    """Base exception for all Gatekeeper application errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable representation for API responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(GatekeeperException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class ConfigValidationException(GatekeeperException):
    """Raised when a permission config mutation is rejected before persistence.

    details["errors"] lists every invalid field as {"field", "message"} so the
    caller can report all problems at once.
    """

    def __init__(self, errors: list[dict[str, str]]) -> None:
        """Initialize with field-level errors.

        Args:
            errors: List of {"field": dotted path, "message": reason}.
        """
        fields = ", ".join(e["field"] for e in errors) or "config"
        super().__init__(
            f"Invalid permission config: {fields}",
            "VALIDATION_ERROR",
            {"errors": errors},
        )

    @property
    def fields(self) -> list[str]:
        """Return the invalid field paths in report order."""
        return [e["field"] for e in self.details["errors"]]


class OperationNotConfigurableException(GatekeeperException):
    """Raised when changing the config of an operation locked against edits."""

    def __init__(self, tenant_id: str, operation_name: str) -> None:
        super().__init__(
            f"Permissions for operation '{operation_name}' cannot be modified",
            "NOT_CONFIGURABLE",
            {"tenant_id": tenant_id, "operation_name": operation_name},
        )


class PersistenceException(GatekeeperException):
    """Raised when a store is unreachable or times out.

    On the decision path this makes the resolver fail closed.
    """

    def __init__(self, operation: str, reason: str) -> None:
        """Initialize with the failed store operation and reason.

        Args:
            operation: Store call that failed (e.g. 'config_store.get').
            reason: Short description (e.g. 'timeout', exception text).
        """
        super().__init__(
            f"Persistence failure during {operation}: {reason}",
            "PERSISTENCE_ERROR",
            {"operation": operation, "reason": reason},
        )


class CacheUnavailableException(GatekeeperException):
    """Raised by a distributed cache backend when it cannot serve a request.

    Never fatal: callers bypass the cache and read the store directly.
    """

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(
            f"Cache unavailable during {operation}: {reason}",
            "CACHE_UNAVAILABLE",
            {"operation": operation, "reason": reason},
        )


class ResourceNotFoundException(GatekeeperException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'custom_role').
            resource_id: The ID or name that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class DuplicateAssignmentException(GatekeeperException):
    """Raised when creating a role, permission grant or role assignment that already exists."""

    def __init__(self, message: str, assignment_type: str, details_extra: dict[str, Any] | None = None) -> None:
        """Initialize with message and assignment context.

        Args:
            message: Human-readable description (e.g. 'Role already exists').
            assignment_type: 'custom_role', 'role_permission' or 'role_assignment'.
            details_extra: Optional extra keys (e.g. role_name, user_id).
        """
        details = dict(details_extra or {})
        details["assignment_type"] = assignment_type
        super().__init__(message, "DUPLICATE_ASSIGNMENT", details)
