"""Domain value objects for the Gatekeeper authorization engine.

Value objects are immutable types that represent domain concepts with
self-validation. They have no identity, only value.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from gatekeeper.domain.enums import Capability

# Platform ids (users, roles, guilds) are snowflakes: unsigned 64-bit integers as decimal strings.
SNOWFLAKE_RE = re.compile(r"^[0-9]{1,20}$")

# Operation names: lowercase segments separated by dots (e.g. "ban", "economy.pay").
OPERATION_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9_-]*(\.[a-z0-9][a-z0-9_-]*)*$")
OPERATION_NAME_MAX_LENGTH = 100

PERMISSION_PREFIX = "operation"
PERMISSION_SEP = "."
WILDCARD = "*"


def is_snowflake(value: str) -> bool:
    """Return True if value is a well-formed platform id."""
    return isinstance(value, str) and bool(SNOWFLAKE_RE.fullmatch(value))


def is_valid_operation_name(value: str) -> bool:
    """Return True if value is a well-formed operation name."""
    return (
        isinstance(value, str)
        and 0 < len(value) <= OPERATION_NAME_MAX_LENGTH
        and bool(OPERATION_NAME_RE.fullmatch(value))
    )


@dataclass(frozen=True)
class Actor:
    """Identity attempting an operation, as supplied by the command dispatcher.

    role_ids are the actor's native platform roles in the tenant and
    permissions is the platform capability bitfield; both come from the
    caller, never from this engine.
    """

    user_id: str
    role_ids: frozenset[str] = field(default_factory=frozenset)
    permissions: int = 0

    @property
    def is_administrator(self) -> bool:
        return bool(self.permissions & Capability.ADMINISTRATOR)

    def has_capability(self, capability: int) -> bool:
        """Return True if the actor holds every bit of capability.

        Administrators implicitly hold all capabilities, as on the platform.
        """
        if self.is_administrator:
            return True
        return (self.permissions & capability) == capability

    def has_any_capability(self, capabilities: Iterable[int]) -> bool:
        return any(self.has_capability(c) for c in capabilities)

    def has_any_role(self, role_ids: Iterable[str]) -> bool:
        return any(role_id in self.role_ids for role_id in role_ids)


@dataclass(frozen=True)
class Tenant:
    """Isolated namespace (one guild) in which an operation is attempted."""

    tenant_id: str
    owner_id: str | None = None

    def is_owner(self, user_id: str) -> bool:
        return self.owner_id is not None and self.owner_id == user_id


@dataclass(frozen=True)
class Decision:
    """Outcome of a permission check.

    reason is set on denies (human-readable); bypassed_by names the shortcut
    that allowed the request ('developer', 'explicit-allow'), if any.
    """

    allowed: bool
    reason: str | None = None
    bypassed_by: str | None = None

    @classmethod
    def allow(cls, bypassed_by: str | None = None) -> "Decision":
        return cls(allowed=True, bypassed_by=bypassed_by)

    @classmethod
    def deny(cls, reason: str) -> "Decision":
        return cls(allowed=False, reason=reason)


@dataclass(frozen=True)
class DeveloperAllowlist:
    """Process-wide set of developer user ids, fixed at startup."""

    user_ids: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_csv(cls, raw: str | None) -> "DeveloperAllowlist":
        """Parse a comma-separated id list; blanks are ignored.

        Raises:
            ValueError: If an entry is not a well-formed platform id.
        """
        ids = [part.strip() for part in (raw or "").split(",") if part.strip()]
        invalid = [i for i in ids if not is_snowflake(i)]
        if invalid:
            raise ValueError(f"Invalid developer user ids: {', '.join(invalid)}")
        return cls(user_ids=frozenset(ids))

    def __contains__(self, user_id: object) -> bool:
        return user_id in self.user_ids

    def __len__(self) -> int:
        return len(self.user_ids)


@dataclass(frozen=True)
class PermissionString:
    """RBAC grant of the form 'operation.<name>' or a wildcard 'operation.*'.

    A trailing '.*' matches every operation name under that prefix, so
    'operation.*' matches all operations and 'operation.economy.*' matches
    'economy.pay' but not 'economy'.
    """

    value: str

    def __post_init__(self) -> None:
        if not self.is_valid(self.value):
            raise ValueError(
                f"Permission must be '{PERMISSION_PREFIX}.<name>' or "
                f"'{PERMISSION_PREFIX}.{WILDCARD}', got: {self.value!r}"
            )

    @staticmethod
    def is_valid(value: str) -> bool:
        if not isinstance(value, str):
            return False
        head = PERMISSION_PREFIX + PERMISSION_SEP
        if not value.startswith(head):
            return False
        rest = value[len(head):]
        if rest == WILDCARD:
            return True
        if rest.endswith(PERMISSION_SEP + WILDCARD):
            rest = rest[: -len(PERMISSION_SEP + WILDCARD)]
        return is_valid_operation_name(rest)

    @staticmethod
    def for_operation(operation_name: str) -> str:
        """Return the exact grant string for an operation."""
        return f"{PERMISSION_PREFIX}{PERMISSION_SEP}{operation_name}"

    @property
    def is_wildcard(self) -> bool:
        return self.value.endswith(PERMISSION_SEP + WILDCARD)

    def matches(self, operation_name: str) -> bool:
        """Return True if this grant covers operation_name."""
        target = self.for_operation(operation_name)
        if not self.is_wildcard:
            return self.value == target
        prefix = self.value[: -len(WILDCARD)]
        return target.startswith(prefix)


def grants_operation(permissions: Iterable[str], operation_name: str) -> bool:
    """Return True if any permission string in the set covers operation_name.

    Malformed strings (e.g. legacy rows) never grant anything.
    """
    exact = PermissionString.for_operation(operation_name)
    for raw in permissions:
        if raw == exact:
            return True
        if PermissionString.is_valid(raw) and PermissionString(raw).matches(operation_name):
            return True
    return False
