"""Domain enumerations for the Gatekeeper authorization engine.

Enums represent fixed sets of domain values (permission levels, audit
actions, platform capability bits).
"""

from enum import Enum, IntFlag


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class PermissionLevel(_ValuesMixin, str, Enum):
    """Coarse-grained policy category attached to an operation.

    Determines which branch of the level switch decides the request once the
    explicit lists and custom roles did not settle it.
    """

    DEVELOPER = "developer"
    OWNER = "owner"
    ADMIN = "admin"
    MODERATOR = "moderator"
    PUBLIC = "public"
    CUSTOM = "custom"


class AuditAction(_ValuesMixin, str, Enum):
    """Audit action types recorded in the permission audit log."""

    UPDATE = "update"
    DELETE = "delete"
    MAINTENANCE_ENABLED = "maintenance_enabled"
    MAINTENANCE_DISABLED = "maintenance_disabled"
    PERMISSION_DENIED = "permission_denied"


class OperationCategory(_ValuesMixin, str, Enum):
    """Static category of a registered operation; selects its default policy."""

    ADMIN = "admin"
    CONTEXT = "context"
    MESSAGE = "message"
    DEV = "dev"
    GENERAL = "general"
    MODERATION = "moderation"
    ECONOMY = "economy"
    FUN = "fun"
    UTILITY = "utility"


class Capability(IntFlag):
    """Platform-native permission bits (Discord guild permission flags)."""

    CREATE_INSTANT_INVITE = 1 << 0
    KICK_MEMBERS = 1 << 1
    BAN_MEMBERS = 1 << 2
    ADMINISTRATOR = 1 << 3
    MANAGE_CHANNELS = 1 << 4
    MANAGE_GUILD = 1 << 5
    ADD_REACTIONS = 1 << 6
    VIEW_AUDIT_LOG = 1 << 7
    VIEW_CHANNEL = 1 << 10
    SEND_MESSAGES = 1 << 11
    MANAGE_MESSAGES = 1 << 13
    MENTION_EVERYONE = 1 << 17
    MUTE_MEMBERS = 1 << 22
    MANAGE_NICKNAMES = 1 << 27
    MANAGE_ROLES = 1 << 28
    MANAGE_WEBHOOKS = 1 << 29
    MANAGE_EVENTS = 1 << 33
    MODERATE_MEMBERS = 1 << 40


# Capabilities that make an actor a moderator for effective-level reporting.
MODERATION_CAPABILITIES: tuple[Capability, ...] = (
    Capability.MODERATE_MEMBERS,
    Capability.MANAGE_MESSAGES,
    Capability.KICK_MEMBERS,
    Capability.BAN_MEMBERS,
)
