"""Static catalogue of known operations and their built-in default policies.

Operations register a category at startup; the category picks the policy used
when a tenant has no stored override. Unregistered operations get the most
restrictive non-developer default (ADMIN).
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass

from gatekeeper.domain.entities.policy import OperationPolicy, default_policy_for_level
from gatekeeper.domain.enums import OperationCategory, PermissionLevel

_CATEGORY_LEVELS: dict[OperationCategory, PermissionLevel] = {
    OperationCategory.ADMIN: PermissionLevel.ADMIN,
    OperationCategory.CONTEXT: PermissionLevel.ADMIN,
    OperationCategory.MESSAGE: PermissionLevel.ADMIN,
    OperationCategory.DEV: PermissionLevel.DEVELOPER,
}

UNREGISTERED_LEVEL = PermissionLevel.ADMIN


def level_for_category(category: OperationCategory | None) -> PermissionLevel:
    """Return the default permission level for an operation category."""
    if category is None:
        return UNREGISTERED_LEVEL
    return _CATEGORY_LEVELS.get(category, PermissionLevel.PUBLIC)


@dataclass(frozen=True)
class RegisteredOperation:
    name: str
    category: OperationCategory
    configurable: bool = True


class OperationRegistry:
    """In-process registry of operation name -> category (and edit lock)."""

    def __init__(
        self,
        categories: Mapping[str, OperationCategory] | None = None,
        locked: Iterable[str] = (),
    ) -> None:
        self._operations: dict[str, RegisteredOperation] = {}
        locked_names = set(locked)
        for name, category in (categories or {}).items():
            self.register(name, category, configurable=name not in locked_names)

    def register(
        self, name: str, category: OperationCategory | str, configurable: bool = True
    ) -> RegisteredOperation:
        """Register (or re-register) an operation. Last registration wins."""
        op = RegisteredOperation(name, OperationCategory(category), configurable)
        self._operations[name] = op
        return op

    def get(self, name: str) -> RegisteredOperation | None:
        return self._operations.get(name)

    def category_of(self, name: str) -> OperationCategory | None:
        op = self._operations.get(name)
        return op.category if op else None

    def is_configurable(self, name: str) -> bool:
        """Unregistered operations are configurable."""
        op = self._operations.get(name)
        return op.configurable if op else True

    def operations_in(self, category: OperationCategory | str) -> list[str]:
        """Return the names registered under category, sorted."""
        wanted = OperationCategory(category)
        return sorted(name for name, op in self._operations.items() if op.category == wanted)

    def default_level(self, name: str) -> PermissionLevel:
        return level_for_category(self.category_of(name))

    def default_policy(self, name: str) -> OperationPolicy:
        """Return the built-in policy applied when a tenant has no override."""
        return default_policy_for_level(self.default_level(name))

    def __contains__(self, name: object) -> bool:
        return name in self._operations

    def __iter__(self) -> Iterator[RegisteredOperation]:
        return iter(sorted(self._operations.values(), key=lambda op: op.name))

    def __len__(self) -> int:
        return len(self._operations)
