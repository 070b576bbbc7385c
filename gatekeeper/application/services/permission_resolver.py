"""Permission resolver: the allow/deny decision for one operation attempt.

Precedence (each step short-circuits):

1. maintenance lockdown (developers are not exempt unless allowlisted)
2. developer allowlist
3. stored override, else the operation's default policy
4. explicit deny (wins over explicit allow)
5. explicit allow
6. custom-role RBAC grant
7. permission level
8. deny

Any store failure on the way fails closed with "permission check failed".
"""

from __future__ import annotations

import logging

from gatekeeper.application.dtos.permission import EffectivePolicy
from gatekeeper.application.services.audit_recorder import AuditRecorder
from gatekeeper.application.services.maintenance_gate import MaintenanceGate
from gatekeeper.application.services.operation_registry import OperationRegistry
from gatekeeper.application.services.policy_cache import PolicyCache
from gatekeeper.application.services.role_resolver import RoleResolver
from gatekeeper.core.constants import (
    BYPASS_DEVELOPER,
    BYPASS_EXPLICIT_ALLOW,
    REASON_CHECK_FAILED,
    REASON_EXPLICIT_DENY,
    REASON_INSUFFICIENT,
    REASON_MAINTENANCE,
)
from gatekeeper.domain.enums import MODERATION_CAPABILITIES, AuditAction, PermissionLevel
from gatekeeper.domain.exceptions import PersistenceException
from gatekeeper.domain.value_objects.core import Actor, Decision, DeveloperAllowlist, Tenant
from gatekeeper.shared.telemetry.tracing import add_span_attributes, set_span_error, traced

logger = logging.getLogger(__name__)


class PermissionResolver:
    """Decides whether an actor may run an operation in a tenant.

    Reentrant; safe to call concurrently. The only side effects are cache
    population and (background) audit writes on denies.
    """

    def __init__(
        self,
        maintenance_gate: MaintenanceGate,
        policy_cache: PolicyCache,
        role_resolver: RoleResolver,
        registry: OperationRegistry,
        audit: AuditRecorder,
        developers: DeveloperAllowlist,
    ) -> None:
        self._maintenance = maintenance_gate
        self._cache = policy_cache
        self._roles = role_resolver
        self._registry = registry
        self._audit = audit
        self._developers = developers

    @traced("gatekeeper.check_permission")
    async def check_permission(self, actor: Actor, operation_name: str, tenant: Tenant) -> Decision:
        """Return the Decision for actor running operation_name in tenant. Never raises."""
        try:
            decision = await self._evaluate(actor, operation_name, tenant)
        except PersistenceException as e:
            logger.error(
                "Permission check failed closed (tenant=%s operation=%s user=%s): %s",
                tenant.tenant_id,
                operation_name,
                actor.user_id,
                e.message,
            )
            set_span_error(e)
            decision = Decision.deny(REASON_CHECK_FAILED)
        except Exception as e:
            logger.exception(
                "Unexpected error in permission check (tenant=%s operation=%s user=%s)",
                tenant.tenant_id,
                operation_name,
                actor.user_id,
            )
            set_span_error(e)
            decision = Decision.deny(REASON_CHECK_FAILED)
        add_span_attributes(
            **{
                "gatekeeper.tenant_id": tenant.tenant_id,
                "gatekeeper.operation": operation_name,
                "gatekeeper.allowed": decision.allowed,
                "gatekeeper.reason": decision.reason or decision.bypassed_by or "",
            }
        )
        return decision

    async def _evaluate(self, actor: Actor, operation_name: str, tenant: Tenant) -> Decision:
        tenant_id = tenant.tenant_id
        if await self._maintenance.is_blocked(tenant_id, actor.user_id):
            return Decision.deny(REASON_MAINTENANCE)

        if actor.user_id in self._developers:
            return Decision.allow(bypassed_by=BYPASS_DEVELOPER)

        effective = await self.get_effective_policy(tenant_id, operation_name)
        policy = effective.policy

        if actor.user_id in policy.denied_user_ids:
            return self._deny_and_audit(actor, operation_name, tenant_id, REASON_EXPLICIT_DENY)

        if actor.user_id in policy.allowed_user_ids:
            return Decision.allow(bypassed_by=BYPASS_EXPLICIT_ALLOW)

        if await self._roles.grants(actor.user_id, tenant_id, operation_name):
            return Decision.allow()

        if policy.level_allows(actor, tenant, self._developers):
            return Decision.allow()

        return self._deny_and_audit(actor, operation_name, tenant_id, REASON_INSUFFICIENT)

    def _deny_and_audit(
        self, actor: Actor, operation_name: str, tenant_id: str, reason: str
    ) -> Decision:
        logger.debug(
            "Denied %s for user %s in tenant %s: %s", operation_name, actor.user_id, tenant_id, reason
        )
        self._audit.record_in_background(
            tenant_id,
            AuditAction.PERMISSION_DENIED,
            actor.user_id,
            operation_name=operation_name,
            reason=reason,
        )
        return Decision.deny(reason)

    async def get_effective_policy(self, tenant_id: str, operation_name: str) -> EffectivePolicy:
        """Return the policy in force: the stored override, else the built-in default.

        Raises:
            PersistenceException: If the config store is unreachable.
        """
        config = await self._cache.get_config(tenant_id, operation_name)
        if config is not None:
            return EffectivePolicy(operation_name, config.policy, is_default=False)
        return EffectivePolicy(
            operation_name, self._registry.default_policy(operation_name), is_default=True
        )

    def effective_level(self, actor: Actor, tenant: Tenant) -> PermissionLevel:
        """Return the highest built-in level the actor holds in tenant (for display)."""
        if actor.user_id in self._developers:
            return PermissionLevel.DEVELOPER
        if tenant.is_owner(actor.user_id):
            return PermissionLevel.OWNER
        if actor.is_administrator:
            return PermissionLevel.ADMIN
        if actor.has_any_capability(MODERATION_CAPABILITIES):
            return PermissionLevel.MODERATOR
        return PermissionLevel.PUBLIC
