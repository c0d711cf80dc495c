from __future__ import annotations

import time
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from ..common.datetime_utils import utc_now
from ..common.ids import new_id
from ..core.constants import PERMISSION_CACHE_TTL_SECONDS
from ..logging_config import get_logger
from .model import (
    EffectivePermission,
    PermissionAuditLog,
    PermissionCheckResult,
    PermissionEffect,
    PermissionGroup,
)
from .permission_code import PermissionCode
from .repository import (
    GroupPermissionRepository,
    PermissionAuditLogRepository,
    PermissionGroupRepository,
    PermissionRepository,
    UserDirectPermissionRepository,
    UserGroupRepository,
)

logger = get_logger(__name__)

CacheKey = Tuple[str, str]


class PermissionService:
    """Resolves a user's effective permissions (groups, ancestors, direct grants)."""

    def __init__(
        self,
        permissions: PermissionRepository,
        groups: PermissionGroupRepository,
        group_permissions: GroupPermissionRepository,
        user_groups: UserGroupRepository,
        direct_permissions: UserDirectPermissionRepository,
        audit_logs: Optional[PermissionAuditLogRepository] = None,
        *,
        cache_ttl_seconds: int = PERMISSION_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._permissions = permissions
        self._groups = groups
        self._group_permissions = group_permissions
        self._user_groups = user_groups
        self._direct = direct_permissions
        self._audit_logs = audit_logs
        self._ttl = cache_ttl_seconds
        self._clock = clock
        self._cache: Dict[CacheKey, Tuple[float, List[EffectivePermission]]] = {}

    # cache
    def invalidate_user_cache(self, tenant_id: str, user_id: str) -> None:
        self._cache.pop((tenant_id, user_id), None)

    def clear_cache(self) -> None:
        self._cache.clear()

    def get_effective_permissions(self, tenant_id: str, user_id: str) -> List[EffectivePermission]:
        key = (tenant_id, user_id)
        cached = self._cache.get(key)
        now = self._clock()
        if cached and cached[0] > now:
            return cached[1]
        effective = self._load(tenant_id, user_id)
        self._cache[key] = (now + self._ttl, effective)
        return effective

    def _with_ancestors(self, tenant_id: str, group_id: str) -> Iterator[PermissionGroup]:
        seen = set()
        current = self._groups.get_by_id(tenant_id=tenant_id, group_id=group_id)
        while current is not None and current.id not in seen and current.is_active:
            seen.add(current.id)
            yield current
            if not current.parent_id:
                break
            current = self._groups.get_by_id(tenant_id=tenant_id, group_id=current.parent_id)

    def _load(self, tenant_id: str, user_id: str) -> List[EffectivePermission]:
        now = utc_now()
        groups: Dict[str, PermissionGroup] = {}
        for membership in self._user_groups.list_by_user(tenant_id=tenant_id, user_id=user_id):
            if not membership.is_active(now):
                continue
            for group in self._with_ancestors(tenant_id, membership.group_id):
                groups.setdefault(group.id, group)

        grants = self._group_permissions.list_by_groups(groups.keys())
        direct = [g for g in self._direct.list_by_user(tenant_id=tenant_id, user_id=user_id) if g.is_active(now)]

        permission_ids = {g.permission_id for g in grants} | {g.permission_id for g in direct}
        codes = {p.id: p.code for p in self._permissions.get_many(permission_ids)}

        effective: List[EffectivePermission] = []
        for grant in grants:
            if grant.permission_id in codes:
                effective.append(
                    EffectivePermission(
                        code=PermissionCode(codes[grant.permission_id]),
                        effect=grant.effect,
                        source=f"group:{groups[grant.group_id].slug}",
                    )
                )
        for grant in direct:
            if grant.permission_id in codes:
                code = PermissionCode(codes[grant.permission_id])
                effective.append(EffectivePermission(code=code, effect=grant.effect, source="direct"))
        return effective

    # checks
    def _evaluate(self, effective: Iterable[EffectivePermission], requested: PermissionCode) -> PermissionCheckResult:
        matching = [p for p in effective if p.code.matches(requested)]
        for p in matching:
            if p.effect == PermissionEffect.DENY:
                return PermissionCheckResult(allowed=False, reason=f"denied by {p.code}")
        for p in matching:
            if p.effect == PermissionEffect.ALLOW:
                return PermissionCheckResult(allowed=True, reason=f"granted by {p.code}")
        return PermissionCheckResult(allowed=False, reason="no matching permission")

    def check_permission(
        self,
        *,
        tenant_id: str,
        user_id: str,
        code: str,
        resource_id: Optional[str] = None,
        ip: Optional[str] = None,
    ) -> PermissionCheckResult:
        requested = PermissionCode.parse(code)
        result = self._evaluate(self.get_effective_permissions(tenant_id, user_id), requested)
        self._record(tenant_id, user_id, requested.value, result, resource_id, ip)
        return result

    def has_permission(self, *, tenant_id: str, user_id: str, code: str) -> bool:
        """Check without writing an audit trail entry."""
        return self._evaluate(self.get_effective_permissions(tenant_id, user_id), PermissionCode.parse(code)).allowed

    def check_many(self, *, tenant_id: str, user_id: str, codes: Iterable[str], require_all: bool = True) -> bool:
        results = [self.has_permission(tenant_id=tenant_id, user_id=user_id, code=c) for c in codes]
        if not results:
            return False
        return all(results) if require_all else any(results)

    def get_user_permission_codes(self, *, tenant_id: str, user_id: str) -> List[str]:
        effective = self.get_effective_permissions(tenant_id, user_id)
        denies = [p.code for p in effective if p.effect == PermissionEffect.DENY]
        allowed = {
            p.code.value
            for p in effective
            if p.effect == PermissionEffect.ALLOW and not any(d.matches(p.code) for d in denies)
        }
        return sorted(allowed)

    def _record(
        self,
        tenant_id: str,
        user_id: str,
        code: str,
        result: PermissionCheckResult,
        resource_id: Optional[str],
        ip: Optional[str],
    ) -> None:
        if self._audit_logs is None:
            return
        try:
            self._audit_logs.save(
                PermissionAuditLog(
                    id=new_id(),
                    tenant_id=tenant_id,
                    user_id=user_id,
                    permission_code=code,
                    allowed=result.allowed,
                    reason=result.reason,
                    resource_id=resource_id,
                    ip=ip,
                )
            )
        except Exception:
            # The check result stands even if the trail cannot be written
            logger.warning("Failed to record permission check %s for user %s", code, user_id, exc_info=True)
