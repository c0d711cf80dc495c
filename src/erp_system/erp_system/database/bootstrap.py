from __future__ import annotations

from typing import List, Optional

import mysql.connector
from sqlalchemy.engine import make_url

from ..logging_config import get_logger
from ..rbac import permission_codes as perms
from ..tenants.model import Tenant, slugify
from ..users.model import User
from .connection import Database
from .tables import Base

logger = get_logger(__name__)

ADMIN_GROUP_SLUG = "administrators"


def ensure_database_exists(url: str) -> None:
    """Create the MySQL schema named in the URL when it is missing."""
    target = make_url(url)
    if not target.drivername.startswith("mysql") or not target.database:
        return
    conn = mysql.connector.connect(
        host=target.host or "localhost",
        port=int(target.port or 3306),
        user=target.username or "root",
        password=target.password or "",
        use_pure=True,
    )
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def create_schema(database: Database) -> None:
    Base.metadata.create_all(database.engine)


def list_tables(database: Database) -> List[str]:
    return sorted(Base.metadata.tables)


def seed_permissions(rbac_service, permissions_repo) -> int:
    """Insert the permission catalogue; existing codes are left untouched."""
    created = 0
    for code, name in perms.ALL_PERMISSIONS:
        if permissions_repo.get_by_code(code):
            continue
        rbac_service.create_permission(code=code, name=name, is_system=True)
        created += 1
    if created:
        logger.info("Seeded %d permissions", created)
    return created


def ensure_admin(
    *,
    tenant_service,
    user_service,
    rbac_service,
    tenants_repo,
    users_repo,
    groups_repo,
    tenant_name: str,
    username: str,
    password: str,
) -> Optional[User]:
    """Make sure the first tenant has an administrator holding full access."""
    if not password:
        logger.info("ADMIN_PASSWORD is empty, skipping admin bootstrap")
        return None

    tenant: Optional[Tenant] = tenants_repo.get_by_slug(slugify(tenant_name))
    if tenant is None:
        tenant = tenant_service.create_tenant(name=tenant_name)

    admin = users_repo.get_by_username(tenant_id=tenant.id, username=username, include_deleted=True)
    if admin is not None:
        if admin.deleted_at is not None:
            logger.warning("Admin user '%s' was deleted, not recreating it", username)
        return admin

    admin = user_service.register_user(
        tenant_id=tenant.id,
        username=username,
        email=f"{username}@{tenant.slug}.local",
        password=password,
    )
    group = groups_repo.get_by_slug(tenant_id=tenant.id, slug=ADMIN_GROUP_SLUG)
    if group is None:
        group = rbac_service.create_group(
            tenant_id=tenant.id, name="Administrators", slug=ADMIN_GROUP_SLUG, priority=100
        )
        rbac_service.add_permission_to_group(
            tenant_id=tenant.id, group_id=group.id, permission_code=perms.FULL_ACCESS
        )
    rbac_service.assign_group_to_user(tenant_id=tenant.id, user_id=admin.id, group_id=group.id)
    logger.info("Created admin user '%s' for tenant '%s'", username, tenant.slug)
    return admin
