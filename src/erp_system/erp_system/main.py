from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .absences.controller import register as register_absences
from .audit.controller import register as register_audit
from .config import load_settings
from .container import Container, build_in_memory_container, build_sql_container
from .database.bootstrap import create_schema, ensure_admin, ensure_database_exists, list_tables, seed_permissions
from .employees.controller import register as register_employees
from .finance.controller import register as register_finance
from .http import files, health
from .http.errors import register_error_handlers
from .http.middleware import register_rate_limit
from .logging_config import get_logger, setup_logging
from .notifications.controller import register as register_notifications
from .payroll.controller import register as register_payroll
from .rbac.controller import register as register_rbac
from .requests.controller import register as register_requests
from .sales.controller import register as register_sales
from .stock.controller import register as register_stock
from .tenants.controller import register as register_tenants
from .users.controller import register as register_users

logger = get_logger(__name__)


def _init_data(container: Container) -> None:
    settings = container.settings
    if container.database is not None:
        ensure_database_exists(settings.database_url)
        create_schema(container.database)
        logger.info("Schema ready (%d tables)", len(list_tables(container.database)))

    repos = container.repos
    seed_permissions(container.rbac_service, repos.permissions)
    ensure_admin(
        tenant_service=container.tenant_service,
        user_service=container.user_service,
        rbac_service=container.rbac_service,
        tenants_repo=repos.tenants,
        users_repo=repos.users,
        groups_repo=repos.groups,
        tenant_name=settings.admin_tenant_name,
        username=settings.admin_username,
        password=settings.admin_password,
    )


def create_app(settings_module: Optional[str] = None, container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)

    if container is None:
        settings = load_settings(settings_module)
        setup_logging(settings.log_level, settings.log_format)
        if settings.repository_backend == "memory":
            container = build_in_memory_container(settings)
        else:
            container = build_sql_container(settings)
    else:
        settings = container.settings
        setup_logging(settings.log_level, settings.log_format)

    app = Flask(__name__)
    app.secret_key = settings.secret_key
    app.config["DEBUG"] = settings.debug
    app.config["TESTING"] = settings.testing
    app.config["MAX_CONTENT_LENGTH"] = 20 * 1024 * 1024

    dialect = container.database.dialect if container.database is not None else "memory"
    logger.info("Starting ERP backend (settings=%s, backend=%s)", settings.module, dialect)

    if settings.auto_init_db:
        _init_data(container)

    app.extensions["erp_container"] = container

    register_error_handlers(app)
    register_rate_limit(app, container.rate_limiter, container.guards, container.permission_service)
    health.register(app)

    register_tenants(app, container)
    register_users(app, container)
    register_rbac(app, container)
    register_audit(app, container)
    register_notifications(app, container)
    register_employees(app, container)
    register_absences(app, container)
    register_payroll(app, container)
    register_finance(app, container)
    register_stock(app, container)
    register_sales(app, container)
    register_requests(app, container)
    files.register(app, container)

    return app


def run() -> None:
    app = create_app()
    app.run(host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "5000")), debug=app.config["DEBUG"])


if __name__ == "__main__":
    run()
