from __future__ import annotations

import importlib
import os
from dataclasses import dataclass
from typing import Optional


def get_settings_module() -> str:
    # APP_ENV selects the settings module, development by default
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "erp_system.config.production"

    if env in {"test", "testing"}:
        return "erp_system.config.testing"

    return "erp_system.config.development"


@dataclass(frozen=True)
class Settings:
    module: str
    secret_key: str
    database_url: str
    debug: bool = False
    testing: bool = False
    auto_init_db: bool = False
    repository_backend: str = "sql"
    log_level: str = "INFO"
    log_format: str = "text"
    redis_url: str = ""
    rate_limit_enabled: bool = False
    access_token_ttl_seconds: int = 86400
    session_days: int = 7
    audit_hmac_secret: str = ""
    jwt_secret: str = ""
    storage_driver: str = "local"
    upload_dir: str = "uploads"
    public_files_url: str = "/files"
    s3_bucket: str = ""
    s3_region: str = ""
    s3_endpoint_url: str = ""
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_sender: str = "no-reply@erp.local"
    smtp_use_tls: bool = True
    admin_tenant_name: str = "Default"
    admin_username: str = "admin"
    admin_password: str = ""


def load_settings(module_name: Optional[str] = None) -> Settings:
    name = module_name or get_settings_module()
    module = importlib.import_module(name)

    def opt(key: str, default):
        return getattr(module, key, default)

    return Settings(
        module=name,
        secret_key=getattr(module, "SECRET_KEY"),
        database_url=getattr(module, "DATABASE_URL"),
        debug=bool(opt("DEBUG", False)),
        testing=bool(opt("TESTING", False)),
        auto_init_db=bool(opt("AUTO_INIT_DB", False)),
        repository_backend=str(opt("REPOSITORY_BACKEND", "sql")),
        log_level=str(opt("LOG_LEVEL", "INFO")),
        log_format=str(opt("LOG_FORMAT", "text")),
        redis_url=str(opt("REDIS_URL", "")),
        rate_limit_enabled=bool(opt("RATE_LIMIT_ENABLED", False)),
        access_token_ttl_seconds=int(opt("ACCESS_TOKEN_TTL_SECONDS", 86400)),
        session_days=int(opt("SESSION_DAYS", 7)),
        audit_hmac_secret=str(opt("AUDIT_HMAC_SECRET", "")),
        jwt_secret=str(opt("JWT_SECRET", "")),
        storage_driver=str(opt("STORAGE_DRIVER", "local")),
        upload_dir=str(opt("UPLOAD_DIR", "uploads")),
        public_files_url=str(opt("PUBLIC_FILES_URL", "/files")),
        s3_bucket=str(opt("S3_BUCKET", "")),
        s3_region=str(opt("S3_REGION", "")),
        s3_endpoint_url=str(opt("S3_ENDPOINT_URL", "")),
        smtp_host=str(opt("SMTP_HOST", "")),
        smtp_port=int(opt("SMTP_PORT", 587)),
        smtp_user=str(opt("SMTP_USER", "")),
        smtp_password=str(opt("SMTP_PASSWORD", "")),
        smtp_sender=str(opt("SMTP_SENDER", "no-reply@erp.local")),
        smtp_use_tls=bool(opt("SMTP_USE_TLS", True)),
        admin_tenant_name=str(opt("ADMIN_TENANT_NAME", "Default")),
        admin_username=str(opt("ADMIN_USERNAME", "admin")),
        admin_password=str(opt("ADMIN_PASSWORD", "")),
    )
