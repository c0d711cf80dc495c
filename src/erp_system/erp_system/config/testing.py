import os

from .base import *  # noqa: F401,F403

SECRET_KEY = "test-secret"
DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite://")

DEBUG = False
TESTING = True

AUTO_INIT_DB = True
REPOSITORY_BACKEND = os.getenv("REPOSITORY_BACKEND", "memory")
RATE_LIMIT_ENABLED = False
REDIS_URL = ""
AUDIT_HMAC_SECRET = "test-audit-secret"
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "/tmp/erp-test-uploads")
STORAGE_DRIVER = "local"
ADMIN_PASSWORD = ""
