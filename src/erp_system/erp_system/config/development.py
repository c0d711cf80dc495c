import os

from .base import *  # noqa: F401,F403

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, tables are created on startup (idempotent: create_all)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
REPOSITORY_BACKEND = os.getenv("REPOSITORY_BACKEND", "sql")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")
