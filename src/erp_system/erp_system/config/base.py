import os
import urllib.parse

DB_USER = os.getenv("DB_USER", "root")
DB_PASSWORD = os.getenv("DB_PASSWORD", "")
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_PORT = int(os.getenv("DB_PORT", "3306"))
DB_NAME = os.getenv("DB_NAME", "erp_db")

_encoded_password = urllib.parse.quote_plus(DB_PASSWORD)
MYSQL_URL = f"mysql+mysqlconnector://{DB_USER}:{_encoded_password}@{DB_HOST}:{DB_PORT}/{DB_NAME}"

DATABASE_URL = os.getenv("DATABASE_URL", MYSQL_URL)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "text")

REDIS_URL = os.getenv("REDIS_URL", "")
RATE_LIMIT_ENABLED = bool(int(os.getenv("RATE_LIMIT_ENABLED", "1")))

ACCESS_TOKEN_TTL_SECONDS = int(os.getenv("ACCESS_TOKEN_TTL_SECONDS", str(60 * 60 * 24)))
SESSION_DAYS = int(os.getenv("SESSION_DAYS", "7"))

AUDIT_HMAC_SECRET = os.getenv("AUDIT_HMAC_SECRET", "")
JWT_SECRET = os.getenv("JWT_SECRET", "")

# Uploads: "local" or "s3"
STORAGE_DRIVER = os.getenv("STORAGE_DRIVER", "local")
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")
PUBLIC_FILES_URL = os.getenv("PUBLIC_FILES_URL", "/files")
S3_BUCKET = os.getenv("S3_BUCKET", "")
S3_REGION = os.getenv("S3_REGION", "")
S3_ENDPOINT_URL = os.getenv("S3_ENDPOINT_URL", "")

SMTP_HOST = os.getenv("SMTP_HOST", "")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER", "")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
SMTP_SENDER = os.getenv("SMTP_SENDER", "no-reply@erp.local")
SMTP_USE_TLS = bool(int(os.getenv("SMTP_USE_TLS", "1")))

ADMIN_TENANT_NAME = os.getenv("ADMIN_TENANT_NAME", "Default")
ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "")
