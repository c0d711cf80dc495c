"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7
DEFAULT_ACCESS_TOKEN_TTL_SECONDS = 60 * 60 * 24

MAX_LOGIN_ATTEMPTS = 5
BLOCK_MINUTES = 15
RESET_TOKEN_MINUTES = 30

PERMISSION_CACHE_TTL_SECONDS = 5 * 60

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100

MAX_UPLOAD_BYTES = 10 * 1024 * 1024

REDACTED = "[REDACTED]"
