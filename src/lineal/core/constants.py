"""Lineal constants: filesystem layout, storage keys, and limits."""

from __future__ import annotations

from enum import IntEnum

# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------


class ExitCode(IntEnum):
    SUCCESS = 0
    ERROR = 1
    CONFIG_ERROR = 2
    STORAGE_ERROR = 3
    AUTH_ERROR = 4
    PERMISSION_ERROR = 5


# ---------------------------------------------------------------------------
# Filesystem layout
# ---------------------------------------------------------------------------

LINEAL_DIR_NAME = ".lineal"
CONFIG_FILENAME = "config.toml"
DB_FILENAME = "lineal.db"
DATA_DIRNAME = "data"

# ---------------------------------------------------------------------------
# Storage keys (one blob per collection)
# ---------------------------------------------------------------------------

USERS_KEY = "users"
PERSONNEL_KEY = "personnel"
AUDIT_LOG_KEY = "auditLog"

# ---------------------------------------------------------------------------
# Limits and defaults
# ---------------------------------------------------------------------------

AUDIT_LOG_MAX_ENTRIES = 1000  # oldest entries dropped silently beyond this
MIN_PASSWORD_LENGTH = 8
RETIREMENT_AGE_YEARS = 56  # mandatory retirement age

DEFAULT_PASSWORD = "Admin@123"  # seed accounts; rotation forced on first login
DEFAULT_SUPER_ADMIN_EMAIL = "superadmin@bjmp.gov.ph"
DEFAULT_ADMIN_EMAIL = "admin@bjmp.gov.ph"

SYSTEM_PRINCIPAL = "System"
