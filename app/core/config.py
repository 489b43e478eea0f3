# app/core/config.py

import os
from pathlib import Path
from typing import Final

# ==========================
# Process / environment
# ==========================

#: Service version reported by /api/health and used as the Sentry release.
APP_VERSION: Final[str] = "4.0.0"

#: Service name used in health responses and the Sentry release tag.
APP_NAME: Final[str] = "nomina"

#: Default directory for config.json, employees.json and payrolls/.
#: Override with NOMINA_DATA_DIR.
DEFAULT_DATA_DIR: Final[str] = "data"

#: Default directory for rotating log files. Override with LOG_DIR.
DEFAULT_LOG_DIR: Final[str] = "logs"


def is_production() -> bool:
    """True when PRODUCTION=true is set in the environment."""
    return os.getenv("PRODUCTION", "false").lower() == "true"


def get_data_dir() -> Path:
    """Directory holding the JSON data files, read from the environment on every call."""
    return Path(os.getenv("NOMINA_DATA_DIR", DEFAULT_DATA_DIR))


def get_log_dir() -> Path:
    return Path(os.getenv("LOG_DIR", DEFAULT_LOG_DIR))


def get_cors_origins() -> list[str]:
    """Comma separated CORS_ORIGINS, empty list when unset."""
    raw = os.getenv("CORS_ORIGINS", "")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


# ==========================
# Identifiers
# ==========================

#: Allowed characters for a payroll period identifier. The identifier becomes
#: a file name under payrolls/, so nothing outside this set is accepted.
PERIOD_ID_PATTERN: Final[str] = r"[A-Za-z0-9_-]{1,40}"
