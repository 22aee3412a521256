import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "shift_attendance"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Organization wall-clock offset used for every shift time and punch
ORG_UTC_OFFSET = os.getenv("ORG_UTC_OFFSET", "+05:30")
MATCH_TOLERANCE_HOURS = float(os.getenv("MATCH_TOLERANCE_HOURS", "3"))

PROCESSING_MAX_WORKERS = int(os.getenv("PROCESSING_MAX_WORKERS", "4"))
LOCK_TIMEOUT_SECONDS = float(os.getenv("LOCK_TIMEOUT_SECONDS", "30"))
# "process" (threading locks) or "mysql" (GET_LOCK, shared across processes)
LOCK_BACKEND = os.getenv("LOCK_BACKEND", "process")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
