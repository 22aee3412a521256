import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "shift_attendance_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

ORG_UTC_OFFSET = os.getenv("ORG_UTC_OFFSET", "+05:30")
MATCH_TOLERANCE_HOURS = 3.0

PROCESSING_MAX_WORKERS = 2
LOCK_TIMEOUT_SECONDS = 5.0
LOCK_BACKEND = "process"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
