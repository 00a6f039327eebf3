import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_ledger"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Applies database/schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

WORKDAY_START = os.getenv("WORKDAY_START", "08:00")
LATE_GRACE_MINUTES = int(os.getenv("LATE_GRACE_MINUTES", "15"))
ANNUAL_LEAVE_QUOTA = int(os.getenv("ANNUAL_LEAVE_QUOTA", "12"))
REPORT_NAME = os.getenv("REPORT_NAME", "attendance-report")
