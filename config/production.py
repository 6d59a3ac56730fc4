import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "workboard_db"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

PERIOD_MONTHS_BACK = int(os.getenv("PERIOD_MONTHS_BACK", "6"))
PERIOD_MONTHS_FORWARD = int(os.getenv("PERIOD_MONTHS_FORWARD", "6"))
LONG_DAY_HOURS = float(os.getenv("LONG_DAY_HOURS", "8"))
MAX_ENTRY_DAYS = int(os.getenv("MAX_ENTRY_DAYS", "93"))
