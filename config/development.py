import os

from config import split_origins

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "roster_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

# Attendance cascade: how many players/events one trigger loads, and write concurrency
CASCADE_FETCH_LIMIT = int(os.getenv("CASCADE_FETCH_LIMIT", "1000"))
CASCADE_MAX_WORKERS = int(os.getenv("CASCADE_MAX_WORKERS", "8"))

ALLOWED_ORIGINS = split_origins(os.getenv("ALLOWED_ORIGINS", "*"))
