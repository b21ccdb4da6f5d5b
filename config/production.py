import os

from config import split_origins

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "roster_db"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

CASCADE_FETCH_LIMIT = int(os.getenv("CASCADE_FETCH_LIMIT", "1000"))
CASCADE_MAX_WORKERS = int(os.getenv("CASCADE_MAX_WORKERS", "8"))

# Comma separated; the first entry is used when the request origin is not listed
ALLOWED_ORIGINS = split_origins(os.getenv("ALLOWED_ORIGINS", ""))
