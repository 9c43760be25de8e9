import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "settlement_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Applies database/schema.sql on startup (CREATE TABLE IF NOT EXISTS, safe to repeat).
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

# Subscription price per active student, minor units; used when a contract has none.
DEFAULT_PRICE_PER_UNIT = int(os.getenv("DEFAULT_PRICE_PER_UNIT", "1000"))
