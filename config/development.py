import os

from config.config import db_config_from_env, env_flag, env_int

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = db_config_from_env(default_password="")

# "mysql" or "memory" (memory keeps everything in-process, handy without a DB server)
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "mysql")

DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "1")
# Optional: also seed random students on startup when the roster is empty
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")

MAX_BATCH_WRITES = env_int("MAX_BATCH_WRITES", 500)
TRANSACTION_ATTEMPTS = env_int("TRANSACTION_ATTEMPTS", 5)
