import os

from config.config import db_config_from_env, env_flag, env_int

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = db_config_from_env()

STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "mysql")

DEBUG = False

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "0")
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")

MAX_BATCH_WRITES = env_int("MAX_BATCH_WRITES", 500)
TRANSACTION_ATTEMPTS = env_int("TRANSACTION_ATTEMPTS", 5)
