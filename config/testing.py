SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": "localhost",
    "port": 3306,
    "user": "root",
    "password": "",
    "database": "classroom_ledger_test",
}

STORAGE_BACKEND = "memory"

DEBUG = False
TESTING = True

AUTO_INIT_DB = False
AUTO_SEED_DB = False

MAX_BATCH_WRITES = 500
TRANSACTION_ATTEMPTS = 5
