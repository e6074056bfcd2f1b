from .config import Config

SECRET_KEY = "test-secret"
DB_CONFIG = {**Config.db_config(), "database": "payroll_test_db"}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"
CURRENCY_LABEL = Config.CURRENCY_LABEL

AUTO_INIT_DB = False
AUTO_SEED_DB = False
