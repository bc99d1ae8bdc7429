import os

from config import env_flag

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "academic_records_test"),
}

JWT_SECRET = "test-jwt-secret"
JWT_ALGORITHM = "HS256"
JWT_EXPIRES_MINUTES = 60

DEBUG = False
TESTING = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "0")
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")

ALLOW_PRIVILEGED_REGISTRATION = env_flag("ALLOW_PRIVILEGED_REGISTRATION", "0")
DEFAULT_STUDENT_PASSWORD = "student123"
