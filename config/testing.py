import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "absensi_test"),
    "timeout_seconds": 3,
}

OFFICE = {
    "lat": -7.688260,
    "lng": 110.187048,
    "radius_m": 20.0,
    "epsilon_m": 5.0,
    "timezone": "Asia/Jakarta",
    "annual_leave_quota": 12,
    "production": False,
}

JWT = {
    "secret": "test-jwt-secret",
    "access_ttl_min": 15,
    "refresh_ttl_day": 7,
    "accept_legacy_claims": False,
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False
AUTO_SEED_DB = False
