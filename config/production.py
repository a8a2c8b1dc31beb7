import os

from config import env_flag

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "absensi"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "absensi"),
    "timeout_seconds": int(os.getenv("DB_TIMEOUT_SECONDS", "3")),
}

OFFICE = {
    "lat": float(os.getenv("OFFICE_LAT", "-7.688260")),
    "lng": float(os.getenv("OFFICE_LNG", "110.187048")),
    "radius_m": float(os.getenv("OFFICE_RADIUS_M", "20")),
    "epsilon_m": float(os.getenv("OFFICE_EPSILON_M", "5")),
    "timezone": os.getenv("OFFICE_TZ", "Asia/Jakarta"),
    "annual_leave_quota": int(os.getenv("ANNUAL_LEAVE_QUOTA", "12")),
    # Disables the attendance reset operation and its route.
    "production": True,
}

JWT = {
    "secret": os.getenv("JWT_SECRET", "please-set-JWT_SECRET"),
    "access_ttl_min": int(os.getenv("ACCESS_TOKEN_TTL_MIN", "15")),
    "refresh_ttl_day": int(os.getenv("REFRESH_TOKEN_TTL_DAY", "7")),
    "accept_legacy_claims": env_flag("JWT_ACCEPT_LEGACY_CLAIMS"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = env_flag("AUTO_INIT_DB")
AUTO_SEED_DB = env_flag("AUTO_SEED_DB")
