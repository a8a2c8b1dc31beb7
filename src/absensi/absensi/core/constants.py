"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

EARTH_RADIUS_M = 6_371_000.0

DEFAULT_OFFICE_LAT = -7.688260
DEFAULT_OFFICE_LNG = 110.187048
DEFAULT_OFFICE_RADIUS_M = 20.0
DEFAULT_GPS_EPSILON_M = 5.0
DEFAULT_OFFICE_TZ = "Asia/Jakarta"
DEFAULT_ANNUAL_LEAVE_QUOTA = 12

DEFAULT_DB_TIMEOUT_SECONDS = 3

DEFAULT_ACCESS_TOKEN_TTL_MIN = 15
DEFAULT_REFRESH_TOKEN_TTL_DAY = 7
JWT_ALGORITHM = "HS256"

IMAGE_MAX_SIDE = 1080
IMAGE_JPEG_QUALITY = 85

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6
