from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping
from zoneinfo import ZoneInfo

from .constants import (
    DEFAULT_ACCESS_TOKEN_TTL_MIN,
    DEFAULT_ANNUAL_LEAVE_QUOTA,
    DEFAULT_GPS_EPSILON_M,
    DEFAULT_OFFICE_LAT,
    DEFAULT_OFFICE_LNG,
    DEFAULT_OFFICE_RADIUS_M,
    DEFAULT_OFFICE_TZ,
    DEFAULT_REFRESH_TOKEN_TTL_DAY,
)


@dataclass(frozen=True)
class OfficeSettings:
    """Process-wide policy injected into the attendance and leave services."""

    office_lat: float = DEFAULT_OFFICE_LAT
    office_lng: float = DEFAULT_OFFICE_LNG
    radius_m: float = DEFAULT_OFFICE_RADIUS_M
    epsilon_m: float = DEFAULT_GPS_EPSILON_M
    timezone: str = DEFAULT_OFFICE_TZ
    annual_leave_quota: int = DEFAULT_ANNUAL_LEAVE_QUOTA
    production: bool = False

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "OfficeSettings":
        return cls(
            office_lat=float(data.get("lat", DEFAULT_OFFICE_LAT)),
            office_lng=float(data.get("lng", DEFAULT_OFFICE_LNG)),
            radius_m=float(data.get("radius_m", DEFAULT_OFFICE_RADIUS_M)),
            epsilon_m=float(data.get("epsilon_m", DEFAULT_GPS_EPSILON_M)),
            timezone=str(data.get("timezone", DEFAULT_OFFICE_TZ)),
            annual_leave_quota=int(data.get("annual_leave_quota", DEFAULT_ANNUAL_LEAVE_QUOTA)),
            production=bool(data.get("production", False)),
        )


@dataclass(frozen=True)
class TokenSettings:
    secret: str
    access_ttl_min: int = DEFAULT_ACCESS_TOKEN_TTL_MIN
    refresh_ttl_day: int = DEFAULT_REFRESH_TOKEN_TTL_DAY
    accept_legacy_claims: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TokenSettings":
        return cls(
            secret=str(data["secret"]),
            access_ttl_min=int(data.get("access_ttl_min", DEFAULT_ACCESS_TOKEN_TTL_MIN)),
            refresh_ttl_day=int(data.get("refresh_ttl_day", DEFAULT_REFRESH_TOKEN_TTL_DAY)),
            accept_legacy_claims=bool(data.get("accept_legacy_claims", False)),
        )
