from __future__ import annotations

import math
from dataclasses import dataclass

from ..core.constants import EARTH_RADIUS_M
from ..core.settings import OfficeSettings


@dataclass(frozen=True)
class Position:
    lat: float
    lng: float


def distance_meters(p1: Position, p2: Position) -> float:
    """Great-circle distance between two points (haversine, mean Earth radius)."""
    lat1 = math.radians(p1.lat)
    lat2 = math.radians(p2.lat)
    d_lat = math.radians(p2.lat - p1.lat)
    d_lng = math.radians(p2.lng - p1.lng)

    a = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def office_position(settings: OfficeSettings) -> Position:
    return Position(lat=settings.office_lat, lng=settings.office_lng)


def inside_radius(distance: float, settings: OfficeSettings) -> bool:
    # epsilon absorbs GPS noise on borderline fixes
    return distance <= settings.radius_m + settings.epsilon_m
