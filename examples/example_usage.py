"""Example: drive the service layer directly (no Flask).

Controllers are a thin layer; the attendance and leave rules live in the services.
"""

import importlib
from datetime import date

from config import get_settings_module

from src.absensi.absensi.common.datetime_utils import utc_now
from src.absensi.absensi.common.geo import Position
from src.absensi.absensi.container import build_container
from src.absensi.absensi.core.settings import OfficeSettings, TokenSettings


def main():
    settings = importlib.import_module(get_settings_module())
    office = OfficeSettings.from_mapping(settings.OFFICE)
    container = build_container(
        db_config=settings.DB_CONFIG,
        office=office,
        tokens=TokenSettings.from_mapping(settings.JWT),
    )

    user = container.auth_service.get_user(1)
    at_office = Position(lat=office.office_lat, lng=office.office_lng)
    print(container.attendance_service.get_status(user.user_id, utc_now(), at_office))
    print(container.leave_service.get_quota(user.user_id, date.today().year))


if __name__ == "__main__":
    main()
