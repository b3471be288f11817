"""Example: drive the service layer directly (no Flask).

Controllers are a thin layer; the admission rules live in the services.
Run `scripts/init_db.py` and `scripts/seed_db.py` first.
"""

import importlib

from dotenv import load_dotenv

from attendance_guard.attendance.model import AttendanceSubmission, GeoLocation
from attendance_guard.config import get_settings_module
from attendance_guard.container import build_container
from attendance_guard.core.exceptions import DomainError


def main():
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    submission = AttendanceSubmission(
        username="alice",
        work_mode="office",
        location=GeoLocation(latitude=40.71316, longitude=-74.0060, accuracy=15),
    )
    try:
        record = container.attendance_service.mark_attendance(submission, "demo")
        print(record.to_dict())
    except DomainError as e:
        print(f"{type(e).__name__}: {e}")


if __name__ == "__main__":
    main()
