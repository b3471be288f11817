import os


def get_settings_module() -> str:
    # APP_ENV selects the settings module; default is development.
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "attendance_guard.config.production"

    if env in {"test", "testing"}:
        return "attendance_guard.config.testing"

    return "attendance_guard.config.development"
