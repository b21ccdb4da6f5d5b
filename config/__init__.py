import os


def get_settings_module() -> str:
    """Map APP_ENV to a settings module; anything unknown is development."""
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "config.production"

    if env in {"test", "testing"}:
        return "config.testing"

    return "config.development"


def split_origins(value: str) -> list:
    return [o.strip() for o in (value or "").split(",") if o.strip()]
