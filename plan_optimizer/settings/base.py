"""
Base settings for plan_optimizer project.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "django-insecure-plan-optimizer-dev-key")

DEBUG = False

ALLOWED_HOSTS: list[str] = []

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "usage",
    "billing",
    "tariffs",
]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Internationalization: Hebrew first, English available
LANGUAGE_CODE = "he"
LANGUAGES = [
    ("he", "Hebrew"),
    ("en", "English"),
]
USE_I18N = True
TIME_ZONE = "Asia/Jerusalem"
USE_TZ = True

# Plan catalog (YAML); reloadable without code changes
TARIFF_CATALOG_PATH = Path(
    os.getenv("TARIFF_CATALOG_PATH", BASE_DIR / "tariffs" / "catalog.yaml")
)

# Usage uploads
USAGE_UPLOAD_MAX_BYTES = 10 * 1024 * 1024

# Estimates for households without a smart meter
SMART_METER_COST = 265
ASSUMED_DISCOUNT_HOURS_SHARE = 0.35

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {
            "format": "{asctime} {levelname} {name}: {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        "usage": {"level": os.getenv("USAGE_LOG_LEVEL", "INFO")},
        "billing": {"level": os.getenv("BILLING_LOG_LEVEL", "INFO")},
        "tariffs": {"level": "INFO"},
    },
}
