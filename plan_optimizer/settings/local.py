"""
Local development settings for plan_optimizer project.
"""

from .base import *  # noqa: F403, F401

# Development-specific settings
DEBUG = True

ALLOWED_HOSTS = ["localhost", "127.0.0.1"]

LOGGING["root"]["level"] = "INFO"  # noqa: F405
LOGGING["loggers"]["usage"]["level"] = "DEBUG"  # noqa: F405
