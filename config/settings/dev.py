"""Development settings.

Extends the base settings with debug enabled and permissive hosts. Do not
use these settings in production!
"""

from .base import *  # noqa: F401,F403

DEBUG = True

ALLOWED_HOSTS = ['*']

EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'

LOGGING["loggers"]["apps"]["level"] = "DEBUG"  # noqa: F405
