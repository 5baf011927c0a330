"""Production settings.

Sensitive values must be provided via environment variables.
"""

from .base import *  # noqa: F401,F403

DEBUG = False

SECRET_KEY = get_env('DJANGO_SECRET_KEY', required=True)  # noqa: F405

ALLOWED_HOSTS = [host.strip() for host in get_env('DJANGO_ALLOWED_HOSTS', '').split(',') if host.strip()]  # noqa: F405

SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')
CSRF_COOKIE_SECURE = True
SESSION_COOKIE_SECURE = True
SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = 'DENY'
