"""Production settings.

Extends the base settings with production specific configuration.
Sensitive values must be provided via environment variables.
"""

from .base import *  # noqa: F401,F403

# Never run with debug enabled in production
DEBUG = False

# Allowed hosts should be defined explicitly via environment variable
ALLOWED_HOSTS = os.environ.get('DJANGO_ALLOWED_HOSTS', '').split(',')  # noqa: F405

SECRET_KEY = os.environ['DJANGO_SECRET_KEY']  # noqa: F405
