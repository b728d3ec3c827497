"""Base settings for all environments.

Common configuration for the availability engine: the installed apps
that provide serializers for rule records and booking requests, logging,
and the booking policy constants. Environment-specific overrides live in
`dev.py`, `prod.py` and `test.py`.
"""

import os
from pathlib import Path

import structlog

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'replace-me-in-production')

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = False

ALLOWED_HOSTS: list[str] = os.environ.get('DJANGO_ALLOWED_HOSTS', '*').split(',')

# Application definition

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',
    # Third‑party apps
    'rest_framework',
    # Domain apps
    'apps.availability',
]

# Rules and bookings are persisted by the backend; nothing is stored here.
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

# Internationalization

LANGUAGE_CODE = 'en-us'

TIME_ZONE = 'Africa/Lagos'

USE_I18N = True

USE_TZ = True

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# Django Rest Framework
REST_FRAMEWORK = {
    'COERCE_DECIMAL_TO_STRING': True,
    'DATE_INPUT_FORMATS': ['iso-8601'],
}

# Booking policy
# Calendar stay bounds used when no host rule applies at check-in
BOOKING_DEFAULT_MIN_STAY = int(os.environ.get('BOOKING_DEFAULT_MIN_STAY', 1))
BOOKING_DEFAULT_MAX_STAY = int(os.environ.get('BOOKING_DEFAULT_MAX_STAY', 28))
# Hard ceiling checked by the booking form, independent of rule max stays
BOOKING_FORM_MAX_NIGHTS = int(os.environ.get('BOOKING_FORM_MAX_NIGHTS', 28))
BOOKING_SERVICE_FEE_RATE = os.environ.get('BOOKING_SERVICE_FEE_RATE', '0.10')
BOOKING_TAX_RATE = os.environ.get('BOOKING_TAX_RATE', '0.05')
BOOKING_CURRENCY = os.environ.get('BOOKING_CURRENCY', 'NGN')
# Max stay prefilled in the host's rule dialog
AVAILABILITY_RULE_DEFAULT_MAX_STAY = int(os.environ.get('AVAILABILITY_RULE_DEFAULT_MAX_STAY', 30))

# Logging
structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "json": {
            "()": "structlog.stdlib.ProcessorFormatter",
            "processor": structlog.processors.JSONRenderer(),
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "level": "DEBUG",
        }
    },
    "root": {"handlers": ["console"], "level": "WARNING"},
    "loggers": {
        "django": {"handlers": ["console"], "level": "INFO", "propagate": False},
        "apps": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "shared": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
    },
}
