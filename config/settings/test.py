"""Test settings.

Pins the booking policy to its documented defaults so tests do not
depend on the environment, and lets log records propagate to pytest.
"""

from .base import *  # noqa: F401,F403

SECRET_KEY = 'test-secret-key'

BOOKING_DEFAULT_MIN_STAY = 1
BOOKING_DEFAULT_MAX_STAY = 28
BOOKING_FORM_MAX_NIGHTS = 28
BOOKING_SERVICE_FEE_RATE = '0.10'
BOOKING_TAX_RATE = '0.05'
BOOKING_CURRENCY = 'NGN'
AVAILABILITY_RULE_DEFAULT_MAX_STAY = 30

LOGGING["loggers"]["apps"]["propagate"] = True  # noqa: F405
LOGGING["loggers"]["shared"]["propagate"] = True  # noqa: F405
