"""Booking policy read from Django settings."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore

from apps.availability.domain.policy import BookingPolicy, DEFAULT_POLICY


def get_booking_policy() -> BookingPolicy:
    """Build the policy from settings, falling back to the platform defaults."""

    return BookingPolicy(
        default_min_stay=int(getattr(settings, "BOOKING_DEFAULT_MIN_STAY", DEFAULT_POLICY.default_min_stay)),
        default_max_stay=int(getattr(settings, "BOOKING_DEFAULT_MAX_STAY", DEFAULT_POLICY.default_max_stay)),
        form_max_nights=int(getattr(settings, "BOOKING_FORM_MAX_NIGHTS", DEFAULT_POLICY.form_max_nights)),
        rule_form_max_stay=int(
            getattr(settings, "AVAILABILITY_RULE_DEFAULT_MAX_STAY", DEFAULT_POLICY.rule_form_max_stay)
        ),
        service_fee_rate=Decimal(str(getattr(settings, "BOOKING_SERVICE_FEE_RATE", DEFAULT_POLICY.service_fee_rate))),
        tax_rate=Decimal(str(getattr(settings, "BOOKING_TAX_RATE", DEFAULT_POLICY.tax_rate))),
        currency=getattr(settings, "BOOKING_CURRENCY", DEFAULT_POLICY.currency),
    )
