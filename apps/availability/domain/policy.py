"""
Booking Policy

Platform-wide constants that govern stay selection and pricing.
Domain code receives a BookingPolicy explicitly; apps.availability.conf
builds one from Django settings.
"""

from dataclasses import dataclass
from decimal import Decimal

from shared.domain.base import ValueObject
from shared.domain.value_objects import SUPPORTED_CURRENCIES, to_decimal


@dataclass(frozen=True)
class BookingPolicy(ValueObject):
    """
    Booking policy value object

    default_min_stay / default_max_stay: calendar bounds when no rule applies
    form_max_nights: hard ceiling checked by the booking form, independent
        of any rule-level max_stay
    rule_form_max_stay: max_stay prefilled in the host's rule form
    """
    default_min_stay: int = 1
    default_max_stay: int = 28
    form_max_nights: int = 28
    rule_form_max_stay: int = 30
    service_fee_rate: Decimal = Decimal('0.10')
    tax_rate: Decimal = Decimal('0.05')
    currency: str = 'NGN'

    def __post_init__(self):
        object.__setattr__(self, 'service_fee_rate', to_decimal(self.service_fee_rate))
        object.__setattr__(self, 'tax_rate', to_decimal(self.tax_rate))
        if self.default_min_stay < 1:
            raise ValueError("default_min_stay must be at least 1 night")
        if self.default_max_stay < self.default_min_stay:
            raise ValueError("default_max_stay cannot be below default_min_stay")
        if self.form_max_nights < 1:
            raise ValueError("form_max_nights must be at least 1 night")
        if self.service_fee_rate < 0 or self.tax_rate < 0:
            raise ValueError("Fee and tax rates cannot be negative")
        if self.currency not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Unsupported currency: {self.currency}")


DEFAULT_POLICY = BookingPolicy()
