"""
Common Value Objects

Value objects used across the availability domain:
- Money: A monetary amount in a single currency, rounded for display
- DateRange: A stay period (check-in inclusive, check-out exclusive)
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterator

from shared.domain.base import ValueObject

SUPPORTED_CURRENCIES = ('NGN', 'USD', 'EUR', 'GBP')

CENT = Decimal('0.01')


def to_decimal(value) -> Decimal:
    """Coerce int/float/str input into a Decimal without float noise"""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round2(value) -> Decimal:
    """Round half-up to two decimal places"""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def as_day(value) -> date:
    """Strip the time component; the domain works at whole-day granularity"""
    if isinstance(value, datetime):
        return value.date()
    return value


def days_between(start: date, end: date) -> int:
    """Whole days from start to end (negative when end is earlier)"""
    return (as_day(end) - as_day(start)).days


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object

    Represents a non-negative amount in one currency.
    There is no conversion between currencies.
    """
    amount: Decimal
    currency: str = 'NGN'

    def __post_init__(self):
        object.__setattr__(self, 'amount', to_decimal(self.amount))
        if self.amount < 0:
            raise ValueError("Amount cannot be negative")
        if not self.currency:
            raise ValueError("Currency is required")
        if self.currency not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Unsupported currency: {self.currency}")

    def __str__(self):
        return f"{self.currency} {self.amount:,.2f}"

    def __repr__(self):
        return f"Money({self.amount}, '{self.currency}')"


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Stay period value object

    start_date is the check-in day (inclusive), end_date the check-out day
    (exclusive). Iterating yields every night of the stay.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        object.__setattr__(self, 'start_date', as_day(self.start_date))
        object.__setattr__(self, 'end_date', as_day(self.end_date))
        if self.start_date >= self.end_date:
            raise ValueError(f"Start date ({self.start_date}) must be before end date ({self.end_date})")

    def __iter__(self) -> Iterator[date]:
        current = self.start_date
        while current < self.end_date:
            yield current
            current += timedelta(days=1)

    def __str__(self):
        return f"{self.start_date.isoformat()} - {self.end_date.isoformat()}"

    def __repr__(self):
        return f"DateRange({self.start_date}, {self.end_date})"
