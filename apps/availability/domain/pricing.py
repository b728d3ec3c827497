"""
Stay Pricing

Price breakdown for a validated stay:

    nightly rate  = price_override of the available rule covering the night,
                    otherwise the base rate
    subtotal      = sum of nightly rates
    service_fee   = round2((subtotal + cleaning_fee) * service_fee_rate)
    taxes         = round2((subtotal + cleaning_fee) * tax_rate)
    total         = subtotal + cleaning_fee + service_fee + taxes + security_deposit

Every line is rounded to cents on its own before summing, so the lines
shown to the guest always add up to the total shown.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Tuple

from shared.domain.value_objects import DateRange, Money, round2, to_decimal
from apps.availability.domain.policy import BookingPolicy, DEFAULT_POLICY
from apps.availability.domain.rules import DateRule, RuleIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NightlyRate:
    night: date
    rate: Decimal
    source: str  # "base" or "override"


@dataclass(frozen=True)
class PriceBreakdown:
    """
    Price breakdown value object

    Derived from a stay and a rule set; recompute instead of storing.
    """
    nights: int
    subtotal: Decimal
    service_fee: Decimal
    taxes: Decimal
    total: Decimal
    nightly_rates: Tuple[NightlyRate, ...] = ()
    cleaning_fee: Decimal = Decimal('0.00')
    security_deposit: Decimal = Decimal('0.00')
    currency: str = 'NGN'

    @property
    def chargeable_subtotal(self) -> Decimal:
        """Amount fees and taxes are charged on"""
        return self.subtotal + self.cleaning_fee

    @property
    def average_nightly_rate(self) -> Decimal:
        if not self.nights:
            return Decimal('0.00')
        return round2(self.subtotal / self.nights)

    def as_money(self) -> Money:
        return Money(self.total, self.currency)

    def line_items(self) -> List[Tuple[str, Money]]:
        """Labelled lines for display, zero-valued optional lines omitted"""
        items = [(f"{self.nights} nights", Money(self.subtotal, self.currency))]
        if self.cleaning_fee:
            items.append(("Cleaning fee", Money(self.cleaning_fee, self.currency)))
        items.append(("Service fee", Money(self.service_fee, self.currency)))
        items.append(("Taxes", Money(self.taxes, self.currency)))
        if self.security_deposit:
            items.append(("Security deposit", Money(self.security_deposit, self.currency)))
        return items


def nightly_rates(check_in: date, check_out: date, base_rate,
                  rules: RuleIndex) -> List[NightlyRate]:
    """Rate for every night in [check_in, check_out)"""
    base = to_decimal(base_rate)
    rates = []
    for night in DateRange(check_in, check_out):
        rate, source_rule = rules.price_for(night, base)
        if source_rule is None and rules.is_blocked(night):
            logger.warning("Pricing night %s under a blocking rule at the base rate", night)
        rates.append(NightlyRate(
            night=night,
            rate=rate,
            source="override" if source_rule is not None else "base",
        ))
    return rates


def price_stay(
    check_in: date,
    check_out: date,
    base_rate,
    rules: RuleIndex | Iterable[DateRule] = (),
    *,
    policy: BookingPolicy = DEFAULT_POLICY,
    cleaning_fee=0,
    security_deposit=0,
) -> PriceBreakdown:
    """
    Price a stay

    The range is expected to be validated already (at least one night);
    availability is not re-checked here.
    """
    index = rules if isinstance(rules, RuleIndex) else RuleIndex(rules)
    if to_decimal(base_rate) <= 0:
        raise ValueError("Base rate must be positive")

    rates = nightly_rates(check_in, check_out, base_rate, index)
    subtotal = round2(sum((r.rate for r in rates), Decimal('0')))
    cleaning = round2(Money(cleaning_fee, policy.currency).amount)
    deposit = round2(Money(security_deposit, policy.currency).amount)

    chargeable = subtotal + cleaning
    service_fee = round2(chargeable * policy.service_fee_rate)
    taxes = round2(chargeable * policy.tax_rate)
    total = subtotal + cleaning + service_fee + taxes + deposit

    breakdown = PriceBreakdown(
        nights=len(rates),
        subtotal=subtotal,
        service_fee=service_fee,
        taxes=taxes,
        total=total,
        nightly_rates=tuple(rates),
        cleaning_fee=cleaning,
        security_deposit=deposit,
        currency=policy.currency,
    )
    logger.debug(
        "Priced %s-%s: %s nights, total %s %s",
        check_in, check_out, breakdown.nights, breakdown.total, breakdown.currency,
    )
    return breakdown
