"""
Date Rules

Host-declared overrides for contiguous date spans:
- DateRule: a blocked span, or an available span with custom stay
  bounds and/or a nightly price override
- RuleIndex: resolves a calendar day to the rule governing it

Resolution policy is "first match wins": rules are scanned in the order
they were declared and the first one covering the day applies. A rule
appended later never overrides an older overlapping one.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Iterator, List, Tuple

from shared.domain.base import Entity
from shared.domain.value_objects import as_day, to_decimal


@dataclass(kw_only=True, eq=False)
class DateRule(Entity):
    """
    DateRule entity

    start_date and end_date are both inclusive whole days.
    min_stay, max_stay and price_override only mean something while
    is_available is True; reason is display-only.
    """
    start_date: date
    end_date: date
    is_available: bool = True
    min_stay: int | None = None
    max_stay: int | None = None
    price_override: Decimal | None = None
    reason: str | None = None

    def __post_init__(self):
        self.start_date = as_day(self.start_date)
        self.end_date = as_day(self.end_date)
        if self.price_override is not None:
            self.price_override = to_decimal(self.price_override)
        self.validate()

    def validate(self):
        """Check invariants, raising ValueError on the first violation"""
        if self.start_date > self.end_date:
            raise ValueError(
                f"Rule end date ({self.end_date}) cannot be before start date ({self.start_date})"
            )
        if self.min_stay is not None and self.min_stay < 1:
            raise ValueError("Minimum stay must be at least 1 night")
        if self.max_stay is not None and self.max_stay < 1:
            raise ValueError("Maximum stay must be at least 1 night")
        if (self.min_stay is not None and self.max_stay is not None
                and self.max_stay < self.min_stay):
            raise ValueError(
                f"Maximum stay ({self.max_stay}) cannot be below minimum stay ({self.min_stay})"
            )
        if self.price_override is not None and self.price_override <= 0:
            raise ValueError("Price override must be positive")

    def covers(self, day: date) -> bool:
        return self.start_date <= as_day(day) <= self.end_date

    def days(self) -> Iterator[date]:
        """Every day of the span, end date included"""
        current = self.start_date
        while current <= self.end_date:
            yield current
            current += timedelta(days=1)

    @property
    def length(self) -> int:
        """Number of days covered"""
        return (self.end_date - self.start_date).days + 1

    @property
    def is_blocking(self) -> bool:
        return not self.is_available

    def __str__(self):
        state = "available" if self.is_available else "blocked"
        return f"DateRule {self.start_date.isoformat()}..{self.end_date.isoformat()} ({state})"

    def __repr__(self):
        return (
            f"DateRule(id={self.id}, start_date={self.start_date}, "
            f"end_date={self.end_date}, is_available={self.is_available})"
        )


class RuleIndex:
    """
    Lookup from a calendar day to its governing rule

    Keeps the declared order of the host's rule list. Lookups are a
    linear scan; rule lists are small (tens of entries per property).
    """

    def __init__(self, rules: Iterable[DateRule] = ()):
        self._rules: Tuple[DateRule, ...] = tuple(rules)

    def rule_for(self, day: date) -> DateRule | None:
        """Return the first declared rule covering day, or None"""
        day = as_day(day)
        for rule in self._rules:
            if rule.start_date <= day <= rule.end_date:
                return rule
        return None

    def is_blocked(self, day: date) -> bool:
        rule = self.rule_for(day)
        return rule is not None and not rule.is_available

    def stay_bounds(self, day: date, default_min: int, default_max: int) -> Tuple[int, int]:
        """
        Min/max nights for a stay checking in on day

        Bounds come from the rule in effect at check-in; a missing rule,
        a blocking rule, or an unset bound falls back to the defaults.
        A bound the rule sets explicitly always wins over a conflicting
        default for the other bound.
        """
        rule = self.rule_for(day)
        if rule is None or not rule.is_available:
            return default_min, default_max
        if rule.max_stay is not None:
            max_stay = rule.max_stay
            min_stay = rule.min_stay if rule.min_stay is not None else min(default_min, max_stay)
        else:
            min_stay = rule.min_stay if rule.min_stay is not None else default_min
            max_stay = max(default_max, min_stay)
        return min_stay, max_stay

    def price_for(self, day: date, base_rate: Decimal) -> Tuple[Decimal, DateRule | None]:
        """Nightly rate for day and the rule that set it (None for base rate)"""
        rule = self.rule_for(day)
        if rule is not None and rule.is_available and rule.price_override is not None:
            return rule.price_override, rule
        return to_decimal(base_rate), None

    def overlapping(self, start: date, end: date) -> List[DateRule]:
        """Rules sharing at least one day with the inclusive span [start, end]"""
        start, end = as_day(start), as_day(end)
        return [
            rule for rule in self._rules
            if rule.start_date <= end and rule.end_date >= start
        ]

    @property
    def rules(self) -> List[DateRule]:
        return list(self._rules)

    def __iter__(self) -> Iterator[DateRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self):
        return f"RuleIndex(rules={len(self._rules)})"
