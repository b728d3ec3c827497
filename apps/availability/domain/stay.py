"""
Stay Validation

Second, form-level check of a booking request. The booking form accepts
dates typed directly into its fields, so a request is validated here no
matter how its dates were chosen.

Errors are returned as data (field -> FieldError) and every applicable
error is collected, so a form can flag all of its fields at once.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Iterable

from shared.domain.value_objects import DateRange, as_day, days_between
from apps.availability.domain.policy import BookingPolicy, DEFAULT_POLICY
from apps.availability.domain.rules import RuleIndex

logger = logging.getLogger(__name__)

NON_FIELD_ERRORS = 'non_field_errors'


class ErrorKind(Enum):
    """Kinds of user-correctable validation failures"""
    MISSING_FIELD = 'missing_field'
    PAST_DATE = 'past_date'
    INVALID_RANGE = 'invalid_range'
    MAX_STAY_EXCEEDED = 'max_stay_exceeded'
    MIN_STAY_NOT_MET = 'min_stay_not_met'
    CAPACITY_EXCEEDED = 'capacity_exceeded'
    INVALID_GUEST_COUNT = 'invalid_guest_count'
    DATES_UNAVAILABLE = 'dates_unavailable'


@dataclass(frozen=True)
class FieldError:
    kind: ErrorKind
    message: str

    def __str__(self):
        return self.message


@dataclass(frozen=True)
class StayForm:
    """Raw booking form values; any of them may still be missing"""
    check_in: date | None = None
    check_out: date | None = None
    guests: int | None = None


@dataclass(frozen=True)
class PropertyLimits:
    """The property facts the form is checked against"""
    max_guests: int


@dataclass
class StayValidation:
    """Outcome of validate_stay: ok when no field has an error"""
    errors: Dict[str, FieldError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def kinds(self) -> Dict[str, ErrorKind]:
        return {name: error.kind for name, error in self.errors.items()}

    def messages(self) -> Dict[str, str]:
        return {name: error.message for name, error in self.errors.items()}

    def __bool__(self):
        return self.ok


def validate_stay(
    form: StayForm,
    property_limits: PropertyLimits,
    *,
    today: date | None = None,
    policy: BookingPolicy = DEFAULT_POLICY,
    rules: RuleIndex | None = None,
    unavailable_dates: Iterable[date] = (),
) -> StayValidation:
    """
    Validate a complete booking form

    The form-level ceiling (policy.form_max_nights) is always checked.
    When rules are given, the rule-level stay bounds in effect on the
    check-in day are checked as well, as a separate rule. Rules and
    unavailable_dates also reject stays crossing a blocked night.
    """
    today = as_day(today) if today is not None else date.today()
    errors: Dict[str, FieldError] = {}

    check_in = as_day(form.check_in) if form.check_in is not None else None
    check_out = as_day(form.check_out) if form.check_out is not None else None

    if check_in is None:
        errors['check_in'] = FieldError(ErrorKind.MISSING_FIELD, "Check-in date is required")
    if check_out is None:
        errors['check_out'] = FieldError(ErrorKind.MISSING_FIELD, "Check-out date is required")

    if check_in is not None and check_out is not None:
        if check_in < today:
            errors['check_in'] = FieldError(
                ErrorKind.PAST_DATE, "Check-in date cannot be in the past"
            )

        nights = days_between(check_in, check_out)
        if nights <= 0:
            errors['check_out'] = FieldError(
                ErrorKind.INVALID_RANGE, "Check-out date must be after check-in date"
            )
        elif nights > policy.form_max_nights:
            errors['check_out'] = FieldError(
                ErrorKind.MAX_STAY_EXCEEDED,
                f"Maximum stay is {policy.form_max_nights} nights",
            )
        elif rules is not None:
            rule_error = _check_rule_stay_bounds(rules, check_in, nights, policy)
            if rule_error is not None:
                errors['check_out'] = rule_error

        if nights > 0:
            blocked = _first_blocked_night(rules, frozenset(as_day(d) for d in unavailable_dates),
                                           check_in, check_out)
            if blocked is not None:
                errors[NON_FIELD_ERRORS] = FieldError(
                    ErrorKind.DATES_UNAVAILABLE,
                    f"The property is not available on {blocked.isoformat()}",
                )

    guests = form.guests
    if guests is None:
        errors['guests'] = FieldError(ErrorKind.MISSING_FIELD, "Number of guests is required")
    elif guests < 1:
        errors['guests'] = FieldError(
            ErrorKind.INVALID_GUEST_COUNT, "At least 1 guest is required"
        )
    elif guests > property_limits.max_guests:
        errors['guests'] = FieldError(
            ErrorKind.CAPACITY_EXCEEDED,
            f"Maximum {property_limits.max_guests} guests allowed",
        )

    if errors:
        logger.debug("Stay form rejected: %s", {k: e.kind.value for k, e in errors.items()})
    return StayValidation(errors=errors)


def _check_rule_stay_bounds(rules: RuleIndex, check_in: date, nights: int,
                            policy: BookingPolicy) -> FieldError | None:
    min_stay, max_stay = rules.stay_bounds(
        check_in, policy.default_min_stay, policy.default_max_stay
    )
    if nights < min_stay:
        return FieldError(ErrorKind.MIN_STAY_NOT_MET, f"Minimum stay is {min_stay} nights")
    if nights > max_stay:
        return FieldError(ErrorKind.MAX_STAY_EXCEEDED, f"Maximum stay is {max_stay} nights")
    return None


def _first_blocked_night(rules: RuleIndex | None, booked: frozenset,
                         check_in: date, check_out: date) -> date | None:
    if rules is None and not booked:
        return None
    for night in DateRange(check_in, check_out):
        if night in booked or (rules is not None and rules.is_blocked(night)):
            return night
    return None
