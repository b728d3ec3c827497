"""
Availability Calendar

Guest-facing date-range picker, independent of any rendering layer.

The calendar turns a sequence of day clicks into a validated
check-in/check-out pair. Every transition takes a BookingSelectionSession
and returns a new one; the calendar itself only holds the inputs
(rules, already-booked days, policy and today's date).

Click transitions:
1. A day that is not available is ignored.
2. Without a check-in, the day becomes the check-in and the calendar
   waits for a check-out.
3. With a check-in (choosing a check-out, or both already set):
   - day <= check-in: restart the selection at day
   - nights > max_stay: restart the selection at day
   - nights < min_stay: ignore the click
   - otherwise: commit day as check-out
   Stay bounds are those in effect on the check-in day.
"""

import calendar as month_calendar
import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Iterable, List, Tuple

from shared.domain.value_objects import as_day, days_between
from apps.availability.domain.policy import BookingPolicy, DEFAULT_POLICY
from apps.availability.domain.rules import DateRule, RuleIndex
from apps.availability.domain.selection import BookingSelectionSession

logger = logging.getLogger(__name__)

# Stay bounds at or above this many nights are not worth showing
UNBOUNDED_STAY_HINT = 365


def first_of_month(day: date) -> date:
    return day.replace(day=1)


def shift_month(month: date, offset: int) -> date:
    """First day of the month offset months away from month"""
    index = month.year * 12 + (month.month - 1) + offset
    return date(index // 12, index % 12 + 1, 1)


def month_grid(year: int, month: int) -> List[List[date]]:
    """
    Sunday-first weeks covering the month

    The first week starts on the Sunday on or before the 1st and the
    last week ends on the Saturday on or after the last day, so leading
    and trailing days belong to the adjacent months.
    """
    return month_calendar.Calendar(firstweekday=month_calendar.SUNDAY).monthdatescalendar(year, month)


@dataclass(frozen=True)
class DayStatus:
    """Per-day calendar metadata for rendering"""
    day: date
    is_past: bool
    is_available: bool
    is_selected: bool
    is_in_range: bool
    is_today: bool = False
    is_current_month: bool = True
    is_booked: bool = False
    rule: DateRule | None = None

    @property
    def is_clickable(self) -> bool:
        return self.is_available and self.is_current_month


@dataclass(frozen=True)
class StayRequirements:
    """Stay bounds and prompt shown under the calendar"""
    min_stay: int
    max_stay: int
    prompt: str

    @property
    def show_min_stay(self) -> bool:
        return self.min_stay > 1

    @property
    def show_max_stay(self) -> bool:
        return self.max_stay < UNBOUNDED_STAY_HINT


class AvailabilityCalendar:
    """
    Date-range picker over a property's availability

    Args:
        rules: host DateRules (or a RuleIndex over them)
        unavailable_dates: days already taken by bookings
        policy: booking policy supplying default stay bounds
        today: reference day; days before it are past
        min_stay / max_stay: caller-supplied defaults overriding the policy
    """

    def __init__(
        self,
        rules: RuleIndex | Iterable[DateRule] = (),
        unavailable_dates: Iterable[date] = (),
        *,
        policy: BookingPolicy = DEFAULT_POLICY,
        today: date | None = None,
        min_stay: int | None = None,
        max_stay: int | None = None,
    ):
        self.rules = rules if isinstance(rules, RuleIndex) else RuleIndex(rules)
        self.unavailable_dates = frozenset(as_day(d) for d in unavailable_dates)
        self.today = as_day(today) if today is not None else date.today()
        self.default_min_stay = min_stay if min_stay is not None else policy.default_min_stay
        self.default_max_stay = max_stay if max_stay is not None else policy.default_max_stay
        if self.default_max_stay < self.default_min_stay:
            raise ValueError(
                f"Maximum stay ({self.default_max_stay}) cannot be below "
                f"minimum stay ({self.default_min_stay})"
            )

    # ----- sessions -----

    def start_session(self) -> BookingSelectionSession:
        return BookingSelectionSession(visible_month=first_of_month(self.today))

    def clear(self, session: BookingSelectionSession) -> BookingSelectionSession:
        """Drop the selection; the visible month is kept"""
        return session.cleared()

    def navigate(self, session: BookingSelectionSession, months: int) -> BookingSelectionSession:
        """Move the visible month; the selection is never touched"""
        visible = session.visible_month or first_of_month(self.today)
        return replace(session, visible_month=shift_month(visible, months))

    # ----- classification -----

    def is_past(self, day: date) -> bool:
        return as_day(day) < self.today

    def is_blocked(self, day: date) -> bool:
        """Blocked by a host rule or already booked"""
        day = as_day(day)
        return self.rules.is_blocked(day) or day in self.unavailable_dates

    def is_available(self, day: date) -> bool:
        return not self.is_past(day) and not self.is_blocked(day)

    def classify(self, session: BookingSelectionSession, day: date) -> DayStatus:
        day = as_day(day)
        check_in, check_out = session.check_in, session.check_out
        visible = session.visible_month
        return DayStatus(
            day=day,
            is_past=self.is_past(day),
            is_available=self.is_available(day),
            is_selected=day == check_in or day == check_out,
            is_in_range=(check_in is not None and check_out is not None
                         and check_in <= day <= check_out),
            is_today=day == self.today,
            is_current_month=visible is None or (day.year, day.month) == (visible.year, visible.month),
            is_booked=day in self.unavailable_dates,
            rule=self.rules.rule_for(day),
        )

    def weeks(self, session: BookingSelectionSession) -> List[List[DayStatus]]:
        """The visible month as Sunday-first rows of DayStatus"""
        visible = session.visible_month or first_of_month(self.today)
        if session.visible_month is None:
            session = replace(session, visible_month=visible)
        return [
            [self.classify(session, day) for day in week]
            for week in month_grid(visible.year, visible.month)
        ]

    # ----- selection -----

    def stay_bounds(self, check_in: date) -> Tuple[int, int]:
        """Min/max nights for a stay starting on check_in"""
        return self.rules.stay_bounds(check_in, self.default_min_stay, self.default_max_stay)

    def click(self, session: BookingSelectionSession, day: date) -> BookingSelectionSession:
        day = as_day(day)
        if not self.is_available(day):
            logger.debug("Ignoring click on unavailable day %s", day)
            return session

        check_in = session.check_in
        if check_in is None:
            return session.start_at(day)

        if day <= check_in:
            logger.debug("Day %s is not after check-in %s, restarting selection", day, check_in)
            return session.start_at(day)

        nights = days_between(check_in, day)
        min_stay, max_stay = self.stay_bounds(check_in)
        if nights > max_stay:
            logger.debug(
                "%s nights exceeds maximum stay of %s, restarting selection at %s",
                nights, max_stay, day,
            )
            return session.start_at(day)
        if nights < min_stay:
            logger.debug("%s nights is below minimum stay of %s, ignoring click", nights, min_stay)
            return session

        return session.commit_checkout(day)

    def click_in_view(self, session: BookingSelectionSession, day: date) -> BookingSelectionSession:
        """Click as a rendered grid does it: days of adjacent months are inert"""
        if not self.classify(session, day).is_current_month:
            return session
        return self.click(session, day)

    def stay_requirements(self, session: BookingSelectionSession) -> StayRequirements:
        """Stay bounds for the current check-in (or defaults) and a prompt"""
        if session.check_in is not None:
            min_stay, max_stay = self.stay_bounds(session.check_in)
        else:
            min_stay, max_stay = self.default_min_stay, self.default_max_stay

        if session.check_in is None:
            prompt = "Select your check-in date"
        elif session.check_out is None:
            prompt = "Select your check-out date"
        else:
            prompt = f"{session.nights} nights selected"
        return StayRequirements(min_stay=min_stay, max_stay=max_stay, prompt=prompt)
