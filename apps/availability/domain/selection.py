"""
Selection State

Immutable state passed into and returned from the calendar's
transition functions:
- StaySelection: the guest's check-in/check-out pair and guest count
- BookingSelectionSession: the selection plus calendar UI state
"""

from dataclasses import dataclass, field, replace
from datetime import date

from shared.domain.base import ValueObject
from shared.domain.value_objects import DateRange, days_between


@dataclass(frozen=True)
class StaySelection(ValueObject):
    """
    Stay selection value object

    check_out only means something once check_in is set and
    check_out > check_in.
    """
    check_in: date | None = None
    check_out: date | None = None
    guests: int = 1

    def __post_init__(self):
        if self.guests < 1:
            raise ValueError("At least 1 guest is required")

    @property
    def is_complete(self) -> bool:
        return (self.check_in is not None and self.check_out is not None
                and self.check_out > self.check_in)

    @property
    def nights(self) -> int:
        """Whole nights between check-in and check-out, 0 while incomplete"""
        if not self.is_complete:
            return 0
        return days_between(self.check_in, self.check_out)

    def as_range(self) -> DateRange:
        if not self.is_complete:
            raise ValueError("Selection needs both check-in and check-out dates")
        return DateRange(self.check_in, self.check_out)

    def cleared(self) -> 'StaySelection':
        return replace(self, check_in=None, check_out=None)


@dataclass(frozen=True)
class BookingSelectionSession(ValueObject):
    """
    Calendar session value object

    selecting_checkout is True between the check-in click and the
    click that commits a check-out. visible_month is the first day of
    the month on screen and is view state only.
    """
    selection: StaySelection = field(default_factory=StaySelection)
    selecting_checkout: bool = False
    visible_month: date | None = None

    @property
    def check_in(self) -> date | None:
        return self.selection.check_in

    @property
    def check_out(self) -> date | None:
        return self.selection.check_out

    @property
    def nights(self) -> int:
        return self.selection.nights

    def start_at(self, day: date) -> 'BookingSelectionSession':
        """New selection with day as check-in, waiting for a check-out"""
        return replace(
            self,
            selection=replace(self.selection, check_in=day, check_out=None),
            selecting_checkout=True,
        )

    def commit_checkout(self, day: date) -> 'BookingSelectionSession':
        return replace(
            self,
            selection=replace(self.selection, check_out=day),
            selecting_checkout=False,
        )

    def cleared(self) -> 'BookingSelectionSession':
        return replace(self, selection=self.selection.cleared(), selecting_checkout=False)
