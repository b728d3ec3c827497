"""
Availability Rule Editor

Host-facing counterpart of the guest calendar. The host picks days on a
multi-select calendar and turns them into a DateRule, or edits and
deletes existing rules.

- AvailabilityRuleEditor: aggregate owning one property's rule list and
  the pending day selection
- RuleForm: the values entered in the rule dialog
- QuickBlockSelection: two-click block/unblock of date ranges

New rules are appended to the end of the list. Under first-match lookup
this makes them the lowest-priority match: a new rule never overrides an
older rule it overlaps.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import FrozenSet, Iterable, List, Set
from uuid import UUID

from shared.domain.base import Aggregate
from shared.domain.value_objects import as_day, to_decimal
from apps.availability.domain.booking_calendar import first_of_month, month_grid
from apps.availability.domain.events import RuleCreated, RuleDeleted, RuleUpdated
from apps.availability.domain.policy import BookingPolicy, DEFAULT_POLICY
from apps.availability.domain.rules import DateRule, RuleIndex

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ('is_available', 'min_stay', 'max_stay', 'price_override', 'reason')


class RuleEditorError(ValueError):
    """Raised when an editor operation cannot be applied"""


class EmptySelectionError(RuleEditorError):
    """Raised when a rule is requested without any selected day"""


class RuleNotFoundError(RuleEditorError):
    """Raised when a rule id is not in the editor's rule list"""


@dataclass(frozen=True)
class RuleForm:
    """
    Values from the host's rule dialog

    A blocked rule never carries a price override; an empty reason is
    stored as None.
    """
    is_available: bool = True
    min_stay: int | None = 1
    max_stay: int | None = 30
    price_override: Decimal | None = None
    reason: str | None = None

    def normalized(self) -> 'RuleForm':
        price = self.price_override
        if not self.is_available:
            price = None
        elif price is not None:
            price = to_decimal(price)
        reason = (self.reason or '').strip() or None
        return replace(self, price_override=price, reason=reason)

    def rule_fields(self) -> dict:
        form = self.normalized()
        return {name: getattr(form, name) for name in EDITABLE_FIELDS}


@dataclass(frozen=True)
class RuleDayMarker:
    """What the host calendar shows on one day"""
    day: date
    rule: DateRule | None
    is_selected: bool
    is_past: bool
    is_today: bool
    has_custom_price: bool

    @property
    def state(self) -> str | None:
        if self.rule is None:
            return None
        return "available" if self.rule.is_available else "blocked"


@dataclass(kw_only=True, eq=False)
class AvailabilityRuleEditor(Aggregate):
    """
    Rule editor aggregate

    Holds the rule list of one property. Mutations are expected one at a
    time; each returns a copy of the full rule list for the caller to
    persist.
    """
    property_id: UUID | None = None
    base_price: Decimal = Decimal('0')
    rules: List[DateRule] = field(default_factory=list)
    selected_dates: Set[date] = field(default_factory=set)
    unavailable_dates: FrozenSet[date] = frozenset()
    today: date | None = None
    policy: BookingPolicy = DEFAULT_POLICY

    def __post_init__(self):
        self.base_price = to_decimal(self.base_price)
        self.rules = list(self.rules)
        self.selected_dates = {as_day(d) for d in self.selected_dates}
        self.unavailable_dates = frozenset(as_day(d) for d in self.unavailable_dates)
        if self.today is None:
            self.today = date.today()

    @property
    def index(self) -> RuleIndex:
        return RuleIndex(self.rules)

    # ----- pending selection -----

    def toggle_date_in_selection(self, day: date) -> FrozenSet[date]:
        """Add day to the pending selection, or remove it if already there"""
        day = as_day(day)
        if day in self.selected_dates:
            self.selected_dates.discard(day)
        else:
            self.selected_dates.add(day)
        return frozenset(self.selected_dates)

    def clear_selection(self):
        self.selected_dates.clear()

    # ----- forms -----

    def new_rule_form(self) -> RuleForm:
        """Defaults for the rule dialog"""
        return RuleForm(
            is_available=True,
            min_stay=self.policy.default_min_stay,
            max_stay=self.policy.rule_form_max_stay,
            price_override=self.base_price if self.base_price > 0 else None,
            reason=None,
        )

    def form_for_rule(self, rule: DateRule) -> RuleForm:
        """Dialog values for editing an existing rule"""
        defaults = self.new_rule_form()
        return RuleForm(
            is_available=rule.is_available,
            min_stay=rule.min_stay or defaults.min_stay,
            max_stay=rule.max_stay or defaults.max_stay,
            price_override=rule.price_override or defaults.price_override,
            reason=rule.reason,
        )

    # ----- rule mutations -----

    def create_rule(self, form: RuleForm, selected_dates: Iterable[date] | None = None) -> List[DateRule]:
        """
        Turn the selected days into a rule spanning their min and max

        Gaps between non-contiguous selected days are absorbed into the
        rule. The pending selection is cleared on success.
        """
        days = {as_day(d) for d in selected_dates} if selected_dates is not None else set(self.selected_dates)
        if not days:
            raise EmptySelectionError("Select at least one date to create a rule")

        rules = self.create_rule_for_range(min(days), max(days), form)
        self.selected_dates.clear()
        return rules

    def create_rule_for_range(self, start_date: date, end_date: date, form: RuleForm) -> List[DateRule]:
        rule = DateRule(start_date=start_date, end_date=end_date, **form.rule_fields())
        earlier = self.index.overlapping(rule.start_date, rule.end_date)
        self.rules.append(rule)

        if earlier:
            logger.info(
                "Rule %s overlaps %s earlier rule(s); earlier rules keep precedence",
                rule.id, len(earlier),
            )
        logger.info("Created rule %s for property %s", rule, self.property_id)

        self.add_event(RuleCreated(
            aggregate_id=self.id,
            property_id=self.property_id,
            rule_id=rule.id,
            start_date=rule.start_date,
            end_date=rule.end_date,
            is_available=rule.is_available,
        ))
        return list(self.rules)

    def update_rule(self, rule_id: UUID, form: RuleForm) -> List[DateRule]:
        """Update a rule's fields in place; its dates never change"""
        rule = self.get_rule(rule_id)
        values = form.rule_fields()

        # validate the new values before touching the stored rule
        DateRule(start_date=rule.start_date, end_date=rule.end_date, **values)

        changed = tuple(name for name, value in values.items() if getattr(rule, name) != value)
        for name, value in values.items():
            setattr(rule, name, value)
        rule.touch()

        logger.info("Updated rule %s (%s)", rule.id, ", ".join(changed) or "no changes")
        self.add_event(RuleUpdated(
            aggregate_id=self.id,
            property_id=self.property_id,
            rule_id=rule.id,
            changed_fields=changed,
        ))
        return list(self.rules)

    def delete_rule(self, rule_id: UUID) -> List[DateRule]:
        rule = self.get_rule(rule_id)
        self.rules.remove(rule)

        logger.info("Deleted rule %s", rule)
        self.add_event(RuleDeleted(
            aggregate_id=self.id,
            property_id=self.property_id,
            rule_id=rule.id,
        ))
        return list(self.rules)

    def get_rule(self, rule_id: UUID) -> DateRule:
        rule = next((r for r in self.rules if r.id == rule_id), None)
        if rule is None:
            raise RuleNotFoundError(f"No rule {rule_id} for property {self.property_id}")
        return rule

    # ----- host calendar -----

    def day_marker(self, day: date) -> RuleDayMarker:
        day = as_day(day)
        rule = self.index.rule_for(day)
        return RuleDayMarker(
            day=day,
            rule=rule,
            is_selected=day in self.selected_dates,
            is_past=day < self.today,
            is_today=day == self.today,
            has_custom_price=bool(
                rule is not None and rule.is_available and rule.price_override is not None
                and rule.price_override != self.base_price
            ),
        )

    def weeks(self, visible_month: date | None = None) -> List[List[RuleDayMarker]]:
        month = first_of_month(as_day(visible_month) if visible_month else self.today)
        return [
            [self.day_marker(day) for day in week]
            for week in month_grid(month.year, month.month)
        ]

    def __repr__(self):
        return (
            f"AvailabilityRuleEditor(property_id={self.property_id}, "
            f"rules={len(self.rules)}, selected={len(self.selected_dates)})"
        )


class SelectionMode(Enum):
    BLOCK = 'block'
    UNBLOCK = 'unblock'


class QuickBlockSelection:
    """
    Two-click block/unblock on top of the rule editor

    Block mode: the first click picks the start, the second the end (an
    earlier second click swaps them); a third click starts over.
    Unblock mode: clicking any day of a blocked rule selects that rule.
    """

    def __init__(self, editor: AvailabilityRuleEditor, mode: SelectionMode = SelectionMode.BLOCK):
        self.editor = editor
        self.mode = mode
        self.selected_start: date | None = None
        self.selected_end: date | None = None
        self.selected_rule_id: UUID | None = None
        self.error: str | None = None

    def reset(self):
        self.selected_start = None
        self.selected_end = None
        self.selected_rule_id = None
        self.error = None

    def set_mode(self, mode: SelectionMode):
        self.mode = mode
        self.reset()

    def select(self, day: date):
        day = as_day(day)
        self.error = None
        index = self.editor.index

        if self.mode is SelectionMode.UNBLOCK:
            rule = index.rule_for(day)
            if rule is None or rule.is_available:
                self.selected_rule_id = None
                self.error = "Select a blocked date to unblock."
                return
            self.selected_rule_id = rule.id
            return

        if index.is_blocked(day) or day in self.editor.unavailable_dates or day < self.editor.today:
            return

        if self.selected_start is None or self.selected_end is not None:
            self.selected_start = day
            self.selected_end = None
        elif day < self.selected_start:
            self.selected_start, self.selected_end = day, self.selected_start
        else:
            self.selected_end = day

    @property
    def selected_days(self) -> FrozenSet[date]:
        if self.selected_start is None:
            return frozenset()
        end = self.selected_end or self.selected_start
        return frozenset(DateRule(start_date=self.selected_start, end_date=end).days())

    def block(self, reason: str) -> List[DateRule]:
        if self.selected_start is None or self.selected_end is None:
            raise RuleEditorError("Select a start and end date to block.")
        if not (reason or '').strip():
            raise RuleEditorError("Provide a reason for blocking the selected dates.")

        rules = self.editor.create_rule_for_range(
            self.selected_start,
            self.selected_end,
            RuleForm(is_available=False, min_stay=None, max_stay=None, reason=reason),
        )
        self.reset()
        return rules

    def unblock(self) -> List[DateRule]:
        if self.selected_rule_id is None:
            raise RuleEditorError("Select a blocked date range to unblock.")
        rules = self.editor.delete_rule(self.selected_rule_id)
        self.reset()
        return rules
