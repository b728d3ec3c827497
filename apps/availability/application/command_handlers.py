"""
Availability Command Handlers

Use cases of the availability domain. Rule handlers run one editor
mutation and publish the resulting events; the quote handler runs the
booking form check and, when it passes, prices the stay.

Commands:
- CreateRuleCommand: Turn selected days into a rule
- UpdateRuleCommand: Change a rule's availability, bounds, price or reason
- DeleteRuleCommand: Remove a rule
- QuoteStayCommand: Validate a booking request and price it
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Tuple
from uuid import UUID
import logging

from shared.application.message_bus import MessageBus
from apps.availability.domain.editor import AvailabilityRuleEditor, RuleForm
from apps.availability.domain.policy import BookingPolicy, DEFAULT_POLICY
from apps.availability.domain.pricing import PriceBreakdown, price_stay
from apps.availability.domain.rules import DateRule, RuleIndex
from apps.availability.domain.stay import PropertyLimits, StayForm, StayValidation, validate_stay

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class CreateRuleCommand:
    """Create a rule; selected_dates=None uses the editor's pending selection"""
    form: RuleForm
    selected_dates: Tuple[date, ...] | None = None


@dataclass
class UpdateRuleCommand:
    rule_id: UUID
    form: RuleForm


@dataclass
class DeleteRuleCommand:
    rule_id: UUID


@dataclass
class QuoteStayCommand:
    """
    Command to validate and price a booking request

    Dates and guests may be missing; they are reported as field errors.
    """
    check_in: date | None
    check_out: date | None
    guests: int | None
    max_guests: int
    base_rate: Decimal
    rules: Tuple[DateRule, ...] = ()
    unavailable_dates: Tuple[date, ...] = ()
    cleaning_fee: Decimal = Decimal('0')
    security_deposit: Decimal = Decimal('0')
    today: date | None = None


@dataclass(frozen=True)
class StayQuote:
    """Validation outcome plus the price breakdown when the request is valid"""
    validation: StayValidation
    breakdown: PriceBreakdown | None = None

    @property
    def ok(self) -> bool:
        return self.validation.ok


# ===== Command Handlers =====

class _RuleHandler:
    def __init__(self, editor: AvailabilityRuleEditor, bus: MessageBus):
        self.editor = editor
        self.bus = bus

    def _publish(self):
        self.bus.publish_from(self.editor)


class CreateRuleHandler(_RuleHandler):
    def handle(self, command: CreateRuleCommand) -> List[DateRule]:
        logger.info("Creating rule for property %s", self.editor.property_id)
        rules = self.editor.create_rule(command.form, command.selected_dates)
        self._publish()
        return rules


class UpdateRuleHandler(_RuleHandler):
    def handle(self, command: UpdateRuleCommand) -> List[DateRule]:
        logger.info("Updating rule %s", command.rule_id)
        rules = self.editor.update_rule(command.rule_id, command.form)
        self._publish()
        return rules


class DeleteRuleHandler(_RuleHandler):
    def handle(self, command: DeleteRuleCommand) -> List[DateRule]:
        logger.info("Deleting rule %s", command.rule_id)
        rules = self.editor.delete_rule(command.rule_id)
        self._publish()
        return rules


class QuoteStayHandler:
    """
    Handler for QuoteStay command

    1. Validate the form against capacity, the form-level stay ceiling,
       the rule-level stay bounds and blocked nights
    2. Price the stay only if every check passed
    """

    def __init__(self, policy: BookingPolicy = DEFAULT_POLICY):
        self.policy = policy

    def handle(self, command: QuoteStayCommand) -> StayQuote:
        rules = RuleIndex(command.rules)
        validation = validate_stay(
            StayForm(command.check_in, command.check_out, command.guests),
            PropertyLimits(max_guests=command.max_guests),
            today=command.today,
            policy=self.policy,
            rules=rules,
            unavailable_dates=command.unavailable_dates,
        )
        if not validation.ok:
            logger.info("Quote rejected: %s", ", ".join(sorted(validation.errors)))
            return StayQuote(validation=validation)

        breakdown = price_stay(
            command.check_in,
            command.check_out,
            command.base_rate,
            rules,
            policy=self.policy,
            cleaning_fee=command.cleaning_fee,
            security_deposit=command.security_deposit,
        )
        return StayQuote(validation=validation, breakdown=breakdown)


def register_rule_handlers(bus: MessageBus, editor: AvailabilityRuleEditor):
    """Wire the rule commands of one editing session to the bus"""
    bus.register_command_handler(CreateRuleCommand, CreateRuleHandler(editor, bus).handle)
    bus.register_command_handler(UpdateRuleCommand, UpdateRuleHandler(editor, bus).handle)
    bus.register_command_handler(DeleteRuleCommand, DeleteRuleHandler(editor, bus).handle)


def register_quote_handler(bus: MessageBus, policy: BookingPolicy = DEFAULT_POLICY):
    bus.register_command_handler(QuoteStayCommand, QuoteStayHandler(policy).handle)
