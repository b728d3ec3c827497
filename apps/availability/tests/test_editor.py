"""Tests for the host-facing rule editor."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from apps.availability.domain.editor import (
    AvailabilityRuleEditor,
    EmptySelectionError,
    QuickBlockSelection,
    RuleEditorError,
    RuleForm,
    RuleNotFoundError,
    SelectionMode,
)
from apps.availability.domain.events import RuleCreated, RuleDeleted, RuleUpdated
from apps.availability.domain.rules import DateRule

TODAY = date(2024, 5, 1)


@pytest.fixture
def editor() -> AvailabilityRuleEditor:
    return AvailabilityRuleEditor(property_id=uuid4(), base_price=Decimal("100"), today=TODAY)


def _blocked(start: date, end: date) -> DateRule:
    return DateRule(start_date=start, end_date=end, is_available=False, reason="Maintenance")


class TestSelection:
    def test_toggle_adds_and_removes_days(self, editor):
        assert editor.toggle_date_in_selection(date(2024, 6, 3)) == {date(2024, 6, 3)}
        assert editor.toggle_date_in_selection(date(2024, 6, 5)) == {date(2024, 6, 3), date(2024, 6, 5)}
        assert editor.toggle_date_in_selection(date(2024, 6, 3)) == {date(2024, 6, 5)}

    def test_past_days_can_be_toggled_in_and_out(self, editor):
        editor.selected_dates = {date(2024, 4, 20)}

        assert editor.toggle_date_in_selection(date(2024, 4, 25)) == {date(2024, 4, 20), date(2024, 4, 25)}
        assert editor.toggle_date_in_selection(date(2024, 4, 20)) == {date(2024, 4, 25)}

    def test_clear_selection(self, editor):
        editor.toggle_date_in_selection(date(2024, 6, 3))
        editor.clear_selection()
        assert editor.selected_dates == set()


class TestCreateRule:
    def test_rule_spans_first_to_last_selected_day(self, editor):
        for day in (date(2024, 6, 10), date(2024, 6, 3), date(2024, 6, 7)):
            editor.toggle_date_in_selection(day)

        rules = editor.create_rule(RuleForm(min_stay=2, max_stay=14, price_override=Decimal("150")))

        assert len(rules) == 1
        rule = rules[0]
        assert (rule.start_date, rule.end_date) == (date(2024, 6, 3), date(2024, 6, 10))
        assert rule.covers(date(2024, 6, 5))
        assert (rule.min_stay, rule.max_stay) == (2, 14)
        assert rule.price_override == Decimal("150")
        assert editor.selected_dates == set()

    def test_explicit_days_take_precedence_over_pending_selection(self, editor):
        editor.toggle_date_in_selection(date(2024, 7, 1))
        editor.create_rule(RuleForm(), [date(2024, 6, 1)])

        assert (editor.rules[0].start_date, editor.rules[0].end_date) == (date(2024, 6, 1), date(2024, 6, 1))
        assert editor.selected_dates == set()

    def test_empty_selection_is_rejected(self, editor):
        with pytest.raises(EmptySelectionError):
            editor.create_rule(RuleForm())
        with pytest.raises(ValueError):
            editor.create_rule(RuleForm(), [])
        assert editor.rules == []

    def test_new_rule_is_appended_with_lowest_priority(self, editor):
        older = _blocked(date(2024, 6, 1), date(2024, 6, 10))
        editor.rules.append(older)

        rules = editor.create_rule(
            RuleForm(price_override=Decimal("200")),
            [date(2024, 6, 5), date(2024, 6, 6)],
        )

        assert rules[0] is older
        assert rules[-1].price_override == Decimal("200")
        assert editor.index.rule_for(date(2024, 6, 5)) is older

    def test_blocked_rule_drops_price_override(self, editor):
        rules = editor.create_rule(
            RuleForm(is_available=False, price_override=Decimal("150"), reason="  "),
            [date(2024, 6, 1)],
        )

        assert rules[0].price_override is None
        assert rules[0].reason is None
        assert rules[0].is_blocking

    def test_invalid_form_is_rejected(self, editor):
        with pytest.raises(ValueError):
            editor.create_rule(RuleForm(min_stay=5, max_stay=2), [date(2024, 6, 1)])
        assert editor.rules == []

    def test_returned_list_is_a_copy(self, editor):
        rules = editor.create_rule(RuleForm(), [date(2024, 6, 1)])
        rules.clear()
        assert len(editor.rules) == 1


class TestUpdateAndDelete:
    def test_update_changes_fields_but_not_dates(self, editor):
        rule = editor.create_rule(RuleForm(), [date(2024, 6, 1), date(2024, 6, 5)])[0]

        rules = editor.update_rule(rule.id, RuleForm(
            is_available=True, min_stay=3, max_stay=10, price_override=Decimal("175"), reason="Festival",
        ))

        assert rules == [rule]
        assert rules[0] is rule
        assert (rule.start_date, rule.end_date) == (date(2024, 6, 1), date(2024, 6, 5))
        assert (rule.min_stay, rule.max_stay) == (3, 10)
        assert rule.price_override == Decimal("175")
        assert rule.reason == "Festival"

    def test_invalid_update_leaves_rule_untouched(self, editor):
        rule = editor.create_rule(RuleForm(min_stay=2, max_stay=7), [date(2024, 6, 1)])[0]

        with pytest.raises(ValueError):
            editor.update_rule(rule.id, RuleForm(min_stay=9, max_stay=3))

        assert (rule.min_stay, rule.max_stay) == (2, 7)

    def test_update_unknown_rule(self, editor):
        with pytest.raises(RuleNotFoundError):
            editor.update_rule(uuid4(), RuleForm())

    def test_delete_removes_rule(self, editor):
        first = editor.create_rule(RuleForm(), [date(2024, 6, 1)])[0]
        second = editor.create_rule(RuleForm(), [date(2024, 6, 8)])[-1]

        assert editor.delete_rule(first.id) == [second]
        assert editor.index.rule_for(date(2024, 6, 1)) is None

    def test_delete_unknown_rule(self, editor):
        with pytest.raises(RuleNotFoundError):
            editor.delete_rule(uuid4())


class TestEvents:
    def test_mutations_record_events(self, editor):
        rule = editor.create_rule(RuleForm(), [date(2024, 6, 1)])[0]
        editor.update_rule(rule.id, RuleForm(min_stay=2))
        editor.delete_rule(rule.id)

        created, updated, deleted = editor.events
        assert isinstance(created, RuleCreated)
        assert isinstance(updated, RuleUpdated)
        assert isinstance(deleted, RuleDeleted)
        assert {e.aggregate_id for e in editor.events} == {editor.id}
        assert created.rule_id == rule.id
        assert updated.changed_fields == ('min_stay',)

    def test_event_payload_is_serializable(self, editor):
        editor.create_rule(RuleForm(is_available=False), [date(2024, 6, 1)])
        data = editor.events[0].to_dict()

        assert data['event_type'] == 'RuleCreated'
        assert data['start_date'] == '2024-06-01'
        assert data['is_available'] is False
        assert data['property_id'] == str(editor.property_id)

    def test_failed_mutation_records_no_event(self, editor):
        with pytest.raises(RuleNotFoundError):
            editor.delete_rule(uuid4())
        assert editor.events == []


class TestForms:
    def test_new_rule_form_defaults(self, editor):
        form = editor.new_rule_form()

        assert form.is_available
        assert (form.min_stay, form.max_stay) == (1, 30)
        assert form.price_override == Decimal("100")
        assert form.reason is None

    def test_new_rule_form_without_base_price(self):
        editor = AvailabilityRuleEditor(today=TODAY)
        assert editor.new_rule_form().price_override is None

    def test_form_for_rule_fills_gaps_with_defaults(self, editor):
        rule = _blocked(date(2024, 6, 1), date(2024, 6, 3))
        form = editor.form_for_rule(rule)

        assert not form.is_available
        assert (form.min_stay, form.max_stay) == (1, 30)
        assert form.reason == "Maintenance"


class TestHostCalendar:
    def test_day_marker(self, editor):
        editor.rules.extend([
            DateRule(start_date=date(2024, 6, 1), end_date=date(2024, 6, 2), price_override=Decimal("150")),
            DateRule(start_date=date(2024, 6, 3), end_date=date(2024, 6, 3), price_override=Decimal("100")),
            _blocked(date(2024, 6, 4), date(2024, 6, 4)),
        ])
        editor.toggle_date_in_selection(date(2024, 6, 2))

        marker = editor.day_marker(date(2024, 6, 2))
        assert marker.state == "available"
        assert marker.has_custom_price
        assert marker.is_selected

        assert not editor.day_marker(date(2024, 6, 3)).has_custom_price
        assert editor.day_marker(date(2024, 6, 4)).state == "blocked"
        assert editor.day_marker(date(2024, 6, 5)).state is None

        past = editor.day_marker(date(2024, 4, 29))
        assert past.is_past

    def test_weeks_cover_visible_month(self, editor):
        weeks = editor.weeks(date(2024, 6, 15))

        assert weeks[0][0].day == date(2024, 5, 26)
        assert weeks[-1][-1].day == date(2024, 7, 6)


class TestQuickBlockSelection:
    def test_two_clicks_select_a_range_in_any_order(self, editor):
        quick = QuickBlockSelection(editor)
        quick.select(date(2024, 6, 5))
        quick.select(date(2024, 6, 3))

        assert (quick.selected_start, quick.selected_end) == (date(2024, 6, 3), date(2024, 6, 5))
        assert quick.selected_days == {date(2024, 6, 3), date(2024, 6, 4), date(2024, 6, 5)}

    def test_third_click_starts_over(self, editor):
        quick = QuickBlockSelection(editor)
        for day in (date(2024, 6, 3), date(2024, 6, 5), date(2024, 6, 9)):
            quick.select(day)

        assert (quick.selected_start, quick.selected_end) == (date(2024, 6, 9), None)

    def test_unselectable_days_are_ignored(self):
        editor = AvailabilityRuleEditor(
            rules=[_blocked(date(2024, 6, 10), date(2024, 6, 12))],
            unavailable_dates=frozenset({date(2024, 6, 20)}),
            today=TODAY,
        )
        quick = QuickBlockSelection(editor)
        for day in (date(2024, 6, 11), date(2024, 6, 20), date(2024, 4, 1)):
            quick.select(day)

        assert quick.selected_start is None

    def test_block_creates_blocked_rule(self, editor):
        quick = QuickBlockSelection(editor)
        quick.select(date(2024, 6, 3))
        quick.select(date(2024, 6, 5))

        rules = quick.block("Maintenance")

        rule = rules[-1]
        assert (rule.start_date, rule.end_date) == (date(2024, 6, 3), date(2024, 6, 5))
        assert not rule.is_available
        assert rule.reason == "Maintenance"
        assert quick.selected_start is None

    def test_block_needs_range_and_reason(self, editor):
        quick = QuickBlockSelection(editor)
        quick.select(date(2024, 6, 3))

        with pytest.raises(RuleEditorError, match="start and end"):
            quick.block("Maintenance")

        quick.select(date(2024, 6, 5))
        with pytest.raises(RuleEditorError, match="reason"):
            quick.block("   ")
        assert editor.rules == []

    def test_unblock_removes_selected_rule(self):
        rule = _blocked(date(2024, 6, 10), date(2024, 6, 12))
        editor = AvailabilityRuleEditor(rules=[rule], today=TODAY)
        quick = QuickBlockSelection(editor, SelectionMode.UNBLOCK)

        quick.select(date(2024, 6, 11))
        assert quick.selected_rule_id == rule.id

        assert quick.unblock() == []
        assert quick.selected_rule_id is None

    def test_unblock_requires_blocked_day(self, editor):
        quick = QuickBlockSelection(editor, SelectionMode.UNBLOCK)
        quick.select(date(2024, 6, 11))

        assert quick.error == "Select a blocked date to unblock."
        with pytest.raises(RuleEditorError):
            quick.unblock()

    def test_switching_mode_resets_selection(self, editor):
        quick = QuickBlockSelection(editor)
        quick.select(date(2024, 6, 3))
        quick.set_mode(SelectionMode.UNBLOCK)

        assert quick.mode is SelectionMode.UNBLOCK
        assert quick.selected_start is None
