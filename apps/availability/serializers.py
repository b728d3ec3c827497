"""Serializers for the availability domain.

Rule records and booking requests arrive from the backend and the booking
form as primitives; these serializers turn them into domain objects and
render domain results back out.
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal

from rest_framework import serializers  # type: ignore
from rest_framework.exceptions import ErrorDetail  # type: ignore
from rest_framework.fields import SkipField  # type: ignore
from rest_framework.settings import api_settings  # type: ignore

from apps.availability.conf import get_booking_policy
from apps.availability.domain.editor import RuleForm
from apps.availability.domain.rules import DateRule, RuleIndex
from apps.availability.domain.selection import StaySelection
from apps.availability.domain.stay import StayForm, validate_stay


def _validate_stay_bounds(attrs):  # type: ignore
    min_stay = attrs.get("min_stay")
    max_stay = attrs.get("max_stay")
    if min_stay is not None and max_stay is not None and max_stay < min_stay:
        raise serializers.ValidationError(
            {"max_stay": ["Maximum stay cannot be less than minimum stay."]}
        )


class DateRuleSerializer(serializers.Serializer):
    """Reads and writes host date rules."""

    id = serializers.UUIDField(required=False)
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    is_available = serializers.BooleanField(default=True)
    min_stay = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    max_stay = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    price_override = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal("0.01"),
        required=False,
        allow_null=True,
    )
    reason = serializers.CharField(
        max_length=255, required=False, allow_blank=True, allow_null=True
    )

    def validate(self, attrs):  # type: ignore
        start = attrs.get("start_date")
        end = attrs.get("end_date")
        if start and end and start > end:
            raise serializers.ValidationError("End date cannot be before start date.")
        _validate_stay_bounds(attrs)
        return attrs

    def create(self, validated_data):  # type: ignore
        data = dict(validated_data)
        if data.get("id") is None:
            data.pop("id", None)
        if not data.get("is_available", True):
            data["price_override"] = None
        data["reason"] = (data.get("reason") or "").strip() or None
        try:
            return DateRule(**data)
        except ValueError as exc:
            raise serializers.ValidationError({"non_field_errors": [str(exc)]})


def load_rules(records) -> list[DateRule]:
    """Parse the backend's rule records, keeping their order."""

    serializer = DateRuleSerializer(data=list(records), many=True)
    serializer.is_valid(raise_exception=True)
    return serializer.save()


class UnavailableDatesSerializer(serializers.Serializer):
    """Days already taken by bookings."""

    dates = serializers.ListField(child=serializers.DateField(), allow_empty=True)


class RuleFormSerializer(serializers.Serializer):
    """Values entered in the host's rule dialog."""

    is_available = serializers.BooleanField(default=True)
    min_stay = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    max_stay = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    price_override = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal("0.01"),
        required=False,
        allow_null=True,
    )
    reason = serializers.CharField(
        max_length=255, required=False, allow_blank=True, allow_null=True
    )

    def validate(self, attrs):  # type: ignore
        _validate_stay_bounds(attrs)
        return attrs

    def to_form(self) -> RuleForm:
        return RuleForm(**self.validated_data)


class StayRequestSerializer(serializers.Serializer):
    """Booking form submission.

    Expects ``property_limits`` in the context, and optionally ``rules``,
    ``unavailable_dates``, ``today`` and ``policy``. Every failing field is
    reported at once, including booking errors on the fields that parsed
    when another field is malformed; each booking ErrorDetail code is the
    ErrorKind value.
    """

    check_in = serializers.DateField(required=False, allow_null=True)
    check_out = serializers.DateField(required=False, allow_null=True)
    guests = serializers.IntegerField(required=False, allow_null=True)

    def to_internal_value(self, data):  # type: ignore
        if not isinstance(data, Mapping):
            raise serializers.ValidationError(
                {api_settings.NON_FIELD_ERRORS_KEY: ["Invalid data. Expected a dictionary."]}
            )

        # parse fields one by one so a malformed value does not hide the
        # booking errors of the fields that did parse
        attrs, errors = {}, {}
        for field in self._writable_fields:
            try:
                attrs[field.field_name] = field.run_validation(field.get_value(data))
            except serializers.ValidationError as exc:
                errors[field.field_name] = exc.detail
            except SkipField:
                pass

        for name, details in self._stay_errors(attrs).items():
            errors.setdefault(name, details)
        if errors:
            raise serializers.ValidationError(errors)
        return attrs

    def _stay_errors(self, attrs):  # type: ignore
        rules = self.context.get("rules")
        if rules is not None and not isinstance(rules, RuleIndex):
            rules = RuleIndex(rules)

        form = StayForm(
            check_in=attrs.get("check_in"),
            check_out=attrs.get("check_out"),
            guests=attrs.get("guests"),
        )
        result = validate_stay(
            form,
            self.context["property_limits"],
            today=self.context.get("today"),
            policy=self.context.get("policy") or get_booking_policy(),
            rules=rules,
            unavailable_dates=self.context.get("unavailable_dates", ()),
        )
        return {
            name: [ErrorDetail(error.message, code=error.kind.value)]
            for name, error in result.errors.items()
        }

    def to_selection(self) -> StaySelection:
        data = self.validated_data
        return StaySelection(
            check_in=data["check_in"],
            check_out=data["check_out"],
            guests=data["guests"],
        )


class NightlyRateSerializer(serializers.Serializer):
    night = serializers.DateField()
    rate = serializers.DecimalField(max_digits=12, decimal_places=2)
    source = serializers.CharField()


class PriceBreakdownSerializer(serializers.Serializer):
    """Price breakdown shown before the payment hand-off."""

    nights = serializers.IntegerField()
    nightly_rates = NightlyRateSerializer(many=True)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
    cleaning_fee = serializers.DecimalField(max_digits=12, decimal_places=2)
    service_fee = serializers.DecimalField(max_digits=12, decimal_places=2)
    taxes = serializers.DecimalField(max_digits=12, decimal_places=2)
    security_deposit = serializers.DecimalField(max_digits=12, decimal_places=2)
    total = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.CharField()


class CalendarDaySerializer(serializers.Serializer):
    """One cell of the guest calendar."""

    date = serializers.DateField(source="day")
    is_past = serializers.BooleanField()
    is_available = serializers.BooleanField()
    is_selected = serializers.BooleanField()
    is_in_range = serializers.BooleanField()
    is_today = serializers.BooleanField()
    is_current_month = serializers.BooleanField()
    is_booked = serializers.BooleanField()
    rule_id = serializers.SerializerMethodField()

    def get_rule_id(self, obj):  # type: ignore
        return str(obj.rule.id) if obj.rule is not None else None
