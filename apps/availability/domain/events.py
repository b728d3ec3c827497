"""
Availability Domain Events

Raised by the rule editor and handed to the persistence collaborator
once the mutation has completed.
"""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class RuleCreated(DomainEvent):
    """
    Event: The host declared a new date rule

    Triggers:
    - Persist the rule
    - Refresh the public calendar
    """
    property_id: UUID | None
    rule_id: UUID
    start_date: date
    end_date: date
    is_available: bool

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            'property_id': str(self.property_id) if self.property_id else None,
            'rule_id': str(self.rule_id),
            'start_date': self.start_date.isoformat(),
            'end_date': self.end_date.isoformat(),
            'is_available': self.is_available,
        })
        return data


@dataclass(kw_only=True)
class RuleUpdated(DomainEvent):
    """Event: A rule's availability, stay bounds, price or reason changed"""
    property_id: UUID | None
    rule_id: UUID
    changed_fields: tuple

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            'property_id': str(self.property_id) if self.property_id else None,
            'rule_id': str(self.rule_id),
            'changed_fields': list(self.changed_fields),
        })
        return data


@dataclass(kw_only=True)
class RuleDeleted(DomainEvent):
    """Event: The host removed a rule; its days fall back to the defaults"""
    property_id: UUID | None
    rule_id: UUID

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            'property_id': str(self.property_id) if self.property_id else None,
            'rule_id': str(self.rule_id),
        })
        return data
