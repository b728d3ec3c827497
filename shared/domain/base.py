"""
Base Domain Classes

Kernel for the availability domain:
- Entity: host DateRules and the rule editor, equal by id
- ValueObject: selections, sessions, policy and money, equal by value
- Aggregate: the rule editor, which records rule events per mutation
- DomainEvent: rule changes handed to the persistence collaborator
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime
from typing import List
from uuid import UUID, uuid4


@dataclass(eq=False)
class Entity(ABC):
    """
    Identity base for rules and the editor

    Subclasses declare ``@dataclass(kw_only=True, eq=False)``: their own
    fields may lack defaults, and equality stays by id so a rule edited in
    place is still found in its editor's list.
    """
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)

    def touch(self):
        """Stamp updated_at after an in-place edit"""
        self.updated_at = datetime.now()


@dataclass(frozen=True)
class ValueObject(ABC):
    """Frozen base; state changes return a new instance via dataclasses.replace"""
    pass


@dataclass(eq=False)
class Aggregate(Entity):
    """
    Entity that records events while it mutates

    The command handlers hand the recorded events to the message bus
    (``MessageBus.publish_from``) once the mutation has succeeded; a
    failed mutation records nothing.
    """
    _events: List['DomainEvent'] = field(default_factory=list, repr=False, init=False)

    def add_event(self, event: 'DomainEvent'):
        self._events.append(event)

    def clear_events(self):
        self._events.clear()

    @property
    def events(self) -> List['DomainEvent']:
        """Copy of the events recorded since the last publish"""
        return self._events.copy()


@dataclass(kw_only=True)
class DomainEvent:
    """
    Rule change notification

    aggregate_id is the editor that recorded the event. Payload fields
    are keyword-only on subclasses, which extend to_dict with them.
    """
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=datetime.now)
    aggregate_id: UUID | None = None

    def to_dict(self) -> dict:
        """JSON-ready payload for the persistence collaborator"""
        return {
            'event_id': str(self.event_id),
            'event_type': self.__class__.__name__,
            'occurred_at': self.occurred_at.isoformat(),
            'aggregate_id': str(self.aggregate_id) if self.aggregate_id else None,
        }
