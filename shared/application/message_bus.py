"""
Message Bus

Routes commands to their single handler and domain events to any number
of subscribers (for example the persistence collaborator that stores a
host's rules).
"""

from typing import Any, Callable, Dict, Iterable, List, Type
import logging

from shared.domain.base import Aggregate, DomainEvent

logger = logging.getLogger(__name__)


class MessageBus:
    """
    Message bus for commands and events

    Commands: One handler per command (1:1)
    Events: Multiple handlers per event (1:N)
    """

    def __init__(self):
        self._event_handlers: Dict[Type[DomainEvent], List[Callable]] = {}
        self._command_handlers: Dict[Type, Callable] = {}

    def register_event_handler(
        self,
        event_type: Type[DomainEvent],
        handler: Callable[[DomainEvent], None]
    ):
        """Subscribe handler to event_type; several handlers may subscribe"""
        self._event_handlers.setdefault(event_type, []).append(handler)
        logger.debug("Registered event handler for %s", event_type.__name__)

    def register_command_handler(
        self,
        command_type: Type,
        handler: Callable[[Any], Any]
    ):
        """
        Register the handler for command_type

        Raises ValueError if the command already has a handler.
        """
        if command_type in self._command_handlers:
            raise ValueError(
                f"Handler for {command_type.__name__} is already registered. "
                "Commands can have only one handler."
            )
        self._command_handlers[command_type] = handler
        logger.debug("Registered command handler for %s", command_type.__name__)

    def handle_command(self, command: Any) -> Any:
        """Run the command's handler and return its result"""
        command_type = type(command)
        handler = self._command_handlers.get(command_type)

        if not handler:
            raise ValueError(
                f"No handler registered for command {command_type.__name__}"
            )

        logger.info("Handling command: %s", command_type.__name__)
        try:
            result = handler(command)
        except Exception as e:
            logger.error("Error handling command %s: %s", command_type.__name__, e)
            raise
        logger.debug("Command %s handled successfully", command_type.__name__)
        return result

    def publish_events(self, events: Iterable[DomainEvent]):
        """
        Publish domain events

        A failing handler is logged and does not stop the others.
        """
        for event in events:
            event_type = type(event)
            handlers = self._event_handlers.get(event_type, [])

            if not handlers:
                logger.debug("No handlers registered for event %s", event_type.__name__)
                continue

            logger.info("Publishing event: %s (ID: %s)", event_type.__name__, event.event_id)

            for handler in handlers:
                try:
                    handler(event)
                except Exception as e:
                    logger.error(
                        "Error in event handler %s for event %s: %s",
                        getattr(handler, '__name__', repr(handler)), event_type.__name__, e,
                        exc_info=True
                    )

    def publish_from(self, aggregate: Aggregate):
        """Publish and clear the events an aggregate collected"""
        events = aggregate.events
        aggregate.clear_events()
        self.publish_events(events)

