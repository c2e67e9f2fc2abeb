from typing import Type, Callable, List, Dict, Any
from vbt.domain.events import Event

class EventBus:
    """A simple synchronous event bus between the pipeline and the console UI."""

    def __init__(self):
        self._subscribers: Dict[Type[Event], List[Callable[[Any], None]]] = {}

    def subscribe(self, event_type: Type[Event], callback: Callable[[Any], None]):
        """Subscribes a callback to a specific event type."""
        self._subscribers.setdefault(event_type, []).append(callback)

    def publish(self, event: Event):
        """Delivers an event to subscribers of its exact type, in subscription order."""
        for callback in self._subscribers.get(type(event), []):
            callback(event)
