"""
Base class for NLP extensions
"""
from abc import ABC

from events.dispatcher import EventDispatcher


class NLPExtension(ABC):
    """
    Plugin hooked into the annotation lifecycle.

    Extensions are discovered once at startup; each gets a single chance to
    subscribe to events through register_event_listeners.
    """

    def get_name(self) -> str:
        return type(self).__name__

    def register_event_listeners(self, dispatcher: EventDispatcher) -> None:
        """Subscribe to lifecycle events; the default extension listens to nothing"""
        pass
