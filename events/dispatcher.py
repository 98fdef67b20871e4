"""
Event dispatcher - synchronous publish/subscribe for annotation lifecycle events
"""
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from domain.annotated_text import AnnotatedText
from domain.references import NodeRef
from logger import get_logger
from metrics import events_published

logger = get_logger(__name__)


class Events(Enum):
    POST_TEXT_ANNOTATION = "post_text_annotation"


@dataclass
class TextAnnotationEvent:
    """Published once an annotated text has been persisted"""
    node: NodeRef
    annotated_text: AnnotatedText
    id: str


Listener = Union[Callable[[Any], Any], Any]


class EventDispatcher:
    """
    Delivers events to listeners in registration order.

    Listeners are plain callables or objects with an ``on_event(payload)``
    method. Delivery happens on the caller's thread and a listener error
    stops delivery and propagates to the publisher.
    """

    def __init__(self):
        self._listeners: Dict[Events, List[Listener]] = {}
        self._lock = threading.Lock()

    def register(self, event: Events, listener: Listener) -> None:
        if not callable(listener) and not hasattr(listener, "on_event"):
            raise ValueError(f"{listener!r} is neither callable nor has on_event()")

        with self._lock:
            self._listeners.setdefault(event, []).append(listener)
        logger.debug(f"Registered listener for {event.value}: {listener!r}")

    def unregister(self, event: Events, listener: Listener) -> bool:
        with self._lock:
            listeners = self._listeners.get(event, [])
            if listener in listeners:
                listeners.remove(listener)
                return True
        return False

    def listeners(self, event: Events) -> List[Listener]:
        with self._lock:
            return list(self._listeners.get(event, []))

    def notify(self, event: Events, payload: Optional[Any] = None) -> None:
        for listener in self.listeners(event):
            try:
                if hasattr(listener, "on_event"):
                    listener.on_event(payload)
                else:
                    listener(payload)
            except Exception as e:
                logger.error(f"Listener {listener!r} failed on {event.value}: {e}")
                raise

        events_published.labels(event=event.value).inc()
