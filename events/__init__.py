from .dispatcher import EventDispatcher, Events, TextAnnotationEvent

__all__ = ["EventDispatcher", "Events", "TextAnnotationEvent"]
