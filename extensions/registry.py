"""
Extension registry - discovers extensions through package entry points
"""
import threading
from importlib.metadata import entry_points
from typing import Dict, Iterable, List, Optional, Type, TypeVar

from config import settings
from events.dispatcher import EventDispatcher
from extensions.base import NLPExtension
from logger import get_logger

logger = get_logger(__name__)

E = TypeVar("E", bound=NLPExtension)


class ExtensionRegistry:
    """
    One extension instance per concrete type.

    A type discovered twice keeps the last instance. Discovery runs once;
    later calls to load() are no-ops.
    """

    def __init__(self):
        self._extensions: Dict[Type[NLPExtension], NLPExtension] = {}
        self._loaded = False
        self._lock = threading.Lock()

    @classmethod
    def from_instances(cls, extensions: Iterable[NLPExtension]) -> "ExtensionRegistry":
        """Fixed registry, no entry point discovery"""
        registry = cls()
        for extension in extensions:
            registry.add(extension)
        registry._loaded = True
        return registry

    def add(self, extension: NLPExtension) -> None:
        if not isinstance(extension, NLPExtension):
            raise ValueError(f"{extension} must inherit from NLPExtension")
        extension_type = type(extension)
        if extension_type in self._extensions:
            logger.warning(f"Extension {extension_type.__name__} discovered again, keeping the last one")
            # Re-insert so the type takes its last discovery position
            del self._extensions[extension_type]
        self._extensions[extension_type] = extension

    def load(self, group: Optional[str] = None) -> "ExtensionRegistry":
        with self._lock:
            if self._loaded:
                return self
            group = group or settings.get('extensions_entry_point_group')

            for entry_point in entry_points(group=group):
                try:
                    extension_class = entry_point.load()
                    self.add(extension_class())
                    logger.info(f"Loaded extension {entry_point.name} from {entry_point.value}")
                except (ImportError, AttributeError, TypeError, ValueError) as e:
                    logger.error(f"Failed to load extension {entry_point.name}: {e}")

            self._loaded = True
        logger.info(f"{len(self._extensions)} extensions loaded from group '{group}'")
        return self

    def register_event_listeners(self, dispatcher: EventDispatcher) -> None:
        for extension in self._extensions.values():
            extension.register_event_listeners(dispatcher)
            logger.debug(f"Registered event listeners of {extension.get_name()}")

    def get(self, extension_type: Type[E]) -> Optional[E]:
        return self._extensions.get(extension_type)

    def list_extensions(self) -> List[NLPExtension]:
        return list(self._extensions.values())
