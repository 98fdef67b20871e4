"""
Dynamic configuration persisted next to the graph

Holds the pipeline specifications registered at runtime, aliases for the
property keys used when writing nodes, and free-form settings. Values
survive restarts because they live in the same database as the graph.
"""
from typing import Any, Dict, List

from domain.requests import PipelineSpecification
from exceptions import InvalidInputError
from logger import get_logger
from persistence.constants import Properties
from persistence.graph_store import GraphStore
from persistence.models import ConfigurationEntry

logger = get_logger(__name__)

PIPELINE_KEY_PREFIX = "PIPELINE_"
PROPERTY_KEY_PREFIX = "PROPERTY_KEY_"
SETTING_KEY_PREFIX = "SETTING_"


class DynamicConfiguration:
    """Key/value configuration stored in the graph database"""

    def __init__(self, store: GraphStore):
        self.store = store

    # Raw access

    def get(self, key: str, default: Any = None) -> Any:
        with self.store.session_scope() as session:
            entry = session.get(ConfigurationEntry, key)
            return entry.value if entry is not None else default

    def update(self, key: str, value: Any) -> None:
        with self.store.session_scope() as session:
            entry = session.get(ConfigurationEntry, key)
            if entry is None:
                session.add(ConfigurationEntry(key=key, value=value))
            else:
                entry.value = value
        logger.debug(f"Configuration updated: {key}")

    def remove(self, key: str) -> bool:
        with self.store.session_scope() as session:
            entry = session.get(ConfigurationEntry, key)
            if entry is None:
                return False
            session.delete(entry)
        logger.debug(f"Configuration removed: {key}")
        return True

    def get_all(self, prefix: str = "") -> Dict[str, Any]:
        with self.store.session_scope() as session:
            entries = session.query(ConfigurationEntry).filter(
                ConfigurationEntry.key.startswith(prefix, autoescape=True)
            ).order_by(ConfigurationEntry.key).all()
            return {entry.key: entry.value for entry in entries}

    # Settings

    def get_setting(self, name: str, default: Any = None) -> Any:
        return self.get(SETTING_KEY_PREFIX + name, default)

    def update_setting(self, name: str, value: Any) -> None:
        self.update(SETTING_KEY_PREFIX + name, value)

    # Property keys

    def property_key_for(self, prop: Properties) -> str:
        """Storage key for a well-known property, honouring any alias"""
        return self.get(PROPERTY_KEY_PREFIX + prop.name, prop.value)

    def update_property_key(self, prop: Properties, key: str) -> None:
        if not key:
            raise ValueError(f"Empty storage key for property {prop.name}")
        self.update(PROPERTY_KEY_PREFIX + prop.name, key)

    # Pipelines

    @staticmethod
    def _pipeline_key(name: str, text_processor: str) -> str:
        return f"{PIPELINE_KEY_PREFIX}{text_processor}.{name}"

    def store_pipeline(self, spec: PipelineSpecification) -> None:
        self.update(self._pipeline_key(spec.name, spec.text_processor), spec.to_dict())
        logger.info(f"Stored pipeline '{spec.name}' for text processor '{spec.text_processor}'")

    def remove_pipeline(self, name: str, text_processor: str) -> bool:
        return self.remove(self._pipeline_key(name, text_processor))

    def has_pipeline(self, name: str, text_processor: str) -> bool:
        return self.get(self._pipeline_key(name, text_processor)) is not None

    def load_pipelines(self) -> List[PipelineSpecification]:
        pipelines = []
        for key, value in self.get_all(PIPELINE_KEY_PREFIX).items():
            try:
                pipelines.append(PipelineSpecification.from_dict(value))
            except (InvalidInputError, ValueError, TypeError, AttributeError) as e:
                logger.error(f"Ignoring malformed stored pipeline {key}: {e}")
        return pipelines
