"""
Persistence registry - maps entity kinds to their persisters
"""
from typing import Any, Dict

from domain.references import EntityKind
from exceptions import NoPersisterRegisteredError
from logger import get_logger
from persistence.configuration import DynamicConfiguration
from persistence.graph_store import GraphStore
from persistence.persisters import AnnotatedTextPersister, Persister, TagPersister

logger = get_logger(__name__)


class PersistenceRegistry:
    """Static mapping from EntityKind to Persister, built once at construction"""

    def __init__(self, store: GraphStore, configuration: DynamicConfiguration):
        self.store = store
        self.configuration = configuration

        tag_persister = TagPersister(store, configuration)
        self._persisters: Dict[EntityKind, Persister] = {
            EntityKind.ANNOTATED_TEXT: AnnotatedTextPersister(store, configuration, tag_persister),
            EntityKind.TAG: tag_persister,
        }
        logger.info(f"Registered {len(self._persisters)} persisters")

    def persister_for(self, kind: EntityKind) -> Persister:
        persister = self._persisters.get(kind)
        if persister is None:
            logger.error(f"No persister registered for {kind}")
            raise NoPersisterRegisteredError(kind)
        return persister

    def persister_for_entity(self, entity: Any) -> Persister:
        return self.persister_for(getattr(entity, "entity_kind", None))
