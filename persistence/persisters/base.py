"""
Base abstract interface for entity persisters
"""
from abc import ABC, abstractmethod
from typing import Any, Optional

from domain.references import NodeRef
from persistence.configuration import DynamicConfiguration
from persistence.graph_store import GraphStore


class Persister(ABC):
    """Stores one kind of entity in the graph and loads it back"""

    def __init__(self, store: GraphStore, configuration: DynamicConfiguration):
        self.store = store
        self.configuration = configuration

    @abstractmethod
    def persist(self, entity: Any, external_id: Optional[str] = None, tx_id: Optional[str] = None) -> NodeRef:
        """Write the entity, overwriting any previous version with the same id"""
        pass

    @abstractmethod
    def load(self, ref: NodeRef) -> Any:
        """Rebuild the entity stored at the reference"""
        pass

    @abstractmethod
    def find(self, external_id: str) -> Optional[NodeRef]:
        """Reference of the entity stored under an external id, if any"""
        pass
