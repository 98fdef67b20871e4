"""
Base abstract interface for enrichers
"""
from abc import ABC, abstractmethod

from domain.references import NodeRef
from domain.requests import ConceptRequest


class Enricher(ABC):
    """Imports external knowledge for stored entities"""

    @abstractmethod
    def get_name(self) -> str:
        """Name the enricher is registered under"""
        pass

    @abstractmethod
    async def import_concept(self, request: ConceptRequest) -> NodeRef:
        """Import related concepts for the requested node and return it"""
        pass

    async def close(self):
        """Cleanup resources"""
        pass
