from .client import ConceptEdge, ConceptNetClient
from .enricher import ConceptNet5Enricher

__all__ = ["ConceptEdge", "ConceptNetClient", "ConceptNet5Enricher"]
