"""
Enrichment of stored entities with external knowledge
"""

from .base import Enricher
from .registry import EnrichmentRegistry

__all__ = ["Enricher", "EnrichmentRegistry"]
