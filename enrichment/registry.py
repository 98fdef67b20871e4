"""
Enrichment registry - enrichers keyed by name
"""
from typing import Dict, List, Optional

from enrichment.base import Enricher
from exceptions import EnricherNotFoundError
from logger import get_logger

logger = get_logger(__name__)


class EnrichmentRegistry:
    """Registry for enrichers"""

    def __init__(self):
        self._enrichers: Dict[str, Enricher] = {}

    def register(self, enricher: Enricher):
        """Register an enricher under its own name; a later one replaces it"""
        if not isinstance(enricher, Enricher):
            raise ValueError(f"{enricher} must inherit from Enricher")
        self._enrichers[enricher.get_name()] = enricher
        logger.info(f"Registered enricher: {enricher.get_name()}")

    def get(self, name: str) -> Optional[Enricher]:
        """Enricher by name, None when not registered"""
        return self._enrichers.get(name)

    def require(self, name: str) -> Enricher:
        enricher = self.get(name)
        if enricher is None:
            raise EnricherNotFoundError(name)
        return enricher

    def list_enrichers(self) -> List[str]:
        return list(self._enrichers.keys())

    async def close_all(self):
        """Close all enrichers"""
        for name, enricher in self._enrichers.items():
            try:
                await enricher.close()
                logger.info(f"Closed enricher: {name}")
            except Exception as e:
                logger.error(f"Error closing enricher {name}: {e}")
