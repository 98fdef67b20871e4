"""
ConceptNet 5 REST client

API Documentation: https://github.com/commonsense/conceptnet5/wiki/API
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import aiohttp

from circuit_breaker import CircuitBreaker, CircuitBreakerError
from config import settings
from exceptions import ConceptNetError
from logger import get_logger
from metrics import conceptnet_requests

logger = get_logger(__name__)


@dataclass
class ConceptEdge:
    """One assertion between two concepts"""
    relation: str
    start: str
    start_language: str
    end: str
    end_language: str
    weight: float = 1.0


def concept_uri(concept: str, language: str) -> str:
    return f"/c/{language}/{concept.strip().lower().replace(' ', '_')}"


def parse_concept_uri(uri: str) -> Tuple[str, str]:
    """'/c/en/ice_cream/n' -> ('ice cream', 'en')"""
    parts = uri.split("/")
    if len(parts) < 4 or parts[1] != "c":
        raise ValueError(f"Not a concept URI: {uri}")
    return parts[3].replace("_", " "), parts[2]


class ConceptNetClient:
    """Async client for the ConceptNet 5 query API"""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[int] = None,
                 session: Optional[aiohttp.ClientSession] = None):
        self.base_url = (base_url or settings.get('conceptnet_url')).rstrip("/")
        self.timeout = timeout or settings.get('conceptnet_timeout', 30)
        self.session = session
        self._owns_session = session is None
        self.circuit_breaker = CircuitBreaker(
            name="conceptnet",
            failure_threshold=settings.get('conceptnet_circuit_breaker_threshold', 5),
            recovery_timeout=settings.get('conceptnet_circuit_breaker_timeout', 60),
            expected_exception=ConceptNetError
        )

    async def _get_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self._owns_session = True
        return self.session

    async def _fetch(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        session = await self._get_session()
        url = f"{self.base_url}{path}"
        try:
            async with session.get(url, params=params) as response:
                if response.status != 200:
                    conceptnet_requests.labels(status="error").inc()
                    raise ConceptNetError(f"ConceptNet request {url} failed: HTTP {response.status}")
                data = await response.json()
        except aiohttp.ClientError as e:
            conceptnet_requests.labels(status="error").inc()
            raise ConceptNetError(f"ConceptNet request {url} failed: {e}", e)

        conceptnet_requests.labels(status="success").inc()
        return data

    async def get_edges(self, concept: str, language: str, limit: int = 100) -> List[ConceptEdge]:
        """Edges touching the concept, in either direction"""
        params = {"node": concept_uri(concept, language), "limit": limit}
        try:
            data = await self.circuit_breaker.call(self._fetch, "/query", params)
        except CircuitBreakerError as e:
            raise ConceptNetError(str(e), e)

        edges = []
        for raw in data.get("edges", []):
            try:
                edges.append(self._parse_edge(raw))
            except (KeyError, ValueError) as e:
                logger.debug(f"Skipping malformed ConceptNet edge: {e}")
        return edges

    @staticmethod
    def _parse_edge(raw: Dict[str, Any]) -> ConceptEdge:
        start, start_language = parse_concept_uri(raw["start"]["@id"])
        end, end_language = parse_concept_uri(raw["end"]["@id"])
        relation = raw["rel"].get("label") or raw["rel"]["@id"].split("/")[-1]
        return ConceptEdge(
            relation=relation,
            start=raw["start"].get("label", start),
            start_language=raw["start"].get("language", start_language),
            end=raw["end"].get("label", end),
            end_language=raw["end"].get("language", end_language),
            weight=float(raw.get("weight", 1.0))
        )

    async def close(self):
        if self.session is not None and self._owns_session and not self.session.closed:
            await self.session.close()
            logger.info("ConceptNet client session closed")
