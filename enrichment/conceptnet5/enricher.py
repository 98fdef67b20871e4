"""
ConceptNet 5 enricher

Walks ConceptNet breadth-first from the tags of a stored text (or from a
single stored tag) and stores every admitted related concept as a Tag node
linked with IS_RELATED_TO {type, weight}. The walk stops at request.depth.
"""
import asyncio
from collections import deque
from typing import List, Optional, Set

from domain.annotated_text import Tag
from domain.references import NodeRef
from domain.requests import ConceptRequest
from enrichment.base import Enricher
from enrichment.conceptnet5.client import ConceptEdge, ConceptNetClient
from exceptions import InvalidInputError
from logger import get_logger
from persistence.constants import Properties, Relationships
from persistence.graph_store import GraphStore
from persistence.persisters.tag import TagPersister
from persistence.queries import tags_of

logger = get_logger(__name__)


class ConceptNet5Enricher(Enricher):
    """Imports related concepts from ConceptNet 5"""

    ENRICHER_NAME = "conceptnet5"

    def __init__(self, store: GraphStore, tag_persister: TagPersister,
                 client: Optional[ConceptNetClient] = None, processors_manager=None):
        self.store = store
        self.tag_persister = tag_persister
        self.client = client or ConceptNetClient()
        self.processors_manager = processors_manager

    def get_name(self) -> str:
        return self.ENRICHER_NAME

    async def import_concept(self, request: ConceptRequest) -> NodeRef:
        if request.depth < 1:
            raise InvalidInputError(f"depth must be positive, got {request.depth}")

        loop = asyncio.get_event_loop()
        start_tags = await loop.run_in_executor(None, self._start_tags, request.node.id)
        if not start_tags:
            logger.warning(f"No tags to enrich for {request.node}")
            return request.node

        imported = 0
        for tag in start_tags:
            imported += await self._import_from(
                tag.id,
                tag.properties.get(Properties.VALUE.value, ""),
                tag.properties.get(Properties.LANGUAGE.value, request.language),
                request
            )

        logger.info(f"Imported {imported} ConceptNet relationships for {request.node}")
        return request.node

    async def _import_from(self, tag_id: int, lemma: str, language: str, request: ConceptRequest) -> int:
        loop = asyncio.get_event_loop()
        queue = deque([(tag_id, lemma, language, 0)])
        visited: Set[str] = {f"{lemma.lower()}_{language}"}
        imported = 0

        while queue:
            node_id, concept, concept_language, level = queue.popleft()
            if level >= request.depth:
                continue

            edges = await self.client.get_edges(concept, concept_language, request.results_limit)
            for edge in edges:
                related = self._related(edge, concept, concept_language, request)
                if related is None:
                    continue
                related_concept, related_language = related
                lemma = await loop.run_in_executor(
                    None, self._lemma, related_concept, related_language, request
                )
                tag = Tag(lemma, related_language)

                related_ref = await loop.run_in_executor(None, self._store_related, node_id, tag, edge)
                if related_ref is None:
                    continue
                imported += 1

                if tag.id.lower() not in visited:
                    visited.add(tag.id.lower())
                    queue.append((related_ref.id, tag.lemma, related_language, level + 1))

        return imported

    def _start_tags(self, node_id: int):
        with self.store.transaction() as tx:
            return tags_of(tx, node_id)

    def _store_related(self, node_id: int, tag: Tag, edge: ConceptEdge) -> Optional[NodeRef]:
        """Merge the related tag and link it; None when the edge points back at the node"""
        with self.store.transaction() as tx:
            related_ref = self.tag_persister.merge(tx, tag)
            if related_ref.id == node_id:
                return None
            tx.merge_relationship(node_id, related_ref.id, Relationships.IS_RELATED_TO.value, {
                Properties.TYPE.value: edge.relation,
                Properties.WEIGHT.value: edge.weight
            })
        return related_ref

    def _related(self, edge: ConceptEdge, concept: str, language: str, request: ConceptRequest):
        """The concept on the other side of the edge, if admitted by the request"""
        if request.admitted_relationships and edge.relation not in request.admitted_relationships:
            return None

        if edge.start.lower() == concept.lower() and edge.start_language == language:
            other = (edge.end, edge.end_language)
        else:
            other = (edge.start, edge.start_language)

        if request.filter_by_language:
            languages: List[str] = request.output_languages or [request.language]
            if other[1] not in languages:
                return None
        return other

    def _lemma(self, concept: str, language: str, request: ConceptRequest) -> str:
        if not request.text_processor or self.processors_manager is None:
            return concept
        processor = self.processors_manager.get_text_processor(request.text_processor)
        annotated = processor.annotate_text(concept, lang=language)
        lemmas = [o.tag.lemma for s in annotated.sentences for o in s.occurrences]
        return " ".join(lemmas) or concept

    async def close(self):
        await self.client.close()
