"""
Feature-based similarity between stored nodes

Every node is turned into a sparse feature vector (feature node id ->
weight) and compared with cosine similarity against the other candidates.
The best matches are written back as relationships carrying the score in
their "value" property; earlier results of the same type are replaced.
"""
import math
from abc import ABC, abstractmethod
from collections import Counter
from typing import Dict, Iterable, List, Optional, Tuple

from config import settings
from exceptions import InvalidInputError
from logger import get_logger
from persistence.constants import Labels, Properties, Relationships
from persistence.graph_store import Direction, GraphStore, GraphTransaction
from persistence.queries import text_tag_frequencies
from similarity.requests import (
    DirectSimilarity,
    ExpansionSimilarity,
    ScopedQuerySimilarity,
    SimilarityRequest,
)

logger = get_logger(__name__)

Vector = Dict[int, float]


def cosine_similarity(a: Vector, b: Vector) -> float:
    if not a or not b:
        return 0.0
    if len(a) > len(b):
        a, b = b, a
    dot = sum(weight * b.get(feature, 0.0) for feature, weight in a.items())
    if dot == 0:
        return 0.0
    norm_a = math.sqrt(sum(w * w for w in a.values()))
    norm_b = math.sqrt(sum(w * w for w in b.values()))
    return dot / (norm_a * norm_b)


def parse_feature_query(query: str) -> Tuple[str, Optional[str]]:
    """'HAS_TAG' -> ('HAS_TAG', None), 'HAS_TAG.tf' -> ('HAS_TAG', 'tf')"""
    if not query or not query.strip():
        raise InvalidInputError("Feature query cannot be empty")
    rel_type, _, weight_property = query.strip().partition(".")
    if not rel_type:
        raise InvalidInputError(f"Invalid feature query: {query}")
    return rel_type, weight_property or None


class ConceptExpander(ABC):
    """Expands a set of tags with related concepts"""

    @abstractmethod
    def expand(self, tx: GraphTransaction, tag_ids: Iterable[int], depth: int) -> Dict[int, int]:
        """Concept id -> number of times it was reached, starting tags included"""
        pass


class GraphConceptExpander(ConceptExpander):
    """Follows IS_RELATED_TO relationships already stored in the graph"""

    def expand(self, tx: GraphTransaction, tag_ids: Iterable[int], depth: int) -> Dict[int, int]:
        counts = Counter(tag_ids)
        visited = set(counts)
        frontier = set(counts)

        for _ in range(depth):
            next_frontier = set()
            for concept_id in frontier:
                for rel in tx.relationships(concept_id, Relationships.IS_RELATED_TO.value, Direction.BOTH):
                    other = rel.other_node(concept_id)
                    counts[other] += 1
                    if other not in visited:
                        visited.add(other)
                        next_frontier.add(other)
            if not next_frontier:
                break
            frontier = next_frontier

        return dict(counts)


class FeatureBasedProcessLogic:
    """Computes and stores cosine similarities for the requested nodes"""

    def __init__(self, store: GraphStore, top_k: Optional[int] = None,
                 expander: Optional[ConceptExpander] = None):
        self.store = store
        self.top_k = top_k or settings.get('similarity_top_k', 10)
        self.expander = expander or GraphConceptExpander()

    def compute(self, node_ids: List[int], request: SimilarityRequest) -> int:
        if isinstance(request, ExpansionSimilarity):
            return self.compute_expanded_similarity_for_nodes(node_ids, request.depth)
        if isinstance(request, ScopedQuerySimilarity):
            return self.compute_feature_similarity_for_nodes(
                node_ids, request.query, request.relationship_type, request.offset
            )
        if isinstance(request, DirectSimilarity):
            return self.compute_feature_similarity_for_nodes(node_ids)
        raise InvalidInputError(f"Unknown similarity request {request!r}")

    def compute_feature_similarity_for_nodes(self, node_ids: List[int], query: Optional[str] = None,
                                             relationship_type: Optional[str] = None, offset: int = 0) -> int:
        if query is not None and relationship_type is not None:
            return self._compute_scoped(node_ids, query, relationship_type, offset)

        with self.store.transaction() as tx:
            vectors = self._tf_idf_vectors(tx)
            return self._write_similarities(tx, node_ids, vectors, Relationships.SIMILARITY_COSINE.value)

    def compute_expanded_similarity_for_nodes(self, node_ids: List[int], depth: int) -> int:
        with self.store.transaction() as tx:
            vectors = {}
            for text in tx.nodes_with_label(Labels.ANNOTATED_TEXT.value):
                tag_ids = text_tag_frequencies(tx, text.id).keys()
                vectors[text.id] = {
                    concept: float(count)
                    for concept, count in self.expander.expand(tx, tag_ids, depth).items()
                }
            return self._write_similarities(tx, node_ids, vectors, Relationships.SIMILARITY_COSINE_CN5.value)

    def _compute_scoped(self, node_ids: List[int], query: str, relationship_type: str, offset: int) -> int:
        feature_rel, weight_property = parse_feature_query(query)

        with self.store.transaction() as tx:
            vectors_by_label: Dict[str, Dict[int, Vector]] = {}
            processed = 0
            for node_id in node_ids:
                node = tx.get_node(node_id)
                if node is None:
                    logger.warning(f"Skipping similarity for missing node {node_id}")
                    continue
                if node.label not in vectors_by_label:
                    vectors_by_label[node.label] = {
                        candidate.id: self._feature_vector(tx, candidate.id, feature_rel, weight_property)
                        for candidate in tx.nodes_with_label(node.label)
                    }
                processed += self._write_similarities(
                    tx, [node_id], vectors_by_label[node.label], relationship_type, offset
                )
            return processed

    @staticmethod
    def _feature_vector(tx: GraphTransaction, node_id: int, rel_type: str,
                        weight_property: Optional[str]) -> Vector:
        vector: Vector = {}
        for rel in tx.relationships(node_id, rel_type):
            weight = rel.properties.get(weight_property, 1.0) if weight_property else 1.0
            vector[rel.end_id] = vector.get(rel.end_id, 0.0) + float(weight)
        return vector

    @staticmethod
    def _tf_idf_vectors(tx: GraphTransaction) -> Dict[int, Vector]:
        frequencies = {
            text.id: text_tag_frequencies(tx, text.id)
            for text in tx.nodes_with_label(Labels.ANNOTATED_TEXT.value)
        }
        document_frequency = Counter()
        for tags in frequencies.values():
            document_frequency.update(tags.keys())

        total = len(frequencies)
        vectors = {}
        for text_id, tags in frequencies.items():
            vectors[text_id] = {
                tag_id: tf * (math.log((1 + total) / (1 + document_frequency[tag_id])) + 1)
                for tag_id, tf in tags.items()
            }
        return vectors

    def _write_similarities(self, tx: GraphTransaction, node_ids: List[int], vectors: Dict[int, Vector],
                            rel_type: str, offset: int = 0) -> int:
        """Write the top matches of every node; returns how many nodes got at least one"""
        processed = 0
        for node_id in node_ids:
            vector = vectors.get(node_id)
            if vector is None:
                logger.debug(f"Node {node_id} has no feature vector for {rel_type}")
                continue

            scores = []
            for other_id, other_vector in vectors.items():
                if other_id == node_id:
                    continue
                score = cosine_similarity(vector, other_vector)
                if score > 0:
                    scores.append((other_id, score))
            scores.sort(key=lambda item: (-item[1], item[0]))
            scores = scores[offset:offset + self.top_k]

            tx.delete_relationships(node_id, rel_type)
            for other_id, score in scores:
                tx.merge_relationship(node_id, other_id, rel_type, {Properties.VALUE.value: score})

            if scores:
                processed += 1

        logger.info(f"{rel_type}: {processed}/{len(node_ids)} nodes with results")
        return processed
