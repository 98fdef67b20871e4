"""
Similarity process - entry point of the similarity engine
"""
import time
from collections.abc import Iterable, Mapping
from typing import Any, List, Optional

from domain.references import NodeRef
from exceptions import InvalidInputError
from logger import get_logger
from metrics import similarity_duration, similarity_processed
from similarity.feature_logic import FeatureBasedProcessLogic
from similarity.requests import ExpansionSimilarity, ScopedQuerySimilarity, build_similarity_request

logger = get_logger(__name__)


class SimilarityProcess:
    """
    Computes similarities for stored nodes.

    Input may be a single NodeRef, any iterable of NodeRefs, or a mapping
    whose NodeRef values are used (other values are ignored).
    """

    def __init__(self, logic: FeatureBasedProcessLogic):
        self.logic = logic

    def compute(self, input: Any, query: Optional[str] = None, relationship_type: Optional[str] = None,
                depth: Optional[int] = None) -> int:
        request = build_similarity_request(query, relationship_type, depth)
        node_ids = self.get_nodes_from_input(input)
        if not node_ids:
            return 0

        start = time.time()
        processed = self.logic.compute(node_ids, request)
        similarity_duration.labels(request.name).observe(time.time() - start)
        similarity_processed.labels(request.name).inc(processed)

        logger.info(f"Similarity ({request.name}) processed {processed} of {len(node_ids)} nodes")
        return processed

    def compute_all(self, input: Any, query: Optional[str] = None, relationship_type: Optional[str] = None) -> int:
        """Direct or scoped-query similarity, never expansion"""
        node_ids = self.get_nodes_from_input(input)
        if not node_ids:
            return 0
        if query is not None and relationship_type is not None:
            return self.logic.compute(node_ids, ScopedQuerySimilarity(query, relationship_type, 0))
        return self.logic.compute_feature_similarity_for_nodes(node_ids)

    def compute_all_cn5(self, input: Any, depth: int) -> int:
        node_ids = self.get_nodes_from_input(input)
        if not node_ids:
            return 0
        return self.logic.compute(node_ids, ExpansionSimilarity(depth))

    @staticmethod
    def get_nodes_from_input(input: Any) -> Optional[List[int]]:
        """
        Node ids from the accepted input shapes.

        Returns None when nothing usable is left (None input, or a mapping
        without NodeRef values) and an empty list for an empty collection.
        """
        if input is None:
            return None
        if isinstance(input, NodeRef):
            return [input.id]
        if isinstance(input, Mapping):
            node_ids = [value.id for value in input.values() if isinstance(value, NodeRef)]
            return node_ids or None
        if isinstance(input, Iterable) and not isinstance(input, (str, bytes)):
            node_ids = []
            for item in input:
                if not isinstance(item, NodeRef):
                    raise InvalidInputError(f"Invalid input parameters {item!r}")
                if item.id not in node_ids:
                    node_ids.append(item.id)
            return node_ids
        raise InvalidInputError(f"Invalid input parameters {input!r}")
