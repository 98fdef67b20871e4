"""
Similarity engine: feature vectors, cosine scores, stored similarity relationships
"""

from .requests import (
    DirectSimilarity,
    ExpansionSimilarity,
    ScopedQuerySimilarity,
    build_similarity_request,
)
from .feature_logic import ConceptExpander, FeatureBasedProcessLogic, GraphConceptExpander, cosine_similarity
from .process import SimilarityProcess

__all__ = [
    "DirectSimilarity",
    "ExpansionSimilarity",
    "ScopedQuerySimilarity",
    "build_similarity_request",
    "ConceptExpander",
    "FeatureBasedProcessLogic",
    "GraphConceptExpander",
    "cosine_similarity",
    "SimilarityProcess",
]
