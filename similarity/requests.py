"""
Similarity request variants, decided once from the caller's parameters
"""
from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class DirectSimilarity:
    """Cosine over the stored tf-idf vectors of the texts"""
    name = "direct"


@dataclass(frozen=True)
class ScopedQuerySimilarity:
    """Cosine over the features selected by a feature query, written under relationship_type"""
    query: str
    relationship_type: str
    offset: int = 0
    name = "scoped_query"


@dataclass(frozen=True)
class ExpansionSimilarity:
    """Cosine over tag sets expanded through related concepts up to depth hops"""
    depth: int
    name = "expansion"


SimilarityRequest = Union[DirectSimilarity, ScopedQuerySimilarity, ExpansionSimilarity]


def build_similarity_request(query: Optional[str] = None,
                             relationship_type: Optional[str] = None,
                             depth: Optional[int] = None) -> SimilarityRequest:
    """A positive depth always wins; query and relationship type only count together"""
    if depth is not None and depth > 0:
        return ExpansionSimilarity(int(depth))
    if query is not None and relationship_type is not None:
        return ScopedQuerySimilarity(query, relationship_type, 0)
    return DirectSimilarity()
