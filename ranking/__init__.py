from .pagerank import PageRankProcessor
from .textrank import Keyword, TextRankProcessor

__all__ = ["PageRankProcessor", "Keyword", "TextRankProcessor"]
