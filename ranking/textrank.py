"""
TextRank keyword extraction for stored texts (networkx)

Tags of a text are linked when they occur within a window of each other in
a sentence; PageRank over that co-occurrence graph gives the keyword
relevance. The best keywords are stored as Keyword nodes that DESCRIBE the
text.
"""
import math
from dataclasses import dataclass
from typing import List

import networkx as nx

from domain.references import EntityKind, NodeRef
from logger import get_logger
from metrics import ranking_duration, track_duration
from persistence.constants import Labels, Properties, Relationships
from persistence.graph_store import Direction
from persistence.registry import PersistenceRegistry

logger = get_logger(__name__)

# POS values kept as keyword candidates; tags without POS are always kept
KEYWORD_POS = {"NOUN", "PROPN", "ADJ"}


@dataclass
class Keyword:
    value: str
    language: str
    relevance: float

    @property
    def id(self) -> str:
        return f"{self.value}_{self.language}"


class TextRankProcessor:

    def __init__(self, persistence_registry: PersistenceRegistry, damping: float = 0.85):
        self.persistence_registry = persistence_registry
        self.store = persistence_registry.store
        self.damping = damping

    @staticmethod
    def _is_candidate(pos: List[str]) -> bool:
        return not pos or any(value in KEYWORD_POS for value in pos)

    def build_graph(self, node: NodeRef, window: int = 2) -> nx.Graph:
        annotated_text = self.persistence_registry.persister_for(EntityKind.ANNOTATED_TEXT).load(node)

        G = nx.Graph()
        for sentence in annotated_text.sentences:
            lemmas = [
                occurrence.tag.lemma.lower()
                for occurrence in sentence.occurrences
                if self._is_candidate(occurrence.tag.pos)
            ]
            G.add_nodes_from(lemmas)
            for i, lemma in enumerate(lemmas):
                for other in lemmas[i + 1:i + window]:
                    if other == lemma:
                        continue
                    if G.has_edge(lemma, other):
                        G[lemma][other]["weight"] += 1.0
                    else:
                        G.add_edge(lemma, other, weight=1.0)
        G.graph["language"] = annotated_text.language
        return G

    @track_duration(ranking_duration, "textrank")
    def extract_keywords(self, node: NodeRef, top_ratio: float = 0.33, window: int = 2) -> List[Keyword]:
        G = self.build_graph(node, window)
        if G.number_of_nodes() == 0:
            return []

        scores = nx.pagerank(G, alpha=self.damping, weight="weight")
        ranked = sorted(scores.items(), key=lambda item: (-item[1], item[0]))
        limit = max(1, math.ceil(len(ranked) * top_ratio))
        language = G.graph["language"]
        keywords = [Keyword(value, language, relevance) for value, relevance in ranked[:limit]]

        with self.store.transaction() as tx:
            tx.delete_relationships(node.id, Relationships.DESCRIBES.value, Direction.INCOMING)
            for keyword in keywords:
                keyword_ref = tx.merge_node(Labels.KEYWORD.value, keyword.id, {
                    Properties.VALUE.value: keyword.value,
                    Properties.LANGUAGE.value: keyword.language
                })
                tx.merge_relationship(keyword_ref.id, node.id, Relationships.DESCRIBES.value, {
                    Properties.RELEVANCE.value: keyword.relevance
                })

        logger.info(f"Stored {len(keywords)} keywords for {node}")
        return keywords
