"""
PageRank over a labelled subgraph of the store (networkx)
"""
from typing import Dict, Optional

import networkx as nx

from logger import get_logger
from metrics import ranking_duration, track_duration
from persistence.constants import Properties
from persistence.graph_store import GraphStore

logger = get_logger(__name__)


class PageRankProcessor:
    """Ranks the nodes of one label over one relationship type and stores the score"""

    def __init__(self, store: GraphStore):
        self.store = store

    def build_graph(self, label: str, relationship_type: str, weight_property: Optional[str] = None) -> nx.DiGraph:
        G = nx.DiGraph()
        with self.store.transaction() as tx:
            nodes = tx.nodes_with_label(label)
            node_ids = {node.id for node in nodes}
            G.add_nodes_from(node_ids)

            for node in nodes:
                for rel in tx.relationships(node.id, relationship_type):
                    if rel.end_id not in node_ids or rel.end_id == node.id:
                        continue
                    weight = float(rel.properties.get(weight_property, 1.0)) if weight_property else 1.0
                    if G.has_edge(node.id, rel.end_id):
                        G[node.id][rel.end_id]["weight"] += weight
                    else:
                        G.add_edge(node.id, rel.end_id, weight=weight)

        logger.debug(f"PageRank graph for {label}/{relationship_type}: "
                     f"{G.number_of_nodes()} nodes, {G.number_of_edges()} edges")
        return G

    @track_duration(ranking_duration, "pagerank")
    def compute(self, label: str, relationship_type: str, weight_property: Optional[str] = None,
                damping: float = 0.85, iterations: int = 100) -> Dict[int, float]:
        G = self.build_graph(label, relationship_type, weight_property)
        if G.number_of_nodes() == 0:
            return {}

        scores = nx.pagerank(G, alpha=damping, max_iter=iterations, weight="weight")

        with self.store.transaction() as tx:
            for node_id, score in scores.items():
                tx.set_properties(node_id, {Properties.PAGERANK.value: score})

        logger.info(f"PageRank stored for {len(scores)} {label} nodes")
        return scores
