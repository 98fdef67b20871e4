"""
Read helpers shared by the enrichers, similarity and ranking
"""
from typing import Dict, List

from persistence.constants import Labels, Properties, Relationships
from persistence.graph_store import GraphTransaction, NodeRecord


def text_tag_frequencies(tx: GraphTransaction, text_id: int) -> Dict[int, int]:
    """Tag node id -> term frequency summed over the sentences of a text"""
    frequencies: Dict[int, int] = {}
    for sentence in tx.neighbours(text_id, Relationships.CONTAINS_SENTENCE.value):
        for rel in tx.relationships(sentence.id, Relationships.HAS_TAG.value):
            tf = rel.properties.get(Properties.TERM_FREQUENCY.value, 1)
            frequencies[rel.end_id] = frequencies.get(rel.end_id, 0) + tf
    return frequencies


def text_tags(tx: GraphTransaction, text_id: int) -> List[NodeRecord]:
    tags = []
    for tag_id in text_tag_frequencies(tx, text_id):
        tag = tx.get_node(tag_id)
        if tag is not None:
            tags.append(tag)
    return tags


def tags_of(tx: GraphTransaction, node_id: int) -> List[NodeRecord]:
    """Tags of a stored text, or the node itself when it is a tag"""
    node = tx.get_node(node_id)
    if node is None:
        return []
    if node.label == Labels.TAG.value:
        return [node]
    if node.label == Labels.ANNOTATED_TEXT.value:
        return text_tags(tx, node_id)
    return []
