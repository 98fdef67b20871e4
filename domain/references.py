"""
Stored-entity references and entity kinds
"""
from dataclasses import dataclass
from enum import Enum


class EntityKind(Enum):
    """Kinds of domain entities that can be persisted into the graph"""
    ANNOTATED_TEXT = "annotated_text"
    TAG = "tag"


@dataclass(frozen=True)
class NodeRef:
    """
    Opaque handle to a node persisted in the graph store.

    Two references are equal when they point at the same node id.
    """
    id: int
    label: str

    def __str__(self):
        return f"({self.label}:{self.id})"
