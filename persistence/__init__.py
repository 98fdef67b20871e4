"""
Graph persistence: SQLAlchemy-backed property graph, persisters and the
dynamic configuration stored alongside them
"""

from .constants import Labels, Properties, Relationships
from .graph_store import Direction, GraphStore, GraphTransaction, NodeRecord, RelationshipRecord
from .configuration import DynamicConfiguration
from .registry import PersistenceRegistry

__all__ = [
    "Labels",
    "Properties",
    "Relationships",
    "Direction",
    "GraphStore",
    "GraphTransaction",
    "NodeRecord",
    "RelationshipRecord",
    "DynamicConfiguration",
    "PersistenceRegistry",
]
