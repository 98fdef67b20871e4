"""
SQLAlchemy models backing the property graph and the dynamic configuration.

These tables support:
- Labelled nodes with JSON properties, unique per (label, key)
- Typed relationships with JSON properties, unique per (type, start, end)
- Key/value configuration entries (pipelines, property-key aliases)
"""

from datetime import datetime

from sqlalchemy import (
    Column,
    String,
    Integer,
    DateTime,
    JSON,
    ForeignKey,
    Index,
    UniqueConstraint
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class GraphNode(Base):
    """A labelled node of the graph"""

    __tablename__ = "graph_nodes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    label = Column(String(100), nullable=False)
    # Business key, unique within a label (external id, tag id, ...)
    key = Column(String(500), nullable=False)
    properties = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("label", "key", name="uq_node_label_key"),
        Index("idx_node_label", "label"),
    )


class GraphRelationship(Base):
    """A typed, directed relationship between two nodes"""

    __tablename__ = "graph_relationships"

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(String(100), nullable=False)
    start_id = Column(Integer, ForeignKey("graph_nodes.id", ondelete="CASCADE"), nullable=False)
    end_id = Column(Integer, ForeignKey("graph_nodes.id", ondelete="CASCADE"), nullable=False)
    properties = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("type", "start_id", "end_id", name="uq_relationship"),
        Index("idx_relationship_start", "start_id", "type"),
        Index("idx_relationship_end", "end_id", "type"),
    )


class ConfigurationEntry(Base):
    """Persisted dynamic configuration value"""

    __tablename__ = "nlp_configuration"

    key = Column(String(255), primary_key=True)
    value = Column(JSON, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
