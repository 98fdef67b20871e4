"""
graph_store.py - Property graph on top of SQLAlchemy with serialized writes
"""
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import create_engine, or_, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import NullPool, QueuePool, StaticPool

from config import settings
from domain.references import NodeRef
from logger import get_logger
from persistence.models import Base, GraphNode, GraphRelationship

logger = get_logger(__name__)


class Direction(Enum):
    OUTGOING = "outgoing"
    INCOMING = "incoming"
    BOTH = "both"


@dataclass
class NodeRecord:
    """Detached snapshot of a stored node"""
    id: int
    label: str
    key: str
    properties: Dict[str, Any] = field(default_factory=dict)

    @property
    def ref(self) -> NodeRef:
        return NodeRef(self.id, self.label)


@dataclass
class RelationshipRecord:
    """Detached snapshot of a stored relationship"""
    id: int
    type: str
    start_id: int
    end_id: int
    properties: Dict[str, Any] = field(default_factory=dict)

    def other_node(self, node_id: int) -> int:
        return self.end_id if self.start_id == node_id else self.start_id


def _node_record(node: GraphNode) -> NodeRecord:
    return NodeRecord(node.id, node.label, node.key, dict(node.properties or {}))


def _relationship_record(rel: GraphRelationship) -> RelationshipRecord:
    return RelationshipRecord(rel.id, rel.type, rel.start_id, rel.end_id, dict(rel.properties or {}))


class GraphTransaction:
    """Graph operations bound to one database session"""

    def __init__(self, session: Session):
        self.session = session

    # Nodes

    def merge_node(self, label: str, key: str, properties: Optional[Dict[str, Any]] = None,
                   replace: bool = False) -> NodeRef:
        """
        Create the node identified by (label, key) or update the existing one.

        Properties are merged into the stored ones unless replace is set.
        """
        node = self.session.query(GraphNode).filter(
            GraphNode.label == label,
            GraphNode.key == key
        ).first()

        if node is None:
            node = GraphNode(label=label, key=key, properties=dict(properties or {}))
            self.session.add(node)
            self.session.flush()
        elif properties:
            merged = {} if replace else dict(node.properties or {})
            merged.update(properties)
            # Assign a new dict so the JSON column is flagged dirty
            node.properties = merged

        return NodeRef(node.id, node.label)

    def get_node(self, node_id: int) -> Optional[NodeRecord]:
        node = self.session.get(GraphNode, node_id)
        return _node_record(node) if node is not None else None

    def find_node(self, label: str, key: str) -> Optional[NodeRecord]:
        node = self.session.query(GraphNode).filter(
            GraphNode.label == label,
            GraphNode.key == key
        ).first()
        return _node_record(node) if node is not None else None

    def nodes_with_label(self, label: str) -> List[NodeRecord]:
        nodes = self.session.query(GraphNode).filter(
            GraphNode.label == label
        ).order_by(GraphNode.id).all()
        return [_node_record(node) for node in nodes]

    def set_properties(self, node_id: int, properties: Dict[str, Any]) -> None:
        node = self.session.get(GraphNode, node_id)
        if node is None:
            raise KeyError(f"Node {node_id} not found")
        merged = dict(node.properties or {})
        merged.update(properties)
        node.properties = merged

    def detach_delete(self, node_id: int) -> None:
        """Delete a node together with all its relationships"""
        self.session.query(GraphRelationship).filter(
            or_(GraphRelationship.start_id == node_id, GraphRelationship.end_id == node_id)
        ).delete(synchronize_session="fetch")
        self.session.query(GraphNode).filter(GraphNode.id == node_id).delete(synchronize_session="fetch")

    # Relationships

    def merge_relationship(self, start_id: int, end_id: int, rel_type: str,
                           properties: Optional[Dict[str, Any]] = None) -> int:
        rel = self.session.query(GraphRelationship).filter(
            GraphRelationship.type == rel_type,
            GraphRelationship.start_id == start_id,
            GraphRelationship.end_id == end_id
        ).first()

        if rel is None:
            rel = GraphRelationship(
                type=rel_type,
                start_id=start_id,
                end_id=end_id,
                properties=dict(properties or {})
            )
            self.session.add(rel)
            self.session.flush()
        elif properties:
            merged = dict(rel.properties or {})
            merged.update(properties)
            rel.properties = merged

        return rel.id

    def relationships(self, node_id: int, rel_type: Optional[str] = None,
                      direction: Direction = Direction.OUTGOING) -> List[RelationshipRecord]:
        query = self.session.query(GraphRelationship).filter(self._direction_clause(node_id, direction))
        if rel_type is not None:
            query = query.filter(GraphRelationship.type == rel_type)
        return [_relationship_record(rel) for rel in query.order_by(GraphRelationship.id).all()]

    def neighbours(self, node_id: int, rel_type: Optional[str] = None,
                   direction: Direction = Direction.OUTGOING) -> List[NodeRecord]:
        neighbours = []
        for rel in self.relationships(node_id, rel_type, direction):
            node = self.get_node(rel.other_node(node_id))
            if node is not None:
                neighbours.append(node)
        return neighbours

    def delete_relationships(self, node_id: int, rel_type: Optional[str] = None,
                             direction: Direction = Direction.OUTGOING) -> int:
        query = self.session.query(GraphRelationship).filter(self._direction_clause(node_id, direction))
        if rel_type is not None:
            query = query.filter(GraphRelationship.type == rel_type)
        return query.delete(synchronize_session="fetch")

    @staticmethod
    def _direction_clause(node_id: int, direction: Direction):
        if direction == Direction.OUTGOING:
            return GraphRelationship.start_id == node_id
        if direction == Direction.INCOMING:
            return GraphRelationship.end_id == node_id
        return or_(GraphRelationship.start_id == node_id, GraphRelationship.end_id == node_id)


class GraphStore:
    def __init__(self, db_url: str = None):
        """Initialize the store with connection pooling suited to the database"""
        self.db_url = db_url or settings.get('database_url')
        self._lock = threading.RLock()
        self._local = threading.local()

        self.is_postgresql = 'postgresql' in self.db_url
        self.is_sqlite = 'sqlite' in self.db_url
        self.is_memory = self.is_sqlite and (':memory:' in self.db_url or self.db_url.rstrip('/') == 'sqlite:')

        if self.is_sqlite:
            if self.is_memory:
                # One shared connection, otherwise every checkout sees an empty database
                engine_kwargs = {"poolclass": StaticPool}
            else:
                self._ensure_sqlite_directory()
                engine_kwargs = {"poolclass": NullPool}
            engine_kwargs["connect_args"] = {
                "check_same_thread": False,
                "timeout": 30
            }
        else:
            engine_kwargs = {
                "poolclass": QueuePool,
                "pool_size": settings.get('database_pool_size', 20),
                "max_overflow": settings.get('database_max_overflow', 40),
                "pool_recycle": settings.get('database_pool_recycle', 3600),
                "pool_pre_ping": True,
            }
            if self.is_postgresql:
                engine_kwargs["connect_args"] = {"connect_timeout": 10}

        self.engine = create_engine(self.db_url, echo=settings.get('debug', False), **engine_kwargs)
        self.SessionFactory = sessionmaker(bind=self.engine, expire_on_commit=False)

        logger.info(f"Graph store initialized with database: {self.db_url}")

    def _ensure_sqlite_directory(self):
        database = make_url(self.db_url).database
        if database:
            Path(database).parent.mkdir(parents=True, exist_ok=True)

    def init_db(self):
        """Create tables with retry logic"""
        max_retries = 3
        retry_delay = 1

        for attempt in range(max_retries):
            try:
                with self._lock:
                    Base.metadata.create_all(bind=self.engine)
                    logger.info("Graph tables initialized")
                    return
            except OperationalError as e:
                if attempt < max_retries - 1:
                    logger.warning(f"Database init attempt {attempt + 1} failed: {e}")
                    time.sleep(retry_delay * (2 ** attempt))
                else:
                    logger.error(f"Database initialization failed after {max_retries} attempts: {e}")
                    raise

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Session with commit/rollback, serialized with graph writes"""
        with self.transaction() as tx:
            yield tx.session

    @contextmanager
    def transaction(self) -> Iterator[GraphTransaction]:
        """
        Explicit transaction; nested calls on the same thread join the
        outer transaction.
        """
        current = getattr(self._local, "transaction", None)
        if current is not None:
            yield current
            return

        with self._lock:
            session = self.SessionFactory()
            tx = GraphTransaction(session)
            self._local.transaction = tx
            try:
                yield tx
                session.commit()
            except IntegrityError as e:
                session.rollback()
                logger.error(f"Graph integrity error: {str(e)}")
                raise
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"Graph database error: {str(e)}")
                raise
            except Exception as e:
                session.rollback()
                logger.error(f"Transaction rolled back: {str(e)}")
                raise
            finally:
                self._local.transaction = None
                session.close()

    # Single-statement conveniences

    def get_node(self, node_id: int) -> Optional[NodeRecord]:
        with self.transaction() as tx:
            return tx.get_node(node_id)

    def find_node(self, label: str, key: str) -> Optional[NodeRecord]:
        with self.transaction() as tx:
            return tx.find_node(label, key)

    def nodes_with_label(self, label: str) -> List[NodeRecord]:
        with self.transaction() as tx:
            return tx.nodes_with_label(label)

    def relationships(self, node_id: int, rel_type: Optional[str] = None,
                      direction: Direction = Direction.OUTGOING) -> List[RelationshipRecord]:
        with self.transaction() as tx:
            return tx.relationships(node_id, rel_type, direction)

    def check_connection(self) -> bool:
        """Check database connection health"""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Database connection check failed: {e}")
            return False

    def close(self):
        """Close all database connections"""
        self.engine.dispose()
        logger.info("Database connections closed")
