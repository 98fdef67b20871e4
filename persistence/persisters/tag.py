"""
Tag persister - tags are shared nodes keyed by "<lemma>_<language>"
"""
from typing import Optional

from domain.annotated_text import Tag
from domain.references import NodeRef
from exceptions import InvalidInputError
from persistence.constants import Labels, Properties
from persistence.graph_store import GraphTransaction
from persistence.persisters.base import Persister


class TagPersister(Persister):

    def persist(self, entity: Tag, external_id: Optional[str] = None, tx_id: Optional[str] = None) -> NodeRef:
        with self.store.transaction() as tx:
            return self.merge(tx, entity)

    def merge(self, tx: GraphTransaction, tag: Tag) -> NodeRef:
        """Merge the tag node, accumulating POS and NE values already stored"""
        existing = tx.find_node(Labels.TAG.value, tag.id)
        pos = list(existing.properties.get(Properties.POS.value, [])) if existing else []
        ne = list(existing.properties.get(Properties.NE.value, [])) if existing else []
        pos.extend(value for value in tag.pos if value not in pos)
        ne.extend(value for value in tag.ne if value not in ne)

        return tx.merge_node(Labels.TAG.value, tag.id, {
            Properties.VALUE.value: tag.lemma,
            Properties.LANGUAGE.value: tag.language,
            Properties.POS.value: pos,
            Properties.NE.value: ne
        })

    def load(self, ref: NodeRef) -> Tag:
        node = self.store.get_node(ref.id)
        if node is None or node.label != Labels.TAG.value:
            raise InvalidInputError(f"No tag stored at {ref}")
        props = node.properties
        return Tag(
            lemma=props[Properties.VALUE.value],
            language=props.get(Properties.LANGUAGE.value, "en"),
            pos=list(props.get(Properties.POS.value, [])),
            ne=list(props.get(Properties.NE.value, []))
        )

    def find(self, external_id: str) -> Optional[NodeRef]:
        node = self.store.find_node(Labels.TAG.value, external_id)
        return node.ref if node is not None else None
