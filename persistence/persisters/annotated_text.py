"""
AnnotatedText persister

Layout written for one text:

    (:AnnotatedText {id, txId, text, numTerms, language})
        -[:CONTAINS_SENTENCE]-> (:Sentence {text, sentenceNumber, sentiment, occurrences})
            -[:HAS_TAG {tf}]-> (:Tag {value, language, pos, ne})

Sentences belong to exactly one text and are replaced on every write; tags
are shared between texts.
"""
from typing import Optional

from domain.annotated_text import AnnotatedText, Sentence, TagOccurrence
from domain.references import NodeRef
from exceptions import InvalidInputError
from logger import get_logger
from persistence.constants import Labels, Properties, Relationships
from persistence.persisters.base import Persister
from persistence.persisters.tag import TagPersister

logger = get_logger(__name__)


class AnnotatedTextPersister(Persister):

    def __init__(self, store, configuration, tag_persister: Optional[TagPersister] = None):
        super().__init__(store, configuration)
        self.tag_persister = tag_persister or TagPersister(store, configuration)

    def persist(self, entity: AnnotatedText, external_id: Optional[str] = None,
                tx_id: Optional[str] = None) -> NodeRef:
        external_id = external_id or entity.id
        if not external_id:
            raise InvalidInputError("An id is required to persist an annotated text")

        id_key = self.configuration.property_key_for(Properties.ID)
        properties = {
            id_key: external_id,
            Properties.TX_ID.value: tx_id,
            Properties.TEXT.value: entity.text,
            Properties.NUM_TERMS.value: entity.token_count,
            Properties.LANGUAGE.value: entity.language
        }

        with self.store.transaction() as tx:
            ref = tx.merge_node(Labels.ANNOTATED_TEXT.value, external_id, properties, replace=True)

            for old_sentence in tx.neighbours(ref.id, Relationships.CONTAINS_SENTENCE.value):
                tx.detach_delete(old_sentence.id)

            for sentence in entity.sentences:
                sentence_ref = tx.merge_node(
                    Labels.SENTENCE.value,
                    f"{external_id}_{sentence.number}",
                    {
                        Properties.TEXT.value: sentence.text,
                        Properties.SENTENCE_NUMBER.value: sentence.number,
                        Properties.SENTIMENT.value: sentence.sentiment,
                        Properties.OCCURRENCES.value: [o.to_dict() for o in sentence.occurrences]
                    },
                    replace=True
                )
                tx.merge_relationship(ref.id, sentence_ref.id, Relationships.CONTAINS_SENTENCE.value)

                frequencies = sentence.tag_frequencies()
                for tag in sentence.tags:
                    tag_ref = self.tag_persister.merge(tx, tag)
                    tx.merge_relationship(
                        sentence_ref.id,
                        tag_ref.id,
                        Relationships.HAS_TAG.value,
                        {Properties.TERM_FREQUENCY.value: frequencies[tag.id]}
                    )

        entity.id = external_id
        entity.tx_id = tx_id
        logger.debug(f"Persisted annotated text {external_id} (txId={tx_id}, node={ref.id})")
        return ref

    def load(self, ref: NodeRef) -> AnnotatedText:
        id_key = self.configuration.property_key_for(Properties.ID)

        with self.store.transaction() as tx:
            node = tx.get_node(ref.id)
            if node is None or node.label != Labels.ANNOTATED_TEXT.value:
                raise InvalidInputError(f"No annotated text stored at {ref}")

            props = node.properties
            language = props.get(Properties.LANGUAGE.value, "en")
            sentence_nodes = sorted(
                tx.neighbours(ref.id, Relationships.CONTAINS_SENTENCE.value),
                key=lambda n: n.properties.get(Properties.SENTENCE_NUMBER.value, 0)
            )

        sentences = []
        for sentence_node in sentence_nodes:
            sprops = sentence_node.properties
            sentences.append(Sentence(
                text=sprops.get(Properties.TEXT.value, ""),
                number=sprops.get(Properties.SENTENCE_NUMBER.value, 0),
                occurrences=[
                    TagOccurrence.from_dict(data, language)
                    for data in sprops.get(Properties.OCCURRENCES.value, [])
                ],
                sentiment=sprops.get(Properties.SENTIMENT.value)
            ))

        return AnnotatedText(
            text=props.get(Properties.TEXT.value, ""),
            sentences=sentences,
            language=language,
            id=props.get(id_key, node.key),
            tx_id=props.get(Properties.TX_ID.value)
        )

    def find(self, external_id: str) -> Optional[NodeRef]:
        node = self.store.find_node(Labels.ANNOTATED_TEXT.value, external_id)
        return node.ref if node is not None else None
