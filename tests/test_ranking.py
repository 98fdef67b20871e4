"""
Tests for PageRank and TextRank over the stored graph
"""
import pytest

from domain.annotated_text import AnnotatedText, Sentence, Tag
from domain.references import EntityKind
from persistence.constants import Labels, Properties, Relationships
from persistence.graph_store import Direction
from ranking.pagerank import PageRankProcessor
from ranking.textrank import TextRankProcessor


def sentence_of(number, words, pos=None):
    sentence = Sentence(text=" ".join(words), number=number)
    position = 0
    for word in words:
        sentence.add_occurrence(word, position, position + len(word), Tag(word, "en", [pos or "NOUN"]))
        position += len(word) + 1
    return sentence


class TestPageRank:

    @pytest.fixture
    def chain(self, store):
        with store.transaction() as tx:
            refs = [tx.merge_node("Page", name) for name in ("a", "b", "c")]
            tx.merge_relationship(refs[0].id, refs[2].id, "LINKS")
            tx.merge_relationship(refs[1].id, refs[2].id, "LINKS")
            tx.merge_relationship(refs[2].id, refs[0].id, "LINKS")
            tx.merge_node("Other", "ignored")
        return refs

    def test_scores_are_stored_on_nodes(self, store, chain):
        scores = PageRankProcessor(store).compute("Page", "LINKS")

        assert set(scores) == {ref.id for ref in chain}
        assert sum(scores.values()) == pytest.approx(1.0)
        assert max(scores, key=scores.get) == chain[2].id
        assert store.get_node(chain[2].id).properties[Properties.PAGERANK.value] == pytest.approx(scores[chain[2].id])

    def test_graph_uses_weights(self, store, chain):
        with store.transaction() as tx:
            tx.merge_relationship(chain[0].id, chain[1].id, "LINKS", {"weight": 4.0})

        G = PageRankProcessor(store).build_graph("Page", "LINKS", "weight")

        assert G[chain[0].id][chain[1].id]["weight"] == 4.0
        assert G.number_of_nodes() == 3

    def test_empty_label(self, store):
        assert PageRankProcessor(store).compute("Missing", "LINKS") == {}


class TestTextRank:

    @pytest.fixture
    def text_node(self, persistence_registry):
        text = AnnotatedText(text="graph database stores graph nodes. graph theory studies graph nodes.", sentences=[
            sentence_of(0, ["graph", "database", "stores", "graph", "nodes"]),
            sentence_of(1, ["graph", "theory", "studies", "graph", "nodes"]),
        ])
        return persistence_registry.persister_for(EntityKind.ANNOTATED_TEXT).persist(text, "doc-1", "1")

    def test_co_occurrence_graph(self, persistence_registry, text_node):
        G = TextRankProcessor(persistence_registry).build_graph(text_node)

        assert "graph" in G
        assert G.has_edge("graph", "database")
        assert not G.has_edge("database", "nodes")

    def test_verbs_are_not_candidates(self, persistence_registry):
        text = AnnotatedText(text="graphs run", sentences=[sentence_of(0, ["run"], pos="VERB")])
        node = persistence_registry.persister_for(EntityKind.ANNOTATED_TEXT).persist(text, "doc-2", "1")

        assert TextRankProcessor(persistence_registry).extract_keywords(node) == []

    def test_keywords_describe_the_text(self, persistence_registry, store, text_node):
        keywords = TextRankProcessor(persistence_registry).extract_keywords(text_node)

        assert keywords[0].value == "graph"
        assert len(keywords) == 2

        describes = store.relationships(text_node.id, Relationships.DESCRIBES.value, Direction.INCOMING)
        assert len(describes) == 2
        keyword_node = store.get_node(describes[0].start_id)
        assert keyword_node.label == Labels.KEYWORD.value
        assert describes[0].properties[Properties.RELEVANCE.value] > 0

    def test_extraction_replaces_previous_keywords(self, persistence_registry, store, text_node):
        processor = TextRankProcessor(persistence_registry)
        processor.extract_keywords(text_node)
        processor.extract_keywords(text_node, top_ratio=0.1)

        describes = store.relationships(text_node.id, Relationships.DESCRIBES.value, Direction.INCOMING)
        assert len(describes) == 1
