"""
Tests for the similarity process and the feature-based logic
"""
import math

import pytest
from unittest.mock import MagicMock

from domain.annotated_text import AnnotatedText, Sentence, Tag
from domain.references import EntityKind, NodeRef
from exceptions import InvalidInputError
from persistence.constants import Labels, Properties, Relationships
from similarity.feature_logic import FeatureBasedProcessLogic, cosine_similarity, parse_feature_query
from similarity.process import SimilarityProcess
from similarity.requests import (
    DirectSimilarity,
    ExpansionSimilarity,
    ScopedQuerySimilarity,
    build_similarity_request,
)


def persist_text(persistence_registry, external_id, words):
    sentence = Sentence(text=" ".join(words), number=0)
    position = 0
    for word in words:
        sentence.add_occurrence(word, position, position + len(word), Tag(word, "en", ["NOUN"]))
        position += len(word) + 1
    text = AnnotatedText(text=" ".join(words), sentences=[sentence])
    return persistence_registry.persister_for(EntityKind.ANNOTATED_TEXT).persist(text, external_id, "1")


def similar_ids(store, node, rel_type=Relationships.SIMILARITY_COSINE.value):
    return [rel.end_id for rel in store.relationships(node.id, rel_type)]


class TestSimilarityRequests:

    def test_depth_wins(self):
        assert build_similarity_request("HAS_TAG", "SIMILAR", 5) == ExpansionSimilarity(5)

    def test_query_and_relationship_select_scoped(self):
        request = build_similarity_request("HAS_TAG", "SIMILAR")

        assert isinstance(request, ScopedQuerySimilarity)
        assert request.relationship_type == "SIMILAR"

    @pytest.mark.parametrize("query,relationship_type,depth", [
        (None, None, None),
        ("HAS_TAG", None, None),
        (None, "SIMILAR", None),
        ("HAS_TAG", None, 0),
    ])
    def test_direct_otherwise(self, query, relationship_type, depth):
        assert isinstance(build_similarity_request(query, relationship_type, depth), DirectSimilarity)

    @pytest.mark.parametrize("depth", [0, -1])
    def test_non_positive_depth_does_not_expand(self, depth):
        request = build_similarity_request("HAS_TAG", "SIMILAR", depth)

        assert isinstance(request, ScopedQuerySimilarity)


class TestSimilarityProcess:

    @pytest.fixture
    def logic(self):
        logic = MagicMock()
        logic.compute.return_value = 1
        return logic

    def test_empty_input_does_nothing(self, logic):
        process = SimilarityProcess(logic)

        assert process.compute([]) == 0
        assert process.compute(None) == 0
        assert process.compute({"score": 1}) == 0
        logic.compute.assert_not_called()

    def test_expansion_is_selected_by_depth(self, logic):
        SimilarityProcess(logic).compute(NodeRef(1, "AnnotatedText"), "HAS_TAG", "SIMILAR", 5)

        node_ids, request = logic.compute.call_args[0]
        assert node_ids == [1]
        assert request == ExpansionSimilarity(5)

    def test_scoped_query_is_selected(self, logic):
        SimilarityProcess(logic).compute([NodeRef(1, "AnnotatedText")], "HAS_TAG", "SIMILAR")

        assert logic.compute.call_args[0][1] == ScopedQuerySimilarity("HAS_TAG", "SIMILAR", 0)

    def test_zero_depth_selects_scoped_query(self, logic):
        SimilarityProcess(logic).compute([NodeRef(1, "AnnotatedText")], "HAS_TAG", "SIMILAR", depth=0)

        assert logic.compute.call_args[0][1] == ScopedQuerySimilarity("HAS_TAG", "SIMILAR", 0)

    def test_direct_when_relationship_missing(self, logic):
        SimilarityProcess(logic).compute([NodeRef(1, "AnnotatedText")], "HAS_TAG")

        assert logic.compute.call_args[0][1] == DirectSimilarity()

    def test_compute_all_never_expands(self, logic):
        process = SimilarityProcess(logic)

        process.compute_all([NodeRef(1, "AnnotatedText")])
        logic.compute_feature_similarity_for_nodes.assert_called_once_with([1])

        process.compute_all([NodeRef(1, "AnnotatedText")], "HAS_TAG", "SIMILAR")
        assert logic.compute.call_args[0][1] == ScopedQuerySimilarity("HAS_TAG", "SIMILAR", 0)

    def test_compute_all_cn5(self, logic):
        SimilarityProcess(logic).compute_all_cn5(NodeRef(1, "AnnotatedText"), 2)

        assert logic.compute.call_args[0] == ([1], ExpansionSimilarity(2))

    def test_processed_count_is_returned(self, logic):
        logic.compute.return_value = 2
        assert SimilarityProcess(logic).compute([NodeRef(1, "A"), NodeRef(2, "A")]) == 2

    def test_node_ids_from_mapping(self):
        ids = SimilarityProcess.get_nodes_from_input({"a": NodeRef(3, "Tag"), "b": "ignored", "c": NodeRef(4, "Tag")})
        assert ids == [3, 4]

    def test_node_ids_from_any_iterable(self):
        refs = {"a": NodeRef(5, "Tag"), "b": NodeRef(6, "Tag")}

        assert SimilarityProcess.get_nodes_from_input(NodeRef(i, "AnnotatedText") for i in range(2)) == [0, 1]
        assert SimilarityProcess.get_nodes_from_input(refs.values()) == [5, 6]

    def test_duplicates_are_removed(self):
        assert SimilarityProcess.get_nodes_from_input([NodeRef(3, "Tag"), NodeRef(3, "Tag")]) == [3]

    @pytest.mark.parametrize("value", ["text", 42, [NodeRef(1, "Tag"), "text"]])
    def test_invalid_input(self, value):
        with pytest.raises(InvalidInputError, match="Invalid input parameters"):
            SimilarityProcess.get_nodes_from_input(value)


class TestCosine:

    def test_identical_vectors(self):
        assert cosine_similarity({1: 2.0, 2: 1.0}, {1: 2.0, 2: 1.0}) == pytest.approx(1.0)

    def test_disjoint_vectors(self):
        assert cosine_similarity({1: 1.0}, {2: 1.0}) == 0.0

    def test_partial_overlap(self):
        assert cosine_similarity({1: 1.0, 2: 1.0}, {1: 1.0}) == pytest.approx(1 / math.sqrt(2))

    def test_empty_vector(self):
        assert cosine_similarity({}, {1: 1.0}) == 0.0

    def test_feature_query(self):
        assert parse_feature_query("HAS_TAG.tf") == ("HAS_TAG", "tf")
        assert parse_feature_query("HAS_TAG") == ("HAS_TAG", None)
        with pytest.raises(InvalidInputError):
            parse_feature_query(" ")


class TestFeatureBasedProcessLogic:

    @pytest.fixture
    def texts(self, persistence_registry):
        return {
            "graphs": persist_text(persistence_registry, "doc-1", ["graph", "node", "edge"]),
            "more_graphs": persist_text(persistence_registry, "doc-2", ["graph", "node", "path"]),
            "cooking": persist_text(persistence_registry, "doc-3", ["pasta", "sauce"]),
        }

    def test_direct_similarity(self, store, texts):
        logic = FeatureBasedProcessLogic(store, top_k=10)
        process = SimilarityProcess(logic)

        processed = process.compute(list(texts.values()))

        assert processed == 2
        assert similar_ids(store, texts["graphs"]) == [texts["more_graphs"].id]
        assert similar_ids(store, texts["cooking"]) == []

        rel = store.relationships(texts["graphs"].id, Relationships.SIMILARITY_COSINE.value)[0]
        assert 0 < rel.properties[Properties.VALUE.value] < 1

    def test_results_are_replaced(self, store, texts, persistence_registry):
        process = SimilarityProcess(FeatureBasedProcessLogic(store, top_k=10))
        process.compute(texts["graphs"])

        persist_text(persistence_registry, "doc-2", ["pasta", "sauce", "tomato"])
        process.compute(texts["graphs"])

        assert similar_ids(store, texts["graphs"]) == []

    def test_top_k_limits_results(self, store, texts, persistence_registry):
        persist_text(persistence_registry, "doc-4", ["graph", "tree"])
        process = SimilarityProcess(FeatureBasedProcessLogic(store, top_k=1))

        process.compute(texts["graphs"])

        assert similar_ids(store, texts["graphs"]) == [texts["more_graphs"].id]

    def test_scoped_query_similarity(self, store, texts):
        process = SimilarityProcess(FeatureBasedProcessLogic(store, top_k=10))

        processed = process.compute(texts["graphs"], "CONTAINS_SENTENCE", "SIMILAR_SENTENCES")

        # sentences are never shared between texts
        assert processed == 0
        assert similar_ids(store, texts["graphs"], "SIMILAR_SENTENCES") == []

    def test_scoped_query_over_sentence_tags(self, store, texts):
        sentences = store.nodes_with_label(Labels.SENTENCE.value)
        process = SimilarityProcess(FeatureBasedProcessLogic(store, top_k=10))

        processed = process.compute([node.ref for node in sentences], "HAS_TAG.tf", "SIMILAR_SENTENCE")

        assert processed == 2
        first = sentences[0]
        related = store.relationships(first.id, "SIMILAR_SENTENCE")
        assert [store.get_node(rel.end_id).label for rel in related] == [Labels.SENTENCE.value]

    def test_scoped_offset_skips_best_matches(self, store, texts, persistence_registry):
        persist_text(persistence_registry, "doc-4", ["graph", "tree"])
        first = store.find_node(Labels.SENTENCE.value, "doc-1_0")
        weakest = store.find_node(Labels.SENTENCE.value, "doc-4_0")
        logic = FeatureBasedProcessLogic(store, top_k=10)

        logic.compute([first.id], ScopedQuerySimilarity("HAS_TAG", "SIMILAR", 1))

        assert [rel.end_id for rel in store.relationships(first.id, "SIMILAR")] == [weakest.id]

    def test_expansion_uses_related_concepts(self, store, persistence_registry):
        dog = persist_text(persistence_registry, "doc-1", ["dog"])
        puppy = persist_text(persistence_registry, "doc-2", ["puppy"])

        with store.transaction() as tx:
            dog_tag = tx.find_node(Labels.TAG.value, "dog_en")
            puppy_tag = tx.find_node(Labels.TAG.value, "puppy_en")
            animal = tx.merge_node(Labels.TAG.value, "animal_en", {Properties.VALUE.value: "animal"})
            tx.merge_relationship(dog_tag.id, animal.id, Relationships.IS_RELATED_TO.value, {"type": "IsA"})
            tx.merge_relationship(puppy_tag.id, animal.id, Relationships.IS_RELATED_TO.value, {"type": "IsA"})

        process = SimilarityProcess(FeatureBasedProcessLogic(store, top_k=10))

        assert process.compute([dog, puppy]) == 0
        assert process.compute([dog, puppy], depth=1) == 2
        assert similar_ids(store, dog, Relationships.SIMILARITY_COSINE_CN5.value) == [puppy.id]

    def test_missing_node_is_skipped(self, store, texts):
        logic = FeatureBasedProcessLogic(store, top_k=10)

        assert logic.compute_feature_similarity_for_nodes([9999], "HAS_TAG", "SIMILAR") == 0
