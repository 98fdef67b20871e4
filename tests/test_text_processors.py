"""
Tests for the spaCy text processor, sentiment lexicon and processor registry
"""
import threading

import pytest

from domain.requests import DEFAULT_PIPELINE, PipelineSpecification
from exceptions import (
    InvalidInputError,
    NoProcessorAvailableError,
    PipelineNotFoundError,
    ProcessorNotFoundError,
)
from text_processors.pipeline_loader import PipelineLoader
from text_processors.registry import TextProcessorsManager
from text_processors.sentiment import LexiconSentimentAnalyzer, NEGATIVE, NEUTRAL, POSITIVE, VERY_POSITIVE
from text_processors.spacy_processor import SpacyTextProcessor


class TestSpacyTextProcessor:

    def test_baseline_pipeline_always_exists(self, spacy_processor):
        assert spacy_processor.has_pipeline(DEFAULT_PIPELINE)
        assert spacy_processor.has_pipeline("")
        assert spacy_processor.has_pipeline(None)

    def test_annotate_single_sentence(self, spacy_processor):
        annotated = spacy_processor.annotate_text("I love graphs.")

        assert len(annotated.sentences) == 1
        assert [o.value for o in annotated.sentences[0].occurrences] == ["I", "love", "graphs"]
        assert annotated.token_count == 3
        assert annotated.sentences[0].sentiment is None

    def test_lemma_falls_back_to_lowercase_text(self, spacy_processor):
        annotated = spacy_processor.annotate_text("Graphs rule.")
        assert annotated.sentences[0].occurrences[0].tag.lemma == "graphs"

    def test_sentences_are_split_and_numbered(self, spacy_processor):
        annotated = spacy_processor.annotate_text("Graphs are great. Trees are graphs too.")

        assert [s.number for s in annotated.sentences] == [0, 1]
        assert annotated.sentences[1].occurrences[0].begin == len("Graphs are great. ")

    def test_offsets_match_the_text(self, spacy_processor):
        text = "Nodes and edges."
        annotated = spacy_processor.annotate_text(text)

        for occurrence in annotated.sentences[0].occurrences:
            assert text[occurrence.begin:occurrence.end] == occurrence.value

    def test_stop_words_are_skipped(self, spacy_processor):
        spacy_processor.create_pipeline(PipelineSpecification(
            name="nostop", text_processor="spacy", stop_words=["and"]
        ))

        annotated = spacy_processor.annotate_text("Nodes and edges.", "nostop")

        assert [o.value for o in annotated.sentences[0].occurrences] == ["Nodes", "edges"]

    def test_sentiment_step_scores_sentences(self, spacy_processor):
        spacy_processor.create_pipeline(PipelineSpecification(
            name="withSentiment",
            text_processor="spacy",
            processing_steps={"tokenize": True, "ner": True, "sentiment": True}
        ))

        annotated = spacy_processor.annotate_text("I love graphs.", "withSentiment")

        assert annotated.sentences[0].sentiment == POSITIVE

    def test_sentiment_in_place_keeps_structure(self, spacy_processor):
        annotated = spacy_processor.annotate_text("This is a terrible graph. Nice tree.")
        before = [s.token_count for s in annotated.sentences]

        result = spacy_processor.sentiment(annotated)

        assert result is annotated
        assert [s.token_count for s in annotated.sentences] == before
        assert [s.sentiment for s in annotated.sentences] == [NEGATIVE, POSITIVE]

    def test_unknown_pipeline(self, spacy_processor):
        with pytest.raises(PipelineNotFoundError):
            spacy_processor.annotate_text("text", "missing")

    def test_identical_pipeline_registration_is_idempotent(self, spacy_processor):
        spec = PipelineSpecification(name="p1", text_processor="spacy")

        assert spacy_processor.create_pipeline(spec) is True
        assert spacy_processor.create_pipeline(PipelineSpecification(name="p1", text_processor="spacy")) is False

    def test_changed_pipeline_drops_cached_language(self, spacy_processor):
        spacy_processor.create_pipeline(PipelineSpecification(name="p1", text_processor="spacy"))
        first = spacy_processor.get_language(spacy_processor.get_pipeline("p1"))
        assert spacy_processor.get_language(spacy_processor.get_pipeline("p1")) is first

        spacy_processor.create_pipeline(PipelineSpecification(name="p1", text_processor="spacy", stop_words=["a"]))

        assert spacy_processor.get_language(spacy_processor.get_pipeline("p1")) is not first
        assert spacy_processor.get_pipeline("p1").stop_words == ["a"]

    def test_baseline_pipeline_cannot_be_removed(self, spacy_processor):
        with pytest.raises(InvalidInputError):
            spacy_processor.remove_pipeline(DEFAULT_PIPELINE)

    def test_missing_model_falls_back_to_blank(self):
        processor = SpacyTextProcessor({"model_name": "xx_model_that_does_not_exist"})

        annotated = processor.annotate_text("Graphs rule.")

        assert annotated.token_count == 2

    def test_pipeline_infos(self, spacy_processor):
        infos = spacy_processor.get_pipeline_infos()

        assert [info.name for info in infos] == [DEFAULT_PIPELINE]
        assert infos[0].to_dict()["textProcessor"] == "spacy"


class TestLexiconSentimentAnalyzer:

    @pytest.mark.parametrize("words,expected", [
        (["a", "graph"], NEUTRAL),
        (["good", "graph"], POSITIVE),
        (["very", "good", "graph"], VERY_POSITIVE),
        (["not", "good"], NEGATIVE),
        (["bad"], NEGATIVE),
    ])
    def test_scores(self, words, expected):
        assert LexiconSentimentAnalyzer().score(words) == expected


class TestTextProcessorsManager:

    @pytest.fixture
    def registry(self, configuration):
        return TextProcessorsManager(
            configuration,
            processors={
                "proc-a": SpacyTextProcessor({"name": "proc-a", "model_name": "blank:en"}),
                "proc-b": SpacyTextProcessor({"name": "proc-b", "model_name": "blank:en"}),
            },
            default_processor="proc-a"
        )

    def test_builtin_processor_is_registered(self, configuration):
        registry = TextProcessorsManager(configuration)

        assert registry.get_text_processor_names() == ["spacy"]
        assert registry.get_default_processor_name() == "spacy"

    def test_resolve_default_and_explicit(self, registry):
        assert registry.resolve().get_name() == "proc-a"
        assert registry.resolve("proc-b").get_name() == "proc-b"
        assert registry.retrieve_text_processor(None, "").get_name() == "proc-a"

    def test_set_default(self, registry):
        registry.set_default("proc-b")
        assert registry.resolve().get_name() == "proc-b"

        with pytest.raises(ProcessorNotFoundError):
            registry.set_default("missing")
        assert registry.get_default_processor_name() == "proc-b"

    def test_unknown_processor(self, registry):
        with pytest.raises(ProcessorNotFoundError):
            registry.resolve("missing")

    def test_no_default_processor(self, configuration):
        registry = TextProcessorsManager(
            configuration,
            processors={"proc-a": SpacyTextProcessor({"name": "proc-a", "model_name": "blank:en"})},
            default_processor="not-registered"
        )

        assert registry.get_default_processor_name() is None
        with pytest.raises(NoProcessorAvailableError):
            registry.resolve()

    def test_create_then_remove_pipeline(self, registry, configuration):
        registry.create_pipeline(PipelineSpecification(name="p1", text_processor="proc-a"))

        assert registry.resolve("proc-a", "p1").get_name() == "proc-a"
        assert configuration.has_pipeline("p1", "proc-a")

        registry.remove_pipeline("p1", "proc-a")

        with pytest.raises(ProcessorNotFoundError):
            registry.resolve("proc-a", "p1")
        assert not configuration.has_pipeline("p1", "proc-a")

    def test_pipeline_names_are_scoped_per_processor(self, registry):
        registry.create_pipeline(PipelineSpecification(name="p1", text_processor="proc-a"))

        with pytest.raises(PipelineNotFoundError):
            registry.resolve("proc-b", "p1")

    def test_remove_unknown_pipeline(self, registry):
        with pytest.raises(PipelineNotFoundError):
            registry.remove_pipeline("missing", "proc-a")

    def test_pipeline_for_unknown_processor(self, registry):
        with pytest.raises(ProcessorNotFoundError):
            registry.create_pipeline(PipelineSpecification(name="p1", text_processor="missing"))

    def test_persisted_pipelines_are_reloaded(self, registry, configuration):
        registry.create_pipeline(PipelineSpecification(name="p1", text_processor="proc-a"))
        configuration.store_pipeline(PipelineSpecification(name="orphan", text_processor="missing"))

        fresh = TextProcessorsManager(
            configuration,
            processors={"proc-a": SpacyTextProcessor({"name": "proc-a", "model_name": "blank:en"})}
        )
        assert fresh.load_pipelines() == 1
        assert fresh.get_text_processor("proc-a").has_pipeline("p1")

    def test_pipeline_infos_filtered_by_name(self, registry):
        registry.create_pipeline(PipelineSpecification(name="p1", text_processor="proc-b"))

        assert len(registry.get_pipeline_infos()) == 3
        assert [info.text_processor for info in registry.get_pipeline_infos("p1")] == ["proc-b"]

    def test_concurrent_resolution_during_registration(self, registry):
        errors = []

        def reader():
            for _ in range(200):
                try:
                    registry.resolve("proc-a", DEFAULT_PIPELINE)
                except Exception as e:
                    errors.append(e)

        def writer():
            for n in range(50):
                registry.create_pipeline(PipelineSpecification(name=f"p{n}", text_processor="proc-a"))

        threads = [threading.Thread(target=reader) for _ in range(4)] + [threading.Thread(target=writer)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []


class TestPipelineLoader:

    def test_load_yaml(self, tmp_path):
        pipelines = tmp_path / "pipelines.yaml"
        pipelines.write_text(
            "pipelines:\n"
            "  - name: tokenizerAndSentiment\n"
            "    textProcessor: spacy\n"
            "    processingSteps:\n"
            "      sentiment: true\n"
            "  - textProcessor: spacy\n"
        )

        specs = PipelineLoader(pipelines).load()

        assert [spec.name for spec in specs] == ["tokenizerAndSentiment"]
        assert specs[0].has_step("sentiment")

    def test_missing_path(self, tmp_path):
        assert PipelineLoader(tmp_path / "missing.yaml").load() == []
