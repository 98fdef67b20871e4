"""
spaCy text processor - one Language object per pipeline, built lazily
"""
from typing import Any, Dict, Optional, Tuple

import spacy
from spacy.language import Language

from config import settings
from domain.annotated_text import AnnotatedText, Sentence, Tag
from domain.requests import PipelineSpecification
from logger import get_logger
from text_processors.base import TextProcessor
from text_processors.sentiment import LexiconSentimentAnalyzer

logger = get_logger(__name__)

BLANK_PREFIX = "blank:"
SENTENCE_COMPONENTS = ("parser", "senter", "sentencizer")


class SpacyTextProcessor(TextProcessor):
    """Text processor backed by spaCy models"""

    NAME = "spacy"

    def __init__(self, config: Dict[str, Any] = None):
        config = config or {}
        self.name = config.get('name', self.NAME)
        self.model_name = config.get('model_name', settings.get('spacy_model', 'en_core_web_sm'))
        self.sentiment_analyzer = LexiconSentimentAnalyzer()
        self._languages: Dict[Tuple[str, str], Language] = {}
        super().__init__(config)

    def get_name(self) -> str:
        return self.name

    def _pipeline_changed(self, name: str) -> None:
        for key in [key for key in self._languages if key[0] == name]:
            del self._languages[key]
        logger.debug(f"Dropped cached spaCy pipeline '{name}'")

    def _load_model(self, model_name: str, lang: str) -> Language:
        if model_name.startswith(BLANK_PREFIX):
            return spacy.blank(model_name[len(BLANK_PREFIX):] or lang)
        try:
            return spacy.load(model_name)
        except OSError:
            logger.warning(f"SpaCy model {model_name} not found, using a blank '{lang}' pipeline")
            return spacy.blank(lang)

    def _build_language(self, spec: PipelineSpecification, lang: str) -> Language:
        model_name = spec.params.get('model', self.model_name)
        nlp = self._load_model(model_name, lang)

        if not spec.has_step("ner") and "ner" in nlp.pipe_names:
            nlp.remove_pipe("ner")
        if not spec.has_step("dependency") and "parser" in nlp.pipe_names:
            nlp.remove_pipe("parser")

        # Sentence boundaries are always needed
        if not any(component in nlp.pipe_names for component in SENTENCE_COMPONENTS):
            nlp.add_pipe("sentencizer", first=True)

        nlp.max_length = settings.get('max_text_length', 100000)
        logger.info(f"Built spaCy pipeline '{spec.name}' from {model_name}: {nlp.pipe_names}")
        return nlp

    def get_language(self, spec: PipelineSpecification, lang: str = "en") -> Language:
        key = (spec.name, lang)
        nlp = self._languages.get(key)
        if nlp is None:
            with self._lock:
                nlp = self._languages.get(key)
                if nlp is None:
                    nlp = self._build_language(spec, lang)
                    self._languages[key] = nlp
        return nlp

    def annotate_text(self, text: str, pipeline: Optional[str] = None, lang: str = "en",
                      extra_params: Optional[Dict[str, Any]] = None) -> AnnotatedText:
        spec = self.get_pipeline(pipeline)
        nlp = self.get_language(spec, lang)
        extra_params = extra_params or {}

        stop_words = {word.lower() for word in (spec.stop_words or [])}
        stop_words.update(word.lower() for word in extra_params.get('stop_words', []))
        with_ner = spec.has_step("ner")

        doc = nlp(text)
        annotated_text = AnnotatedText(text=text, language=lang)

        for number, span in enumerate(doc.sents):
            sentence = Sentence(text=span.text, number=number)
            for token in span:
                if token.is_punct or token.is_space:
                    continue
                lemma = token.lemma_ or token.lower_
                if lemma.lower() in stop_words or token.lower_ in stop_words:
                    continue
                tag = Tag(
                    lemma=lemma,
                    language=lang,
                    pos=[token.pos_] if token.pos_ else [],
                    ne=[token.ent_type_] if with_ner and token.ent_type_ else []
                )
                sentence.add_occurrence(token.text, token.idx, token.idx + len(token.text), tag)

            if spec.has_step("sentiment"):
                sentence.sentiment = self.sentiment_analyzer.score(o.value for o in sentence.occurrences)
            annotated_text.sentences.append(sentence)

        logger.debug(
            f"Annotated {len(text)} chars with pipeline '{spec.name}': "
            f"{len(annotated_text.sentences)} sentences, {annotated_text.token_count} tokens"
        )
        return annotated_text

    def sentiment(self, annotated_text: AnnotatedText) -> AnnotatedText:
        for sentence in annotated_text.sentences:
            sentence.sentiment = self.sentiment_analyzer.score(o.value for o in sentence.occurrences)
        return annotated_text
