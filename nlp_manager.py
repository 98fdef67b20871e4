"""
NLP Manager - annotation orchestration over text processors, graph persistence and events
"""
import time
from typing import Any, List, Optional, Type, TypeVar

from config import settings
from domain.annotated_text import AnnotatedText
from domain.references import EntityKind, NodeRef
from domain.requests import DEFAULT_PIPELINE, AnnotationRequest, ConceptRequest, FilterRequest, PipelineSpecification
from enrichment.base import Enricher
from enrichment.conceptnet5.enricher import ConceptNet5Enricher
from enrichment.registry import EnrichmentRegistry
from events.dispatcher import EventDispatcher, Events, TextAnnotationEvent
from exceptions import InvalidInputError, NoProcessorAvailableError, UnsupportedLanguageError
from extensions.base import NLPExtension
from extensions.registry import ExtensionRegistry
from language_manager import LanguageManager, get_language_manager
from logger import get_logger
from metrics import annotation_count, annotation_duration, filter_count, sentiment_updates
from persistence.configuration import DynamicConfiguration
from persistence.constants import Properties
from persistence.graph_store import GraphStore
from persistence.persisters.base import Persister
from persistence.registry import PersistenceRegistry
from ranking.pagerank import PageRankProcessor
from ranking.textrank import TextRankProcessor
from similarity.feature_logic import FeatureBasedProcessLogic
from similarity.process import SimilarityProcess
from text_processors.base import PipelineInfo, TextProcessor
from text_processors.pipeline_loader import PipelineLoader
from text_processors.registry import TextProcessorsManager

logger = get_logger(__name__)

X = TypeVar("X", bound=NLPExtension)


def new_tx_id() -> str:
    """Version marker of a persisted write: current time in milliseconds"""
    return str(int(time.time() * 1000))


class NLPManager:
    """
    Entry point for annotation, filtering, sentiment and enrichment.

    Every collaborator can be injected; the defaults are built from settings.
    Extensions are discovered and get their listeners registered exactly
    once, when the manager is constructed.
    """

    def __init__(self,
                 store: Optional[GraphStore] = None,
                 configuration: Optional[DynamicConfiguration] = None,
                 processors_manager: Optional[TextProcessorsManager] = None,
                 persistence_registry: Optional[PersistenceRegistry] = None,
                 dispatcher: Optional[EventDispatcher] = None,
                 enrichment_registry: Optional[EnrichmentRegistry] = None,
                 extension_registry: Optional[ExtensionRegistry] = None,
                 language_manager: Optional[LanguageManager] = None):
        self.store = store or GraphStore()
        self.store.init_db()

        self.configuration = configuration or DynamicConfiguration(self.store)
        self.processors_manager = processors_manager or TextProcessorsManager(self.configuration)
        self._load_pipelines()

        self.persistence_registry = persistence_registry or PersistenceRegistry(self.store, self.configuration)
        self.dispatcher = dispatcher or EventDispatcher()
        self.enrichment_registry = enrichment_registry or self._build_and_register_enrichers()
        self.language_manager = language_manager or get_language_manager()

        self.extension_registry = extension_registry or ExtensionRegistry()
        self.extension_registry.load()
        self.extension_registry.register_event_listeners(self.dispatcher)

        self._similarity_process: Optional[SimilarityProcess] = None
        self._page_rank_processor: Optional[PageRankProcessor] = None
        self._text_rank_processor: Optional[TextRankProcessor] = None

        logger.info(f"NLP manager ready with text processors {self.processors_manager.get_text_processor_names()}")

    def _load_pipelines(self):
        pipelines_file = settings.get('pipelines_file')
        if pipelines_file:
            self.processors_manager.load_pipelines(PipelineLoader(pipelines_file).load())
        self.processors_manager.load_pipelines()

    def _build_and_register_enrichers(self) -> EnrichmentRegistry:
        registry = EnrichmentRegistry()
        registry.register(ConceptNet5Enricher(
            self.store,
            self.persistence_registry.persister_for(EntityKind.TAG),
            processors_manager=self.processors_manager
        ))
        return registry

    # Annotation

    def annotate_text_and_persist(self, text: str, id: str, text_processor: Optional[str] = None,
                                  pipeline: Optional[str] = None, force: bool = False,
                                  check_language: bool = True) -> NodeRef:
        """
        Annotate a text and store it under its external id.

        Without force, a text already stored under the id is returned as is.
        Listener errors on the post-annotation event reach the caller; the
        stored text stays in place.
        """
        if text is None:
            raise InvalidInputError("text is null")
        if id is None or id == "":
            raise InvalidInputError("An id needs to be provided")

        if check_language:
            self._check_text_language(text)

        processor_name = text_processor or self.processors_manager.get_default_processor_name()
        if not processor_name:
            raise NoProcessorAvailableError()
        processor = self.processors_manager.resolve(processor_name, pipeline)

        persister = self.get_persister(EntityKind.ANNOTATED_TEXT)
        if not force:
            existing = persister.find(id)
            if existing is not None:
                logger.info(f"Text {id} already annotated as {existing}, skipping")
                return existing

        start = time.time()
        try:
            language = self.language_manager.language_for(text)
            annotated_text = processor.annotate_text(text, pipeline or DEFAULT_PIPELINE, language, None)
            node = self.persist_annotated_text(annotated_text, id, new_tx_id())
        except Exception:
            annotation_count.labels(processor=processor_name, status="error").inc()
            raise

        annotation_duration.labels(processor=processor_name).observe(time.time() - start)
        annotation_count.labels(processor=processor_name, status="success").inc()
        logger.info(f"Annotated text {id} with {processor_name}/{pipeline or DEFAULT_PIPELINE} as {node}")

        self.dispatcher.notify(Events.POST_TEXT_ANNOTATION, TextAnnotationEvent(node, annotated_text, id))
        return node

    def annotate(self, request: AnnotationRequest) -> NodeRef:
        return self.annotate_text_and_persist(
            request.text,
            request.id,
            request.text_processor,
            request.pipeline,
            request.force,
            request.check_language
        )

    def persist_annotated_text(self, annotated_text: AnnotatedText, id: str, tx_id: str) -> NodeRef:
        return self.get_persister(EntityKind.ANNOTATED_TEXT).persist(annotated_text, id, tx_id)

    def apply_sentiment(self, node: NodeRef, text_processor: str = "") -> NodeRef:
        """Compute sentence sentiment of a stored text and store it again with a new txId"""
        processor = self._processor_or_default(text_processor)
        persister = self.get_persister(EntityKind.ANNOTATED_TEXT)

        annotated_text = persister.load(node)
        processor.sentiment(annotated_text)

        stored = self.store.get_node(node.id)
        id_key = self.configuration.property_key_for(Properties.ID)
        external_id = str(stored.properties.get(id_key, stored.key))

        ref = persister.persist(annotated_text, external_id, new_tx_id())
        sentiment_updates.labels(processor=processor.get_name()).inc()
        return ref

    def filter(self, filter_request: FilterRequest) -> bool:
        text = filter_request.text
        if not text:
            logger.info("text is null")
            raise InvalidInputError("text is null or language not supported or unable to detect the language")
        if not filter_request.filter:
            raise InvalidInputError("A filter value needs to be provided")

        self._check_text_language(text)
        language = self.language_manager.language_for(text)

        processor = self.processors_manager.retrieve_text_processor(filter_request.processor, filter_request.pipeline)
        annotated_text = processor.annotate_text(text, DEFAULT_PIPELINE, language, None)
        result = processor.filter(annotated_text, filter_request.filter)

        filter_count.labels(result=str(result).lower()).inc()
        return result

    def _check_text_language(self, text: str) -> bool:
        if not self.language_manager.is_text_language_supported(text):
            detected = self.language_manager.detect_language(text)
            logger.error(f"Unsupported language : {detected}")
            raise UnsupportedLanguageError(detected)
        return True

    def _processor_or_default(self, name: Optional[str]) -> TextProcessor:
        if name:
            return self.processors_manager.get_text_processor(name)
        default = self.processors_manager.get_default_processor_name()
        if not default:
            raise NoProcessorAvailableError()
        return self.processors_manager.get_text_processor(default)

    # Pipelines and processors

    def get_pipeline_infos(self, pipeline_name: str = "") -> List[PipelineInfo]:
        return self.processors_manager.get_pipeline_infos(pipeline_name)

    def add_pipeline(self, spec: PipelineSpecification) -> None:
        self.processors_manager.create_pipeline(spec)

    def remove_pipeline(self, pipeline: str, processor: str) -> None:
        self.processors_manager.remove_pipeline(pipeline, processor)

    def get_processors(self) -> List[str]:
        return sorted(self.processors_manager.get_text_processor_names())

    # Collaborators

    def get_persister(self, kind: EntityKind) -> Persister:
        return self.persistence_registry.persister_for(kind)

    def get_enricher(self, name: str) -> Optional[Enricher]:
        return self.enrichment_registry.get(name)

    async def enrich_concept(self, request: ConceptRequest, enricher_name: str = ConceptNet5Enricher.ENRICHER_NAME) -> NodeRef:
        return await self.enrichment_registry.require(enricher_name).import_concept(request)

    def get_extension(self, extension_type: Type[X]) -> Optional[X]:
        return self.extension_registry.get(extension_type)

    def get_similarity_process(self) -> SimilarityProcess:
        if self._similarity_process is None:
            self._similarity_process = SimilarityProcess(FeatureBasedProcessLogic(self.store))
        return self._similarity_process

    def get_page_rank_processor(self) -> PageRankProcessor:
        if self._page_rank_processor is None:
            self._page_rank_processor = PageRankProcessor(self.store)
        return self._page_rank_processor

    def get_text_rank_processor(self) -> TextRankProcessor:
        if self._text_rank_processor is None:
            self._text_rank_processor = TextRankProcessor(self.persistence_registry)
        return self._text_rank_processor

    def get_configuration(self) -> DynamicConfiguration:
        return self.configuration

    def get_event_dispatcher(self) -> EventDispatcher:
        return self.dispatcher

    def get_text_processors_manager(self) -> TextProcessorsManager:
        return self.processors_manager

    def compute_similarity(self, input: Any, query: Optional[str] = None, relationship_type: Optional[str] = None,
                           depth: Optional[int] = None) -> int:
        return self.get_similarity_process().compute(input, query, relationship_type, depth)

    async def close(self):
        await self.enrichment_registry.close_all()
        self.store.close()
