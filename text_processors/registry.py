"""
Text processor registry - resolves processors and their pipelines
"""
import threading
from typing import Dict, List, Optional

from config import settings
from domain.requests import PipelineSpecification
from exceptions import NoProcessorAvailableError, PipelineNotFoundError, ProcessorNotFoundError
from logger import get_logger
from persistence.configuration import DynamicConfiguration
from text_processors.base import PipelineInfo, TextProcessor
from text_processors.spacy_processor import SpacyTextProcessor

logger = get_logger(__name__)


class TextProcessorsManager:
    """Registry of named text processors and the pipelines they expose"""

    def __init__(self, configuration: Optional[DynamicConfiguration] = None,
                 processors: Optional[Dict[str, TextProcessor]] = None,
                 default_processor: Optional[str] = None):
        self.configuration = configuration
        self._processors: Dict[str, TextProcessor] = {}
        self._lock = threading.RLock()
        self._default_processor = default_processor or settings.get('default_text_processor')

        if processors is None:
            self._register_builtin_processors()
        else:
            for name, processor in processors.items():
                self.register(name, processor)

    def _register_builtin_processors(self):
        """Register built-in processors"""
        self.register(SpacyTextProcessor.NAME, SpacyTextProcessor())
        logger.info(f"Registered {len(self._processors)} built-in text processors")

    def register(self, name: str, processor: TextProcessor):
        """Register a processor instance under a name"""
        if not isinstance(processor, TextProcessor):
            raise ValueError(f"{processor} must inherit from TextProcessor")

        with self._lock:
            self._processors[name] = processor
        logger.info(f"Registered text processor: {name}")

    def get_text_processor(self, name: str) -> TextProcessor:
        processor = self._processors.get(name)
        if processor is None:
            raise ProcessorNotFoundError(name)
        return processor

    def get_text_processor_names(self) -> List[str]:
        return list(self._processors.keys())

    def get_default_processor_name(self) -> Optional[str]:
        """Configured default processor, or None when it is not registered"""
        if self._default_processor and self._default_processor in self._processors:
            return self._default_processor
        return None

    def set_default(self, name: str):
        if name not in self._processors:
            raise ProcessorNotFoundError(name)
        self._default_processor = name
        logger.info(f"Set default text processor: {name}")

    def resolve(self, processor_name: Optional[str] = None, pipeline_name: Optional[str] = None) -> TextProcessor:
        """
        Find the processor to run.

        The explicit processor wins over the default; the pipeline (empty means
        the baseline tokenizer pipeline) must exist on the chosen processor.
        """
        name = processor_name or self.get_default_processor_name()
        if not name:
            raise NoProcessorAvailableError()

        processor = self.get_text_processor(name)
        if not processor.has_pipeline(pipeline_name):
            raise PipelineNotFoundError(pipeline_name, name)
        return processor

    def retrieve_text_processor(self, processor_name: Optional[str] = None,
                                pipeline_name: Optional[str] = None) -> TextProcessor:
        return self.resolve(processor_name, pipeline_name)

    # Pipelines

    def create_pipeline(self, spec: PipelineSpecification) -> bool:
        """Register the pipeline on its processor and persist it"""
        processor = self.get_text_processor(spec.text_processor)
        with self._lock:
            changed = processor.create_pipeline(spec)
            if self.configuration is not None:
                self.configuration.store_pipeline(spec)
        return changed

    def remove_pipeline(self, pipeline_name: str, processor_name: str) -> None:
        processor = self.get_text_processor(processor_name)
        if not processor.has_pipeline(pipeline_name):
            raise PipelineNotFoundError(pipeline_name, processor_name)

        with self._lock:
            processor.remove_pipeline(pipeline_name)
            if self.configuration is not None:
                self.configuration.remove_pipeline(pipeline_name, processor_name)

    def load_pipelines(self, specifications: Optional[List[PipelineSpecification]] = None) -> int:
        """
        Register pipelines from a list, or from the dynamic configuration.

        Pipelines for processors that are not registered are skipped.
        """
        if specifications is None:
            specifications = self.configuration.load_pipelines() if self.configuration is not None else []

        loaded = 0
        for spec in specifications:
            processor = self._processors.get(spec.text_processor)
            if processor is None:
                logger.warning(f"Skipping pipeline '{spec.name}': text processor '{spec.text_processor}' not registered")
                continue
            processor.create_pipeline(spec)
            loaded += 1

        if loaded:
            logger.info(f"Loaded {loaded} pipelines")
        return loaded

    def get_pipeline_infos(self, pipeline_name: str = "") -> List[PipelineInfo]:
        infos = []
        for processor in list(self._processors.values()):
            for info in processor.get_pipeline_infos():
                if not pipeline_name or info.name == pipeline_name:
                    infos.append(info)
        return infos
