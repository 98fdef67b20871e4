"""
Base abstract interface for text processors
"""
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from domain.annotated_text import AnnotatedText
from domain.requests import DEFAULT_PIPELINE, PipelineSpecification
from exceptions import InvalidInputError, PipelineNotFoundError
from logger import get_logger

logger = get_logger(__name__)


@dataclass
class PipelineInfo:
    """Description of a pipeline as exposed to callers"""
    name: str
    text_processor: str
    processing_steps: Dict[str, bool] = field(default_factory=dict)
    stop_words: Optional[List[str]] = None
    threads_number: int = 4
    params: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_specification(cls, spec: PipelineSpecification) -> "PipelineInfo":
        return cls(
            name=spec.name,
            text_processor=spec.text_processor,
            processing_steps=dict(spec.processing_steps),
            stop_words=list(spec.stop_words) if spec.stop_words is not None else None,
            threads_number=spec.threads_number,
            params=dict(spec.params)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "textProcessor": self.text_processor,
            "processingSteps": dict(self.processing_steps),
            "stopWords": self.stop_words,
            "threadNumber": self.threads_number,
            "params": dict(self.params)
        }


class TextProcessor(ABC):
    """Abstract base class for text processors"""

    def __init__(self, config: Dict[str, Any] = None):
        self.config = config or {}
        self._pipelines: Dict[str, PipelineSpecification] = {}
        self._lock = threading.RLock()

        self.create_pipeline(PipelineSpecification(name=DEFAULT_PIPELINE, text_processor=self.get_name()))

    @abstractmethod
    def get_name(self) -> str:
        """Name the processor is registered under"""
        pass

    @abstractmethod
    def annotate_text(self, text: str, pipeline: Optional[str] = None, lang: str = "en",
                      extra_params: Optional[Dict[str, Any]] = None) -> AnnotatedText:
        """Run the named pipeline over the text"""
        pass

    @abstractmethod
    def sentiment(self, annotated_text: AnnotatedText) -> AnnotatedText:
        """Compute per-sentence sentiment in place"""
        pass

    def filter(self, annotated_text: AnnotatedText, expression: str) -> bool:
        return annotated_text.filter(expression)

    # Pipelines

    def create_pipeline(self, spec: PipelineSpecification) -> bool:
        """
        Register a pipeline.

        Returns False when an identical specification is already registered;
        a different specification under the same name replaces it.
        """
        if not spec.name:
            raise InvalidInputError("A pipeline name needs to be provided")

        with self._lock:
            existing = self._pipelines.get(spec.name)
            if existing == spec:
                return False
            self._pipelines[spec.name] = spec
            if existing is not None:
                self._pipeline_changed(spec.name)

        logger.info(f"Pipeline '{spec.name}' registered on text processor '{self.get_name()}'")
        return True

    def remove_pipeline(self, name: str) -> bool:
        if name == DEFAULT_PIPELINE:
            raise InvalidInputError(f"The '{DEFAULT_PIPELINE}' pipeline cannot be removed")

        with self._lock:
            removed = self._pipelines.pop(name, None)
            if removed is not None:
                self._pipeline_changed(name)

        if removed is not None:
            logger.info(f"Pipeline '{name}' removed from text processor '{self.get_name()}'")
        return removed is not None

    def _pipeline_changed(self, name: str) -> None:
        """Hook for processors that cache per-pipeline state"""
        pass

    def has_pipeline(self, name: Optional[str]) -> bool:
        return (name or DEFAULT_PIPELINE) in self._pipelines

    def get_pipeline(self, name: Optional[str]) -> PipelineSpecification:
        name = name or DEFAULT_PIPELINE
        spec = self._pipelines.get(name)
        if spec is None:
            raise PipelineNotFoundError(name, self.get_name())
        return spec

    def get_pipeline_infos(self) -> List[PipelineInfo]:
        return [PipelineInfo.from_specification(spec) for spec in list(self._pipelines.values())]
