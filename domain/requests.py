"""
Request objects accepted by the NLP manager and the enrichers
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from config import settings
from domain.references import NodeRef
from exceptions import InvalidInputError

DEFAULT_PIPELINE = "tokenizer"

DEFAULT_PROCESSING_STEPS = {
    "tokenize": True,
    "ner": True,
    "sentiment": False,
    "dependency": False,
}


@dataclass
class PipelineSpecification:
    """Named configuration of annotation steps for one text processor"""
    name: str
    text_processor: str
    processing_steps: Dict[str, bool] = field(default_factory=lambda: dict(DEFAULT_PROCESSING_STEPS))
    stop_words: Optional[List[str]] = None
    threads_number: int = 4
    params: Dict[str, Any] = field(default_factory=dict)

    def has_step(self, step: str) -> bool:
        return bool(self.processing_steps.get(step, False))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "textProcessor": self.text_processor,
            "processingSteps": dict(self.processing_steps),
            "stopWords": list(self.stop_words) if self.stop_words is not None else None,
            "threadNumber": self.threads_number,
            "params": dict(self.params)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PipelineSpecification":
        name = data.get("name")
        text_processor = data.get("textProcessor") or data.get("text_processor")
        if not name:
            raise InvalidInputError("A pipeline name needs to be provided")
        if not text_processor:
            raise InvalidInputError(f"Pipeline '{name}' needs a text processor")

        steps = dict(DEFAULT_PROCESSING_STEPS)
        steps.update(data.get("processingSteps") or data.get("processing_steps") or {})

        stop_words = data.get("stopWords", data.get("stop_words"))
        if isinstance(stop_words, str):
            stop_words = [w.strip() for w in stop_words.split(",") if w.strip()]

        return cls(
            name=name,
            text_processor=text_processor,
            processing_steps=steps,
            stop_words=stop_words,
            threads_number=int(data.get("threadNumber", data.get("threads_number", 4))),
            params=dict(data.get("params") or {})
        )


@dataclass
class AnnotationRequest:
    text: str
    id: str
    text_processor: Optional[str] = None
    pipeline: Optional[str] = None
    force: bool = False
    check_language: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnnotationRequest":
        text = data.get("text")
        external_id = data.get("id")
        if text is None:
            raise InvalidInputError("text is null")
        if external_id is None:
            raise InvalidInputError("An id needs to be provided")
        return cls(
            text=text,
            id=str(external_id),
            text_processor=data.get("textProcessor"),
            pipeline=data.get("pipeline"),
            force=bool(data.get("force", False)),
            check_language=bool(data.get("checkLanguage", True))
        )


@dataclass
class FilterRequest:
    text: Optional[str]
    filter: Optional[str]
    processor: Optional[str] = None
    pipeline: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FilterRequest":
        return cls(
            text=data.get("text"),
            filter=data.get("filter"),
            processor=data.get("processor"),
            pipeline=data.get("pipeline")
        )


@dataclass
class ConceptRequest:
    """Import related concepts for the tags of a stored text or tag"""
    node: NodeRef
    depth: int = field(default_factory=lambda: settings.conceptnet_default_depth)
    language: str = "en"
    admitted_relationships: List[str] = field(
        default_factory=lambda: list(settings.conceptnet_admitted_relationships or [])
    )
    filter_by_language: bool = True
    output_languages: List[str] = field(default_factory=list)
    results_limit: int = field(default_factory=lambda: settings.conceptnet_results_limit)
    text_processor: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConceptRequest":
        node = data.get("node") or data.get("tag")
        if not isinstance(node, NodeRef):
            raise InvalidInputError(f"Invalid input parameters {node!r}")
        request = cls(node=node)
        if data.get("depth") is not None:
            request.depth = int(data["depth"])
        if data.get("language"):
            request.language = data["language"]
        if data.get("admittedRelationships"):
            request.admitted_relationships = list(data["admittedRelationships"])
        if "filterByLanguage" in data:
            request.filter_by_language = bool(data["filterByLanguage"])
        if data.get("outputLanguages"):
            request.output_languages = list(data["outputLanguages"])
        if data.get("resultsLimit") is not None:
            request.results_limit = int(data["resultsLimit"])
        request.text_processor = data.get("textProcessor")
        return request
