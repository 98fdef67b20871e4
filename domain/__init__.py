"""
Domain model: annotated texts, stored-entity references and requests
"""

from .references import EntityKind, NodeRef
from .annotated_text import AnnotatedText, Sentence, Tag, TagOccurrence
from .requests import (
    DEFAULT_PIPELINE,
    AnnotationRequest,
    ConceptRequest,
    FilterRequest,
    PipelineSpecification,
)

__all__ = [
    "EntityKind",
    "NodeRef",
    "AnnotatedText",
    "Sentence",
    "Tag",
    "TagOccurrence",
    "DEFAULT_PIPELINE",
    "AnnotationRequest",
    "ConceptRequest",
    "FilterRequest",
    "PipelineSpecification",
]
