"""
Text processors: the annotation engines and the registry resolving them
"""

from .base import PipelineInfo, TextProcessor
from .spacy_processor import SpacyTextProcessor
from .registry import TextProcessorsManager
from .pipeline_loader import PipelineLoader

__all__ = [
    "PipelineInfo",
    "TextProcessor",
    "SpacyTextProcessor",
    "TextProcessorsManager",
    "PipelineLoader",
]
