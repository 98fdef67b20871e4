from .base import NLPExtension
from .registry import ExtensionRegistry

__all__ = ["NLPExtension", "ExtensionRegistry"]
