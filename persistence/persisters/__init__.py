from .base import Persister
from .annotated_text import AnnotatedTextPersister
from .tag import TagPersister

__all__ = ["Persister", "AnnotatedTextPersister", "TagPersister"]
