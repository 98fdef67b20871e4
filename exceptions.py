"""
Error hierarchy for annotation, persistence, enrichment and similarity

Every error carries a severity so that callers can tell request-level
problems (bad input, unsupported language) from wiring problems that should
never happen in a correctly configured deployment.
"""
from enum import Enum
from typing import Optional


class ErrorSeverity(Enum):
    """Severity levels for NLP errors"""
    VALIDATION = "validation"        # Caller supplied a bad request
    CONFIGURATION = "configuration"  # Missing processor, pipeline or enricher
    EXTERNAL = "external"            # Remote service failed
    FATAL = "fatal"                  # Programming/wiring error


class NLPError(Exception):
    """
    Base class for all errors raised by the NLP engine

    Attributes:
        message: Human-readable error message
        severity: ErrorSeverity level
        original_error: Original exception if wrapped
    """

    severity = ErrorSeverity.FATAL

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self):
        return f"{self.severity.value.upper()}: {self.message}"


class InvalidInputError(NLPError):
    """Request is structurally wrong (missing text, missing filter, bad input type)"""

    severity = ErrorSeverity.VALIDATION


InvalidRequestError = InvalidInputError


class UnsupportedLanguageError(NLPError):
    """Detected language of the text is not supported"""

    severity = ErrorSeverity.VALIDATION

    def __init__(self, language: str):
        super().__init__(f"Unsupported language : {language}")
        self.language = language


class ProcessorNotFoundError(NLPError):
    """Requested text processor is not registered"""

    severity = ErrorSeverity.CONFIGURATION

    def __init__(self, processor_name: Optional[str], message: Optional[str] = None):
        super().__init__(message or f"Text processor '{processor_name}' not found")
        self.processor_name = processor_name


class PipelineNotFoundError(ProcessorNotFoundError):
    """Requested pipeline does not exist for the processor"""

    def __init__(self, pipeline_name: str, processor_name: Optional[str]):
        super().__init__(
            processor_name,
            f"Pipeline '{pipeline_name}' not found for text processor '{processor_name}'"
        )
        self.pipeline_name = pipeline_name


class NoProcessorAvailableError(NLPError):
    """No processor was requested and no default processor is configured"""

    severity = ErrorSeverity.CONFIGURATION

    def __init__(self, message: str = "Unable to find a text processor: none requested and no default configured"):
        super().__init__(message)


class NoPersisterRegisteredError(NLPError):
    """No persister is mapped to the entity kind"""

    severity = ErrorSeverity.FATAL

    def __init__(self, entity_kind):
        super().__init__(f"No persister registered for entity kind {entity_kind}")
        self.entity_kind = entity_kind


class EnricherNotFoundError(NLPError):
    """Requested enricher is not registered"""

    severity = ErrorSeverity.CONFIGURATION

    def __init__(self, enricher_name: str):
        super().__init__(f"Enricher '{enricher_name}' not found")
        self.enricher_name = enricher_name


class ConceptNetError(NLPError):
    """ConceptNet service could not be queried"""

    severity = ErrorSeverity.EXTERNAL
