"""
Configuration management using Pydantic Settings with safe access wrapper
"""
from pydantic_settings import BaseSettings
from typing import List, Optional, Any


class Settings(BaseSettings):
    # Application settings
    app_name: str = "Graph NLP"
    version: str = "1.0.0"
    debug: bool = False
    environment: str = "production"

    # Database settings (graph store and dynamic configuration)
    database_url: str = "sqlite:///data/graph_nlp.db"
    database_pool_size: int = 20
    database_max_overflow: int = 40
    database_pool_recycle: int = 3600

    # Text processing
    default_text_processor: str = "spacy"
    spacy_model: str = "en_core_web_sm"
    max_text_length: int = 100000
    supported_languages: List[str] = ["en"]
    pipelines_file: Optional[str] = None

    # ConceptNet 5 enrichment
    conceptnet_url: str = "http://api.conceptnet.io"
    conceptnet_timeout: int = 30
    conceptnet_results_limit: int = 100
    conceptnet_circuit_breaker_threshold: int = 5
    conceptnet_circuit_breaker_timeout: int = 60
    conceptnet_default_depth: int = 2
    conceptnet_admitted_relationships: List[str] = [
        "RelatedTo", "IsA", "PartOf", "AtLocation", "Synonym", "MemberOf", "HasA", "CausesDesire"
    ]

    # Similarity
    similarity_top_k: int = 10

    # Extensions
    extensions_entry_point_group: str = "graph_nlp.extensions"

    # Logging settings
    log_level: str = "INFO"
    log_dir: str = "logs"
    log_file_max_bytes: int = 10485760
    log_file_backup_count: int = 10

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"   # allow unknown env vars without error

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._validated = False
        self.validate_settings()

    def validate_settings(self):
        """Validate critical settings on startup"""
        if self._validated:
            return

        errors = []

        if self.environment not in ["development", "testing", "production"]:
            errors.append(f"Invalid environment: {self.environment}")

        if not self.database_url:
            errors.append("Database URL is required")

        if not self.supported_languages:
            errors.append("At least one supported language is required")

        if self.similarity_top_k < 1:
            errors.append(f"similarity_top_k must be positive, got {self.similarity_top_k}")

        if self.conceptnet_default_depth < 1:
            errors.append(f"conceptnet_default_depth must be positive, got {self.conceptnet_default_depth}")

        if errors:
            raise ValueError(f"Configuration errors: {'; '.join(errors)}")

        self._validated = True


class SafeSettings:
    """Safe wrapper for settings with fallback defaults"""

    def __init__(self, settings: Settings):
        self._settings = settings
        self._defaults = {
            "default_text_processor": "spacy",
            "spacy_model": "en_core_web_sm",
            "supported_languages": ["en"],
            "max_text_length": 100000,
            "log_level": "INFO",
            "log_dir": "logs",
            "environment": "production",
            "debug": False,
            "similarity_top_k": 10,
            "conceptnet_url": "http://api.conceptnet.io",
            "conceptnet_timeout": 30,
            "conceptnet_results_limit": 100,
            "conceptnet_default_depth": 2,
            "extensions_entry_point_group": "graph_nlp.extensions",
            "database_pool_size": 20,
        }

    def get(self, key: str, default: Any = None) -> Any:
        """Safely get setting value with fallback"""
        try:
            value = getattr(self._settings, key, None)
            if value is None:
                value = self._defaults.get(key, default)
            return value
        except Exception:
            return self._defaults.get(key, default)

    def __getattr__(self, key: str) -> Any:
        """Proxy attribute access with safety"""
        return self.get(key)

    @property
    def raw(self) -> Settings:
        """Get raw settings object"""
        return self._settings


# Initialize settings with safety wrapper
_raw_settings = Settings()
settings = SafeSettings(_raw_settings)
