"""
Shared fixtures: in-memory graph store, blank spaCy processor, wired manager
"""
import pytest

from extensions.registry import ExtensionRegistry
from language_manager import LanguageManager
from nlp_manager import NLPManager
from persistence.configuration import DynamicConfiguration
from persistence.graph_store import GraphStore
from persistence.registry import PersistenceRegistry
from text_processors.registry import TextProcessorsManager
from text_processors.spacy_processor import SpacyTextProcessor


class FixedLanguageManager(LanguageManager):
    """Reports the same language for every text"""

    def __init__(self, language: str = "en", supported_languages=None):
        super().__init__(supported_languages or ["en"])
        self.language = language

    def detect_language(self, text: str) -> str:
        return self.language


@pytest.fixture
def store():
    store = GraphStore("sqlite:///:memory:")
    store.init_db()
    yield store
    store.close()


@pytest.fixture
def configuration(store):
    return DynamicConfiguration(store)


@pytest.fixture
def persistence_registry(store, configuration):
    return PersistenceRegistry(store, configuration)


@pytest.fixture
def spacy_processor():
    return SpacyTextProcessor({"model_name": "blank:en"})


@pytest.fixture
def processors_manager(configuration, spacy_processor):
    return TextProcessorsManager(
        configuration,
        processors={"spacy": spacy_processor},
        default_processor="spacy"
    )


@pytest.fixture
def language_manager():
    return FixedLanguageManager()


@pytest.fixture
def manager(store, configuration, processors_manager, language_manager):
    return NLPManager(
        store=store,
        configuration=configuration,
        processors_manager=processors_manager,
        extension_registry=ExtensionRegistry.from_instances([]),
        language_manager=language_manager
    )


@pytest.fixture
def manager_for_language(store, configuration, processors_manager):
    """Builds a manager whose texts are all detected as the given language"""
    def build(language):
        return NLPManager(
            store=store,
            configuration=configuration,
            processors_manager=processors_manager,
            extension_registry=ExtensionRegistry.from_instances([]),
            language_manager=FixedLanguageManager(language=language)
        )
    return build
