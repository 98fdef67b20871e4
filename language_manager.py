"""
Language detection and supported-language checks (langdetect)
"""
import threading
from typing import List, Optional

from langdetect import DetectorFactory, detect_langs
from langdetect.lang_detect_exception import LangDetectException

from config import settings
from logger import get_logger

logger = get_logger(__name__)

UNDETERMINED = "n/a"

# Deterministic results across runs
DetectorFactory.seed = 0


class LanguageManager:
    """
    Detects the language of a text and tells whether it is supported.

    Texts whose language cannot be determined (too short, digits only)
    are reported as "n/a" and accepted, leaving the decision to the
    text processor.
    """

    def __init__(self, supported_languages: Optional[List[str]] = None, min_probability: float = 0.5):
        self.supported_languages = [
            lang.lower() for lang in (supported_languages or settings.get('supported_languages', ['en']))
        ]
        self.min_probability = min_probability

    def detect_language(self, text: str) -> str:
        if not text or not text.strip():
            return UNDETERMINED
        try:
            candidates = detect_langs(text[:1000])
        except LangDetectException as e:
            logger.debug(f"Language detection failed: {e}")
            return UNDETERMINED

        if not candidates or candidates[0].prob < self.min_probability:
            return UNDETERMINED
        return candidates[0].lang

    def is_language_supported(self, language: str) -> bool:
        return language == UNDETERMINED or language.lower() in self.supported_languages

    def is_text_language_supported(self, text: str) -> bool:
        return self.is_language_supported(self.detect_language(text))

    def language_for(self, text: str) -> str:
        """Detected language, or the first supported one when undetermined"""
        language = self.detect_language(text)
        return self.supported_languages[0] if language == UNDETERMINED else language


_language_manager = None
_language_manager_lock = threading.Lock()


def get_language_manager() -> LanguageManager:
    """Get the process-wide language manager"""
    global _language_manager
    if _language_manager is None:
        with _language_manager_lock:
            if _language_manager is None:
                _language_manager = LanguageManager()
    return _language_manager
