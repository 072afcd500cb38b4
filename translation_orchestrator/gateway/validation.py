"""Input validation in front of the queue.

Text that reaches the RequestQueue is trusted to be non-empty, bounded and
tag-free; this module is where that is enforced.
"""

from __future__ import annotations

import logging
import re

from translation_orchestrator.core.config import settings
from translation_orchestrator.gateway.errors import InvalidInputError

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES = frozenset(
    {
        "en", "es", "fr", "de", "it", "pt", "ru", "ja", "ko", "zh", "ar",
        "hi", "th", "vi", "tr", "pl", "nl", "sv", "da", "no", "fi",
    }
)  # fmt: skip
AUTO_DETECT = "auto"

_TAG_PATTERN = re.compile(r"<[^>]*>")
_WHITESPACE_PATTERN = re.compile(r"\s+")
_CONTROL_PATTERN = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_SECRET_PATTERN = re.compile(r"\b(?:password|pwd|pass|token|key|secret|api[_-]?key|apikey)\s*[:=]\s*\S+", re.IGNORECASE)


class TextValidator:
    """Sanitizes subtitle text and checks language codes."""

    def __init__(self, max_length: int | None = None, languages: frozenset[str] = SUPPORTED_LANGUAGES):
        self.max_length = max_length if max_length is not None else settings.max_text_length
        self.languages = languages

    def sanitize(self, text: str) -> str:
        text = _TAG_PATTERN.sub("", text)
        text = _CONTROL_PATTERN.sub("", text)
        return _WHITESPACE_PATTERN.sub(" ", text).strip()

    def validate_text(self, text: str) -> str:
        """Return the sanitized text or raise InvalidInputError."""
        if not isinstance(text, str) or not text.strip():
            raise InvalidInputError("Invalid text input for translation: must be a non-empty string")
        if len(text) > self.max_length:
            raise InvalidInputError(f"Text too long: {len(text)} characters (max: {self.max_length})")

        sanitized = self.sanitize(text)
        if not sanitized:
            raise InvalidInputError("Invalid text input for translation: nothing left after sanitizing")
        if _SECRET_PATTERN.search(sanitized):
            logger.warning("Rejected translation text that appears to contain credentials")
            raise InvalidInputError("Text contains potentially sensitive information (credentials/keys)")
        return sanitized

    def is_valid_language(self, code: str, allow_auto: bool = False) -> bool:
        if not isinstance(code, str) or not code:
            return False
        code = code.lower()
        if code == AUTO_DETECT:
            return allow_auto
        return code in self.languages

    def validate_languages(self, source_language: str, target_language: str) -> None:
        if not self.is_valid_language(source_language, allow_auto=True):
            raise InvalidInputError(f"Invalid source language code: {source_language}")
        if not self.is_valid_language(target_language):
            raise InvalidInputError(f"Invalid target language code: {target_language}")
