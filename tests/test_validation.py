import logging

import pytest

from translation_orchestrator.gateway.errors import InvalidInputError
from translation_orchestrator.gateway.validation import SUPPORTED_LANGUAGES, TextValidator


@pytest.fixture
def validator() -> TextValidator:
    return TextValidator(max_length=50)


def test_sanitize_strips_tags_and_collapses_whitespace(validator):
    assert validator.sanitize("<b>Hello</b>\n\n   <i>world</i> ") == "Hello world"


def test_sanitize_removes_control_characters(validator):
    assert validator.sanitize("Hel\x00lo\x07") == "Hello"


def test_validate_returns_sanitized(validator):
    assert validator.validate_text("  <font color=red>Run!</font>  ") == "Run!"


@pytest.mark.parametrize("text", ["", "   \n\t", None, 42])
def test_validate_rejects_empty_or_non_string(validator, text):
    with pytest.raises(InvalidInputError, match="non-empty string"):
        validator.validate_text(text)


def test_validate_rejects_tag_only_text(validator):
    with pytest.raises(InvalidInputError, match="nothing left"):
        validator.validate_text("<br/><i></i>")


def test_validate_length_boundary(validator):
    assert validator.validate_text("a" * 50) == "a" * 50
    with pytest.raises(InvalidInputError, match=r"Text too long: 51 characters \(max: 50\)"):
        validator.validate_text("a" * 51)


def test_validate_rejects_credentials(validator, caplog):
    with caplog.at_level(logging.WARNING, logger="translation_orchestrator.gateway.validation"):
        with pytest.raises(InvalidInputError, match="sensitive information"):
            validator.validate_text("my password: hunter2")
    assert "credentials" in caplog.text


@pytest.mark.parametrize("text", ["token=abc123", "API_KEY: sk-123", "secret = s3cr3t", "key:value"])
def test_validate_rejects_secret_patterns(validator, text):
    with pytest.raises(InvalidInputError, match="sensitive information"):
        validator.validate_text(text)


def test_validate_allows_credential_words_in_prose(validator):
    assert validator.validate_text("Forgot my password again") == "Forgot my password again"


def test_default_max_length_from_settings():
    assert TextValidator().max_length == 5000


@pytest.mark.parametrize("code", ["en", "es", "ZH", "fi"])
def test_valid_languages(validator, code):
    assert validator.is_valid_language(code) is True


@pytest.mark.parametrize("code", ["", "xx", "english", None])
def test_invalid_languages(validator, code):
    assert validator.is_valid_language(code) is False


def test_auto_only_allowed_as_source(validator):
    assert validator.is_valid_language("auto", allow_auto=True) is True
    assert validator.is_valid_language("auto") is False

    validator.validate_languages("auto", "es")
    with pytest.raises(InvalidInputError, match="target language"):
        validator.validate_languages("en", "auto")


def test_invalid_source_language(validator):
    with pytest.raises(InvalidInputError, match="source language code: xx"):
        validator.validate_languages("xx", "es")


def test_supported_language_set():
    assert len(SUPPORTED_LANGUAGES) == 21
    assert {"en", "ja", "ar", "no"} <= SUPPORTED_LANGUAGES
