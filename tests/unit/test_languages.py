import pytest

from app.core.exceptions import UnsupportedLanguageError
from app.services.languages import SUPPORTED_LANGUAGES, find_language, resolve_language_name
from app.services.prompts import build_recognize_prompt, build_translate_prompt


def test_twelve_languages_with_unique_codes():
    codes = [lang.code for lang in SUPPORTED_LANGUAGES]
    assert len(codes) == 12
    assert len(set(codes)) == 12


@pytest.mark.parametrize("value,name", [
    ("fr", "French"),
    ("FR", "French"),
    ("French", "French"),
    (" french ", "French"),
    ("zh", "Simplified Chinese"),
    ("Simplified Chinese", "Simplified Chinese"),
])
def test_resolve_by_code_or_name(value, name):
    assert resolve_language_name(value) == name


def test_unknown_language_rejected():
    assert find_language("Klingon") is None
    with pytest.raises(UnsupportedLanguageError) as exc_info:
        resolve_language_name("Klingon")
    assert exc_info.value.status_code == 400
    assert "French" in exc_info.value.details["supported_languages"]


def test_translate_prompt_mentions_languages():
    prompt = build_translate_prompt("French", "Japanese")
    assert "from Japanese into French" in prompt
    assert "detect it from the image" in build_translate_prompt("French")


def test_recognize_prompt_asks_for_json_array():
    prompt = build_recognize_prompt("Korean")
    assert "Korean" in prompt
    assert "JSON array" in prompt
