"""
Supported output languages.

Requests may name a language by code (``fr``) or display name (``French``);
both resolve to the display name, which is what the vision prompts embed.
"""

from typing import Dict, List, Optional

from app.core.exceptions import UnsupportedLanguageError
from app.schemas.translation import LanguageOption

SUPPORTED_LANGUAGES: List[LanguageOption] = [
    LanguageOption(code="en", name="English"),
    LanguageOption(code="vi", name="Vietnamese"),
    LanguageOption(code="zh", name="Simplified Chinese"),
    LanguageOption(code="th", name="Thai"),
    LanguageOption(code="ko", name="Korean"),
    LanguageOption(code="ja", name="Japanese"),
    LanguageOption(code="es", name="Spanish"),
    LanguageOption(code="fr", name="French"),
    LanguageOption(code="de", name="German"),
    LanguageOption(code="it", name="Italian"),
    LanguageOption(code="ar", name="Arabic"),
    LanguageOption(code="ru", name="Russian"),
]

_BY_KEY: Dict[str, LanguageOption] = {}
for _lang in SUPPORTED_LANGUAGES:
    _BY_KEY[_lang.code.lower()] = _lang
    _BY_KEY[_lang.name.lower()] = _lang


def find_language(value: Optional[str]) -> Optional[LanguageOption]:
    if not value:
        return None
    return _BY_KEY.get(value.strip().lower())


def resolve_language_name(value: str) -> str:
    """Return the display name for a code or name, raising for unknown languages."""
    language = find_language(value)
    if language is None:
        raise UnsupportedLanguageError(value, [lang.name for lang in SUPPORTED_LANGUAGES])
    return language.name
