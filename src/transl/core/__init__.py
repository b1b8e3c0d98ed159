"""
Core module - translation table, request context and the Translator.
"""

from .context import (
    get_preferred_languages,
    parse_accept_language,
    preferred_languages,
    reset_preferred_languages,
    set_preferred_languages,
)
from .errors import (
    ConfigError,
    NotMutableError,
    TableDecodeError,
    TranslError,
    UnsupportedShapeError,
)
from .resolver import (
    Translator,
    configure,
    get_default_language,
    get_translator,
    set_defaults,
    translate,
)
from .table import Translatable, TranslationsGetter, TranslationTable

__all__ = [
    "ConfigError",
    "NotMutableError",
    "TableDecodeError",
    "Translatable",
    "TranslationTable",
    "TranslationsGetter",
    "Translator",
    "TranslError",
    "UnsupportedShapeError",
    "configure",
    "get_default_language",
    "get_preferred_languages",
    "get_translator",
    "parse_accept_language",
    "preferred_languages",
    "reset_preferred_languages",
    "set_defaults",
    "set_preferred_languages",
    "translate",
]
