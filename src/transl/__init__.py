"""
transl - language negotiation for records carrying multilingual values.

Public API:
    translate(record, preferred)   Fill localized fields of a record in place.
    Translator(config)             Configurable translator instance.
    TranslationTable               Key -> language -> value storage type.
    Localized / localized()        Mark a string field as localizable.
    preferred_languages(langs)     Set request-scoped preferences.
    set_defaults(code)             Change the process default language.

Usage:
    from dataclasses import dataclass, field
    from transl import TranslationTable, localized, translate

    @dataclass
    class Planet:
        name: str = localized()
        translations: TranslationTable = field(default_factory=TranslationTable)

    p = Planet(translations=TranslationTable({"name": {"en": "Earth", "ru": "Земля"}}))
    translate(p, ["ru"])
    assert p.name == "Земля"
"""

from .config import AppConfig, LoggingConfig, TranslatorConfig, load_config
from .core import (
    ConfigError,
    NotMutableError,
    TableDecodeError,
    Translatable,
    TranslationsGetter,
    TranslationTable,
    Translator,
    TranslError,
    UnsupportedShapeError,
    configure,
    get_default_language,
    get_preferred_languages,
    get_translator,
    parse_accept_language,
    preferred_languages,
    reset_preferred_languages,
    set_defaults,
    set_preferred_languages,
    translate,
)
from .metadata import FieldDescriptor, Localized, StructMetadata, localized, metadata_for
from .negotiation import Confidence, NegotiationEngine, Tag, resolve_tag

__version__ = "0.3.0"

__all__ = [
    "AppConfig",
    "Confidence",
    "ConfigError",
    "FieldDescriptor",
    "Localized",
    "LoggingConfig",
    "NegotiationEngine",
    "NotMutableError",
    "StructMetadata",
    "TableDecodeError",
    "Tag",
    "Translatable",
    "TranslationTable",
    "TranslationsGetter",
    "Translator",
    "TranslatorConfig",
    "TranslError",
    "UnsupportedShapeError",
    "configure",
    "get_default_language",
    "get_preferred_languages",
    "get_translator",
    "load_config",
    "localized",
    "metadata_for",
    "parse_accept_language",
    "preferred_languages",
    "reset_preferred_languages",
    "resolve_tag",
    "set_defaults",
    "set_preferred_languages",
    "translate",
]
