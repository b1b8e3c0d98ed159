"""
Translator - fills a record's localized fields from its translation table.

Flow for one record:
1. Metadata lookup (cached per type). Self-translating records delegate to
   their own translate(); unsupported shapes are a no-op (or an error in
   strict mode).
2. Read the table from the translations field. Empty table -> no-op.
3. Effective preferences: explicit argument, else the request context,
   else the default language.
4. Negotiate and write every localized field, either per field
   ("independent") or once for the whole record ("unified").

Fields whose key is missing or empty in the table keep their current value.
"""

from typing import Any, Iterable, Sequence

import structlog

from ..config.schema import TranslatorConfig
from ..metadata.cache import MetadataCache, StructMetadata, get_metadata_cache
from ..negotiation.engine import NegotiationEngine, Preference
from ..negotiation.matcher import MatchResult, availability_key
from ..negotiation.tags import Tag
from .context import get_preferred_languages
from .errors import NotMutableError
from .table import TranslationTable

class Translator:
    """Applies language negotiation to records.

    Instances are safe to share between threads. The default language can
    be replaced with set_default_language(), which is meant as a rare
    administrative action and is not synchronized with in-flight calls.
    """

    def __init__(
        self,
        config: TranslatorConfig | None = None,
        metadata: MetadataCache | None = None,
        engine: NegotiationEngine | None = None,
    ) -> None:
        self.config = config if config is not None else TranslatorConfig()
        self.metadata = metadata if metadata is not None else get_metadata_cache()
        self.engine = engine if engine is not None else NegotiationEngine()
        self._default_language = self.config.default_language
        self._log = structlog.get_logger(component="translator")

    @property
    def default_language(self) -> str:
        return self._default_language

    def set_default_language(self, code: str) -> None:
        """Replace the default (fallback) language code."""
        code = code.strip()
        if not code:
            raise ValueError("Default language cannot be empty")
        self._log.info("translator.default_language_set", language=code)
        self._default_language = code

    def translate(self, record: Any, preferred: Sequence[Preference] | None = None) -> None:
        """Fill the localized fields of ``record`` in place.

        Args:
            record: Instance of a dataclass, pydantic model or annotated class
            preferred: Preferred languages (Tags or codes), highest priority
                first. None reads the request context; an empty list means
                the default language.

        Raises:
            NotMutableError: If record is a class or a frozen instance
            UnsupportedShapeError: If strict and the type cannot be translated
        """
        if isinstance(record, type):
            raise NotMutableError(
                f"Cannot translate the type '{record.__qualname__}'; pass an instance"
            )

        meta = self.metadata.metadata_for(record)
        if meta.is_translatable:
            record.translate(self._preference_tags(preferred))
            return

        if not meta.valid:
            if self.config.strict:
                raise meta.build_error
            return

        if meta.frozen:
            raise NotMutableError(
                f"Cannot translate frozen instance of '{meta.record_type.__qualname__}'"
            )

        table = self._table_of(record, meta)
        if not table:
            return

        preferences = self._preference_tags(preferred)
        if self.config.strategy == "unified":
            self._translate_unified(record, meta, table, preferences)
        else:
            self._translate_independent(record, meta, table, preferences)

    def translate_many(
        self, records: Iterable[Any], preferred: Sequence[Preference] | None = None
    ) -> None:
        """Translate every record with the same preferences."""
        preferences = self._preference_tags(preferred)
        for record in records:
            self.translate(record, preferences)

    def select(self, available: Iterable[str], preferred: Sequence[Preference] | None = None) -> str | None:
        """Return the code negotiated for a set of available codes.

        Returns:
            Chosen language code, or None when ``available`` is empty
        """
        result = self.engine.negotiate(
            available, self._preference_tags(preferred), self._default_language
        )
        return result.tag.code if result else None

    def _preference_tags(self, preferred: Sequence[Preference] | None) -> list[Tag]:
        if preferred is None:
            preferred = get_preferred_languages()
        if not preferred:
            preferred = [self._default_language]
        return self.engine.to_tags(preferred)

    def _table_of(self, record: Any, meta: StructMetadata) -> TranslationTable | None:
        getter = getattr(record, meta.getter_field, None)  # type: ignore[arg-type]
        if getter is None:
            return None
        return getter.get_translations()

    def _negotiate(self, codes: Iterable[str], preferences: list[Tag]) -> MatchResult:
        key = availability_key(codes, self._default_language)
        return self.engine.match(self.engine.matchers.matcher_for(key), preferences)

    def _translate_independent(
        self,
        record: Any,
        meta: StructMetadata,
        table: TranslationTable,
        preferences: list[Tag],
    ) -> None:
        for fd in meta.fields:
            values = table.get(fd.key)
            if not values:
                continue
            result = self._negotiate(values, preferences)
            setattr(record, fd.name, values[result.tag.code])

    def _translate_unified(
        self,
        record: Any,
        meta: StructMetadata,
        table: TranslationTable,
        preferences: list[Tag],
    ) -> None:
        available: set[str] = set()
        for fd in meta.fields:
            available.update(table.get(fd.key) or ())
        if not available:
            return

        code = self._negotiate(available, preferences).tag.code
        for fd in meta.fields:
            value = (table.get(fd.key) or {}).get(code)
            if value is not None:
                setattr(record, fd.name, value)

    def __repr__(self) -> str:
        return (
            f"<Translator(default='{self._default_language}', "
            f"strategy='{self.config.strategy}', strict={self.config.strict})>"
        )


_default_translator = Translator()


def get_translator() -> Translator:
    """Return the process-wide translator."""
    return _default_translator


def configure(config: TranslatorConfig) -> Translator:
    """Replace the process-wide translator with one built from ``config``."""
    global _default_translator
    _default_translator = Translator(config)
    return _default_translator


def translate(record: Any, preferred: Sequence[Preference] | None = None) -> None:
    """Translate ``record`` with the process-wide translator."""
    _default_translator.translate(record, preferred)


def set_defaults(code: str) -> None:
    """Set the default language of the process-wide translator."""
    _default_translator.set_default_language(code)


def get_default_language() -> str:
    return _default_translator.default_language
