"""
Translation table and record capabilities.

A TranslationTable maps a translation key to a mapping of language code to
string value:

    TranslationTable({
        "name": {"en": "John", "ru": "Джон"},
        "element": {"en": "water", "ru": "вода"},
    })

Records expose their table through a field whose type implements
TranslationsGetter. Records that know how to translate themselves implement
Translatable instead.
"""

import json
from typing import Any, Protocol, Sequence, runtime_checkable

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema

from .errors import TableDecodeError


@runtime_checkable
class TranslationsGetter(Protocol):
    """Capability of a field type that supplies a translation table."""

    def get_translations(self) -> "TranslationTable": ...


@runtime_checkable
class Translatable(Protocol):
    """Capability of a record that translates itself.

    The preferred list holds language tags (or raw codes), highest priority
    first, and is never empty when called by the Translator.
    """

    def translate(self, preferred: Sequence[Any]) -> None: ...


class TranslationTable(dict[str, dict[str, str]]):
    """Key -> language code -> value mapping stored alongside a record.

    Empty tables and empty per-key mappings are valid: they mean there is
    nothing to show, and the Translator leaves the record fields untouched.
    """

    def get_translations(self) -> "TranslationTable":
        return self

    def languages(self) -> set[str]:
        """Return every language code present in any key."""
        codes: set[str] = set()
        for values in self.values():
            codes.update(values)
        return codes

    def languages_for(self, key: str) -> set[str]:
        """Return the language codes available for a single key."""
        return set(self.get(key) or ())

    def dumps(self) -> str:
        """Encode the table as a two-level JSON object."""
        return json.dumps(self, ensure_ascii=False, sort_keys=True)

    @classmethod
    def loads(cls, raw: str | bytes | bytearray | None) -> "TranslationTable":
        """Decode a table from its JSON encoding.

        Args:
            raw: JSON text (or UTF-8 bytes). None and empty input decode to
                an empty table.

        Returns:
            TranslationTable with the decoded content

        Raises:
            TableDecodeError: If the input is not a two-level string mapping
        """
        if raw is None:
            return cls()
        if isinstance(raw, (bytes, bytearray)):
            raw = raw.decode("utf-8")
        if not raw.strip():
            return cls()

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise TableDecodeError(f"Invalid translation table JSON: {e}") from e

        return cls.from_mapping(data)

    @classmethod
    def from_mapping(cls, data: Any) -> "TranslationTable":
        """Build a table from a plain nested mapping, checking its shape."""
        if not isinstance(data, dict):
            raise TableDecodeError(
                f"Translation table must be an object, got {type(data).__name__}"
            )

        table = cls()
        for key, values in data.items():
            if not isinstance(values, dict):
                raise TableDecodeError(
                    f"Translations for key '{key}' must be an object, "
                    f"got {type(values).__name__}"
                )
            for lang, value in values.items():
                if not isinstance(value, str):
                    raise TableDecodeError(
                        f"Translation '{key}'/'{lang}' must be a string, "
                        f"got {type(value).__name__}"
                    )
            table[str(key)] = dict(values)
        return table

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_after_validator_function(
            cls, handler.generate_schema(dict[str, dict[str, str]])
        )

    def __repr__(self) -> str:
        return f"TranslationTable({dict.__repr__(self)})"
