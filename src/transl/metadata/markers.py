"""
Declarative marking of localizable fields.

Two equivalent spellings are supported:

    @dataclass
    class Planet:
        name: Annotated[str, Localized()] = ""          # key "name"
        element: Annotated[str, Localized("elem")] = "" # key "elem"
        translations: TranslationTable = field(default_factory=TranslationTable)

    @dataclass
    class Planet:
        name: str = localized()
        element: str = localized("elem")
        translations: TranslationTable = field(default_factory=TranslationTable)

The Annotated form also works on pydantic models and plain annotated classes.
"""

import dataclasses
from dataclasses import dataclass
from typing import Any

# Key meaning "use the attribute name as translation key"
FIELD_NAME_KEY = "."

# dataclasses.field() metadata entry holding the Localized marker
METADATA_KEY = "transl"


@dataclass(frozen=True)
class Localized:
    """Marks a string field as localizable.

    Attributes:
        key: Translation key. "." (the default) uses the field's own name.
    """

    key: str = FIELD_NAME_KEY

    def key_for(self, field_name: str) -> str:
        if not self.key or self.key == FIELD_NAME_KEY:
            return field_name
        return self.key


def localized(key: str = FIELD_NAME_KEY, default: Any = "", **kwargs: Any) -> Any:
    """dataclasses.field() carrying a Localized marker.

    Args:
        key: Translation key, "." for the field name
        default: Field default (empty string)
        **kwargs: Extra dataclasses.field() arguments

    Returns:
        A dataclasses.Field usable as a class attribute default
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[METADATA_KEY] = Localized(key)
    return dataclasses.field(default=default, metadata=metadata, **kwargs)
