"""
Per-type translation metadata, built once and cached for the process.

The build pass inspects a record type a single time and produces an
immutable StructMetadata describing:
- whether the type translates itself (Translatable capability),
- which field supplies the translation table (TranslationsGetter),
- which string fields are localizable and under which translation key.

Types without a usable translation source keep their UnsupportedShapeError
in the cached metadata, so repeated lookups are O(1) and the error is stable.

Supported record kinds: dataclasses, pydantic models and plain classes with
annotations. Fields are read in declaration order, base classes first.
"""

import dataclasses
import inspect
import threading
import types
import typing
from dataclasses import dataclass
from typing import Annotated, Any, ClassVar, Union, get_args, get_origin

import structlog
from pydantic import BaseModel

from ..core.errors import UnsupportedShapeError
from ..core.table import Translatable, TranslationsGetter
from .markers import METADATA_KEY, Localized

logger = structlog.get_logger()


@dataclass(frozen=True)
class FieldDescriptor:
    """A localizable output field.

    Attributes:
        name: Attribute name written by the Translator
        key: Translation key looked up in the table
        index: Position of the field in declaration order
    """

    name: str
    key: str
    index: int


@dataclass(frozen=True)
class StructMetadata:
    """Immutable translation metadata of one record type."""

    record_type: type
    is_translatable: bool = False
    getter_field: str | None = None
    getter_index: int | None = None
    fields: tuple[FieldDescriptor, ...] = ()
    frozen: bool = False
    build_error: UnsupportedShapeError | None = None

    @property
    def valid(self) -> bool:
        return self.build_error is None

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(f.key for f in self.fields)


@dataclass(frozen=True)
class _Declared:
    name: str
    annotation: Any
    markers: tuple[Any, ...]


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls, include_extras=True)
    except (NameError, TypeError):
        # Unresolvable forward references: fall back to raw annotations
        hints: dict[str, Any] = {}
        for base in reversed(cls.__mro__):
            hints.update(inspect.get_annotations(base))
        return hints


def _split_annotated(annotation: Any) -> tuple[Any, tuple[Any, ...]]:
    if get_origin(annotation) is Annotated:
        return annotation.__origin__, tuple(annotation.__metadata__)
    return annotation, ()


def _declared_fields(cls: type) -> list[_Declared]:
    if issubclass(cls, BaseModel):
        return [
            _Declared(name, info.annotation, tuple(info.metadata))
            for name, info in cls.model_fields.items()
        ]

    hints = _type_hints(cls)

    if dataclasses.is_dataclass(cls):
        declared = []
        for f in dataclasses.fields(cls):
            annotation, extras = _split_annotated(hints.get(f.name, f.type))
            marker = f.metadata.get(METADATA_KEY)
            if marker is not None:
                extras = extras + (marker,)
            declared.append(_Declared(f.name, annotation, extras))
        return declared

    declared = []
    for name, hint in hints.items():
        if hint is ClassVar or get_origin(hint) is ClassVar:
            continue
        annotation, extras = _split_annotated(hint)
        declared.append(_Declared(name, annotation, extras))
    return declared


def _strip_optional(annotation: Any) -> Any:
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _is_string(annotation: Any) -> bool:
    annotation = _strip_optional(annotation)
    return annotation is str or annotation == "str"


def _supplies_translations(annotation: Any) -> bool:
    annotation = _strip_optional(annotation)
    if get_origin(annotation) is not None or not isinstance(annotation, type):
        return False
    try:
        return issubclass(annotation, TranslationsGetter)
    except TypeError:
        return False


def _is_frozen(cls: type) -> bool:
    if issubclass(cls, tuple):
        return True
    if dataclasses.is_dataclass(cls):
        return bool(cls.__dataclass_params__.frozen)  # type: ignore[attr-defined]
    if issubclass(cls, BaseModel):
        return bool(cls.model_config.get("frozen", False))
    return False


def build_metadata(record_type: type) -> StructMetadata:
    """Inspect ``record_type`` and build its StructMetadata.

    Pure and deterministic: building twice yields equal results.
    """
    if issubclass(record_type, Translatable):
        return StructMetadata(record_type=record_type, is_translatable=True)

    fields: list[FieldDescriptor] = []
    getter_field: str | None = None
    getter_index: int | None = None

    for index, declared in enumerate(_declared_fields(record_type)):
        marker = next((m for m in declared.markers if isinstance(m, Localized)), None)
        if marker is not None:
            if _is_string(declared.annotation):
                fields.append(FieldDescriptor(declared.name, marker.key_for(declared.name), index))
            else:
                logger.debug(
                    "metadata.non_string_field_skipped",
                    type=record_type.__qualname__,
                    field=declared.name,
                )

        if getter_field is None and _supplies_translations(declared.annotation):
            getter_field, getter_index = declared.name, index

    error = None
    if not fields:
        error = UnsupportedShapeError(record_type, "no localized string fields")
    elif getter_field is None:
        error = UnsupportedShapeError(record_type, "no translations field")

    if error is not None:
        logger.debug(
            "metadata.unsupported_shape",
            type=record_type.__qualname__,
            reason=error.reason,
        )
        return StructMetadata(record_type=record_type, build_error=error)

    return StructMetadata(
        record_type=record_type,
        getter_field=getter_field,
        getter_index=getter_index,
        fields=tuple(fields),
        frozen=_is_frozen(record_type),
    )


class MetadataCache:
    """Process-lifetime cache of StructMetadata keyed by record type.

    Reads do not lock. Builds run outside the lock; publishing happens under
    a re-entrant lock and keeps the first stored result.
    """

    def __init__(self) -> None:
        self._metas: dict[type, StructMetadata] = {}
        self._lock = threading.RLock()
        self._log = structlog.get_logger(component="metadata_cache")

    def metadata_for(self, target: Any) -> StructMetadata:
        """Return metadata for a record type or a record instance."""
        record_type = target if isinstance(target, type) else type(target)

        meta = self._metas.get(record_type)
        if meta is not None:
            return meta

        built = build_metadata(record_type)
        with self._lock:
            meta = self._metas.setdefault(record_type, built)
        self._log.debug(
            "metadata.built",
            type=record_type.__qualname__,
            fields=len(meta.fields),
            translatable=meta.is_translatable,
            valid=meta.valid,
        )
        return meta

    def stats(self) -> dict[str, int]:
        return {"entries": len(self._metas)}

    def clear(self) -> None:
        """Forget every cached type (for testing)."""
        with self._lock:
            self._metas.clear()

    def __len__(self) -> int:
        return len(self._metas)

    def __repr__(self) -> str:
        return f"<MetadataCache({len(self._metas)} types)>"


_default_cache = MetadataCache()


def get_metadata_cache() -> MetadataCache:
    """Return the process-wide metadata cache."""
    return _default_cache


def metadata_for(target: Any) -> StructMetadata:
    """Look up metadata with the process-wide cache."""
    return _default_cache.metadata_for(target)
