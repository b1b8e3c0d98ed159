"""
Tests for field markers and the per-type metadata cache.

Covers:
- dataclasses with Annotated markers and localized() fields
- pydantic models and plain annotated classes
- getter field detection (first one wins)
- unsupported shapes cached with their error
- self-translating types
"""

import threading
from dataclasses import dataclass, field
from typing import Annotated, Optional

import pytest
from pydantic import BaseModel, ConfigDict, Field

from transl.core.errors import UnsupportedShapeError
from transl.core.table import TranslationTable
from transl.metadata import (
    FieldDescriptor,
    Localized,
    MetadataCache,
    StructMetadata,
    build_metadata,
    localized,
)


@pytest.fixture
def cache() -> MetadataCache:
    return MetadataCache()


# -- Record types --------------------------------------------------------


@dataclass
class GoodRecord:
    name: Annotated[str, Localized()] = ""
    kind: int = 0
    element: Annotated[str, Localized("element")] = ""
    translations: TranslationTable = field(default_factory=TranslationTable)


@dataclass
class FieldHelperRecord:
    title: str = localized()
    body: str = localized("text")
    translations: Optional[TranslationTable] = None


class ModelRecord(BaseModel):
    name: Annotated[str, Localized()] = ""
    element: Annotated[str, Localized("elem")] = ""
    translations: TranslationTable = Field(default_factory=TranslationTable)


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: Annotated[str, Localized()] = ""
    translations: TranslationTable = Field(default_factory=TranslationTable)


class PlainRecord:
    name: Annotated[str, Localized()]
    translations: TranslationTable

    def __init__(self) -> None:
        self.name = ""
        self.translations = TranslationTable()


class SelfTranslating:
    def __init__(self) -> None:
        self.calls = 0

    def translate(self, preferred) -> None:
        self.calls += 1


# ── build_metadata ──────────────────────────────────────────────────────


class TestBuildMetadata:
    def test_good_dataclass(self):
        meta = build_metadata(GoodRecord)
        assert meta == StructMetadata(
            record_type=GoodRecord,
            getter_field="translations",
            getter_index=3,
            fields=(
                FieldDescriptor(name="name", key="name", index=0),
                FieldDescriptor(name="element", key="element", index=2),
            ),
        )
        assert meta.valid
        assert not meta.is_translatable

    def test_localized_helper(self):
        meta = build_metadata(FieldHelperRecord)
        assert meta.keys == ("title", "text")
        assert meta.getter_field == "translations"

    def test_pydantic_model(self):
        meta = build_metadata(ModelRecord)
        assert meta.valid
        assert [(f.name, f.key) for f in meta.fields] == [("name", "name"), ("element", "elem")]
        assert meta.getter_field == "translations"
        assert not meta.frozen

    def test_frozen_pydantic_model(self):
        assert build_metadata(FrozenModel).frozen

    def test_frozen_dataclass(self):
        @dataclass(frozen=True)
        class Frozen:
            name: str = localized()
            translations: TranslationTable = field(default_factory=TranslationTable)

        assert build_metadata(Frozen).frozen

    def test_plain_annotated_class(self):
        meta = build_metadata(PlainRecord)
        assert meta.valid
        assert meta.keys == ("name",)

    def test_first_getter_wins(self):
        @dataclass
        class TwoTables:
            name: str = localized()
            primary: TranslationTable = field(default_factory=TranslationTable)
            secondary: TranslationTable = field(default_factory=TranslationTable)

        meta = build_metadata(TwoTables)
        assert meta.getter_field == "primary"
        assert meta.getter_index == 1

    def test_inherited_fields_come_first(self):
        @dataclass
        class Child(GoodRecord):
            motto: str = localized()

        meta = build_metadata(Child)
        assert meta.keys == ("name", "element", "motto")

    def test_self_translating(self):
        meta = build_metadata(SelfTranslating)
        assert meta.is_translatable
        assert meta.fields == ()
        assert meta.getter_field is None
        assert meta.valid


class TestUnsupportedShapes:
    def test_no_translations_field(self):
        @dataclass
        class NoTable:
            name: str = localized()

        meta = build_metadata(NoTable)
        assert not meta.valid
        assert isinstance(meta.build_error, UnsupportedShapeError)
        assert meta.build_error.reason == "no translations field"
        assert meta.fields == ()

    def test_regular_class(self):
        @dataclass
        class Regular:
            name: str = ""
            kind: int = 0

        meta = build_metadata(Regular)
        assert meta.build_error.reason == "no localized string fields"

    def test_translations_field_of_other_type(self):
        @dataclass
        class OtherTable:
            name: str = localized()
            translations: int = 0

        assert not build_metadata(OtherTable).valid

    def test_non_string_localized_field_skipped(self):
        @dataclass
        class NumberField:
            num: int = localized(default=0)
            translations: TranslationTable = field(default_factory=TranslationTable)

        meta = build_metadata(NumberField)
        assert not meta.valid
        assert meta.build_error.reason == "no localized string fields"

    def test_error_message_names_type(self):
        @dataclass
        class Nothing:
            pass

        error = build_metadata(Nothing).build_error
        assert "Nothing" in str(error)


# ── MetadataCache ───────────────────────────────────────────────────────


class TestMetadataCache:
    def test_same_object_every_time(self, cache):
        first = cache.metadata_for(GoodRecord)
        for _ in range(5):
            assert cache.metadata_for(GoodRecord) is first
        assert len(cache) == 1

    def test_instance_and_type_share_entry(self, cache):
        assert cache.metadata_for(GoodRecord()) is cache.metadata_for(GoodRecord)

    def test_rebuild_is_structurally_equal(self, cache):
        cached = cache.metadata_for(GoodRecord)
        assert build_metadata(GoodRecord) == cached

    def test_invalid_metadata_cached_with_error(self, cache):
        @dataclass
        class NoTable:
            name: str = localized()

        first = cache.metadata_for(NoTable)
        second = cache.metadata_for(NoTable)
        assert first is second
        assert first.build_error is second.build_error

    def test_clear(self, cache):
        cache.metadata_for(GoodRecord)
        cache.clear()
        assert cache.stats() == {"entries": 0}

    def test_concurrent_lookups(self, cache):
        barrier = threading.Barrier(8)
        seen = []
        lock = threading.Lock()

        def worker():
            barrier.wait()
            meta = cache.metadata_for(ModelRecord)
            with lock:
                seen.append(meta)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(cache) == 1
        assert all(m is seen[0] for m in seen)
