"""
Metadata module - field markers and the per-type metadata cache.
"""

from .cache import (
    FieldDescriptor,
    MetadataCache,
    StructMetadata,
    build_metadata,
    get_metadata_cache,
    metadata_for,
)
from .markers import FIELD_NAME_KEY, Localized, localized

__all__ = [
    "FIELD_NAME_KEY",
    "FieldDescriptor",
    "Localized",
    "MetadataCache",
    "StructMetadata",
    "build_metadata",
    "get_metadata_cache",
    "localized",
    "metadata_for",
]
